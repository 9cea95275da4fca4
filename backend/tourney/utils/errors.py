from typing import Any

from tourney.utils.id_types import MatchId


class TourneyError(Exception):
    """
    Base class of the errors raised by the match reconciliation and game recording logic.

    The context (match id, game index, object key, ...) is kept on the exception so the
    caller can tell the admin which part of a submission failed and retry it.
    """

    def __init__(
        self,
        message: str,
        *,
        match_id: MatchId | None = None,
        game_index: int | None = None,
        **context: Any,
    ) -> None:
        self.message = message
        self.match_id = match_id
        self.game_index = game_index
        self.context = context
        super().__init__(self.describe())

    def describe(self) -> str:
        details = []
        if self.match_id is not None:
            details.append(f"match_id={int(self.match_id)}")
        if self.game_index is not None:
            details.append(f"game_index={self.game_index}")
        details.extend(f"{key}={value}" for key, value in self.context.items())
        return f"{self.message} ({', '.join(details)})" if details else self.message


class ValidationError(TourneyError):
    pass


class NotFoundError(TourneyError):
    pass


class StorageError(TourneyError):
    pass


class TransactionError(TourneyError):
    pass
