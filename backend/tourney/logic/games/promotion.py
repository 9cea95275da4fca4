from collections.abc import Iterable
from typing import NamedTuple

from tourney.logic.games.replay_keys import get_permanent_replay_key
from tourney.storage.base import ObjectStore
from tourney.utils.errors import StorageError
from tourney.utils.id_types import MatchId
from tourney.utils.logging import logger


class ReplayPromotion(NamedTuple):
    temp_key: str
    permanent_key: str


async def delete_objects_best_effort(
    object_store: ObjectStore, keys: Iterable[str], reason: str
) -> list[str]:
    """Delete objects, logging failures instead of raising. Returns the keys that failed."""
    failed_keys = []
    for key in keys:
        try:
            await object_store.delete(key)
        except StorageError as exc:
            failed_keys.append(key)
            logger.warning(f"Could not delete object {key} ({reason}): {exc}")
    return failed_keys


class ReplayPromotions:
    """
    Tracks the replays copied from temporary to permanent storage during one game submission.

    The relational transaction decides the outcome: after a commit the temp copies are
    removed, after a failure the permanent copies are removed and the temp uploads are kept,
    so the admin can resubmit them.
    """

    def __init__(self, object_store: ObjectStore, match_id: MatchId) -> None:
        self.object_store = object_store
        self.match_id = match_id
        self.promotions: list[ReplayPromotion] = []

    def __len__(self) -> int:
        return len(self.promotions)

    async def promote(self, temp_key: str, position: int) -> str:
        permanent_key = get_permanent_replay_key(self.match_id, position, temp_key)

        # Registered before copying: a copy that fails half-way may still have written the object.
        self.promotions.append(ReplayPromotion(temp_key, permanent_key))
        try:
            await self.object_store.copy(temp_key, permanent_key)
        except StorageError as exc:
            raise StorageError(
                "Could not promote replay to permanent storage",
                match_id=self.match_id,
                game_index=position,
                temp_key=temp_key,
                permanent_key=permanent_key,
            ) from exc

        logger.debug(f"Promoted replay {temp_key} to {permanent_key}")
        return permanent_key

    async def rollback(self) -> None:
        for promotion in self.promotions:
            try:
                await self.object_store.delete(promotion.permanent_key)
            except StorageError as exc:
                logger.error(
                    f"Could not roll back promoted replay {promotion.permanent_key} "
                    f"of match {int(self.match_id)}: {exc}"
                )

    async def cleanup_temp_keys(self) -> None:
        await delete_objects_best_effort(
            self.object_store,
            [promotion.temp_key for promotion in self.promotions],
            reason=f"temp replay cleanup of match {int(self.match_id)}",
        )
