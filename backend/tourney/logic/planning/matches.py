from tourney.database import database
from tourney.models.db.match import Match, MatchUpdateBody
from tourney.sql.locks import sql_lock_match
from tourney.sql.matches import sql_get_match, sql_update_match
from tourney.utils.errors import NotFoundError, ValidationError
from tourney.utils.id_types import MatchId
from tourney.utils.logging import logger
from tourney.utils.types import assert_some


async def update_match_details(match_id: MatchId, body: MatchUpdateBody) -> Match:
    async with database.transaction():
        await sql_lock_match(match_id)
        match = await sql_get_match(match_id)
        if match is None:
            raise NotFoundError("Match does not exist", match_id=match_id)

        if body.status is not None and not match.status.can_transition_to(body.status):
            raise ValidationError(
                f"Cannot change status of match from {match.status} to {body.status}",
                match_id=match_id,
            )

        await sql_update_match(match_id, body)

    if body.status is not None and body.status != match.status:
        logger.info(f"Match {int(match_id)} moved from {match.status} to {body.status}")

    return assert_some(await sql_get_match(match_id))
