from tourney.database import database
from tourney.utils.id_types import GroupId, MatchId

# Offsets keep the lock keys of different resources apart within the shared bigint space.
_MATCH_LOCK_SALT = 3_114_908_270_551_138_304
_GROUP_LOCK_SALT = 3_114_908_270_551_138_304 + 2**40


def match_lock_key(match_id: MatchId) -> int:
    return _MATCH_LOCK_SALT + int(match_id)


def group_lock_key(group_id: GroupId) -> int:
    return _GROUP_LOCK_SALT + int(group_id)


async def sql_lock_match(match_id: MatchId) -> None:
    """Serialize writers of one match until the surrounding transaction ends."""
    await database.execute(
        "SELECT pg_advisory_xact_lock(:lock_key)",
        values={"lock_key": match_lock_key(match_id)},
    )


async def sql_lock_group(group_id: GroupId) -> None:
    await database.execute(
        "SELECT pg_advisory_xact_lock(:lock_key)",
        values={"lock_key": group_lock_key(group_id)},
    )
