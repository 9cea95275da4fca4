from sqlalchemy import Column, ForeignKey, Integer, String, Table, UniqueConstraint, func
from sqlalchemy.orm import declarative_base  # type: ignore[attr-defined]
from sqlalchemy.sql.sqltypes import BigInteger, Boolean, DateTime, Enum, Text

Base = declarative_base()
metadata = Base.metadata
DateTimeTZ = DateTime(timezone=True)

tournaments = Table(
    "tournaments",
    metadata,
    Column("id", BigInteger, primary_key=True, index=True),
    Column("name", String, nullable=False, index=True),
    Column("created", DateTimeTZ, nullable=False, server_default=func.now()),
    Column(
        "status",
        Enum(
            "PENDING",
            "ACTIVE",
            "FINISHED",
            "CANCELLED",
            name="tournament_status",
        ),
        nullable=False,
        server_default="PENDING",
        index=True,
    ),
)

stages = Table(
    "stages",
    metadata,
    Column("id", BigInteger, primary_key=True, index=True),
    Column("name", String, nullable=False, index=True),
    Column("created", DateTimeTZ, nullable=False, server_default=func.now()),
    Column(
        "tournament_id",
        BigInteger,
        ForeignKey("tournaments.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    ),
)

groups = Table(
    "groups",
    metadata,
    Column("id", BigInteger, primary_key=True, index=True),
    Column("name", String, nullable=False),
    Column("description", Text, nullable=True),
    Column("created", DateTimeTZ, nullable=False, server_default=func.now()),
    Column("stage_id", BigInteger, ForeignKey("stages.id", ondelete="CASCADE"), index=True, nullable=False),
    Column("display_order", Integer, nullable=False, server_default="0"),
    Column("is_team_based", Boolean, nullable=False, server_default="f"),
    Column(
        "match_mode",
        Enum(
            "BEST_OF",
            "PLAY_ALL",
            name="match_mode",
        ),
        nullable=False,
        server_default="BEST_OF",
    ),
    Column("game_count", Integer, nullable=False, server_default="1"),
)

participants = Table(
    "participants",
    metadata,
    Column("id", BigInteger, primary_key=True, index=True),
    Column("name", String, nullable=False, index=True),
    Column("created", DateTimeTZ, nullable=False, server_default=func.now()),
    Column(
        "tournament_id",
        BigInteger,
        ForeignKey("tournaments.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    ),
)

group_participants = Table(
    "group_participants",
    metadata,
    Column("id", BigInteger, primary_key=True, index=True),
    Column("group_id", BigInteger, ForeignKey("groups.id", ondelete="CASCADE"), index=True, nullable=False),
    Column(
        "participant_id",
        BigInteger,
        ForeignKey("participants.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    ),
    Column("display_order", Integer, nullable=False, server_default="0"),
    UniqueConstraint("group_id", "participant_id"),
)

maps = Table(
    "maps",
    metadata,
    Column("id", BigInteger, primary_key=True, index=True),
    Column("name", String, nullable=False, index=True),
)

civilizations = Table(
    "civilizations",
    metadata,
    Column("id", BigInteger, primary_key=True, index=True),
    Column("name", String, nullable=False, index=True),
)

matches = Table(
    "matches",
    metadata,
    Column("id", BigInteger, primary_key=True, index=True),
    Column("created", DateTimeTZ, nullable=False, server_default=func.now()),
    Column("group_id", BigInteger, ForeignKey("groups.id", ondelete="CASCADE"), index=True, nullable=False),
    Column("participant1_id", BigInteger, ForeignKey("participants.id"), nullable=True),
    Column("participant2_id", BigInteger, ForeignKey("participants.id"), nullable=True),
    Column(
        "status",
        Enum(
            "PENDING",
            "SCHEDULED",
            "IN_PROGRESS",
            "COMPLETED",
            "ADMIN_APPROVED",
            "CANCELLED",
            name="match_status",
        ),
        nullable=False,
        server_default="PENDING",
        index=True,
    ),
    Column("match_date", DateTimeTZ, nullable=True),
    Column("civ_draft_key", String, nullable=False, server_default=""),
    Column("map_draft_key", String, nullable=False, server_default=""),
    Column("comment", Text, nullable=True),
    Column("admin_comment", Text, nullable=True),
    Column("is_manual_match", Boolean, nullable=False, server_default="f"),
)

match_participants = Table(
    "match_participants",
    metadata,
    Column("id", BigInteger, primary_key=True, index=True),
    Column("match_id", BigInteger, ForeignKey("matches.id", ondelete="CASCADE"), index=True, nullable=False),
    Column(
        "participant_id",
        BigInteger,
        ForeignKey("participants.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    ),
    Column("won_score", Integer, nullable=False, server_default="0"),
    Column("lost_score", Integer, nullable=False, server_default="0"),
    Column("is_winner", Boolean, nullable=False, server_default="f"),
    UniqueConstraint("match_id", "participant_id"),
)

games = Table(
    "games",
    metadata,
    Column("id", BigInteger, primary_key=True, index=True),
    Column("created", DateTimeTZ, nullable=False, server_default=func.now()),
    Column("match_id", BigInteger, ForeignKey("matches.id", ondelete="CASCADE"), index=True, nullable=False),
    Column("map_id", BigInteger, ForeignKey("maps.id"), nullable=False),
    Column("position", Integer, nullable=False),
    Column("replay_key", String, nullable=True),
    UniqueConstraint("match_id", "position"),
)

game_participants = Table(
    "game_participants",
    metadata,
    Column("id", BigInteger, primary_key=True, index=True),
    Column("game_id", BigInteger, ForeignKey("games.id", ondelete="CASCADE"), index=True, nullable=False),
    Column(
        "match_participant_id",
        BigInteger,
        ForeignKey("match_participants.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    ),
    Column("participant_id", BigInteger, ForeignKey("participants.id"), nullable=False),
    Column("civilization_id", BigInteger, ForeignKey("civilizations.id"), nullable=True),
    Column("position", Integer, nullable=False),
    Column("is_winner", Boolean, nullable=False),
)
