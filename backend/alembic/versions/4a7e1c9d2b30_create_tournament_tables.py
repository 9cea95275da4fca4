"""create tournament tables

Revision ID: 4a7e1c9d2b30
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import ENUM

from alembic import op

# revision identifiers, used by Alembic.
revision: str | None = "4a7e1c9d2b30"
down_revision: str | None = None
branch_labels: str | None = None
depends_on: str | None = None

tournament_status_enum = ENUM(
    "PENDING", "ACTIVE", "FINISHED", "CANCELLED", name="tournament_status", create_type=False
)
match_mode_enum = ENUM("BEST_OF", "PLAY_ALL", name="match_mode", create_type=False)
match_status_enum = ENUM(
    "PENDING",
    "SCHEDULED",
    "IN_PROGRESS",
    "COMPLETED",
    "ADMIN_APPROVED",
    "CANCELLED",
    name="match_status",
    create_type=False,
)


def _created_column() -> sa.Column:
    return sa.Column(
        "created", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
    )


def upgrade() -> None:
    for enum in (tournament_status_enum, match_mode_enum, match_status_enum):
        enum.create(op.get_bind(), checkfirst=True)

    op.create_table(
        "tournaments",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        _created_column(),
        sa.Column("status", tournament_status_enum, server_default="PENDING", nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_tournaments_id"), "tournaments", ["id"], unique=False)
    op.create_index(op.f("ix_tournaments_name"), "tournaments", ["name"], unique=False)
    op.create_index(op.f("ix_tournaments_status"), "tournaments", ["status"], unique=False)

    op.create_table(
        "stages",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        _created_column(),
        sa.Column("tournament_id", sa.BigInteger(), nullable=False),
        sa.ForeignKeyConstraint(["tournament_id"], ["tournaments.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_stages_id"), "stages", ["id"], unique=False)
    op.create_index(op.f("ix_stages_name"), "stages", ["name"], unique=False)
    op.create_index(op.f("ix_stages_tournament_id"), "stages", ["tournament_id"], unique=False)

    op.create_table(
        "groups",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        _created_column(),
        sa.Column("stage_id", sa.BigInteger(), nullable=False),
        sa.Column("display_order", sa.Integer(), server_default="0", nullable=False),
        sa.Column("is_team_based", sa.Boolean(), server_default="f", nullable=False),
        sa.Column("match_mode", match_mode_enum, server_default="BEST_OF", nullable=False),
        sa.Column("game_count", sa.Integer(), server_default="1", nullable=False),
        sa.ForeignKeyConstraint(["stage_id"], ["stages.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_groups_id"), "groups", ["id"], unique=False)
    op.create_index(op.f("ix_groups_stage_id"), "groups", ["stage_id"], unique=False)

    op.create_table(
        "participants",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        _created_column(),
        sa.Column("tournament_id", sa.BigInteger(), nullable=False),
        sa.ForeignKeyConstraint(["tournament_id"], ["tournaments.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_participants_id"), "participants", ["id"], unique=False)
    op.create_index(op.f("ix_participants_name"), "participants", ["name"], unique=False)
    op.create_index(
        op.f("ix_participants_tournament_id"), "participants", ["tournament_id"], unique=False
    )

    op.create_table(
        "group_participants",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("group_id", sa.BigInteger(), nullable=False),
        sa.Column("participant_id", sa.BigInteger(), nullable=False),
        sa.Column("display_order", sa.Integer(), server_default="0", nullable=False),
        sa.ForeignKeyConstraint(["group_id"], ["groups.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["participant_id"], ["participants.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("group_id", "participant_id"),
    )
    op.create_index(op.f("ix_group_participants_id"), "group_participants", ["id"], unique=False)
    op.create_index(
        op.f("ix_group_participants_group_id"), "group_participants", ["group_id"], unique=False
    )
    op.create_index(
        op.f("ix_group_participants_participant_id"),
        "group_participants",
        ["participant_id"],
        unique=False,
    )

    for lookup_table in ("maps", "civilizations"):
        op.create_table(
            lookup_table,
            sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
            sa.Column("name", sa.String(), nullable=False),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index(op.f(f"ix_{lookup_table}_id"), lookup_table, ["id"], unique=False)
        op.create_index(op.f(f"ix_{lookup_table}_name"), lookup_table, ["name"], unique=False)

    op.create_table(
        "matches",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        _created_column(),
        sa.Column("group_id", sa.BigInteger(), nullable=False),
        sa.Column("participant1_id", sa.BigInteger(), nullable=True),
        sa.Column("participant2_id", sa.BigInteger(), nullable=True),
        sa.Column("status", match_status_enum, server_default="PENDING", nullable=False),
        sa.Column("match_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("civ_draft_key", sa.String(), server_default="", nullable=False),
        sa.Column("map_draft_key", sa.String(), server_default="", nullable=False),
        sa.Column("comment", sa.Text(), nullable=True),
        sa.Column("admin_comment", sa.Text(), nullable=True),
        sa.Column("is_manual_match", sa.Boolean(), server_default="f", nullable=False),
        sa.ForeignKeyConstraint(["group_id"], ["groups.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["participant1_id"], ["participants.id"]),
        sa.ForeignKeyConstraint(["participant2_id"], ["participants.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_matches_id"), "matches", ["id"], unique=False)
    op.create_index(op.f("ix_matches_group_id"), "matches", ["group_id"], unique=False)
    op.create_index(op.f("ix_matches_status"), "matches", ["status"], unique=False)

    op.create_table(
        "match_participants",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("match_id", sa.BigInteger(), nullable=False),
        sa.Column("participant_id", sa.BigInteger(), nullable=False),
        sa.Column("won_score", sa.Integer(), server_default="0", nullable=False),
        sa.Column("lost_score", sa.Integer(), server_default="0", nullable=False),
        sa.Column("is_winner", sa.Boolean(), server_default="f", nullable=False),
        sa.ForeignKeyConstraint(["match_id"], ["matches.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["participant_id"], ["participants.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("match_id", "participant_id"),
    )
    op.create_index(op.f("ix_match_participants_id"), "match_participants", ["id"], unique=False)
    op.create_index(
        op.f("ix_match_participants_match_id"), "match_participants", ["match_id"], unique=False
    )
    op.create_index(
        op.f("ix_match_participants_participant_id"),
        "match_participants",
        ["participant_id"],
        unique=False,
    )

    op.create_table(
        "games",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        _created_column(),
        sa.Column("match_id", sa.BigInteger(), nullable=False),
        sa.Column("map_id", sa.BigInteger(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("replay_key", sa.String(), nullable=True),
        sa.ForeignKeyConstraint(["match_id"], ["matches.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["map_id"], ["maps.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("match_id", "position"),
    )
    op.create_index(op.f("ix_games_id"), "games", ["id"], unique=False)
    op.create_index(op.f("ix_games_match_id"), "games", ["match_id"], unique=False)

    op.create_table(
        "game_participants",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("game_id", sa.BigInteger(), nullable=False),
        sa.Column("match_participant_id", sa.BigInteger(), nullable=False),
        sa.Column("participant_id", sa.BigInteger(), nullable=False),
        sa.Column("civilization_id", sa.BigInteger(), nullable=True),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("is_winner", sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(["game_id"], ["games.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["match_participant_id"], ["match_participants.id"], ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(["participant_id"], ["participants.id"]),
        sa.ForeignKeyConstraint(["civilization_id"], ["civilizations.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_game_participants_id"), "game_participants", ["id"], unique=False)
    op.create_index(
        op.f("ix_game_participants_game_id"), "game_participants", ["game_id"], unique=False
    )
    op.create_index(
        op.f("ix_game_participants_match_participant_id"),
        "game_participants",
        ["match_participant_id"],
        unique=False,
    )


def downgrade() -> None:
    for table in (
        "game_participants",
        "games",
        "match_participants",
        "matches",
        "civilizations",
        "maps",
        "group_participants",
        "participants",
        "groups",
        "stages",
        "tournaments",
    ):
        op.drop_table(table)

    for enum in (match_status_enum, match_mode_enum, tournament_status_enum):
        enum.drop(op.get_bind(), checkfirst=True)
