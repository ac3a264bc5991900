"""initial schema: matches, player economies, actions, ships, combat logs

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "001"
down_revision = None
branch_labels = None
depends_on = None

PHASES = ("action", "combat", "upkeep", "income", "cleanup", "end")
ACTION_KINDS = ("explore", "influence", "research", "upgrade", "build", "move", "pass_action")


def upgrade() -> None:
    op.create_table(
        "matches",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("status", sa.Enum("active", "finished", name="matchstatus"), nullable=False),
        sa.Column("current_round", sa.Integer(), nullable=False),
        sa.Column("current_phase", sa.Enum(*PHASES, name="phase"), nullable=False),
        sa.Column("max_rounds", sa.Integer(), nullable=False),
        sa.Column("turn_order", sa.JSON(), nullable=False),
        sa.Column("passed_players", sa.JSON(), nullable=False),
        sa.Column("reacted_players", sa.JSON(), nullable=False),
        sa.Column("current_player_index", sa.Integer(), nullable=False),
        sa.Column("starting_player_index", sa.Integer(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_matches_id"), "matches", ["id"], unique=False)

    op.create_table(
        "player_economies",
        sa.Column("id", sa.Integer(), nullable=False, autoincrement=True),
        sa.Column("match_id", sa.Integer(), nullable=False),
        sa.Column("player_id", sa.String(length=64), nullable=False),
        sa.Column("faction", sa.String(length=64), nullable=False),
        sa.Column("money", sa.Integer(), nullable=False),
        sa.Column("science", sa.Integer(), nullable=False),
        sa.Column("materials", sa.Integer(), nullable=False),
        sa.Column("money_cubes", sa.Integer(), nullable=False),
        sa.Column("science_cubes", sa.Integer(), nullable=False),
        sa.Column("materials_cubes", sa.Integer(), nullable=False),
        sa.Column("influence_on_track", sa.Integer(), nullable=False),
        sa.Column("influence_on_actions", sa.Integer(), nullable=False),
        sa.Column("influence_on_sectors", sa.Integer(), nullable=False),
        sa.Column("influence_total", sa.Integer(), nullable=False),
        sa.Column("max_influence", sa.Integer(), nullable=False),
        sa.Column("colony_ships_total", sa.Integer(), nullable=False),
        sa.Column("colony_ships_available", sa.Integer(), nullable=False),
        sa.Column("colony_ships_used", sa.Integer(), nullable=False),
        sa.Column("trade_ratio", sa.Integer(), nullable=False),
        sa.Column("money_multiplier", sa.Float(), nullable=False),
        sa.Column("science_multiplier", sa.Float(), nullable=False),
        sa.Column("materials_multiplier", sa.Float(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["match_id"], ["matches.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("match_id", "player_id", name="uq_player_economy"),
    )
    op.create_index(
        op.f("ix_player_economies_match_id"), "player_economies", ["match_id"], unique=False
    )

    op.create_table(
        "match_actions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("match_id", sa.Integer(), nullable=False),
        sa.Column("player_id", sa.String(length=64), nullable=False),
        sa.Column("action_kind", sa.Enum(*ACTION_KINDS, name="actionkind"), nullable=False),
        sa.Column("payload", sa.JSON(), nullable=True),
        sa.Column("round_number", sa.Integer(), nullable=False),
        sa.Column("action_number", sa.Integer(), nullable=False),
        sa.Column("is_reaction", sa.Boolean(), nullable=False),
        sa.Column(
            "timestamp",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["match_id"], ["matches.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_match_actions_id"), "match_actions", ["id"], unique=False)
    op.create_index(
        op.f("ix_match_actions_match_id"), "match_actions", ["match_id"], unique=False
    )
    op.create_index(
        op.f("ix_match_actions_player_id"), "match_actions", ["player_id"], unique=False
    )

    op.create_table(
        "ships",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("match_id", sa.Integer(), nullable=False),
        sa.Column("player_id", sa.String(length=64), nullable=False),
        sa.Column("sector_id", sa.String(length=64), nullable=False),
        sa.Column("ship_type", sa.String(length=32), nullable=False),
        sa.Column("initiative", sa.Integer(), nullable=False),
        sa.Column("hull_capacity", sa.Integer(), nullable=False),
        sa.Column("damage", sa.Integer(), nullable=False),
        sa.Column("shield_tier", sa.Integer(), nullable=False),
        sa.Column("computer", sa.Integer(), nullable=False),
        sa.Column("weapons", sa.JSON(), nullable=False),
        sa.Column("is_destroyed", sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(["match_id"], ["matches.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_ships_id"), "ships", ["id"], unique=False)
    op.create_index(op.f("ix_ships_match_id"), "ships", ["match_id"], unique=False)
    op.create_index(op.f("ix_ships_sector_id"), "ships", ["sector_id"], unique=False)

    op.create_table(
        "combat_logs",
        sa.Column("id", sa.Integer(), nullable=False, autoincrement=True),
        sa.Column("match_id", sa.Integer(), nullable=False),
        sa.Column("sector_id", sa.String(length=64), nullable=False),
        sa.Column("round_number", sa.Integer(), nullable=False),
        sa.Column("seed", sa.String(length=255), nullable=False),
        sa.Column("player_a_id", sa.String(length=64), nullable=False),
        sa.Column("player_b_id", sa.String(length=64), nullable=False),
        sa.Column("winner_player_id", sa.String(length=64), nullable=True),
        sa.Column("log_entries", sa.JSON(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["match_id"], ["matches.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_combat_logs_id"), "combat_logs", ["id"], unique=False)
    op.create_index(
        op.f("ix_combat_logs_match_id"), "combat_logs", ["match_id"], unique=False
    )


def downgrade() -> None:
    op.drop_index(op.f("ix_combat_logs_match_id"), table_name="combat_logs")
    op.drop_index(op.f("ix_combat_logs_id"), table_name="combat_logs")
    op.drop_table("combat_logs")
    op.drop_index(op.f("ix_ships_sector_id"), table_name="ships")
    op.drop_index(op.f("ix_ships_match_id"), table_name="ships")
    op.drop_index(op.f("ix_ships_id"), table_name="ships")
    op.drop_table("ships")
    op.drop_index(op.f("ix_match_actions_player_id"), table_name="match_actions")
    op.drop_index(op.f("ix_match_actions_match_id"), table_name="match_actions")
    op.drop_index(op.f("ix_match_actions_id"), table_name="match_actions")
    op.drop_table("match_actions")
    op.drop_index(op.f("ix_player_economies_match_id"), table_name="player_economies")
    op.drop_table("player_economies")
    op.drop_index(op.f("ix_matches_id"), table_name="matches")
    op.drop_table("matches")
