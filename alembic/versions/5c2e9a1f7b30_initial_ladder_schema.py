"""Initial ladder schema

Revision ID: 5c2e9a1f7b30
Revises:
Create Date: 2026-10-19 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "5c2e9a1f7b30"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "competitions",
        sa.Column("guild_id", sa.BigInteger(), primary_key=True),
        sa.Column("default_win_modifier", sa.Integer(), server_default="10"),
        sa.Column("default_loss_modifier", sa.Integer(), server_default="5"),
        sa.Column("allow_negative_score", sa.Boolean(), server_default="false"),
    )

    op.create_table(
        "ranks",
        sa.Column("guild_id", sa.BigInteger(), primary_key=True),
        sa.Column("role_id", sa.BigInteger(), primary_key=True),
        sa.Column("points", sa.Integer(), nullable=False),
        sa.Column("win_modifier", sa.Integer(), nullable=True),
        sa.Column("loss_modifier", sa.Integer(), nullable=True),
    )
    op.create_index("ix_ranks_guild_points", "ranks", ["guild_id", "points"])

    op.create_table(
        "lobbies",
        sa.Column("channel_id", sa.BigInteger(), primary_key=True),
        sa.Column("guild_id", sa.BigInteger(), nullable=False),
        sa.Column("lobby_multiplier", sa.Float(), server_default="1.0"),
        sa.Column("multiply_loss_value", sa.Boolean(), server_default="false"),
        sa.Column("high_limit", sa.Integer(), nullable=True),
        sa.Column("reduction_percent", sa.Float(), server_default="0.5"),
        sa.Column("current_game_count", sa.Integer(), server_default="0"),
    )
    op.create_index("ix_lobbies_guild_id", "lobbies", ["guild_id"])

    op.create_table(
        "players",
        sa.Column("guild_id", sa.BigInteger(), primary_key=True),
        sa.Column("user_id", sa.BigInteger(), primary_key=True),
        sa.Column("points", sa.Integer(), server_default="0"),
        sa.Column("wins", sa.Integer(), server_default="0"),
        sa.Column("losses", sa.Integer(), server_default="0"),
        sa.Column("draws", sa.Integer(), server_default="0"),
    )
    op.create_index("ix_players_guild_points", "players", ["guild_id", "points"])

    op.create_table(
        "game_results",
        sa.Column("id", sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column("guild_id", sa.BigInteger(), nullable=False),
        sa.Column("lobby_id", sa.BigInteger(), nullable=False),
        sa.Column("game_id", sa.Integer(), nullable=False),
        sa.Column("state", sa.String(20), nullable=False, server_default="Undecided"),
        sa.Column("winning_team", sa.Integer(), nullable=True),
        sa.Column("comment", sa.Text(), nullable=True),
        sa.Column("submitter", sa.BigInteger(), nullable=True),
        sa.Column("vote_complete", sa.Boolean(), server_default="false"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.UniqueConstraint("lobby_id", "game_id", name="uq_game_results_lobby_game"),
    )
    op.create_index(
        "ix_game_results_guild_lobby", "game_results", ["guild_id", "lobby_id"]
    )

    op.create_table(
        "team_players",
        sa.Column("lobby_id", sa.BigInteger(), primary_key=True),
        sa.Column("game_id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.BigInteger(), primary_key=True),
        sa.Column("guild_id", sa.BigInteger(), nullable=False),
        sa.Column("team_number", sa.Integer(), nullable=False),
    )

    op.create_table(
        "queued_players",
        sa.Column("channel_id", sa.BigInteger(), primary_key=True),
        sa.Column("user_id", sa.BigInteger(), primary_key=True),
        sa.Column("guild_id", sa.BigInteger(), nullable=False),
    )

    op.create_table(
        "game_votes",
        sa.Column("channel_id", sa.BigInteger(), primary_key=True),
        sa.Column("game_id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.BigInteger(), primary_key=True),
        sa.Column("guild_id", sa.BigInteger(), nullable=False),
        sa.Column("vote", sa.String(10), nullable=False),
    )

    op.create_table(
        "score_updates",
        sa.Column("id", sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column("guild_id", sa.BigInteger(), nullable=False),
        sa.Column("channel_id", sa.BigInteger(), nullable=False),
        sa.Column("game_number", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.BigInteger(), nullable=False),
        sa.Column("modify_amount", sa.Integer(), nullable=False),
    )
    op.create_index(
        "ix_score_updates_game",
        "score_updates",
        ["guild_id", "channel_id", "game_number"],
    )
    op.create_index("ix_score_updates_user", "score_updates", ["guild_id", "user_id"])


def downgrade() -> None:
    op.drop_table("score_updates")
    op.drop_table("game_votes")
    op.drop_table("queued_players")
    op.drop_table("team_players")
    op.drop_table("game_results")
    op.drop_table("players")
    op.drop_table("lobbies")
    op.drop_table("ranks")
    op.drop_table("competitions")
