"""
ladder.database.models — SQLAlchemy 2.0 Data Models
====================================================

Tables:
- competitions     — Per-guild scoring defaults
- ranks            — Per-guild point tiers with their own modifiers
- lobbies          — Per-channel multipliers and game counter
- players          — Per-guild ladder profiles
- game_results     — One row per match played in a lobby
- team_players     — Roster membership written by team formation
- queued_players   — Pending lobby queue
- game_votes       — One vote per participant per match
- score_updates    — Audit trail of applied point deltas (used by undo)
"""

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import (
    BigInteger,
    Boolean,
    DateTime,
    Float,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------
class Base(DeclarativeBase):
    """Shared base for all ladder ORM models."""


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class GameState(enum.StrEnum):
    """Lifecycle of a single match."""
    UNDECIDED = "Undecided"
    PICKING = "Picking"
    DECIDED = "Decided"
    DRAW = "Draw"
    CANCELED = "Canceled"


class VoteState(enum.StrEnum):
    """A participant's view of the result, relative to their own team."""
    WIN = "Win"
    LOSE = "Lose"
    DRAW = "Draw"
    CANCEL = "Cancel"


class TeamSelection(enum.StrEnum):
    """Which roster won.  Never used as a vote value."""
    TEAM1 = "1"
    TEAM2 = "2"

    @property
    def number(self) -> int:
        return int(self.value)

    @property
    def other(self) -> TeamSelection:
        return TeamSelection.TEAM2 if self is TeamSelection.TEAM1 else TeamSelection.TEAM1


class RankChangeState(enum.StrEnum):
    """How a settlement moved a player between tiers."""
    NONE = "None"
    RANK_UP = "RankUp"
    DERANK = "DeRank"


# ---------------------------------------------------------------------------
# Competition — per-guild defaults
# ---------------------------------------------------------------------------
class Competition(Base):
    __tablename__ = "competitions"

    guild_id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    default_win_modifier: Mapped[int] = mapped_column(Integer, default=10)
    default_loss_modifier: Mapped[int] = mapped_column(Integer, default=5)
    allow_negative_score: Mapped[bool] = mapped_column(Boolean, default=False)

    def __repr__(self) -> str:
        return (
            f"<Competition guild={self.guild_id} "
            f"win={self.default_win_modifier} loss={self.default_loss_modifier}>"
        )


# ---------------------------------------------------------------------------
# Rank — a point threshold band tied to a role
# ---------------------------------------------------------------------------
class Rank(Base):
    """A tier.  A player belongs to the highest tier whose ``points``
    threshold is strictly below their own point total.

    ``win_modifier`` / ``loss_modifier`` fall back to the competition
    defaults when unset.  ``loss_modifier`` is a magnitude.
    """
    __tablename__ = "ranks"

    guild_id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    role_id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    points: Mapped[int] = mapped_column(Integer, nullable=False)
    win_modifier: Mapped[int | None] = mapped_column(Integer, default=None)
    loss_modifier: Mapped[int | None] = mapped_column(Integer, default=None)

    __table_args__ = (
        Index("ix_ranks_guild_points", "guild_id", "points"),
    )

    def __repr__(self) -> str:
        return f"<Rank role={self.role_id} points={self.points}>"


# ---------------------------------------------------------------------------
# Lobby — per-channel multipliers
# ---------------------------------------------------------------------------
class Lobby(Base):
    __tablename__ = "lobbies"

    channel_id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    guild_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    lobby_multiplier: Mapped[float] = mapped_column(Float, default=1.0)
    multiply_loss_value: Mapped[bool] = mapped_column(Boolean, default=False)
    high_limit: Mapped[int | None] = mapped_column(Integer, default=None)
    reduction_percent: Mapped[float] = mapped_column(Float, default=0.5)
    current_game_count: Mapped[int] = mapped_column(Integer, default=0)

    __table_args__ = (
        Index("ix_lobbies_guild_id", "guild_id"),
    )

    def __repr__(self) -> str:
        return f"<Lobby channel={self.channel_id} games={self.current_game_count}>"


# ---------------------------------------------------------------------------
# Player — one row per guild member on the ladder
# ---------------------------------------------------------------------------
class Player(Base):
    __tablename__ = "players"

    guild_id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    user_id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    points: Mapped[int] = mapped_column(Integer, default=0)
    wins: Mapped[int] = mapped_column(Integer, default=0)
    losses: Mapped[int] = mapped_column(Integer, default=0)
    draws: Mapped[int] = mapped_column(Integer, default=0)

    __table_args__ = (
        Index("ix_players_guild_points", "guild_id", "points"),
    )

    def __repr__(self) -> str:
        return f"<Player user={self.user_id} points={self.points}>"


# ---------------------------------------------------------------------------
# GameResult — one match in a lobby
# ---------------------------------------------------------------------------
class GameResult(Base):
    __tablename__ = "game_results"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    guild_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    lobby_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    game_id: Mapped[int] = mapped_column(Integer, nullable=False)
    state: Mapped[str] = mapped_column(
        String(20), nullable=False, default=GameState.UNDECIDED.value,
    )
    winning_team: Mapped[int | None] = mapped_column(Integer, default=None)
    comment: Mapped[str | None] = mapped_column(Text, default=None)
    submitter: Mapped[int | None] = mapped_column(BigInteger, default=None)
    vote_complete: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (
        UniqueConstraint("lobby_id", "game_id", name="uq_game_results_lobby_game"),
        Index("ix_game_results_guild_lobby", "guild_id", "lobby_id"),
    )

    @property
    def game_state(self) -> GameState:
        return GameState(self.state)

    def __repr__(self) -> str:
        return f"<GameResult lobby={self.lobby_id} game={self.game_id} state={self.state}>"


# ---------------------------------------------------------------------------
# TeamPlayer — roster membership
# ---------------------------------------------------------------------------
class TeamPlayer(Base):
    """Written by the team-formation step; read-only to scoring."""
    __tablename__ = "team_players"

    lobby_id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    game_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    guild_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    team_number: Mapped[int] = mapped_column(Integer, nullable=False)

    def __repr__(self) -> str:
        return f"<TeamPlayer game={self.game_id} user={self.user_id} team={self.team_number}>"


# ---------------------------------------------------------------------------
# QueuedPlayer — pending lobby queue
# ---------------------------------------------------------------------------
class QueuedPlayer(Base):
    __tablename__ = "queued_players"

    channel_id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    user_id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    guild_id: Mapped[int] = mapped_column(BigInteger, nullable=False)

    def __repr__(self) -> str:
        return f"<QueuedPlayer channel={self.channel_id} user={self.user_id}>"


# ---------------------------------------------------------------------------
# GameVote — one per (match, voter)
# ---------------------------------------------------------------------------
class GameVote(Base):
    __tablename__ = "game_votes"

    channel_id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    game_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    guild_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    vote: Mapped[str] = mapped_column(String(10), nullable=False)

    @property
    def vote_state(self) -> VoteState:
        return VoteState(self.vote)

    def __repr__(self) -> str:
        return f"<GameVote game={self.game_id} user={self.user_id} vote={self.vote}>"


# ---------------------------------------------------------------------------
# ScoreUpdate — audit row per (match, player)
# ---------------------------------------------------------------------------
class ScoreUpdate(Base):
    """The exact signed delta applied to one player for one match.

    Subtracting ``modify_amount`` from the player's points reverses it.
    """
    __tablename__ = "score_updates"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    guild_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    channel_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    game_number: Mapped[int] = mapped_column(Integer, nullable=False)
    user_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    modify_amount: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (
        Index("ix_score_updates_game", "guild_id", "channel_id", "game_number"),
        Index("ix_score_updates_user", "guild_id", "user_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<ScoreUpdate game={self.game_number} user={self.user_id} "
            f"delta={self.modify_amount}>"
        )
