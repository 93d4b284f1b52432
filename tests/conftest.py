"""
tests/conftest.py — Shared Test Fixtures
=========================================
"""

from __future__ import annotations

import pytest
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from ladder.database.models import (
    Base,
    Competition,
    GameResult,
    GameState,
    Lobby,
    Player,
    Rank,
    TeamPlayer,
)
from ladder.engine.outcomes import MatchRef

GUILD_ID = 100
LOBBY_ID = 500


@pytest.fixture
def db_engine() -> Engine:
    """Create an in-memory SQLite engine with all ladder tables.

    Uses StaticPool so all threads share the same in-memory database
    (required by ``asyncio.to_thread`` used by ``run_db``).
    """
    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def db_session(db_engine: Engine):
    """Provide a session that rolls back after each test."""
    with Session(db_engine, expire_on_commit=False) as session:
        yield session
        session.rollback()


# ---------------------------------------------------------------------------
# Seeding helpers
# ---------------------------------------------------------------------------
def seed_ladder(
    session: Session,
    *,
    team1: dict[int, int],
    team2: dict[int, int],
    game_id: int = 1,
    state: GameState = GameState.UNDECIDED,
    win_modifier: int = 10,
    loss_modifier: int = 5,
    allow_negative_score: bool = False,
    lobby_multiplier: float = 1.0,
    multiply_loss_value: bool = False,
    high_limit: int | None = None,
    reduction_percent: float = 0.5,
    ranks: list[tuple[int, int, int | None, int | None]] | None = None,
) -> MatchRef:
    """Insert a competition, lobby, players and one game with two rosters.

    *team1* / *team2* map user_id → starting points.  *ranks* are
    ``(role_id, threshold, win_modifier, loss_modifier)`` tuples.
    """
    session.add(Competition(
        guild_id=GUILD_ID,
        default_win_modifier=win_modifier,
        default_loss_modifier=loss_modifier,
        allow_negative_score=allow_negative_score,
    ))
    session.add(Lobby(
        channel_id=LOBBY_ID,
        guild_id=GUILD_ID,
        lobby_multiplier=lobby_multiplier,
        multiply_loss_value=multiply_loss_value,
        high_limit=high_limit,
        reduction_percent=reduction_percent,
        current_game_count=game_id,
    ))
    for role_id, threshold, win, loss in ranks or []:
        session.add(Rank(
            guild_id=GUILD_ID,
            role_id=role_id,
            points=threshold,
            win_modifier=win,
            loss_modifier=loss,
        ))
    for team_number, roster in ((1, team1), (2, team2)):
        for user_id, points in roster.items():
            session.add(Player(
                guild_id=GUILD_ID,
                user_id=user_id,
                points=points,
                wins=0,
                losses=0,
                draws=0,
            ))
            session.add(TeamPlayer(
                lobby_id=LOBBY_ID,
                game_id=game_id,
                user_id=user_id,
                guild_id=GUILD_ID,
                team_number=team_number,
            ))
    session.add(GameResult(
        guild_id=GUILD_ID,
        lobby_id=LOBBY_ID,
        game_id=game_id,
        state=state.value,
        vote_complete=False,
    ))
    session.commit()
    return MatchRef(guild_id=GUILD_ID, lobby_id=LOBBY_ID, game_id=game_id)


def snapshot(session: Session, *user_ids: int) -> dict[int, tuple[int, int, int, int]]:
    """(points, wins, losses, draws) per user, read fresh from the DB."""
    session.expire_all()
    result = {}
    for user_id in user_ids:
        p = session.get(Player, (GUILD_ID, user_id))
        result[user_id] = (p.points, p.wins, p.losses, p.draws)
    return result
