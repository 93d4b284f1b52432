"""
ladder.services.match_service — Match Outcome State Machine
============================================================

Moderator-facing operations on a single match, plus the match queries
the surrounding application needs.

State machine::

    Undecided ──submit_outcome──▶ Decided ──undo──▶ Undecided
    Undecided ──draw────────────▶ Draw       (terminal)
    Undecided / Picking ──cancel▶ Canceled   (terminal)

Every operation takes the caller's session as its unit of work, loads
the match row ``FOR UPDATE``, validates the transition *before* touching
anything, then mutates.  Rejections raise :mod:`ladder.errors`
exceptions; the caller's :func:`~ladder.database.engine.get_session`
rolls back whatever the failed block wrote.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from ladder.constants import (
    DEFAULT_ALLOW_NEGATIVE_SCORE,
    DEFAULT_LOSS_MODIFIER,
    DEFAULT_WIN_MODIFIER,
    GAME_LIST_LIMIT,
)
from ladder.database.models import (
    Competition,
    GameResult,
    GameState,
    Lobby,
    QueuedPlayer,
    ScoreUpdate,
    TeamPlayer,
    TeamSelection,
)
from ladder.engine.outcomes import MatchRef, Settlement
from ladder.errors import InvalidState, NotFound
from ladder.services import settlement_service

if TYPE_CHECKING:
    from ladder.config import LadderConfig

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------
def get_or_create_competition(
    session: Session, guild_id: int, cfg: LadderConfig | None = None
) -> Competition:
    """Fetch the guild's competition row, seeding it from *cfg* if absent."""
    competition = session.get(Competition, guild_id)
    if competition is None:
        competition = Competition(
            guild_id=guild_id,
            default_win_modifier=cfg.default_win_modifier if cfg else DEFAULT_WIN_MODIFIER,
            default_loss_modifier=cfg.default_loss_modifier if cfg else DEFAULT_LOSS_MODIFIER,
            allow_negative_score=(
                cfg.allow_negative_score if cfg else DEFAULT_ALLOW_NEGATIVE_SCORE
            ),
        )
        session.add(competition)
        session.flush()
        logger.info("Created competition for guild %s", guild_id)
    return competition


def get_lobby(session: Session, lobby_id: int) -> Lobby:
    lobby = session.get(Lobby, lobby_id)
    if lobby is None:
        raise NotFound("Channel is not a lobby.")
    return lobby


def get_latest_game(session: Session, lobby_id: int) -> GameResult | None:
    """Most recent match in a lobby, or ``None`` if it has none."""
    return session.scalar(
        select(GameResult)
        .where(GameResult.lobby_id == lobby_id)
        .order_by(GameResult.game_id.desc())
        .limit(1)
    )


def get_game(session: Session, ref: MatchRef, *, lock: bool = False) -> GameResult:
    """Load one match.

    Raises
    ------
    NotFound
        If the lobby or the game does not exist.  The message names the
        lobby's most recent game number.
    """
    lobby = get_lobby(session, ref.lobby_id)
    stmt = select(GameResult).where(
        GameResult.guild_id == ref.guild_id,
        GameResult.lobby_id == ref.lobby_id,
        GameResult.game_id == ref.game_id,
    )
    if lock:
        stmt = stmt.with_for_update()
    game = session.scalar(stmt)
    if game is None:
        raise NotFound(f"Game not found. Most recent game is {lobby.current_game_count}")
    return game


def list_games(
    session: Session, guild_id: int, lobby_id: int, limit: int = GAME_LIST_LIMIT
) -> list[GameResult]:
    """Newest-first match history for a lobby."""
    return list(
        session.scalars(
            select(GameResult)
            .where(GameResult.guild_id == guild_id, GameResult.lobby_id == lobby_id)
            .order_by(GameResult.game_id.desc())
            .limit(limit)
        ).all()
    )


def get_team(session: Session, game: GameResult, team: TeamSelection) -> set[int]:
    """User IDs on one side of *game*."""
    return set(
        session.scalars(
            select(TeamPlayer.user_id).where(
                TeamPlayer.lobby_id == game.lobby_id,
                TeamPlayer.game_id == game.game_id,
                TeamPlayer.team_number == team.number,
            )
        ).all()
    )


def get_score_updates(session: Session, ref: MatchRef) -> list[ScoreUpdate]:
    return settlement_service.get_score_updates(
        session, ref.guild_id, ref.lobby_id, ref.game_id
    )


def _ref(game: GameResult) -> MatchRef:
    return MatchRef(guild_id=game.guild_id, lobby_id=game.lobby_id, game_id=game.game_id)


# ---------------------------------------------------------------------------
# Undecided → Decided
# ---------------------------------------------------------------------------
def decide_game(
    session: Session,
    game: GameResult,
    lobby: Lobby,
    winning_team: TeamSelection,
    *,
    submitter_id: int,
    comment: str | None = None,
) -> Settlement:
    """Settle both rosters of an already-loaded match and mark it Decided."""
    state = game.game_state
    if state in (GameState.DECIDED, GameState.DRAW):
        raise InvalidState(
            "Game results cannot currently be overwritten without first "
            "running the undo command."
        )
    if state is not GameState.UNDECIDED:
        raise InvalidState(f"Only undecided games can be decided (game is {state}).")

    competition = get_or_create_competition(session, game.guild_id)
    ranks = settlement_service.get_ranks(session, game.guild_id)
    winners = get_team(session, game, winning_team)
    losers = get_team(session, game, winning_team.other)

    # Both rosters up front, in one ordered statement
    settlement_service.lock_players(session, game.guild_id, winners | losers)

    settlement = Settlement(match=_ref(game), winning_team=winning_team, comment=comment)
    settlement.winners = settlement_service.settle_team(
        session, winners, True, game, lobby, competition, ranks
    )
    settlement.losers = settlement_service.settle_team(
        session, losers, False, game, lobby, competition, ranks
    )

    game.state = GameState.DECIDED.value
    game.winning_team = winning_team.number
    game.comment = comment
    game.submitter = submitter_id
    session.flush()

    logger.info(
        "Game #%s in lobby %s decided: team %s won (submitted by %s)",
        game.game_id, game.lobby_id, winning_team.number, submitter_id,
    )
    return settlement


def submit_outcome(
    session: Session,
    ref: MatchRef,
    winning_team: TeamSelection,
    *,
    submitter_id: int,
    comment: str | None = None,
) -> Settlement:
    """Moderator call: *winning_team* won the match at *ref*."""
    game = get_game(session, ref, lock=True)
    lobby = get_lobby(session, ref.lobby_id)
    return decide_game(
        session, game, lobby, winning_team, submitter_id=submitter_id, comment=comment
    )


# ---------------------------------------------------------------------------
# Decided → Undecided
# ---------------------------------------------------------------------------
def undo(session: Session, ref: MatchRef) -> GameResult:
    """Reverse a decided match exactly once and return it to Undecided."""
    game = get_game(session, ref, lock=True)
    state = game.game_state
    if state is GameState.DRAW:
        raise InvalidState("Cannot undo a draw.")
    if state is not GameState.DECIDED:
        raise InvalidState("Game result is not decided and therefore cannot be undone.")

    competition = get_or_create_competition(session, ref.guild_id)
    restored = settlement_service.unsettle_game(session, game, competition)

    game.state = GameState.UNDECIDED.value
    session.flush()

    logger.info(
        "Game #%s in lobby %s undone (%d player(s) restored)",
        game.game_id, game.lobby_id, len(restored),
    )
    return game


# ---------------------------------------------------------------------------
# Undecided / Picking → Canceled
# ---------------------------------------------------------------------------
def cancel_game(
    session: Session,
    game: GameResult,
    *,
    submitter_id: int,
    comment: str | None = None,
) -> GameResult:
    state = game.game_state
    if state not in (GameState.UNDECIDED, GameState.PICKING):
        raise InvalidState("Only games that are undecided or being picked can be cancelled.")

    if state is GameState.PICKING:
        session.execute(
            delete(QueuedPlayer).where(QueuedPlayer.channel_id == game.lobby_id)
        )

    game.state = GameState.CANCELED.value
    game.submitter = submitter_id
    game.comment = comment
    session.flush()

    logger.info("Game #%s in lobby %s canceled by %s", game.game_id, game.lobby_id, submitter_id)
    return game


def cancel(
    session: Session,
    ref: MatchRef,
    *,
    submitter_id: int,
    comment: str | None = None,
) -> GameResult:
    """Moderator call: cancel the match.  A picking lobby loses its queue."""
    game = get_game(session, ref, lock=True)
    return cancel_game(session, game, submitter_id=submitter_id, comment=comment)


# ---------------------------------------------------------------------------
# Undecided → Draw
# ---------------------------------------------------------------------------
def draw_game(
    session: Session,
    game: GameResult,
    *,
    submitter_id: int,
    comment: str | None = None,
) -> GameResult:
    if game.game_state is not GameState.UNDECIDED:
        raise InvalidState("You can only call a draw on a game that hasn't been decided yet.")

    game.state = GameState.DRAW.value
    game.submitter = submitter_id
    game.comment = comment

    players = set().union(*(get_team(session, game, team) for team in TeamSelection))
    settlement_service.draw_players(session, game.guild_id, players)

    logger.info("Draw called on game #%s in lobby %s", game.game_id, game.lobby_id)
    return game


def draw(
    session: Session,
    ref: MatchRef,
    *,
    submitter_id: int,
    comment: str | None = None,
) -> GameResult:
    """Moderator call: the match was a draw.  Both rosters get ``draws += 1``."""
    game = get_game(session, ref, lock=True)
    return draw_game(session, game, submitter_id=submitter_id, comment=comment)


# ---------------------------------------------------------------------------
# History maintenance
# ---------------------------------------------------------------------------
def delete_game(session: Session, ref: MatchRef) -> GameResult:
    """Remove a match record from history.

    Player records and the match's score updates are left as they are;
    undo a decided match first if its points should be reversed.
    """
    game = get_game(session, ref, lock=True)
    session.delete(game)
    session.flush()
    logger.info("Game #%s in lobby %s deleted from history", ref.game_id, ref.lobby_id)
    return game
