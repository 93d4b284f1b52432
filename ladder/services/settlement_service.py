"""
ladder.services.settlement_service — Applying & Reversing Point Changes
========================================================================

The only code that mutates :class:`Player` rows.

- :func:`settle_team`   — win/loss for one roster + one ScoreUpdate per player
- :func:`draw_players`  — draw counter for a set of players, no point change
- :func:`unsettle_game` — reverse every ScoreUpdate of a match and delete it

All functions work inside the caller's session and never commit.  The
caller's unit of work (:func:`ladder.database.engine.get_session`) makes
the whole match settlement atomic.

Players who have left the ladder (no profile row) are skipped silently.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.orm import Session

from ladder.database.models import Player, Rank, ScoreUpdate
from ladder.engine.outcomes import PlayerSettlement
from ladder.engine.scoring import score_player

if TYPE_CHECKING:
    from ladder.database.models import Competition, GameResult, Lobby

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------
def get_ranks(session: Session, guild_id: int) -> list[Rank]:
    """All tiers configured for a guild, lowest threshold first."""
    return list(
        session.scalars(
            select(Rank).where(Rank.guild_id == guild_id).order_by(Rank.points)
        ).all()
    )


def lock_players(
    session: Session, guild_id: int, user_ids: Iterable[int]
) -> dict[int, Player]:
    """Lock every listed player row in one statement, ordered by user ID.

    Matches with overlapping rosters always acquire row locks in the same
    order, so they queue behind each other instead of deadlocking.
    Missing players are simply absent from the result.
    """
    ids = sorted(set(user_ids))
    if not ids:
        return {}
    players = session.scalars(
        select(Player)
        .where(Player.guild_id == guild_id, Player.user_id.in_(ids))
        .order_by(Player.user_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    ).all()
    return {p.user_id: p for p in players}


def get_score_updates(
    session: Session, guild_id: int, channel_id: int, game_number: int
) -> list[ScoreUpdate]:
    """Audit rows written when a match was decided."""
    return list(
        session.scalars(
            select(ScoreUpdate)
            .where(
                ScoreUpdate.guild_id == guild_id,
                ScoreUpdate.channel_id == channel_id,
                ScoreUpdate.game_number == game_number,
            )
            .order_by(ScoreUpdate.id)
        ).all()
    )


# ---------------------------------------------------------------------------
# Win / loss
# ---------------------------------------------------------------------------
def settle_team(
    session: Session,
    roster: Iterable[int],
    won: bool,
    game: GameResult,
    lobby: Lobby,
    competition: Competition,
    ranks: Sequence[Rank],
) -> list[PlayerSettlement]:
    """Apply a win or a loss to every player on *roster*.

    For each player: score via the pure pipeline, write points and the
    win/loss counter, and add a ScoreUpdate carrying the exact delta.
    Returns one :class:`PlayerSettlement` per processed player.
    """
    roster = sorted(set(roster))
    players = lock_players(session, competition.guild_id, roster)

    settlements: list[PlayerSettlement] = []
    for user_id in roster:
        player = players.get(user_id)
        if player is None:
            logger.debug(
                "Skipping user %s in game #%s: no player profile",
                user_id, game.game_id,
            )
            continue

        score = score_player(won, player.points, ranks, lobby, competition)

        player.points = score.points_after
        if won:
            player.wins += 1
        else:
            player.losses += 1

        session.add(ScoreUpdate(
            guild_id=competition.guild_id,
            channel_id=game.lobby_id,
            user_id=player.user_id,
            game_number=game.game_id,
            modify_amount=score.delta,
        ))

        settlements.append(PlayerSettlement(
            player=player,
            delta=score.delta,
            prior_tier=score.prior_tier,
            change_state=score.change_state,
            new_tier=score.new_tier,
            previous_points=score.points_before,
        ))

    session.flush()
    logger.info(
        "Settled %s for %d player(s) in lobby %s game #%s",
        "win" if won else "loss", len(settlements), game.lobby_id, game.game_id,
    )
    return settlements


# ---------------------------------------------------------------------------
# Draw
# ---------------------------------------------------------------------------
def draw_players(session: Session, guild_id: int, roster: Iterable[int]) -> list[Player]:
    """Increment ``draws`` for every player on *roster*.  Points are untouched."""
    updated = list(lock_players(session, guild_id, roster).values())
    for player in updated:
        player.draws += 1
    session.flush()
    return updated


# ---------------------------------------------------------------------------
# Undo
# ---------------------------------------------------------------------------
def unsettle_game(
    session: Session, game: GameResult, competition: Competition
) -> list[Player]:
    """Reverse every ScoreUpdate recorded for *game* and delete it.

    A negative delta was a loss (``losses -= 1``); zero or positive was a
    win (``wins -= 1``).  Points go back by subtracting the recorded
    delta, then the competition's clamp is applied.

    The delta was recorded before any clamp at settlement time, so a
    player who was clamped to zero ends up *above* their pre-match total.

    The win/loss split is read from the sign of the delta alone.  A loss
    settled with a zero loss modifier recorded ``0`` and is therefore
    reversed as a win.

    Audit rows for players who no longer exist are still deleted.
    """
    updates = get_score_updates(session, game.guild_id, game.lobby_id, game.game_id)
    players = lock_players(session, game.guild_id, (u.user_id for u in updates))

    restored: list[Player] = []
    for update in updates:
        player = players.get(update.user_id)
        if player is None:
            logger.warning(
                "Undo of game #%s: player %s not found, dropping audit row",
                game.game_id, update.user_id,
            )
            session.delete(update)
            continue

        if update.modify_amount < 0:
            player.losses -= 1
        else:
            player.wins -= 1

        player.points -= update.modify_amount
        if not competition.allow_negative_score and player.points < 0:
            player.points = 0

        session.delete(update)
        restored.append(player)

    session.flush()
    return restored
