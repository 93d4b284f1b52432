"""
ladder.engine.scoring — Score Delta Calculator
===============================================

Pure calculation pipeline.  No DB I/O; the settlement service feeds it
ORM rows (or anything with the same attributes) and writes the result.

Pipeline for one player:
  resolve prior tier → compute delta → apply + clamp → resolve new tier → classify

All multiplier products are truncated toward zero with ``int()``.  The
recorded delta must be reproducible bit-for-bit so undo can subtract it.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ladder.database.models import RankChangeState
from ladder.engine.ranks import resolve_tier

if TYPE_CHECKING:
    from ladder.database.models import Competition, Lobby, Rank

__all__ = [
    "PlayerScore",
    "apply_delta",
    "classify_tier_change",
    "compute_delta",
    "score_player",
]


# ---------------------------------------------------------------------------
# PlayerScore — output of the pipeline
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class PlayerScore:
    """Everything a settlement needs to write for one player."""

    delta: int
    points_before: int
    points_after: int
    prior_tier: Rank | None
    new_tier: Rank | None
    change_state: RankChangeState


# ---------------------------------------------------------------------------
# Stage 1: Delta
# ---------------------------------------------------------------------------
def compute_delta(
    won: bool,
    points: int,
    tier: Rank | None,
    lobby: Lobby,
    competition: Competition,
) -> int:
    """Signed point change for one player.

    Win:  ``int(win_modifier * lobby_multiplier)``, then, when the player
    is above ``lobby.high_limit``, ``int(delta * reduction_percent)``.

    Loss: the loss modifier (optionally times the lobby multiplier when
    ``multiply_loss_value`` is set), returned as ``-abs(...)``.

    Tier modifiers fall back to the competition defaults when the player
    has no tier or the tier leaves the modifier unset.
    """
    if won:
        modifier = _tier_value(tier, "win_modifier", competition.default_win_modifier)
        delta = int(modifier * lobby.lobby_multiplier)
        if lobby.high_limit is not None and points > lobby.high_limit:
            delta = int(delta * lobby.reduction_percent)
        return delta

    # Loss modifiers are magnitudes to subtract
    magnitude = _tier_value(tier, "loss_modifier", competition.default_loss_modifier)
    if lobby.multiply_loss_value:
        magnitude = int(magnitude * lobby.lobby_multiplier)
    return -abs(magnitude)


def _tier_value(tier: Rank | None, attr: str, default: int) -> int:
    if tier is None:
        return default
    value = getattr(tier, attr)
    return default if value is None else value


# ---------------------------------------------------------------------------
# Stage 2: Apply + clamp
# ---------------------------------------------------------------------------
def apply_delta(points: int, delta: int, allow_negative_score: bool) -> int:
    """New point total.  Only a subtraction is clamped at zero."""
    result = points + delta
    if delta < 0 and not allow_negative_score and result < 0:
        return 0
    return result


# ---------------------------------------------------------------------------
# Stage 3: Tier change
# ---------------------------------------------------------------------------
def classify_tier_change(
    won: bool,
    prior_tier: Rank | None,
    new_tier: Rank | None,
    points_after: int,
) -> RankChangeState:
    """Rank-ups are only reported for winners, de-ranks only for losers.

    Win:  RANK_UP when a tier now resolves and either none did before or
    its role differs from the prior one.

    Loss: DERANK when the player dropped below the prior tier's threshold
    and a strictly lower tier resolves.
    """
    if won:
        if new_tier is not None and (
            prior_tier is None or new_tier.role_id != prior_tier.role_id
        ):
            return RankChangeState.RANK_UP
        return RankChangeState.NONE

    if (
        prior_tier is not None
        and points_after < prior_tier.points
        and new_tier is not None
        and new_tier.points < prior_tier.points
    ):
        return RankChangeState.DERANK
    return RankChangeState.NONE


# ---------------------------------------------------------------------------
# Full per-player pipeline
# ---------------------------------------------------------------------------
def score_player(
    won: bool,
    points: int,
    ranks: Sequence[Rank],
    lobby: Lobby,
    competition: Competition,
) -> PlayerScore:
    """Run the whole pipeline for one player.

    This is a PURE function.  The prior tier is resolved from *points*
    before anything changes; the new tier from the clamped total after.
    """
    prior_tier = resolve_tier(points, ranks)
    delta = compute_delta(won, points, prior_tier, lobby, competition)
    points_after = apply_delta(points, delta, competition.allow_negative_score)
    new_tier = resolve_tier(points_after, ranks)

    return PlayerScore(
        delta=delta,
        points_before=points,
        points_after=points_after,
        prior_tier=prior_tier,
        new_tier=new_tier,
        change_state=classify_tier_change(won, prior_tier, new_tier, points_after),
    )
