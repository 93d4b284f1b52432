"""
ladder.engine.outcomes — Result Records
========================================

Structured values handed back to the presentation layer.  Nothing here
formats text; a chat bot or dashboard decides how to render them.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ladder.database.models import RankChangeState, TeamSelection

if TYPE_CHECKING:
    from ladder.database.models import Player, Rank
    from ladder.errors import LadderError

__all__ = [
    "MatchRef",
    "PlayerSettlement",
    "Settlement",
    "VoteOutcome",
    "VoteOutcomeKind",
]


# ---------------------------------------------------------------------------
# MatchRef — identity of one match
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class MatchRef:
    """(guild, lobby channel, per-lobby game number)."""

    guild_id: int
    lobby_id: int
    game_id: int


# ---------------------------------------------------------------------------
# Settlement records
# ---------------------------------------------------------------------------
@dataclass(slots=True)
class PlayerSettlement:
    """What one settlement did to one player.

    ``delta`` is the signed amount recorded in the audit trail.  On a
    clamped loss it is larger in magnitude than the change actually
    visible in ``player.points``; ``previous_points`` is the true
    pre-match total.
    """

    player: Player
    delta: int
    prior_tier: Rank | None
    change_state: RankChangeState
    new_tier: Rank | None
    previous_points: int = 0


@dataclass(slots=True)
class Settlement:
    """Result of deciding a match: one list per side."""

    match: MatchRef
    winning_team: TeamSelection
    winners: list[PlayerSettlement] = field(default_factory=list)
    losers: list[PlayerSettlement] = field(default_factory=list)
    comment: str | None = None

    @property
    def players(self) -> list[PlayerSettlement]:
        return [*self.winners, *self.losers]


# ---------------------------------------------------------------------------
# Vote outcome
# ---------------------------------------------------------------------------
class VoteOutcomeKind(enum.StrEnum):
    RECORDED = "recorded"
    RESOLVED_WIN = "resolved_win"
    RESOLVED_DRAW = "resolved_draw"
    RESOLVED_CANCEL = "resolved_cancel"
    LOCKED_FOR_MODERATOR = "locked_for_moderator"
    REJECTED = "rejected"


@dataclass(slots=True)
class VoteOutcome:
    """What happened to a single cast vote."""

    kind: VoteOutcomeKind
    team: TeamSelection | None = None
    settlement: Settlement | None = None
    reason: str | None = None
    code: str | None = None

    @classmethod
    def rejected(cls, error: LadderError) -> VoteOutcome:
        return cls(VoteOutcomeKind.REJECTED, reason=error.message, code=error.code)

    @property
    def resolved(self) -> bool:
        return self.kind in (
            VoteOutcomeKind.RESOLVED_WIN,
            VoteOutcomeKind.RESOLVED_DRAW,
            VoteOutcomeKind.RESOLVED_CANCEL,
        )
