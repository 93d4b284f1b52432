"""
ladder.engine.consensus — Vote Tally & Consensus Rules
=======================================================

Pure calculation — no DB I/O.

Votes are relative to the voter's own team (Win / Lose / Draw / Cancel),
never a team number.  A team-1 "Win" and a team-2 "Lose" both count
toward team 1 winning.

Resolution rules:
  1. Nothing is attempted until votes cast * 2 > combined roster size.
     Abstentions therefore count against consensus.
  2. Past quorum, one category must hold *every* vote cast so far.
  3. Quorum without unanimity locks the match for a moderator.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable, Set
from dataclasses import dataclass

from ladder.database.models import TeamSelection, VoteState
from ladder.errors import InvalidVote

__all__ = [
    "ConsensusDecision",
    "VoteTally",
    "has_quorum",
    "parse_vote",
    "resolve_consensus",
    "tally_votes",
    "vote_types",
]


class ConsensusDecision(enum.StrEnum):
    TEAM1_WIN = "team1_win"
    TEAM2_WIN = "team2_win"
    DRAW = "draw"
    CANCEL = "cancel"
    NO_CONSENSUS = "no_consensus"

    @property
    def winning_team(self) -> TeamSelection | None:
        return _DECISION_TEAMS.get(self)


_DECISION_TEAMS: dict[ConsensusDecision, TeamSelection] = {
    ConsensusDecision.TEAM1_WIN: TeamSelection.TEAM1,
    ConsensusDecision.TEAM2_WIN: TeamSelection.TEAM2,
}


# ---------------------------------------------------------------------------
# Parsing user input
# ---------------------------------------------------------------------------
def vote_types() -> list[str]:
    """Accepted vote values, in display order."""
    return [v.value for v in VoteState]


def parse_vote(value: str | VoteState) -> VoteState:
    """Turn user text into a :class:`VoteState` (case-insensitive).

    Numbers are refused outright: "1" or "2" would be a team number, and
    votes are deliberately relative to the voter's own team.

    Raises
    ------
    InvalidVote
        If *value* is numeric or not a known vote.
    """
    if isinstance(value, VoteState):
        return value

    text = value.strip()
    try:
        int(text)
    except ValueError:
        pass
    else:
        raise InvalidVote(
            "Please supply a result relevant to you rather than the team number. "
            f"Valid results: {', '.join(vote_types())}."
        )

    for vote in VoteState:
        if vote.value.lower() == text.lower():
            return vote

    raise InvalidVote(
        "Your vote was invalid. Please choose a result relevant to you, "
        "ie. Win (if you won the game) or Lose (if you lost the game). "
        f"Valid results: {', '.join(vote_types())}."
    )


# ---------------------------------------------------------------------------
# Tally
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class VoteTally:
    """Counts per outcome category, relative to the rosters."""

    total: int = 0
    team1_win: int = 0
    team2_win: int = 0
    draw: int = 0
    cancel: int = 0


def tally_votes(
    votes: Iterable[tuple[int, VoteState]],
    team1: Set[int],
    team2: Set[int],
) -> VoteTally:
    """Count ``(user_id, vote)`` pairs into outcome categories."""
    total = team1_win = team2_win = draw = cancel = 0
    for user_id, vote in votes:
        total += 1
        if vote is VoteState.DRAW:
            draw += 1
        elif vote is VoteState.CANCEL:
            cancel += 1
        elif vote is VoteState.WIN:
            if user_id in team1:
                team1_win += 1
            elif user_id in team2:
                team2_win += 1
        elif vote is VoteState.LOSE:
            if user_id in team2:
                team1_win += 1
            elif user_id in team1:
                team2_win += 1

    return VoteTally(
        total=total,
        team1_win=team1_win,
        team2_win=team2_win,
        draw=draw,
        cancel=cancel,
    )


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------
def has_quorum(vote_count: int, team1_size: int, team2_size: int) -> bool:
    """Strict majority of the *combined* roster."""
    return vote_count * 2 > team1_size + team2_size


def resolve_consensus(
    tally: VoteTally, team1_size: int, team2_size: int
) -> ConsensusDecision | None:
    """Decide a match from its tally.

    Returns ``None`` below quorum (keep collecting votes),
    :attr:`ConsensusDecision.NO_CONSENSUS` when quorum is reached but the
    votes disagree, otherwise the unanimous outcome.
    """
    if not has_quorum(tally.total, team1_size, team2_size):
        return None

    if tally.team1_win == tally.total:
        return ConsensusDecision.TEAM1_WIN
    if tally.team2_win == tally.total:
        return ConsensusDecision.TEAM2_WIN
    if tally.draw == tally.total:
        return ConsensusDecision.DRAW
    if tally.cancel == tally.total:
        return ConsensusDecision.CANCEL
    return ConsensusDecision.NO_CONSENSUS
