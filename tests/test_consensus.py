"""
tests/test_consensus.py — Unit Tests for Vote Parsing & Consensus Rules
========================================================================
"""

from __future__ import annotations

import pytest

from ladder.database.models import TeamSelection, VoteState
from ladder.engine.consensus import (
    ConsensusDecision,
    VoteTally,
    has_quorum,
    parse_vote,
    resolve_consensus,
    tally_votes,
    vote_types,
)
from ladder.errors import InvalidVote, Unauthorized

TEAM1 = {1, 2}
TEAM2 = {3, 4}

W, L, D, C = VoteState.WIN, VoteState.LOSE, VoteState.DRAW, VoteState.CANCEL


class TestParseVote:
    @pytest.mark.parametrize("text", ["win", "WIN", " Win "])
    def test_case_insensitive(self, text):
        assert parse_vote(text) is VoteState.WIN

    def test_enum_passes_through(self):
        assert parse_vote(VoteState.CANCEL) is VoteState.CANCEL

    @pytest.mark.parametrize("text", ["1", "2", " 0 "])
    def test_team_numbers_rejected(self, text):
        with pytest.raises(InvalidVote, match="team number"):
            parse_vote(text)

    def test_unknown_value_rejected(self):
        with pytest.raises(InvalidVote, match="invalid"):
            parse_vote("victory")

    def test_invalid_vote_is_a_policy_rejection(self):
        assert issubclass(InvalidVote, Unauthorized)

    def test_vote_types_lists_every_value(self):
        assert vote_types() == ["Win", "Lose", "Draw", "Cancel"]


class TestTally:
    def test_win_and_opposing_lose_count_for_same_team(self):
        tally = tally_votes([(1, W), (3, L)], TEAM1, TEAM2)
        assert tally == VoteTally(total=2, team1_win=2)

    def test_team2_perspective(self):
        tally = tally_votes([(4, W), (2, L), (1, L)], TEAM1, TEAM2)
        assert tally.team2_win == 3
        assert tally.team1_win == 0

    def test_draw_and_cancel_counted_regardless_of_team(self):
        tally = tally_votes([(1, D), (3, D), (2, C)], TEAM1, TEAM2)
        assert (tally.total, tally.draw, tally.cancel) == (3, 2, 1)


class TestQuorum:
    def test_2v2_needs_three_votes(self):
        assert not has_quorum(2, 2, 2)
        assert has_quorum(3, 2, 2)

    def test_1v1_needs_both_votes(self):
        assert not has_quorum(1, 1, 1)
        assert has_quorum(2, 1, 1)

    def test_uneven_rosters(self):
        # 3 + 2 = 5 players: 3 votes is a strict majority
        assert not has_quorum(2, 3, 2)
        assert has_quorum(3, 3, 2)


class TestResolveConsensus:
    def test_below_quorum_does_nothing(self):
        tally = tally_votes([(1, W), (3, L)], TEAM1, TEAM2)
        assert resolve_consensus(tally, 2, 2) is None

    def test_three_of_four_unanimous_resolves(self):
        tally = tally_votes([(1, W), (3, L), (2, W)], TEAM1, TEAM2)
        decision = resolve_consensus(tally, 2, 2)
        assert decision is ConsensusDecision.TEAM1_WIN
        assert decision.winning_team is TeamSelection.TEAM1

    def test_team2_unanimous(self):
        tally = tally_votes([(3, W), (4, W), (1, L)], TEAM1, TEAM2)
        assert resolve_consensus(tally, 2, 2) is ConsensusDecision.TEAM2_WIN

    def test_unanimous_draw(self):
        tally = tally_votes([(1, D), (3, D), (4, D)], TEAM1, TEAM2)
        decision = resolve_consensus(tally, 2, 2)
        assert decision is ConsensusDecision.DRAW
        assert decision.winning_team is None

    def test_unanimous_cancel(self):
        tally = tally_votes([(1, C), (2, C), (3, C), (4, C)], TEAM1, TEAM2)
        assert resolve_consensus(tally, 2, 2) is ConsensusDecision.CANCEL

    def test_plurality_is_not_enough(self):
        """Both teams claim the win: 2 vs 1 is still no consensus."""
        tally = tally_votes([(1, W), (2, W), (3, W)], TEAM1, TEAM2)
        assert resolve_consensus(tally, 2, 2) is ConsensusDecision.NO_CONSENSUS

    def test_split_two_two(self):
        tally = tally_votes([(1, W), (2, W), (3, D), (4, D)], TEAM1, TEAM2)
        assert resolve_consensus(tally, 2, 2) is ConsensusDecision.NO_CONSENSUS
