"""
tests/test_vote_service.py — Vote Consensus Engine
===================================================

End-to-end voting against SQLite: recording, quorum, unanimous
resolution, moderator lock-out, and every rejection path.
"""

from __future__ import annotations

from sqlalchemy import select

from ladder.constants import VOTE_DECISION_COMMENT
from ladder.database.models import GameResult, GameState, GameVote, TeamSelection
from ladder.engine.outcomes import MatchRef, VoteOutcomeKind
from ladder.services import vote_service

from conftest import GUILD_ID, LOBBY_ID, seed_ladder, snapshot  # noqa: E402

TEAM1 = {1: 100, 2: 100}
TEAM2 = {3: 100, 4: 100}


def _game(session) -> GameResult:
    session.expire_all()
    return session.scalar(select(GameResult).where(GameResult.game_id == 1))


def _vote_count(session) -> int:
    return len(vote_service.get_votes(session, LOBBY_ID, 1))


class TestRecording:
    def test_first_vote_is_recorded(self, db_session):
        ref = seed_ladder(db_session, team1=TEAM1, team2=TEAM2)

        outcome = vote_service.cast_vote(db_session, ref, 1, "win")

        assert outcome.kind is VoteOutcomeKind.RECORDED
        assert not outcome.resolved
        votes = db_session.scalars(select(GameVote)).all()
        assert [(v.user_id, v.vote) for v in votes] == [(1, "Win")]

    def test_agreement_below_quorum_waits(self, db_session):
        ref = seed_ladder(db_session, team1=TEAM1, team2=TEAM2)

        vote_service.cast_vote(db_session, ref, 1, "win")
        outcome = vote_service.cast_vote(db_session, ref, 3, "lose")

        assert outcome.kind is VoteOutcomeKind.RECORDED
        assert _game(db_session).game_state is GameState.UNDECIDED
        assert snapshot(db_session, 1, 3) == {1: (100, 0, 0, 0), 3: (100, 0, 0, 0)}


class TestResolution:
    def test_three_unanimous_votes_decide_2v2(self, db_session):
        ref = seed_ladder(db_session, team1=TEAM1, team2=TEAM2)

        vote_service.cast_vote(db_session, ref, 1, "win")
        vote_service.cast_vote(db_session, ref, 3, "lose")
        outcome = vote_service.cast_vote(db_session, ref, 2, "Win")

        assert outcome.kind is VoteOutcomeKind.RESOLVED_WIN
        assert outcome.resolved
        assert outcome.team is TeamSelection.TEAM1
        assert sorted(s.player.user_id for s in outcome.settlement.winners) == [1, 2]

        game = _game(db_session)
        assert game.game_state is GameState.DECIDED
        assert game.winning_team == 1
        assert game.comment == VOTE_DECISION_COMMENT
        assert game.submitter == 2
        assert snapshot(db_session, 1, 2, 3, 4) == {
            1: (110, 1, 0, 0),
            2: (110, 1, 0, 0),
            3: (95, 0, 1, 0),
            4: (95, 0, 1, 0),
        }

    def test_team2_wins_by_vote(self, db_session):
        ref = seed_ladder(db_session, team1={1: 100}, team2={2: 100})

        vote_service.cast_vote(db_session, ref, 1, "lose")
        outcome = vote_service.cast_vote(db_session, ref, 2, "win")

        assert outcome.kind is VoteOutcomeKind.RESOLVED_WIN
        assert outcome.team is TeamSelection.TEAM2

    def test_vote_after_resolution_rejected(self, db_session):
        ref = seed_ladder(db_session, team1=TEAM1, team2=TEAM2)
        for voter, vote in ((1, "win"), (3, "lose"), (2, "win")):
            vote_service.cast_vote(db_session, ref, voter, vote)

        outcome = vote_service.cast_vote(db_session, ref, 4, "lose")

        assert outcome.kind is VoteOutcomeKind.REJECTED
        assert outcome.code == "invalid_state"
        assert _vote_count(db_session) == 3

    def test_unanimous_draw(self, db_session):
        ref = seed_ladder(db_session, team1={1: 100}, team2={2: 40})

        vote_service.cast_vote(db_session, ref, 1, "draw")
        outcome = vote_service.cast_vote(db_session, ref, 2, "draw")

        assert outcome.kind is VoteOutcomeKind.RESOLVED_DRAW
        game = _game(db_session)
        assert game.game_state is GameState.DRAW
        assert game.comment == VOTE_DECISION_COMMENT
        assert snapshot(db_session, 1, 2) == {1: (100, 0, 0, 1), 2: (40, 0, 0, 1)}

    def test_unanimous_cancel(self, db_session):
        ref = seed_ladder(db_session, team1={1: 100}, team2={2: 40})

        vote_service.cast_vote(db_session, ref, 2, "cancel")
        outcome = vote_service.cast_vote(db_session, ref, 1, "cancel")

        assert outcome.kind is VoteOutcomeKind.RESOLVED_CANCEL
        game = _game(db_session)
        assert game.game_state is GameState.CANCELED
        assert game.submitter == 1
        assert snapshot(db_session, 1, 2) == {1: (100, 0, 0, 0), 2: (40, 0, 0, 0)}


class TestModeratorLock:
    def test_split_vote_locks_match(self, db_session):
        ref = seed_ladder(db_session, team1=TEAM1, team2=TEAM2)

        vote_service.cast_vote(db_session, ref, 1, "win")
        vote_service.cast_vote(db_session, ref, 2, "win")
        outcome = vote_service.cast_vote(db_session, ref, 3, "win")

        assert outcome.kind is VoteOutcomeKind.LOCKED_FOR_MODERATOR
        assert outcome.code == "already_locked"
        assert "moderator" in outcome.reason
        game = _game(db_session)
        assert game.vote_complete is True
        assert game.game_state is GameState.UNDECIDED

    def test_locked_match_rejects_further_votes(self, db_session):
        ref = seed_ladder(db_session, team1=TEAM1, team2=TEAM2)
        for voter, vote in ((1, "win"), (2, "draw"), (3, "cancel")):
            vote_service.cast_vote(db_session, ref, voter, vote)

        outcome = vote_service.cast_vote(db_session, ref, 4, "lose")

        assert outcome.kind is VoteOutcomeKind.REJECTED
        assert outcome.code == "already_locked"
        assert "admin" in outcome.reason
        assert _vote_count(db_session) == 3


class TestRejections:
    def test_duplicate_vote(self, db_session):
        ref = seed_ladder(db_session, team1=TEAM1, team2=TEAM2)
        vote_service.cast_vote(db_session, ref, 1, "win")

        outcome = vote_service.cast_vote(db_session, ref, 1, "lose")

        assert outcome.kind is VoteOutcomeKind.REJECTED
        assert outcome.code == "unauthorized"
        assert "already submitted" in outcome.reason
        assert _vote_count(db_session) == 1

    def test_non_member(self, db_session):
        ref = seed_ladder(db_session, team1=TEAM1, team2=TEAM2)

        outcome = vote_service.cast_vote(db_session, ref, 42, "win")

        assert outcome.kind is VoteOutcomeKind.REJECTED
        assert outcome.code == "unauthorized"
        assert _vote_count(db_session) == 0

    def test_team_number_instead_of_result(self, db_session):
        ref = seed_ladder(db_session, team1=TEAM1, team2=TEAM2)

        outcome = vote_service.cast_vote(db_session, ref, 1, "1")

        assert outcome.kind is VoteOutcomeKind.REJECTED
        assert outcome.code == "invalid_vote"
        assert "team number" in outcome.reason
        assert _vote_count(db_session) == 0

    def test_unknown_vote_value(self, db_session):
        ref = seed_ladder(db_session, team1=TEAM1, team2=TEAM2)

        outcome = vote_service.cast_vote(db_session, ref, 1, "gg")

        assert outcome.code == "invalid_vote"

    def test_missing_game(self, db_session):
        seed_ladder(db_session, team1=TEAM1, team2=TEAM2)

        outcome = vote_service.cast_vote(db_session, MatchRef(GUILD_ID, LOBBY_ID, 9), 1, "win")

        assert outcome.kind is VoteOutcomeKind.REJECTED
        assert outcome.code == "not_found"

    def test_decided_match(self, db_session):
        ref = seed_ladder(db_session, team1=TEAM1, team2=TEAM2, state=GameState.DECIDED)

        outcome = vote_service.cast_vote(db_session, ref, 1, "win")

        assert outcome.code == "invalid_state"
        assert _vote_count(db_session) == 0
