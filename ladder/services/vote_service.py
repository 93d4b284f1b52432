"""
ladder.services.vote_service — Vote Consensus Engine
=====================================================

Lets the players of a match settle it themselves.

Each call to :func:`cast_vote`:
  1. Locks the match row (votes on one match serialize here)
  2. Validates the voter and the match state
  3. Records the vote
  4. Once a strict majority of both rosters combined has voted, resolves
     the match if every vote agrees, or locks it for a moderator if not

The vote row and any resulting settlement are written in the caller's
transaction, so either both land or neither does.
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from ladder.constants import VOTE_DECISION_COMMENT
from ladder.database.models import GameResult, GameState, GameVote, TeamSelection, VoteState
from ladder.engine.consensus import (
    ConsensusDecision,
    parse_vote,
    resolve_consensus,
    tally_votes,
)
from ladder.engine.outcomes import MatchRef, VoteOutcome, VoteOutcomeKind
from ladder.errors import AlreadyLocked, InvalidState, LadderError, Unauthorized
from ladder.services import match_service

logger = logging.getLogger(__name__)


def get_votes(session: Session, lobby_id: int, game_id: int) -> list[GameVote]:
    """Votes recorded for a match, in no particular order."""
    return list(
        session.scalars(
            select(GameVote).where(
                GameVote.channel_id == lobby_id,
                GameVote.game_id == game_id,
            )
        ).all()
    )


def _check_can_vote(
    game: GameResult,
    votes: list[GameVote],
    voter_id: int,
    team1: set[int],
    team2: set[int],
) -> None:
    if game.game_state is not GameState.UNDECIDED:
        raise InvalidState("You can only vote on the result of undecided games.")
    if game.vote_complete:
        raise AlreadyLocked(
            "Vote has already been taken on this game but wasn't unanimous, "
            "ask an admin to submit the result."
        )
    if voter_id not in team1 and voter_id not in team2:
        raise Unauthorized(
            "You are not a player in this game and cannot vote on its result."
        )
    if any(v.user_id == voter_id for v in votes):
        raise Unauthorized("You already submitted your vote for this game.")


def cast_vote(
    session: Session,
    ref: MatchRef,
    voter_id: int,
    vote: VoteState | str,
) -> VoteOutcome:
    """Record *voter_id*'s vote and resolve the match if consensus is reached.

    Rejections come back as a ``REJECTED`` outcome carrying the reason;
    nothing is written for them.
    """
    try:
        vote_state = parse_vote(vote)
        game = match_service.get_game(session, ref, lock=True)
        team1 = match_service.get_team(session, game, TeamSelection.TEAM1)
        team2 = match_service.get_team(session, game, TeamSelection.TEAM2)
        votes = get_votes(session, ref.lobby_id, ref.game_id)
        _check_can_vote(game, votes, voter_id, team1, team2)
    except LadderError as exc:
        logger.debug("Vote by %s on game #%s rejected: %s", voter_id, ref.game_id, exc)
        return VoteOutcome.rejected(exc)

    ballot = GameVote(
        channel_id=ref.lobby_id,
        game_id=ref.game_id,
        user_id=voter_id,
        guild_id=ref.guild_id,
        vote=vote_state.value,
    )
    session.add(ballot)
    votes.append(ballot)
    session.flush()

    tally = tally_votes(((v.user_id, v.vote_state) for v in votes), team1, team2)
    decision = resolve_consensus(tally, len(team1), len(team2))

    if decision is None:
        return VoteOutcome(VoteOutcomeKind.RECORDED)

    if decision is ConsensusDecision.NO_CONSENSUS:
        game.vote_complete = True
        session.flush()
        logger.info(
            "Vote on game #%s in lobby %s was not unanimous, locked for a moderator",
            game.game_id, game.lobby_id,
        )
        return VoteOutcome(
            VoteOutcomeKind.LOCKED_FOR_MODERATOR,
            reason="Vote was not unanimous, game result must be decided by a moderator.",
            code=AlreadyLocked.code,
        )

    logger.info(
        "Vote on game #%s in lobby %s reached consensus: %s",
        game.game_id, game.lobby_id, decision,
    )
    if decision is ConsensusDecision.DRAW:
        match_service.draw_game(
            session, game, submitter_id=voter_id, comment=VOTE_DECISION_COMMENT
        )
        return VoteOutcome(VoteOutcomeKind.RESOLVED_DRAW)

    if decision is ConsensusDecision.CANCEL:
        match_service.cancel_game(
            session, game, submitter_id=voter_id, comment=VOTE_DECISION_COMMENT
        )
        return VoteOutcome(VoteOutcomeKind.RESOLVED_CANCEL)

    team = decision.winning_team
    lobby = match_service.get_lobby(session, ref.lobby_id)
    settlement = match_service.decide_game(
        session, game, lobby, team, submitter_id=voter_id, comment=VOTE_DECISION_COMMENT
    )
    return VoteOutcome(VoteOutcomeKind.RESOLVED_WIN, team=team, settlement=settlement)
