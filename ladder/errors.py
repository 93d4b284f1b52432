"""
ladder.errors — Rejection Taxonomy
===================================

Every failure the scoring core reports is recoverable.  Each exception
carries a stable ``code`` for the caller and a human-readable message
the presentation layer may show as-is.
"""

from __future__ import annotations


class LadderError(Exception):
    """Base class for all rejections raised by the scoring core."""

    code = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFound(LadderError):
    """Referenced match, lobby or player does not exist."""

    code = "not_found"


class InvalidState(LadderError):
    """Transition not permitted from the match's current state."""

    code = "invalid_state"


class Unauthorized(LadderError):
    """Policy rejection: not a roster member, or already voted."""

    code = "unauthorized"


class InvalidVote(Unauthorized):
    """The submitted vote text is not a recognised result."""

    code = "invalid_vote"


class AlreadyLocked(LadderError):
    """Vote failed to reach unanimity; a moderator must decide."""

    code = "already_locked"
