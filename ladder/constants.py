"""
ladder.constants — Shared Constants
====================================

Single source of truth for scoring defaults and fixed strings.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Competition defaults (used when a guild has no competition row yet)
# ---------------------------------------------------------------------------
DEFAULT_WIN_MODIFIER: int = 10
DEFAULT_LOSS_MODIFIER: int = 5
DEFAULT_ALLOW_NEGATIVE_SCORE: bool = False

# ---------------------------------------------------------------------------
# Voting
# ---------------------------------------------------------------------------
VOTE_DECISION_COMMENT = "Decided by vote."

# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------
GAME_LIST_LIMIT: int = 100
