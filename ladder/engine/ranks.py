"""
ladder.engine.ranks — Rank Table Resolver
==========================================

Pure lookup: which tier does a point total belong to?
No DB I/O; callers pass the guild's rank rows in.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ladder.database.models import Rank


def resolve_tier(points: int, ranks: Iterable[Rank]) -> Rank | None:
    """Return the highest-threshold rank with ``threshold < points``.

    The comparison is strict: a player sitting exactly on a threshold
    belongs to the tier below it.  Returns ``None`` when the player is
    below every tier.
    """
    best: Rank | None = None
    for rank in ranks:
        if rank.points < points and (best is None or rank.points > best.points):
            best = rank
    return best
