"""
ladder.config — YAML Configuration Loader
==========================================

Reads ``config.yaml`` for identity settings and the competition defaults
a guild starts with.  Once a guild's ``competitions`` row exists it is
the source of truth; the YAML values only seed it.

Secrets (``DATABASE_URL``) come from the environment / ``.env``.

Usage::

    from ladder.config import load_config

    cfg = load_config()          # reads ./config.yaml by default
    print(cfg.guild_id)
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import yaml

from ladder.constants import (
    DEFAULT_ALLOW_NEGATIVE_SCORE,
    DEFAULT_LOSS_MODIFIER,
    DEFAULT_WIN_MODIFIER,
)


# ---------------------------------------------------------------------------
# Typed settings object
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class LadderConfig:
    """Immutable configuration loaded from ``config.yaml``."""

    # Identity
    community_name: str
    guild_id: int  # Primary guild snowflake (for seeding)

    # Competition seed values
    default_win_modifier: int = DEFAULT_WIN_MODIFIER
    default_loss_modifier: int = DEFAULT_LOSS_MODIFIER
    allow_negative_score: bool = DEFAULT_ALLOW_NEGATIVE_SCORE


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def load_config(path: str | Path = "config.yaml") -> LadderConfig:
    """Read *path* and return a :class:`LadderConfig` instance.

    Raises
    ------
    FileNotFoundError
        If the YAML file doesn't exist.
    KeyError
        If a required key is missing from the YAML file.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path.resolve()}\n"
            "Hint: copy config.yaml.example → config.yaml and edit it."
        )

    with open(config_path, encoding="utf-8") as fh:
        raw: dict = yaml.safe_load(fh) or {}

    competition = raw.get("competition") or {}
    return LadderConfig(
        community_name=raw["community_name"],
        guild_id=int(raw["guild_id"]),
        default_win_modifier=int(
            competition.get("default_win_modifier", DEFAULT_WIN_MODIFIER)
        ),
        default_loss_modifier=int(
            competition.get("default_loss_modifier", DEFAULT_LOSS_MODIFIER)
        ),
        allow_negative_score=bool(
            competition.get("allow_negative_score", DEFAULT_ALLOW_NEGATIVE_SCORE)
        ),
    )
