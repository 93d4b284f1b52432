"""
Ladder — Scoring & Consensus Core for a Competitive Matchmaking Ladder
=======================================================================
Turns a completed or disputed match into a durable, reversible set of
rating changes for every participant, and lets the players settle a
disputed result by vote before a moderator has to step in.

Package layout::

    ladder/
    ├── config.py          # YAML → typed Python config
    ├── constants.py       # Scoring defaults, fixed strings
    ├── errors.py          # NotFound / InvalidState / Unauthorized / AlreadyLocked
    ├── database/
    │   ├── engine.py      # SQLAlchemy engine, unit of work, async helper
    │   └── models.py      # All ORM models
    ├── engine/
    │   ├── ranks.py       # Tier lookup
    │   ├── scoring.py     # Point delta + clamp + tier change pipeline
    │   ├── consensus.py   # Vote parsing, tally, quorum/unanimity
    │   └── outcomes.py    # Result records for the presentation layer
    └── services/
        ├── settlement_service.py  # Apply / reverse point changes
        ├── match_service.py       # Match state machine + queries
        └── vote_service.py        # Player vote consensus
"""

__version__ = "0.1.0"
