"""
ladder.__main__ — Entry point for ``python -m ladder``
======================================================

Prepares a database for the scoring core:
1. Load .env (``DATABASE_URL``).
2. Load config.yaml.
3. Create the SQLAlchemy engine and ensure tables exist.
4. Seed the configured guild's competition row (idempotent).

Run with::

    uv run python -m ladder
"""

from __future__ import annotations

import logging
import sys

from dotenv import load_dotenv

from ladder.config import load_config
from ladder.database.engine import create_db_engine, get_session, init_db
from ladder.services.match_service import get_or_create_competition

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("ladder")


def main() -> None:
    """Bootstrap the ladder database."""

    # 1. Environment variables (secrets).
    load_dotenv()

    # 2. Soft configuration.
    try:
        cfg = load_config()
    except (FileNotFoundError, KeyError) as exc:
        logger.critical("Could not load config.yaml: %s", exc)
        sys.exit(1)
    logger.info("Config loaded — Community: %s", cfg.community_name)

    # 3. Database.
    engine = create_db_engine()
    init_db(engine)

    # 4. Competition defaults for the primary guild.
    with get_session(engine) as session:
        competition = get_or_create_competition(session, cfg.guild_id, cfg)
        logger.info("Competition ready: %r", competition)


if __name__ == "__main__":
    main()
