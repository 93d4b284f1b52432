"""
ladder.database.engine — Database Connection, Unit of Work & Async Helper
==========================================================================

Every scoring operation runs inside exactly one transaction.  The
:func:`get_session` context manager is that unit of work: it commits when
the block exits cleanly and rolls back on *any* exception, so a failure
halfway through a team settlement never leaves half the roster updated.

SQLAlchemy is synchronous.  Async callers (a chat bot, a web handler)
hand the whole unit of work to :func:`run_db`, which runs it on a worker
thread so the event loop is never blocked.

Usage::

    from ladder.database.engine import create_db_engine, get_session, init_db

    engine = create_db_engine()          # reads DATABASE_URL from .env
    init_db(engine)                      # CREATE TABLE IF NOT EXISTS …

    with get_session(engine) as session:
        settlement = submit_outcome(session, ref, TeamSelection.TEAM1, submitter_id=42)
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import ParamSpec, TypeVar

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session

from ladder.database.models import Base

logger = logging.getLogger(__name__)

P = ParamSpec("P")
T = TypeVar("T")


# ---------------------------------------------------------------------------
# Engine creation
# ---------------------------------------------------------------------------
def create_db_engine(url: str | None = None) -> Engine:
    """Build a SQLAlchemy :class:`Engine` from *url* or ``DATABASE_URL``.

    Raises
    ------
    RuntimeError
        If no URL is given and ``DATABASE_URL`` is not set.
    """
    url = url or os.getenv("DATABASE_URL")
    if not url:
        raise RuntimeError(
            "DATABASE_URL is not set.  "
            "Copy .env.example → .env and set a valid PostgreSQL URL."
        )

    engine = create_engine(
        url,
        echo=False,
        pool_pre_ping=True,
        pool_recycle=3600,
    )
    logger.info("Database engine created → %s", engine.url.host or engine.url.database)
    return engine


# ---------------------------------------------------------------------------
# Schema initialization
# ---------------------------------------------------------------------------
def init_db(engine: Engine) -> None:
    """Create all tables defined in :mod:`ladder.database.models`.

    Safe to call on every startup.  Production schemas are managed by
    Alembic (``alembic upgrade head``); this is for dev/test databases.
    """
    Base.metadata.create_all(engine)
    logger.info("Database tables verified / created.")


# ---------------------------------------------------------------------------
# Unit of work
# ---------------------------------------------------------------------------
@contextmanager
def get_session(engine: Engine) -> Iterator[Session]:
    """Yield a :class:`Session` that commits on success and rolls back on
    exception.

    Objects stay readable after the block (``expire_on_commit=False``) so
    settlement results can be handed to the presentation layer.
    """
    session = Session(engine, expire_on_commit=False)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


# ---------------------------------------------------------------------------
# Async bridge
# ---------------------------------------------------------------------------
async def run_db(func: Callable[P, T], *args: P.args, **kwargs: P.kwargs) -> T:
    """Run a **synchronous** database function on a background thread.

    ::

        outcome = await run_db(cast_vote_in_session, engine, ref, user_id, "win")
    """
    return await asyncio.to_thread(func, *args, **kwargs)
