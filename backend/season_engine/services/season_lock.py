"""
Per-season serialization for destructive schedule rebuilds.

Two generation requests for the same season must not interleave their
wipe and insert phases. Within one process a lock per season id serializes
them; on PostgreSQL a transaction-scoped advisory lock does the same across
processes and is released by the commit/rollback that ends the rebuild.

The registry holds locks weakly: an entry lives only while some caller holds
or waits on it, so idle seasons cost nothing.
"""

import logging
import threading
import weakref
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import text
from sqlmodel import Session

logger = logging.getLogger(__name__)

# Advisory lock namespace so season ids don't collide with other lock users
ADVISORY_LOCK_CLASS = 7301

_registry_guard = threading.Lock()
_season_locks: "weakref.WeakValueDictionary[int, threading.Lock]" = weakref.WeakValueDictionary()


def _lock_for(season_id: int) -> threading.Lock:
    with _registry_guard:
        lock = _season_locks.get(season_id)
        if lock is None:
            lock = threading.Lock()
            _season_locks[season_id] = lock
        return lock


def _is_postgres(session: Session) -> bool:
    bind = session.get_bind()
    return bind.dialect.name == "postgresql"


@contextmanager
def season_lock(session: Session, season_id: int) -> Iterator[None]:
    """
    Hold the rebuild lock for a season for the duration of the block.

    The database advisory lock is taken inside the session's transaction, so
    the block must end with commit() or rollback() on the same session.
    """
    lock = _lock_for(season_id)
    with lock:
        if _is_postgres(session):
            session.execute(
                text("SELECT pg_advisory_xact_lock(:lock_class, :season_id)"),
                {"lock_class": ADVISORY_LOCK_CLASS, "season_id": season_id},
            )
            logger.debug("Acquired advisory lock for season %s", season_id)
        yield
