"""
Recommendation Session Store
============================

This module persists RecommendationSession objects between customer messages
with a two-tier storage strategy:
1. **In-Memory Cache**: Fast access for sessions in an ongoing conversation
2. **Database Persistence**: Durable storage in the recommendation_sessions table

Architecture Overview:
----------------------
The store is a write-through cache:
- Reads check the cache first, then fall back to the database
- Writes update both the cache and the database
- Cache entries have TTL and LRU eviction to bound memory usage

Sessions are stored whole as JSON (``RecommendationSession.model_dump``);
status, phone number and branch are copied into columns so the active
session for a customer can be found without scanning JSON.

Concurrency:
------------
The recommendation engine mutates the session it is given. A customer who
sends two answers in quick succession must not have one overwrite the other,
so callers wrap fetch -> answer -> save in ``store.locked(session_id)``::

    with store.locked(session.session_id):
        session = store.get(db, session.session_id)
        engine.answer(session, text)
        store.save(db, session)

The per-session locks serialize work inside one process only; a
multi-worker deployment needs a shared lock (e.g. database row locks).

Cache Eviction Strategy:
------------------------
1. **TTL-based**: entries not accessed within ttl_seconds are dropped,
   checked on roughly 1% of reads.
2. **LRU-based**: at max_cache_size, the oldest 10% by last access go.

Evicted sessions stay in the database and are reloaded on next access.
"""

import logging
import random
import threading
import time
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import flag_modified

from ..config import SESSION_MAX_CACHE_SIZE, SESSION_TTL_SECONDS
from ..models import RecommendationSessionRecord
from ..tasks.models import RecommendationSession, SessionStatus
from ..tasks.recommendation import RecommendationEngine


logger = logging.getLogger(__name__)


class SessionStore:
    """Write-through cache of RecommendationSession objects backed by SQLAlchemy."""

    def __init__(
        self,
        ttl_seconds: int = SESSION_TTL_SECONDS,
        max_cache_size: int = SESSION_MAX_CACHE_SIZE,
    ):
        self.ttl_seconds = ttl_seconds
        self.max_cache_size = max_cache_size

        # {session_id: {"session": RecommendationSession, "last_access": timestamp}}
        self._cache: Dict[str, Dict[str, Any]] = {}
        self._cache_lock = threading.Lock()

        # {session_id: [lock, holders]}; an entry is dropped when its last
        # holder or waiter leaves, so the map only covers sessions in use
        self._session_locks: Dict[str, list] = {}
        self._session_locks_guard = threading.Lock()

    # =========================================================================
    # Cache Maintenance
    # =========================================================================

    def cleanup_expired(self) -> int:
        """
        Remove cache entries not accessed within ttl_seconds.

        Returns:
            int: Number of sessions removed from the cache (the database is untouched)
        """
        now = time.time()
        with self._cache_lock:
            expired = [
                sid for sid, entry in self._cache.items()
                if now - entry["last_access"] > self.ttl_seconds
            ]
            for sid in expired:
                del self._cache[sid]

        if expired:
            logger.debug("Cleaned up %d expired sessions from cache", len(expired))
        return len(expired)

    def _evict_oldest_locked(self) -> None:
        # Caller holds _cache_lock
        if len(self._cache) < self.max_cache_size:
            return
        count = max(self.max_cache_size // 10, 1)
        oldest = sorted(self._cache.items(), key=lambda x: x[1]["last_access"])[:count]
        for sid, _ in oldest:
            del self._cache[sid]
        logger.debug("Evicted %d oldest sessions from cache", len(oldest))

    def _cache_put(self, session: RecommendationSession) -> None:
        with self._cache_lock:
            if session.session_id not in self._cache:
                self._evict_oldest_locked()
            self._cache[session.session_id] = {
                "session": session,
                "last_access": time.time(),
            }

    def _cache_discard(self, session_id: str) -> None:
        with self._cache_lock:
            self._cache.pop(session_id, None)

    # =========================================================================
    # Locking
    # =========================================================================

    @contextmanager
    def locked(self, session_id: str) -> Iterator[None]:
        """Serialize read-modify-write of one session within this process."""
        with self._session_locks_guard:
            entry = self._session_locks.setdefault(session_id, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._session_locks_guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._session_locks[session_id]

    # =========================================================================
    # Read / Write
    # =========================================================================

    def get(self, db: Session, session_id: str) -> Optional[RecommendationSession]:
        """
        Get a session from the cache or the database.

        Returns:
            The session, or None if it does not exist anywhere.
        """
        if random.randint(1, 100) == 1:
            self.cleanup_expired()

        with self._cache_lock:
            entry = self._cache.get(session_id)
            if entry is not None:
                entry["last_access"] = time.time()
                return entry["session"]

        record = db.query(RecommendationSessionRecord).filter(
            RecommendationSessionRecord.session_id == session_id
        ).first()
        if record is None:
            return None

        session = RecommendationSession.model_validate(record.data)
        self._cache_put(session)
        logger.debug("Loaded session %s from database", session_id)
        return session

    def save(self, db: Session, session: RecommendationSession) -> None:
        """
        Upsert a session into the database, then cache it.

        Commits the database transaction. If the commit fails the
        transaction is rolled back and the session is dropped from the
        cache, so the next get() reloads what the database holds.
        """
        data = session.model_dump(mode="json")
        record = db.query(RecommendationSessionRecord).filter(
            RecommendationSessionRecord.session_id == session.session_id
        ).first()

        if record:
            record.data = data
            record.status = session.status.value
            record.phone_number = session.phone_number
            record.branch_id = session.branch_id
            # Force SQLAlchemy to detect the JSON column change
            flag_modified(record, "data")
        else:
            record = RecommendationSessionRecord(
                session_id=session.session_id,
                phone_number=session.phone_number,
                branch_id=session.branch_id,
                status=session.status.value,
                data=data,
            )
            db.add(record)

        try:
            db.commit()
        except Exception as e:
            db.rollback()
            self._cache_discard(session.session_id)
            logger.error("Failed to save session %s: %s", session.session_id, e)
            raise

        self._cache_put(session)

    # =========================================================================
    # Lifecycle Helpers
    # =========================================================================

    def find_active(
        self,
        db: Session,
        phone_number: str,
        branch_id: str | None = None,
    ) -> Optional[RecommendationSession]:
        """Most recent active session for a customer at a branch, if any."""
        query = db.query(RecommendationSessionRecord).filter(
            RecommendationSessionRecord.phone_number == phone_number,
            RecommendationSessionRecord.status == SessionStatus.ACTIVE.value,
        )
        if branch_id is not None:
            query = query.filter(RecommendationSessionRecord.branch_id == branch_id)
        record = query.order_by(RecommendationSessionRecord.id.desc()).first()
        if record is None:
            return None
        return self.get(db, record.session_id)

    def create_session(
        self,
        db: Session,
        engine: RecommendationEngine,
        phone_number: str,
        branch_id: str | None = None,
        people_count: int = 1,
    ) -> RecommendationSession:
        """
        Start a new session, abandoning any active one for the same customer.

        Only one active session per phone number and branch is kept.
        """
        previous = self.find_active(db, phone_number, branch_id)
        if previous is not None:
            with self.locked(previous.session_id):
                engine.cancel(previous)
                self.save(db, previous)

        session = engine.create_session(
            phone_number=phone_number,
            branch_id=branch_id,
            people_count=people_count,
        )
        self.save(db, session)
        return session

    def clear_cache(self) -> int:
        """
        Clear the in-memory cache. The database is untouched.

        Returns:
            int: Number of sessions that were cached
        """
        with self._cache_lock:
            count = len(self._cache)
            self._cache.clear()
        logger.info("Cleared %d sessions from cache", count)
        return count

    def get_cache_stats(self) -> Dict[str, Any]:
        """Size, bounds and access-time range of the session cache."""
        with self._cache_lock:
            access_times = [entry["last_access"] for entry in self._cache.values()]
            return {
                "size": len(self._cache),
                "max_size": self.max_cache_size,
                "ttl_seconds": self.ttl_seconds,
                "oldest_access": min(access_times) if access_times else None,
                "newest_access": max(access_times) if access_times else None,
            }
