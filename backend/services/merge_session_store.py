"""
Process-local store of pending merge sessions.

A merge session holds the ranked candidates from one login attempt while
the person decides which account to keep. Sessions expire after a fixed
TTL and are dropped lazily when read past expiry. The store lives in
process memory, so a restart discards pending sessions and the person
simply logs in again.
"""

import secrets
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional

from loguru import logger

import models.schemas as schemas
from helpers.time_utils import utc_now
from models.config import settings

SESSION_ID_PREFIX = "merge_"


@dataclass
class MergeSession:
    id: str
    identifier: str
    candidates: List[schemas.CandidateAccount]
    created_at: datetime
    expires_at: datetime
    account_ids: frozenset[str] = field(init=False)

    def __post_init__(self) -> None:
        self.account_ids = frozenset(c.id for c in self.candidates)

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at


class MergeSessionStore:
    """Thread-safe dict of MergeSession keyed by session id."""

    def __init__(
        self,
        ttl: Optional[timedelta] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.ttl = ttl or timedelta(minutes=settings.MERGE_SESSION_TTL_MINUTES)
        self.clock = clock
        self._sessions: Dict[str, MergeSession] = {}
        self._lock = threading.Lock()

    @staticmethod
    def new_session_id() -> str:
        return f"{SESSION_ID_PREFIX}{secrets.token_urlsafe(16)}"

    def create(
        self,
        session_id: str,
        candidates: List[schemas.CandidateAccount],
        identifier: str,
    ) -> MergeSession:
        """
        Store a new session, replacing any session with the same id.

        Args:
            session_id: Opaque id, normally from `new_session_id`
            candidates: Ranked candidates in display order
            identifier: Login identifier that produced the candidates

        Returns:
            The stored session
        """
        now = self.clock()
        session = MergeSession(
            id=session_id,
            identifier=identifier,
            candidates=list(candidates),
            created_at=now,
            expires_at=now + self.ttl,
        )
        with self._lock:
            self._sessions[session_id] = session
        logger.debug(
            "Merge session created",
            session_id=session_id,
            candidates=len(session.candidates),
        )
        return session

    def get(self, session_id: str) -> Optional[MergeSession]:
        """Return the live session, deleting it if it has expired."""
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return None
            if session.is_expired(self.clock()):
                del self._sessions[session_id]
                logger.debug("Merge session expired", session_id=session_id)
                return None
            return session

    def delete(self, session_id: str) -> None:
        """Remove a session. Unknown ids are ignored."""
        with self._lock:
            self._sessions.pop(session_id, None)

    def purge_expired(self) -> int:
        """
        Drop every expired session.

        Returns:
            Number of sessions removed
        """
        now = self.clock()
        with self._lock:
            expired = [
                sid for sid, session in self._sessions.items() if session.is_expired(now)
            ]
            for sid in expired:
                del self._sessions[sid]
        if expired:
            logger.info(f"Purged {len(expired)} expired merge sessions")
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


# Process-wide default, injected into request handlers via get_merge_session_store
merge_session_store = MergeSessionStore()


def get_merge_session_store() -> MergeSessionStore:
    """FastAPI dependency returning the process-wide session store."""
    return merge_session_store
