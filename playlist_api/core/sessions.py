"""
Server-side record of ended sessions.

Session tokens are signed and carry a unique "jti". Logout records that id
here until the token would have expired anyway, and the session dependency
refuses any token whose id is recorded. Entries live in process memory, so
they are scoped to one running server, like the sessions themselves.
"""

from __future__ import annotations

import threading
import time
from typing import Dict, Optional

from playlist_api.core.logging import get_logger

logger = get_logger("sessions")


class RevokedSessions:
    """Thread-safe set of revoked token ids, pruned as they expire."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._expires_at: Dict[str, float] = {}

    def _prune(self, now: float) -> None:
        expired = [jti for jti, exp in self._expires_at.items() if exp <= now]
        for jti in expired:
            del self._expires_at[jti]

    # PUBLIC_INTERFACE
    def revoke(self, jti: Optional[str], expires_at: float) -> None:
        """End the session with this token id; kept until expires_at (epoch seconds)."""
        if not jti:
            return
        now = time.time()
        with self._lock:
            self._prune(now)
            self._expires_at[jti] = float(expires_at)
        logger.info("Session revoked", extra={"jti": jti})

    # PUBLIC_INTERFACE
    def is_revoked(self, jti: Optional[str]) -> bool:
        """Tokens without an id cannot be revoked, so they count as revoked."""
        if not jti:
            return True
        with self._lock:
            return jti in self._expires_at

    def __len__(self) -> int:
        with self._lock:
            self._prune(time.time())
            return len(self._expires_at)
