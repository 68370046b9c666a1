"""
In-process record of sessions that currently hold a collection.

Owned by the CollectionManager: populated when chunks are written, cleared
when the session's collection is deleted or swept.

Dependencies: threading (stdlib)
System role: Active session bookkeeping
"""

import threading


class ActiveSessionRegistry:
    """Lock-protected set of session IDs with live collections."""

    def __init__(self) -> None:
        self._sessions: set[str] = set()
        self._lock = threading.Lock()

    def add(self, session_id: str) -> None:
        with self._lock:
            self._sessions.add(session_id)

    def discard(self, session_id: str) -> bool:
        """Remove a session; returns whether it was present."""
        with self._lock:
            if session_id in self._sessions:
                self._sessions.remove(session_id)
                return True
            return False

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._sessions

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
