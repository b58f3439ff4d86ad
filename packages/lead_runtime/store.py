"""In-memory session store for the lead collection backend.

Sessions live for the lifetime of the process; nothing is persisted.
"""

import logging
from datetime import datetime, timezone
from threading import Lock
from typing import Dict, List, Optional

from .state import SessionState, SessionStatus

logger = logging.getLogger(__name__)


class SessionStore:
    """In-memory store for session state, keyed by session ID.

    Access to the underlying dictionary is guarded by a lock so that
    handlers dispatched on a thread pool see a consistent map.
    """

    def __init__(self) -> None:
        """Initialize the session store."""
        self._states: Dict[str, SessionState] = {}
        self._lock = Lock()

    def create(self, state: SessionState) -> SessionState:
        """Store a new session.

        Args:
            state: SessionState to store

        Returns:
            The stored SessionState

        Raises:
            ValueError: If a session with this session_id already exists
        """
        with self._lock:
            if state.session_id in self._states:
                raise ValueError(f"Session {state.session_id} already exists")

            self._states[state.session_id] = state
            logger.debug("Created session %s", state.session_id)
            return state

    def get(self, session_id: str) -> Optional[SessionState]:
        """Retrieve a session by ID.

        Args:
            session_id: Session ID to look up

        Returns:
            SessionState if found, None otherwise
        """
        with self._lock:
            return self._states.get(session_id)

    def update(self, state: SessionState) -> SessionState:
        """Update an existing session.

        Args:
            state: SessionState to update

        Returns:
            The updated SessionState

        Raises:
            ValueError: If the session doesn't exist
        """
        with self._lock:
            if state.session_id not in self._states:
                raise ValueError(f"Session {state.session_id} not found")

            state.updated_at = datetime.now(timezone.utc)
            self._states[state.session_id] = state
            return state

    def delete(self, session_id: str) -> bool:
        """Delete a session.

        Args:
            session_id: Session ID to delete

        Returns:
            True if deleted, False if not found
        """
        with self._lock:
            if session_id in self._states:
                del self._states[session_id]
                return True
            return False

    def list(
        self,
        status: Optional[SessionStatus] = None,
        limit: Optional[int] = None,
    ) -> List[SessionState]:
        """List sessions with optional filtering.

        Args:
            status: Optional status filter
            limit: Optional limit on number of results

        Returns:
            List of SessionState objects, most recently updated first
        """
        with self._lock:
            states = list(self._states.values())

            if status is not None:
                states = [s for s in states if s.status == status]

            states.sort(key=lambda s: s.updated_at, reverse=True)

            if limit is not None:
                states = states[:limit]

            return states

    def count(self, status: Optional[SessionStatus] = None) -> int:
        """Count sessions with optional filtering.

        Args:
            status: Optional status filter

        Returns:
            Count of sessions matching the criteria
        """
        with self._lock:
            if status is None:
                return len(self._states)

            return sum(1 for s in self._states.values() if s.status == status)

    def clear(self) -> int:
        """Remove all sessions.

        Returns:
            Number of sessions cleared
        """
        with self._lock:
            count = len(self._states)
            self._states.clear()
            return count
