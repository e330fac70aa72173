"""
In-memory store of schedule sessions, one per browser session
"""
import threading
import uuid
from typing import Dict

from schedulr.schedule.state import ScheduleSession


class SessionStore:
    """Thread-safe map from session id to the current ScheduleSession"""

    def __init__(self):
        self._sessions: Dict[str, ScheduleSession] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    @staticmethod
    def new_session_id() -> str:
        return uuid.uuid4().hex

    def get(self, session_id: str) -> ScheduleSession:
        with self._guard:
            return self._sessions.get(session_id, ScheduleSession())

    def set(self, session_id: str, session: ScheduleSession):
        with self._guard:
            self._sessions[session_id] = session

    def discard(self, session_id: str):
        """Forget a session; its lock is kept while an upload still holds it"""
        with self._guard:
            self._sessions.pop(session_id, None)
            lock = self._locks.get(session_id)
            if lock is not None and not lock.locked():
                del self._locks[session_id]

    def lock_for(self, session_id: str) -> threading.Lock:
        """Lock serialising the uploads of one session"""
        with self._guard:
            return self._locks.setdefault(session_id, threading.Lock())

    def __len__(self) -> int:
        with self._guard:
            return len(self._sessions)
