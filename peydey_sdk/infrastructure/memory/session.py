"""In-memory session holding the onboarded user"""

import threading
from dataclasses import dataclass
from typing import Optional
from peydey_sdk.domain.models import UserRecord
from peydey_sdk.utils.ids import generate_id


@dataclass(frozen=True)
class SessionState:
    session_id: Optional[str]
    is_authenticated: bool
    user: Optional[UserRecord]


class SessionStore:
    """Holds at most one authenticated user per SDK instance"""

    def __init__(self):
        self._lock = threading.Lock()
        self._session_id: Optional[str] = None
        self._user: Optional[UserRecord] = None

    def create_session(self, user: UserRecord) -> str:
        """Start a session for user, replacing any existing one"""
        with self._lock:
            self._user = user
            self._session_id = generate_id("session")
            return self._session_id

    def get_session(self) -> SessionState:
        with self._lock:
            return SessionState(
                session_id=self._session_id,
                is_authenticated=self._user is not None,
                user=self._user,
            )

    def clear_session(self) -> None:
        with self._lock:
            self._user = None
            self._session_id = None
