"""
In-memory session store for registration dialogues.

AI Assistant Notes:
- One DialogueSession per caller-supplied user identifier (trusted as given)
- Sessions live for the life of the process; nothing expires on its own
- evict(idle_since) is an explicit operator action, not part of the dialogue
- lock_for(user_id) serializes turns per identifier so concurrent messages
  from one user cannot overwrite each other's updates
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Optional

from ..database.models import RegistrationFields, RegistrationStep

logger = logging.getLogger(__name__)


class DialogueState(str, Enum):
    """Dialogue state enumeration."""
    COLLECTING = "collecting"
    COMPLETE = "complete"


@dataclass
class DialogueSession:
    """Per-user registration progress."""
    user_id: str
    fields: RegistrationFields = field(default_factory=RegistrationFields)
    current_step: RegistrationStep = RegistrationStep.NAME
    state: DialogueState = DialogueState.COLLECTING
    welcome_message: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)
    last_activity: datetime = field(default_factory=datetime.now)

    @property
    def completed(self) -> bool:
        return self.state == DialogueState.COMPLETE

    def touch(self) -> None:
        self.last_activity = datetime.now()


class SessionStore:
    """
    Process-wide mapping from user identifier to dialogue session.
    """

    def __init__(self):
        self._sessions: Dict[str, DialogueSession] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    def get(self, user_id: str) -> Optional[DialogueSession]:
        """Get the session for a user, if any."""
        return self._sessions.get(user_id)

    def upsert(self, session: DialogueSession) -> DialogueSession:
        """Store a session under its user identifier."""
        session.touch()
        self._sessions[session.user_id] = session
        return session

    def get_or_create(self, user_id: str) -> DialogueSession:
        """
        Get the session for a user, creating it on first contact.

        Args:
            user_id: Caller-supplied user identifier

        Returns:
            Existing or newly created session
        """
        session = self._sessions.get(user_id)
        if session is None:
            session = self.upsert(DialogueSession(user_id=user_id))
            logger.info(f"Created new registration session for user {user_id}")
        return session

    def lock_for(self, user_id: str) -> asyncio.Lock:
        """Get the lock serializing turns for a user."""
        lock = self._locks.get(user_id)
        if lock is None:
            lock = self._locks[user_id] = asyncio.Lock()
        return lock

    def evict(self, idle_since: datetime) -> int:
        """
        Remove sessions with no activity since a point in time.

        Args:
            idle_since: Sessions last active before this are removed

        Returns:
            Number of sessions removed
        """
        expired = [
            user_id for user_id, session in self._sessions.items()
            if session.last_activity < idle_since
            and not (user_id in self._locks and self._locks[user_id].locked())
        ]

        for user_id in expired:
            del self._sessions[user_id]
            self._locks.pop(user_id, None)

        if expired:
            logger.info(f"Evicted {len(expired)} idle registration sessions")
        return len(expired)

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, user_id: str) -> bool:
        return user_id in self._sessions
