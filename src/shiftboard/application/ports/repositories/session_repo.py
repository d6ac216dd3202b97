"""Session repository interface."""

from abc import ABC, abstractmethod
from typing import List, Optional

from ....domain.entities.aggregates import JoinEligibility, SessionWithParticipants
from ....domain.entities.session import Session, SessionParticipant


class SessionRepository(ABC):
    """Abstract repository for sessions and their memberships."""

    @abstractmethod
    async def create(
        self, name: str, creator_id: str, allowed_user_ids: Optional[List[str]] = None
    ) -> Session:
        """Create a session; the creator joins it immediately."""
        pass

    @abstractmethod
    async def find_by_id(self, session_id: str) -> Optional[Session]:
        pass

    @abstractmethod
    async def find_all(self) -> List[Session]:
        """All sessions, most recently created first."""
        pass

    @abstractmethod
    async def find_active(self) -> Optional[Session]:
        """The most recently created session, if any."""
        pass

    @abstractmethod
    async def find_user_sessions(self, user_id: str) -> List[Session]:
        """Sessions in the user's membership slot (zero or one)."""
        pass

    @abstractmethod
    async def find_user_active_session(self, user_id: str) -> Optional[Session]:
        pass

    @abstractmethod
    async def is_participant(self, user_id: str, session_id: str) -> bool:
        pass

    @abstractmethod
    async def can_join(self, user_id: str, session_id: str) -> JoinEligibility:
        pass

    @abstractmethod
    async def join(self, user_id: str, session_id: str) -> SessionParticipant:
        """Join a session, leaving any other session first."""
        pass

    @abstractmethod
    async def leave(self, user_id: str, session_id: str) -> bool:
        pass

    @abstractmethod
    async def end(self, session_id: str, requester_id: str) -> bool:
        """Delete the session and everything under it. Creator only."""
        pass

    @abstractmethod
    async def add_allowed_user(
        self, session_id: str, user_id: str, requester_id: str
    ) -> Session:
        pass

    @abstractmethod
    async def remove_allowed_user(
        self, session_id: str, user_id: str, requester_id: str
    ) -> Session:
        pass

    @abstractmethod
    async def get_with_participants(
        self, session_id: str
    ) -> Optional[SessionWithParticipants]:
        pass

    @abstractmethod
    async def get_all_with_participants(self) -> List[SessionWithParticipants]:
        pass
