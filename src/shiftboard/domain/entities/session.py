"""Session (duty shift) and participant domain entities."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from ...core.utils.timeutils import utcnow
from ..errors import InvalidNameError

MIN_SESSION_NAME_LENGTH = 2


@dataclass
class Session:
    """A duty shift grouping patients and the users working it.

    An empty ``allowed_user_ids`` means anyone may join.
    """

    id: str
    name: str
    created_by_id: str
    allowed_user_ids: List[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        self.name = self.name.strip()
        # Preserve order, drop blanks and repeats
        seen = []
        for user_id in self.allowed_user_ids or []:
            if user_id and user_id not in seen:
                seen.append(user_id)
        self.allowed_user_ids = seen

    @staticmethod
    def validate_name(name: str) -> str:
        cleaned = (name or "").strip()
        if len(cleaned) < MIN_SESSION_NAME_LENGTH:
            raise InvalidNameError("session name", name, MIN_SESSION_NAME_LENGTH)
        return cleaned

    @property
    def is_restricted(self) -> bool:
        return bool(self.allowed_user_ids)

    def is_creator(self, user_id: str) -> bool:
        return self.created_by_id == user_id

    def allows(self, user_id: str) -> bool:
        """Check whether ``user_id`` passes the allowed-users restriction.

        The creator always passes.
        """
        if not self.is_restricted or self.is_creator(user_id):
            return True
        return user_id in self.allowed_user_ids

    def allow_user(self, user_id: str, at: Optional[datetime] = None) -> bool:
        """Add a user to the allowed list. Returns False if already present."""
        if user_id in self.allowed_user_ids:
            return False
        self.allowed_user_ids.append(user_id)
        self.updated_at = at or utcnow()
        return True

    def disallow_user(self, user_id: str, at: Optional[datetime] = None) -> bool:
        """Remove a user from the allowed list.

        An unrestricted session has nothing to remove and is left untouched.
        Removing the last allowed user leaves the creator in the list, so the
        session stays restricted.
        """
        if not self.allowed_user_ids:
            return False
        remaining = [u for u in self.allowed_user_ids if u != user_id]
        self.allowed_user_ids = remaining or [self.created_by_id]
        self.updated_at = at or utcnow()
        return True


@dataclass
class SessionParticipant:
    """Membership of one user in one session."""

    id: str
    user_id: str
    session_id: str
    joined_at: datetime = field(default_factory=utcnow)
