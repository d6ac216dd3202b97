"""User domain entity."""

from dataclasses import dataclass, field
from datetime import datetime

from ...core.utils.timeutils import utcnow
from ..errors import InvalidNameError

MIN_USERNAME_LENGTH = 2


@dataclass
class User:
    """A person taking part in duty shifts, identified by a unique username."""

    id: str
    username: str
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        self.username = self.username.strip()

    @staticmethod
    def validate_username(username: str) -> str:
        """Return the trimmed username or raise ``InvalidNameError``."""
        cleaned = (username or "").strip()
        if len(cleaned) < MIN_USERNAME_LENGTH:
            raise InvalidNameError("username", username, MIN_USERNAME_LENGTH)
        return cleaned
