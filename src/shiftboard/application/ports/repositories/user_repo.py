"""User repository interface."""

from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from ....domain.entities.user import User


class UserRepository(ABC):
    """Abstract repository for user data access."""

    @abstractmethod
    async def create(self, username: str) -> User:
        """Create a user and its username index."""
        pass

    @abstractmethod
    async def find_by_id(self, user_id: str) -> Optional[User]:
        """Find a user by ID."""
        pass

    @abstractmethod
    async def find_by_username(self, username: str) -> Optional[User]:
        """Find a user through the username index."""
        pass

    @abstractmethod
    async def find_all(self) -> List[User]:
        """All users, most recently created first."""
        pass

    @abstractmethod
    async def find_or_create(self, username: str) -> Tuple[User, bool]:
        """
        Find existing user or create new one.

        Returns:
            Tuple of (user, is_new_user)
        """
        pass
