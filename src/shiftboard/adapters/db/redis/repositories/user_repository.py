"""Redis implementation of UserRepository."""

import logging
from typing import List, Optional, Tuple

from shiftboard.application.ports.repositories.user_repo import UserRepository
from shiftboard.core.utils.timeutils import epoch_millis
from shiftboard.domain.entities.user import User
from shiftboard.domain.value_objects.entity_id import USER_PREFIX, new_id

from .. import keys
from ..models import UserRecord
from ..store import RedisStore

logger = logging.getLogger(__name__)


class RedisUserRepository(UserRepository):
    """Redis implementation of UserRepository."""

    def __init__(self, store: RedisStore):
        self._store = store

    async def create(self, username: str) -> User:
        """Write the user record, its username index and the global listing."""
        user = User(id=new_id(USER_PREFIX), username=username)

        await self._store.put_record(keys.user(user.id), UserRecord.from_domain(user))
        await self._store.put_value(keys.user_by_username(user.username), user.id)
        await self._store.add_scored(
            keys.users_all(), user.id, epoch_millis(user.created_at)
        )

        logger.info("User created: id=%s username=%s", user.id, user.username)
        return user

    async def find_by_id(self, user_id: str) -> Optional[User]:
        """Find a user by ID."""
        record = await self._store.get_record(keys.user(user_id), UserRecord)
        if not record:
            return None
        return record.to_domain()

    async def find_by_username(self, username: str) -> Optional[User]:
        """Find a user through the username index."""
        user_id = await self._store.get_value(keys.user_by_username(username.strip()))
        if not user_id:
            return None

        user = await self.find_by_id(user_id)
        if not user:
            logger.debug("Username index for %r points to missing user %s", username, user_id)
        return user

    async def find_all(self) -> List[User]:
        """All users, most recently created first."""
        user_ids = await self._store.range_scored(keys.users_all())
        records = await self._store.get_records(
            [keys.user(user_id) for user_id in user_ids], UserRecord
        )
        return [record.to_domain() for record in records if record]

    async def find_or_create(self, username: str) -> Tuple[User, bool]:
        """
        Find existing user or create new one.

        Lookups and creation for one username are serialized in-process, so
        sequential or concurrent local callers never create a duplicate.

        Returns:
            Tuple of (user, is_new_user)
        """
        cleaned = username.strip()
        async with self._store.lock(keys.user_by_username(cleaned)):
            existing = await self.find_by_username(cleaned)
            if existing:
                return existing, False

            user = await self.create(cleaned)
            return user, True
