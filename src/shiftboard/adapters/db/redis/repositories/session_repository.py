"""Redis implementation of SessionRepository."""

import asyncio
import logging
from typing import List, Optional

from redis.exceptions import RedisError

from shiftboard.application.ports.repositories.session_repo import SessionRepository
from shiftboard.core.utils.timeutils import epoch_millis
from shiftboard.domain.entities.aggregates import (
    JoinEligibility,
    ParticipantWithUser,
    SessionWithParticipants,
)
from shiftboard.domain.entities.session import Session, SessionParticipant
from shiftboard.domain.errors import (
    AlreadyParticipantError,
    CannotRemoveCreatorError,
    SessionAccessDeniedError,
    SessionNotFoundError,
    SessionPermissionError,
)
from shiftboard.domain.value_objects.entity_id import (
    PARTICIPANT_PREFIX,
    SESSION_PREFIX,
    new_id,
)

from .. import keys
from ..models import ParticipantRecord, SessionRecord
from ..store import RedisStore
from .patient_repository import RedisPatientRepository
from .user_repository import RedisUserRepository

logger = logging.getLogger(__name__)


class RedisSessionRepository(SessionRepository):
    """Redis implementation of SessionRepository.

    A user belongs to at most one session at a time. Membership changes for
    one user are serialized on the user's ``user:{id}:sessions`` key; edits of
    a session record on ``session:{id}``.
    """

    def __init__(
        self,
        store: RedisStore,
        user_repository: RedisUserRepository,
        patient_repository: RedisPatientRepository,
    ):
        self._store = store
        self._users = user_repository
        self._patients = patient_repository

    async def create(
        self, name: str, creator_id: str, allowed_user_ids: Optional[List[str]] = None
    ) -> Session:
        """Create a session; the creator joins it immediately."""
        session = Session(
            id=new_id(SESSION_PREFIX),
            name=name,
            created_by_id=creator_id,
            allowed_user_ids=list(allowed_user_ids or []),
        )

        await self._store.put_record(
            keys.session(session.id), SessionRecord.from_domain(session)
        )
        await self._store.add_scored(
            keys.sessions_all(), session.id, epoch_millis(session.created_at)
        )

        async with self._store.lock(keys.user_sessions(creator_id)):
            await self._add_participant(creator_id, session.id)

        logger.info("Session %s (%s) created by %s", session.id, session.name, creator_id)
        return session

    async def find_by_id(self, session_id: str) -> Optional[Session]:
        """Find a session by ID."""
        record = await self._store.get_record(keys.session(session_id), SessionRecord)
        if not record:
            return None
        return record.to_domain()

    async def find_all(self) -> List[Session]:
        """All sessions, most recently created first."""
        session_ids = await self._store.range_scored(keys.sessions_all())
        records = await self._store.get_records(
            [keys.session(session_id) for session_id in session_ids], SessionRecord
        )
        return [record.to_domain() for record in records if record]

    async def find_active(self) -> Optional[Session]:
        """The most recently created session, if any."""
        sessions = await self.find_all()
        return sessions[0] if sessions else None

    async def find_user_sessions(self, user_id: str) -> List[Session]:
        session_ids = await self._store.members(keys.user_sessions(user_id))
        records = await self._store.get_records(
            [keys.session(session_id) for session_id in session_ids], SessionRecord
        )
        sessions = [record.to_domain() for record in records if record]
        sessions.sort(key=lambda s: s.created_at, reverse=True)
        return sessions

    async def find_user_active_session(self, user_id: str) -> Optional[Session]:
        """The session the user currently participates in."""
        for session_id in await self._store.members(keys.user_sessions(user_id)):
            session = await self.find_by_id(session_id)
            if session and await self.is_participant(user_id, session_id):
                return session
        return None

    async def is_participant(self, user_id: str, session_id: str) -> bool:
        return await self._store.exists(keys.participant(user_id, session_id))

    async def can_join(self, user_id: str, session_id: str) -> JoinEligibility:
        """Check every join precondition, including membership elsewhere."""
        session = await self.find_by_id(session_id)
        if not session:
            return JoinEligibility(False, "Session not found", "SESSION_NOT_FOUND")

        if await self.is_participant(user_id, session_id):
            return JoinEligibility(
                False, "You are already a participant of this session", "ALREADY_PARTICIPANT"
            )

        active = await self.find_user_active_session(user_id)
        if active:
            return JoinEligibility(
                False,
                f'You are already in session "{active.name}". Leave it first.',
                "ACTIVE_SESSION_CONFLICT",
            )

        if not session.allows(user_id):
            return JoinEligibility(
                False, "You are not allowed to join this session", "SESSION_ACCESS_DENIED"
            )

        return JoinEligibility(True)

    async def join(self, user_id: str, session_id: str) -> SessionParticipant:
        """Join a session, leaving whatever session the user was in before."""
        async with self._store.lock(keys.user_sessions(user_id)):
            session = await self.find_by_id(session_id)
            if not session:
                raise SessionNotFoundError(session_id)
            if await self.is_participant(user_id, session_id):
                raise AlreadyParticipantError(session_id, user_id)
            if not session.allows(user_id):
                raise SessionAccessDeniedError(session_id, user_id)

            participant = await self._add_participant(user_id, session_id)

        logger.info("User %s joined session %s", user_id, session_id)
        return participant

    async def leave(self, user_id: str, session_id: str) -> bool:
        """Leave a session. Returns False if the user was not a participant."""
        async with self._store.lock(keys.user_sessions(user_id)):
            left = await self._remove_participant(user_id, session_id)
        if left:
            logger.info("User %s left session %s", user_id, session_id)
        return left

    async def end(self, session_id: str, requester_id: str) -> bool:
        """
        Delete a session and everything under it.

        Order: memberships, then the session record with its participant set
        and global listing entry, then patients and their tasks. A failure
        part-way is logged and re-raised without rollback; calling ``end``
        again finishes the job.

        Returns:
            False if the session does not exist.
        """
        session = await self.find_by_id(session_id)
        if not session:
            return False
        if not session.is_creator(requester_id):
            raise SessionPermissionError(session_id, "end the session")

        async with self._store.lock(keys.session(session_id)):
            try:
                participant_keys = await self._store.members(
                    keys.session_participants(session_id)
                )
                records = await self._store.get_records(
                    participant_keys, ParticipantRecord
                )
                for record in records:
                    if not record:
                        continue
                    async with self._store.lock(keys.user_sessions(record.user_id)):
                        await self._remove_participant(record.user_id, session_id)

                await self._store.remove_scored(keys.sessions_all(), session_id)
                await self._store.delete(
                    keys.session(session_id), keys.session_participants(session_id)
                )

                patient_count = await self._patients.delete_for_session(session_id)
            except RedisError:
                logger.error(
                    "Ending session %s stopped part-way; remaining keys expire with TTL",
                    session_id,
                    exc_info=True,
                )
                raise

        logger.info(
            "Session %s ended by %s (%d patients removed)",
            session_id,
            requester_id,
            patient_count,
        )
        return True

    async def add_allowed_user(
        self, session_id: str, user_id: str, requester_id: str
    ) -> Optional[Session]:
        """Add a user to the allowed list. Creator only."""
        async with self._store.lock(keys.session(session_id)):
            session = await self.find_by_id(session_id)
            if not session:
                return None
            if not session.is_creator(requester_id):
                raise SessionPermissionError(session_id, "add users")

            if session.allow_user(user_id):
                await self._save(session)
                logger.info("User %s allowed into session %s", user_id, session_id)
        return session

    async def remove_allowed_user(
        self, session_id: str, user_id: str, requester_id: str
    ) -> Optional[Session]:
        """Remove a user from the allowed list and evict their membership.

        Creator only; the creator cannot be removed.
        """
        async with self._store.lock(keys.session(session_id)):
            session = await self.find_by_id(session_id)
            if not session:
                return None
            if not session.is_creator(requester_id):
                raise SessionPermissionError(session_id, "remove users")
            if session.is_creator(user_id):
                raise CannotRemoveCreatorError(session_id)

            if session.disallow_user(user_id):
                await self._save(session)

            async with self._store.lock(keys.user_sessions(user_id)):
                evicted = await self._remove_participant(user_id, session_id)

        logger.info(
            "User %s removed from session %s (evicted=%s)", user_id, session_id, evicted
        )
        return session

    async def get_with_participants(
        self, session_id: str
    ) -> Optional[SessionWithParticipants]:
        """Session with its creator and participants (oldest member first)."""
        session = await self.find_by_id(session_id)
        if not session:
            return None

        participant_keys = await self._store.members(
            keys.session_participants(session_id)
        )
        records = await self._store.get_records(participant_keys, ParticipantRecord)
        participants = [record.to_domain() for record in records if record]
        users = await asyncio.gather(
            *(self._users.find_by_id(p.user_id) for p in participants)
        )

        resolved = [
            ParticipantWithUser(participant=participant, user=user)
            for participant, user in zip(participants, users)
            if user
        ]
        resolved.sort(key=lambda item: item.participant.joined_at)

        return SessionWithParticipants(
            session=session,
            participants=resolved,
            created_by=await self._users.find_by_id(session.created_by_id),
        )

    async def get_all_with_participants(self) -> List[SessionWithParticipants]:
        """Every session whose creator still exists, newest first."""
        sessions = await self.find_all()
        views = await asyncio.gather(
            *(self.get_with_participants(session.id) for session in sessions)
        )
        return [view for view in views if view and view.created_by]

    async def _save(self, session: Session) -> None:
        await self._store.put_record(
            keys.session(session.id), SessionRecord.from_domain(session)
        )
        await self._renew_indices(session.id)

    async def _renew_indices(self, session_id: str) -> None:
        """Keep the session's listing and membership keys on the record's TTL."""
        await self._store.renew(
            [
                keys.sessions_all(),
                keys.session_participants(session_id),
                keys.session_patients(session_id),
            ]
        )

    async def _add_participant(
        self, user_id: str, session_id: str
    ) -> SessionParticipant:
        """Write a membership. Caller must hold the user's membership lock."""
        active = await self.find_user_active_session(user_id)
        if active and active.id != session_id:
            await self._remove_participant(user_id, active.id)

        participant = SessionParticipant(
            id=new_id(PARTICIPANT_PREFIX), user_id=user_id, session_id=session_id
        )
        participant_key = keys.participant(user_id, session_id)

        await self._store.put_record(
            participant_key, ParticipantRecord.from_domain(participant)
        )
        await self._store.add_member(
            keys.session_participants(session_id), participant_key
        )
        # Single-valued slot: drop whatever was there
        await self._store.delete(keys.user_sessions(user_id))
        await self._store.add_member(keys.user_sessions(user_id), session_id)
        await self._store.renew([keys.session(session_id)])
        await self._renew_indices(session_id)
        return participant

    async def _remove_participant(self, user_id: str, session_id: str) -> bool:
        """Delete a membership. Caller must hold the user's membership lock."""
        participant_key = keys.participant(user_id, session_id)
        removed = await self._store.delete(participant_key)
        await self._store.remove_member(
            keys.session_participants(session_id), participant_key
        )
        await self._store.remove_member(keys.user_sessions(user_id), session_id)
        return removed > 0
