"""
Unit tests for RedisSessionRepository.

Tests the membership rules for:
- Creation and joining
- Single active session per user
- Allowed-user restriction management
- Ending a session
"""

import asyncio

import pytest

from shiftboard.adapters.db.redis import keys
from shiftboard.domain.errors import (
    AlreadyParticipantError,
    CannotRemoveCreatorError,
    SessionAccessDeniedError,
    SessionNotFoundError,
    SessionPermissionError,
)


# =============================================================================
# Create / join / leave
# =============================================================================

class TestMembership:
    async def test_creator_joins_new_session(self, session_repo, u1):
        session = await session_repo.create("Shift A", u1.id)

        assert await session_repo.is_participant(u1.id, session.id)
        active = await session_repo.find_user_active_session(u1.id)
        assert active.id == session.id

    async def test_empty_allowed_list_is_unrestricted(self, session_repo, u1):
        session = await session_repo.create("Shift A", u1.id, [])
        stored = await session_repo.find_by_id(session.id)
        assert stored.allowed_user_ids == []

    async def test_join_moves_user_between_sessions(self, session_repo, u1, u2, u3):
        a = await session_repo.create("Shift A", u1.id)
        b = await session_repo.create("Shift B", u3.id)

        await session_repo.join(u2.id, a.id)
        await session_repo.join(u2.id, b.id)

        assert not await session_repo.is_participant(u2.id, a.id)
        assert await session_repo.is_participant(u2.id, b.id)
        assert [s.id for s in await session_repo.find_user_sessions(u2.id)] == [b.id]
        view = await session_repo.get_with_participants(a.id)
        assert [p.user.id for p in view.participants] == [u1.id]

    async def test_creating_second_session_moves_creator(self, session_repo, u1):
        a = await session_repo.create("Shift A", u1.id)
        b = await session_repo.create("Shift B", u1.id)

        assert not await session_repo.is_participant(u1.id, a.id)
        assert (await session_repo.find_user_active_session(u1.id)).id == b.id

    async def test_join_twice_is_rejected(self, session_repo, u1, u2):
        session = await session_repo.create("Shift A", u1.id)
        await session_repo.join(u2.id, session.id)

        with pytest.raises(AlreadyParticipantError):
            await session_repo.join(u2.id, session.id)

    async def test_join_missing_session(self, session_repo, u2):
        with pytest.raises(SessionNotFoundError):
            await session_repo.join(u2.id, "session_0_000000000")

    async def test_join_restricted_session(self, session_repo, u1, u2, u3):
        session = await session_repo.create("Shift A", u1.id, [u3.id])

        with pytest.raises(SessionAccessDeniedError):
            await session_repo.join(u2.id, session.id)
        participant = await session_repo.join(u3.id, session.id)

        assert participant.id.startswith("sp_")

    async def test_leave(self, session_repo, u1, u2):
        session = await session_repo.create("Shift A", u1.id)
        await session_repo.join(u2.id, session.id)

        assert await session_repo.leave(u2.id, session.id) is True
        assert await session_repo.leave(u2.id, session.id) is False
        assert await session_repo.find_user_active_session(u2.id) is None

    async def test_concurrent_joins_leave_one_membership(self, session_repo, u1, u2, u3):
        a = await session_repo.create("Shift A", u1.id)
        b = await session_repo.create("Shift B", u3.id)

        await asyncio.gather(
            session_repo.join(u2.id, a.id),
            session_repo.join(u2.id, b.id),
        )

        memberships = [
            await session_repo.is_participant(u2.id, a.id),
            await session_repo.is_participant(u2.id, b.id),
        ]
        assert memberships.count(True) == 1


class TestCanJoin:
    async def test_reasons_in_order(self, session_repo, u1, u2, u3):
        open_session = await session_repo.create("Shift A", u1.id)
        locked = await session_repo.create("Shift B", u3.id, [u3.id])

        missing = await session_repo.can_join(u2.id, "session_0_000000000")
        assert missing.error_code == "SESSION_NOT_FOUND"

        assert (await session_repo.can_join(u2.id, locked.id)).error_code == (
            "SESSION_ACCESS_DENIED"
        )
        assert (await session_repo.can_join(u2.id, open_session.id)).can_join

        await session_repo.join(u2.id, open_session.id)
        already = await session_repo.can_join(u2.id, open_session.id)
        assert already.error_code == "ALREADY_PARTICIPANT"

        elsewhere = await session_repo.can_join(u2.id, locked.id)
        assert elsewhere.error_code == "ACTIVE_SESSION_CONFLICT"
        assert "Shift A" in elsewhere.reason


# =============================================================================
# Allowed users
# =============================================================================

class TestAllowedUsers:
    async def test_only_creator_can_add(self, session_repo, u1, u2, u3):
        session = await session_repo.create("Shift A", u1.id, [u3.id])

        with pytest.raises(SessionPermissionError):
            await session_repo.add_allowed_user(session.id, u2.id, u2.id)

        stored = await session_repo.find_by_id(session.id)
        assert stored.allowed_user_ids == [u3.id]

    async def test_add_is_idempotent(self, session_repo, u1, u2, u3):
        session = await session_repo.create("Shift A", u1.id, [u3.id])

        await session_repo.add_allowed_user(session.id, u2.id, u1.id)
        updated = await session_repo.add_allowed_user(session.id, u2.id, u1.id)

        assert updated.allowed_user_ids == [u3.id, u2.id]

    async def test_add_to_missing_session(self, session_repo, u1):
        assert await session_repo.add_allowed_user("session_0_000000000", "x", u1.id) is None

    async def test_remove_evicts_participant(self, session_repo, u1, u2, u3):
        session = await session_repo.create("Shift A", u1.id, [u2.id, u3.id])
        await session_repo.join(u2.id, session.id)

        updated = await session_repo.remove_allowed_user(session.id, u2.id, u1.id)

        assert updated.allowed_user_ids == [u3.id]
        assert not await session_repo.is_participant(u2.id, session.id)

    async def test_remove_from_unrestricted_session_still_evicts(self, session_repo, u1, u2):
        session = await session_repo.create("Shift A", u1.id)
        await session_repo.join(u2.id, session.id)

        updated = await session_repo.remove_allowed_user(session.id, u2.id, u1.id)

        assert updated.allowed_user_ids == []
        assert not await session_repo.is_participant(u2.id, session.id)

    async def test_creator_cannot_be_removed(self, session_repo, u1, u2):
        session = await session_repo.create("Shift A", u1.id, [u2.id])

        with pytest.raises(CannotRemoveCreatorError):
            await session_repo.remove_allowed_user(session.id, u1.id, u1.id)
        assert await session_repo.is_participant(u1.id, session.id)


# =============================================================================
# Views
# =============================================================================

class TestViews:
    async def test_participants_sorted_by_join_time(self, session_repo, u1, u2, u3):
        session = await session_repo.create("Shift A", u1.id)
        await asyncio.sleep(0.002)
        await session_repo.join(u3.id, session.id)
        await asyncio.sleep(0.002)
        await session_repo.join(u2.id, session.id)

        view = await session_repo.get_with_participants(session.id)

        assert [p.user.username for p in view.participants] == ["u1", "u3", "u2"]
        assert view.created_by.id == u1.id

    async def test_participants_with_missing_user_are_skipped(
        self, session_repo, redis_client, u1, u2
    ):
        session = await session_repo.create("Shift A", u1.id)
        await session_repo.join(u2.id, session.id)
        await redis_client.delete(keys.user(u2.id))

        view = await session_repo.get_with_participants(session.id)

        assert [p.user.id for p in view.participants] == [u1.id]

    async def test_sessions_without_creator_are_dropped(
        self, session_repo, redis_client, u1, u2
    ):
        kept = await session_repo.create("Shift A", u1.id)
        await session_repo.create("Shift B", u2.id)
        await redis_client.delete(keys.user(u2.id))

        views = await session_repo.get_all_with_participants()

        assert [v.session.id for v in views] == [kept.id]

    async def test_find_active_is_latest(self, session_repo, u1, u2):
        await session_repo.create("Shift A", u1.id)
        await asyncio.sleep(0.002)
        latest = await session_repo.create("Shift B", u2.id)

        assert (await session_repo.find_active()).id == latest.id


# =============================================================================
# End session
# =============================================================================

class TestEndSession:
    async def test_only_creator_can_end(self, session_repo, u1, u2):
        session = await session_repo.create("Shift A", u1.id)
        await session_repo.join(u2.id, session.id)

        with pytest.raises(SessionPermissionError):
            await session_repo.end(session.id, u2.id)

        assert await session_repo.find_by_id(session.id) is not None
        assert await session_repo.is_participant(u2.id, session.id)

    async def test_end_missing_session(self, session_repo, u1):
        assert await session_repo.end("session_0_000000000", u1.id) is False

    async def test_end_cascades(self, session_repo, patient_repo, task_repo, redis_client, u1, u2):
        session = await session_repo.create("Shift A", u1.id)
        await session_repo.join(u2.id, session.id)
        patient = await patient_repo.create("12345678901", u1.id, session.id)
        tasks = await task_repo.list_for_patient(patient.id)

        assert await session_repo.end(session.id, u1.id) is True

        assert await session_repo.find_by_id(session.id) is None
        assert session.id not in [s.id for s in await session_repo.find_all()]
        assert await session_repo.find_user_active_session(u1.id) is None
        assert await session_repo.find_user_active_session(u2.id) is None
        assert await patient_repo.find_by_id(patient.id) is None
        assert await patient_repo.find_by_tc_no("12345678901") is None
        for task in tasks:
            assert await task_repo.find_by_id(task.id) is None
        for key in (
            keys.session_participants(session.id),
            keys.session_patients(session.id),
            keys.patient_tasks(patient.id),
        ):
            assert not await redis_client.exists(key)

    async def test_end_twice(self, session_repo, u1):
        session = await session_repo.create("Shift A", u1.id)

        assert await session_repo.end(session.id, u1.id) is True
        assert await session_repo.end(session.id, u1.id) is False


# =============================================================================
# Index expiry
# =============================================================================

SHORT_TTL = 3600


class TestIndexExpiry:
    """Session writes keep listing and membership keys on the record's TTL."""

    async def _shorten(self, redis_client, *names):
        for name in names:
            await redis_client.expire(name, SHORT_TTL)

    async def test_allowed_user_edit_renews_indices(
        self, session_repo, patient_repo, redis_client, u1, u2
    ):
        session = await session_repo.create("Shift A", u1.id)
        await patient_repo.create("12345678901", u1.id, session.id)
        dependents = [
            keys.sessions_all(),
            keys.session_participants(session.id),
            keys.session_patients(session.id),
        ]
        await self._shorten(redis_client, *dependents)

        await session_repo.add_allowed_user(session.id, u2.id, u1.id)

        for name in dependents:
            assert await redis_client.ttl(name) > SHORT_TTL, name

    async def test_join_renews_session_record(self, session_repo, redis_client, u1, u2):
        session = await session_repo.create("Shift A", u1.id)
        await self._shorten(redis_client, keys.session(session.id), keys.sessions_all())

        await session_repo.join(u2.id, session.id)

        assert await redis_client.ttl(keys.session(session.id)) > SHORT_TTL
        assert await redis_client.ttl(keys.sessions_all()) > SHORT_TTL

    async def test_removed_last_user_cannot_rejoin(self, session_repo, u1, u3):
        session = await session_repo.create("Shift A", u1.id, [u3.id])
        await session_repo.join(u3.id, session.id)

        await session_repo.remove_allowed_user(session.id, u3.id, u1.id)

        eligibility = await session_repo.can_join(u3.id, session.id)
        assert eligibility.error_code == "SESSION_ACCESS_DENIED"
