"""Unit tests for RedisPatientRepository."""

import asyncio

import pytest

from shiftboard.adapters.db.redis import keys
from shiftboard.domain.errors import DuplicatePatientError, InvalidTcNumberError

TC = "12345678901"


@pytest.fixture
async def session(session_repo, u1):
    return await session_repo.create("Shift A", u1.id)


class TestCreate:
    async def test_creates_default_tasks_in_order(self, patient_repo, task_repo, session, u1):
        patient = await patient_repo.create(TC, u1.id, session.id, name="Ali Veli")

        tasks = await task_repo.list_for_patient(patient.id)

        assert [t.name for t in tasks] == ["anamnez", "3tup kan", "dosya girişi"]
        assert all(t.created_by_id == u1.id and t.is_pending for t in tasks)
        assert all(t.created_at == patient.created_at for t in tasks)
        assert patient.name == "Ali Veli"

    async def test_custom_default_tasks(self, patient_repo, task_repo, session, u1):
        patient = await patient_repo.create(TC, u1.id, session.id, default_tasks=[])
        assert await task_repo.list_for_patient(patient.id) == []

    async def test_writes_indices(self, patient_repo, redis_client, session, u1):
        patient = await patient_repo.create(TC, u1.id, session.id)

        assert await redis_client.get(keys.patient_by_tc(TC)) == patient.id
        assert await redis_client.zscore(keys.patients_all(), patient.id) is not None
        assert await redis_client.zscore(keys.session_patients(session.id), patient.id) is not None

    async def test_tc_number_is_trimmed_and_validated(self, patient_repo, session, u1):
        patient = await patient_repo.create(f" {TC} ", u1.id, session.id)
        assert patient.tc_no == TC

        with pytest.raises(InvalidTcNumberError):
            await patient_repo.create("123", u1.id, session.id)

    async def test_duplicate_in_same_session_is_rejected(self, patient_repo, session, u1):
        await patient_repo.create(TC, u1.id, session.id)

        with pytest.raises(DuplicatePatientError):
            await patient_repo.create(TC, u1.id, session.id)

    async def test_concurrent_duplicates_create_one_patient(self, patient_repo, session, u1):
        results = await asyncio.gather(
            patient_repo.create(TC, u1.id, session.id),
            patient_repo.create(TC, u1.id, session.id),
            return_exceptions=True,
        )

        assert sum(1 for r in results if isinstance(r, DuplicatePatientError)) == 1
        assert len(await patient_repo.get_session_patients_with_tasks(session.id)) == 1

    async def test_same_tc_in_other_session_moves_pointer(self, patient_repo, session_repo, session, u1, u2):
        other = await session_repo.create("Shift B", u2.id)
        first = await patient_repo.create(TC, u1.id, session.id)
        second = await patient_repo.create(TC, u2.id, other.id)

        assert (await patient_repo.find_by_tc_no(TC)).id == second.id
        assert (await patient_repo.find_in_session_by_tc_no(session.id, TC)).id == first.id


class TestComplete:
    async def test_complete_is_terminal(self, patient_repo, session, u1, u2):
        patient = await patient_repo.create(TC, u1.id, session.id)

        done = await patient_repo.complete(patient.id, u1.id)
        again = await patient_repo.complete(patient.id, u2.id)

        assert done.completed and done.completed_by_id == u1.id
        assert again.completed_by_id == u1.id
        assert again.completed_at == done.completed_at

    async def test_complete_missing(self, patient_repo, u1):
        assert await patient_repo.complete("pat_0_000000000", u1.id) is None


class TestViews:
    async def test_session_patients_newest_first(self, patient_repo, session, u1):
        first = await patient_repo.create("11111111111", u1.id, session.id)
        await asyncio.sleep(0.002)
        second = await patient_repo.create("22222222222", u1.id, session.id)

        views = await patient_repo.get_session_patients_with_tasks(session.id)

        assert [v.patient.id for v in views] == [second.id, first.id]
        assert all(len(v.tasks) == 3 for v in views)

    async def test_get_with_tasks_missing(self, patient_repo):
        assert await patient_repo.get_with_tasks("pat_0_000000000") is None

    async def test_get_all_with_tasks_spans_sessions(self, patient_repo, session_repo, session, u1, u2):
        other = await session_repo.create("Shift B", u2.id)
        await patient_repo.create("11111111111", u1.id, session.id)
        await patient_repo.create("22222222222", u2.id, other.id)

        assert len(await patient_repo.get_all_with_tasks()) == 2


class TestDeleteForSession:
    async def test_deletes_patients_and_tasks(self, patient_repo, task_repo, redis_client, session, u1):
        patient = await patient_repo.create(TC, u1.id, session.id)
        tasks = await task_repo.list_for_patient(patient.id)

        assert await patient_repo.delete_for_session(session.id) == 1

        assert await patient_repo.find_by_id(patient.id) is None
        assert await redis_client.zscore(keys.patients_all(), patient.id) is None
        assert not await redis_client.exists(keys.session_patients(session.id))
        for task in tasks:
            assert await task_repo.find_by_id(task.id) is None

    async def test_keeps_tc_pointer_owned_by_other_session(
        self, patient_repo, session_repo, session, u1, u2
    ):
        other = await session_repo.create("Shift B", u2.id)
        await patient_repo.create(TC, u1.id, session.id)
        newer = await patient_repo.create(TC, u2.id, other.id)

        await patient_repo.delete_for_session(session.id)

        assert (await patient_repo.find_by_tc_no(TC)).id == newer.id

    async def test_repeat_is_harmless(self, patient_repo, session, u1):
        await patient_repo.create(TC, u1.id, session.id)

        assert await patient_repo.delete_for_session(session.id) == 1
        assert await patient_repo.delete_for_session(session.id) == 0

    async def test_index_entries_of_expired_patients_are_cleared(
        self, patient_repo, redis_client, session, u1
    ):
        patient = await patient_repo.create(TC, u1.id, session.id)
        await redis_client.delete(keys.patient(patient.id))

        assert await patient_repo.delete_for_session(session.id) == 0
        assert await redis_client.zscore(keys.patients_all(), patient.id) is None
