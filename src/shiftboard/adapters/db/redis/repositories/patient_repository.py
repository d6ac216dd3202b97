"""Redis implementation of PatientRepository."""

import asyncio
import logging
from typing import List, Optional, Sequence

from shiftboard.application.ports.repositories.patient_repo import PatientRepository
from shiftboard.core.config import DEFAULT_TASKS
from shiftboard.core.utils.timeutils import epoch_millis
from shiftboard.domain.entities.aggregates import PatientWithTasks
from shiftboard.domain.entities.patient import Patient
from shiftboard.domain.errors import DuplicatePatientError
from shiftboard.domain.value_objects.entity_id import PATIENT_PREFIX, new_id
from shiftboard.domain.value_objects.tc_number import TcNumber

from .. import keys
from ..models import PatientRecord
from ..store import RedisStore
from .task_repository import RedisTaskRepository

logger = logging.getLogger(__name__)


class RedisPatientRepository(PatientRepository):
    """Redis implementation of PatientRepository.

    TC numbers are unique per session. The global ``patient:tc:{tcNo}`` index
    is a last-writer pointer: registering the same TC number in a second
    session moves it to the newer patient.
    """

    def __init__(
        self,
        store: RedisStore,
        task_repository: Optional[RedisTaskRepository] = None,
        default_tasks: Sequence[str] = DEFAULT_TASKS,
    ):
        self._store = store
        self._tasks = task_repository or RedisTaskRepository(store)
        self._default_tasks = tuple(default_tasks)

    async def create(
        self,
        tc_no: str,
        creator_id: str,
        session_id: str,
        name: Optional[str] = None,
        default_tasks: Optional[Sequence[str]] = None,
    ) -> Patient:
        """Register a patient in a session together with its default tasks."""
        tc = TcNumber.from_string(tc_no).value
        task_names = self._default_tasks if default_tasks is None else default_tasks

        # Serializes the duplicate check with creation for this session
        async with self._store.lock(keys.session_patients(session_id)):
            if await self.find_in_session_by_tc_no(session_id, tc):
                raise DuplicatePatientError(tc, session_id)

            patient = Patient(
                id=new_id(PATIENT_PREFIX),
                tc_no=tc,
                session_id=session_id,
                created_by_id=creator_id,
                name=name,
            )
            score = epoch_millis(patient.created_at)

            await self._store.put_record(
                keys.patient(patient.id), PatientRecord.from_domain(patient)
            )
            await self._store.put_value(keys.patient_by_tc(tc), patient.id)
            await self._store.add_scored(keys.patients_all(), patient.id, score)
            await self._store.add_scored(
                keys.session_patients(session_id), patient.id, score
            )

        for task_name in task_names:
            await self._tasks.insert(
                patient.id, task_name, creator_id, at=patient.created_at
            )

        logger.info(
            "Patient %s registered in session %s with %d tasks",
            patient.id,
            session_id,
            len(task_names),
        )
        return patient

    async def find_by_id(self, patient_id: str) -> Optional[Patient]:
        """Find a patient by ID."""
        record = await self._store.get_record(keys.patient(patient_id), PatientRecord)
        if not record:
            return None
        return record.to_domain()

    async def find_by_tc_no(self, tc_no: str) -> Optional[Patient]:
        """Resolve the global TC-number index (most recently registered patient)."""
        patient_id = await self._store.get_value(keys.patient_by_tc(tc_no.strip()))
        if not patient_id:
            return None
        return await self.find_by_id(patient_id)

    async def find_in_session_by_tc_no(
        self, session_id: str, tc_no: str
    ) -> Optional[Patient]:
        """Find a patient with ``tc_no`` among the patients of one session."""
        tc_no = tc_no.strip()
        for patient in await self._find_session_patients(session_id):
            if patient.tc_no == tc_no:
                return patient
        return None

    async def find_all(self) -> List[Patient]:
        """All patients, most recently registered first."""
        patient_ids = await self._store.range_scored(keys.patients_all())
        return await self._load_many(patient_ids)

    async def complete(self, patient_id: str, user_id: str) -> Optional[Patient]:
        """Mark a patient completed. Repeated calls keep the first completion."""
        async with self._store.lock(keys.patient(patient_id)):
            patient = await self.find_by_id(patient_id)
            if not patient:
                return None

            if patient.complete(user_id):
                await self._store.put_record(
                    keys.patient(patient.id), PatientRecord.from_domain(patient)
                )
                await self._store.renew(
                    keys.patient_dependents(
                        patient.id, patient.session_id, patient.tc_no
                    )
                )
                logger.info("Patient %s completed by %s", patient_id, user_id)

        return patient

    async def get_with_tasks(self, patient_id: str) -> Optional[PatientWithTasks]:
        """Patient with its tasks in creation order."""
        patient = await self.find_by_id(patient_id)
        if not patient:
            return None
        tasks = await self._tasks.list_for_patient(patient_id)
        return PatientWithTasks(patient=patient, tasks=tasks)

    async def get_all_with_tasks(self) -> List[PatientWithTasks]:
        patients = await self.find_all()
        task_lists = await asyncio.gather(
            *(self._tasks.list_for_patient(patient.id) for patient in patients)
        )
        return [
            PatientWithTasks(patient=patient, tasks=tasks)
            for patient, tasks in zip(patients, task_lists)
        ]

    async def get_session_patients_with_tasks(
        self, session_id: str
    ) -> List[PatientWithTasks]:
        """Patients of a session, newest first, each with its tasks."""
        patient_ids = await self._store.range_scored(keys.session_patients(session_id))
        results = await asyncio.gather(
            *(self.get_with_tasks(patient_id) for patient_id in patient_ids)
        )
        return [result for result in results if result]

    async def delete_for_session(self, session_id: str) -> int:
        """Delete every patient of a session with its tasks and index entries.

        Safe to repeat: keys already gone are skipped.
        """
        session_patients_key = keys.session_patients(session_id)
        patient_ids = await self._store.range_scored(
            session_patients_key, newest_first=False
        )

        deleted = 0
        for patient_id in patient_ids:
            patient = await self.find_by_id(patient_id)
            if patient:
                task_ids = await self._store.read_list(keys.patient_tasks(patient_id))
                await self._store.delete(*(keys.task(task_id) for task_id in task_ids))
                await self._store.delete(
                    keys.patient(patient_id), keys.patient_tasks(patient_id)
                )
                # Leave the pointer alone if another session's patient owns it
                tc_key = keys.patient_by_tc(patient.tc_no)
                if await self._store.get_value(tc_key) == patient_id:
                    await self._store.delete(tc_key)
                deleted += 1

            await self._store.remove_scored(keys.patients_all(), patient_id)
            await self._store.remove_scored(session_patients_key, patient_id)

        await self._store.delete(session_patients_key)
        logger.info("Deleted %d patients of session %s", deleted, session_id)
        return deleted

    async def _find_session_patients(self, session_id: str) -> List[Patient]:
        patient_ids = await self._store.range_scored(keys.session_patients(session_id))
        return await self._load_many(patient_ids)

    async def _load_many(self, patient_ids: Sequence[str]) -> List[Patient]:
        records = await self._store.get_records(
            [keys.patient(patient_id) for patient_id in patient_ids], PatientRecord
        )
        return [record.to_domain() for record in records if record]
