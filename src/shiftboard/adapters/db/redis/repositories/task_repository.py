"""Redis implementation of TaskRepository."""

import logging
from datetime import datetime
from typing import List, Optional

from shiftboard.application.ports.repositories.task_repo import TaskRepository
from shiftboard.core.utils.timeutils import utcnow
from shiftboard.domain.entities.patient import Patient
from shiftboard.domain.entities.task import Task
from shiftboard.domain.errors import PatientCompletedError
from shiftboard.domain.value_objects.entity_id import TASK_PREFIX, new_id

from .. import keys
from ..models import PatientRecord, TaskRecord
from ..store import RedisStore

logger = logging.getLogger(__name__)


class RedisTaskRepository(TaskRepository):
    """Redis implementation of TaskRepository.

    Mutations hold the owning patient's lock and then the task's lock, so a
    concurrent patient completion cannot slip between the guard and the write.
    """

    def __init__(self, store: RedisStore):
        self._store = store

    async def insert(
        self,
        patient_id: str,
        name: str,
        user_id: str,
        at: Optional[datetime] = None,
    ) -> Task:
        """Write a task record and append it to the patient's task list.

        No patient checks are made; ``add`` is the guarded entry point.
        """
        at = at or utcnow()
        task = Task(
            id=new_id(TASK_PREFIX),
            name=name,
            patient_id=patient_id,
            created_by_id=user_id,
            created_at=at,
            updated_at=at,
        )
        await self._store.put_record(keys.task(task.id), TaskRecord.from_domain(task))
        await self._store.append(keys.patient_tasks(patient_id), task.id)
        return task

    async def add(self, patient_id: str, name: str, user_id: str) -> Optional[Task]:
        """Add a task to a patient. Returns None if the patient does not exist."""
        name = Task.validate_name(name)

        async with self._store.lock(keys.patient(patient_id)):
            patient = await self._load_patient(patient_id)
            if not patient:
                return None
            if patient.completed:
                raise PatientCompletedError(patient_id)

            task = await self.insert(patient_id, name, user_id)
            await self._touch_patient(patient, task.created_at)

        logger.info("Task %s added to patient %s by %s", task.id, patient_id, user_id)
        return task

    async def find_by_id(self, task_id: str) -> Optional[Task]:
        """Find a task by ID."""
        record = await self._store.get_record(keys.task(task_id), TaskRecord)
        if not record:
            return None
        return record.to_domain()

    async def list_for_patient(self, patient_id: str) -> List[Task]:
        """Tasks of a patient in creation order; expired tasks are skipped."""
        task_ids = await self._store.read_list(keys.patient_tasks(patient_id))
        records = await self._store.get_records(
            [keys.task(task_id) for task_id in task_ids], TaskRecord
        )
        tasks = [record.to_domain() for record in records if record]
        # Stable sort keeps list order for tasks created in the same millisecond
        tasks.sort(key=lambda t: t.created_at)
        return tasks

    async def toggle(self, task_id: str, user_id: str) -> Optional[Task]:
        """Flip completion of a task. Cancelled tasks come back unchanged."""
        return await self._mutate(task_id, user_id, "toggle")

    async def cancel(self, task_id: str, user_id: str) -> Optional[Task]:
        """Cancel a task, stamping the canceller."""
        return await self._mutate(task_id, user_id, "cancel")

    async def _mutate(self, task_id: str, user_id: str, action: str) -> Optional[Task]:
        task = await self.find_by_id(task_id)
        if not task:
            return None

        async with self._store.lock(keys.patient(task.patient_id)):
            async with self._store.lock(keys.task(task_id)):
                # Re-read under the locks
                task = await self.find_by_id(task_id)
                if not task:
                    return None

                patient = await self._load_patient(task.patient_id)
                if not patient:
                    return None
                if patient.completed:
                    raise PatientCompletedError(patient.id)

                if action == "toggle":
                    changed = task.toggle(user_id)
                else:
                    task.cancel(user_id)
                    changed = True

                if not changed:
                    return task

                await self._store.put_record(
                    keys.task(task.id), TaskRecord.from_domain(task)
                )
                await self._touch_patient(patient, task.updated_at)

        logger.info("Task %s %s by %s", task_id, action, user_id)
        return task

    async def _load_patient(self, patient_id: str) -> Optional[Patient]:
        record = await self._store.get_record(keys.patient(patient_id), PatientRecord)
        if not record:
            return None
        return record.to_domain()

    async def _touch_patient(self, patient: Patient, at: datetime) -> None:
        """Propagate a task change to the patient's ``updatedAt``.

        Caller must hold the patient's lock.
        """
        patient.touch(at)
        await self._store.put_record(
            keys.patient(patient.id), PatientRecord.from_domain(patient)
        )
        await self._store.renew(
            keys.patient_dependents(patient.id, patient.session_id, patient.tc_no)
        )
