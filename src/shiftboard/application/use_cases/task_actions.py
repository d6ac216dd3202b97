"""Task and patient-completion use cases.

The completed-patient guard lives in the task repository itself; these use
cases only turn "not found" results into errors for the API.
"""

from ...domain.entities.patient import Patient
from ...domain.entities.task import Task
from ...domain.errors import PatientNotFoundError, TaskNotFoundError
from ..dto.patient_dto import AddTaskRequest, CompletePatientRequest, TaskActionRequest
from ..ports.repositories.patient_repo import PatientRepository
from ..ports.repositories.task_repo import TaskRepository


class AddTaskUseCase:
    def __init__(self, task_repository: TaskRepository):
        self._task_repository = task_repository

    async def execute(self, request: AddTaskRequest) -> Task:
        task = await self._task_repository.add(
            request.patient_id, request.task_name, request.user_id
        )
        if not task:
            raise PatientNotFoundError(request.patient_id)
        return task


class ToggleTaskUseCase:
    def __init__(self, task_repository: TaskRepository):
        self._task_repository = task_repository

    async def execute(self, request: TaskActionRequest) -> Task:
        task = await self._task_repository.toggle(request.task_id, request.user_id)
        if not task:
            raise TaskNotFoundError(request.task_id)
        return task


class CancelTaskUseCase:
    def __init__(self, task_repository: TaskRepository):
        self._task_repository = task_repository

    async def execute(self, request: TaskActionRequest) -> Task:
        task = await self._task_repository.cancel(request.task_id, request.user_id)
        if not task:
            raise TaskNotFoundError(request.task_id)
        return task


class CompletePatientUseCase:
    def __init__(self, patient_repository: PatientRepository):
        self._patient_repository = patient_repository

    async def execute(self, request: CompletePatientRequest) -> Patient:
        patient = await self._patient_repository.complete(
            request.patient_id, request.user_id
        )
        if not patient:
            raise PatientNotFoundError(request.patient_id)
        return patient
