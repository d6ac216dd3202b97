"""Task repository interface."""

from abc import ABC, abstractmethod
from typing import List, Optional

from ....domain.entities.task import Task


class TaskRepository(ABC):
    """Abstract repository for patient checklist tasks.

    Every mutation is rejected with ``PatientCompletedError`` once the owning
    patient is completed.
    """

    @abstractmethod
    async def add(self, patient_id: str, name: str, user_id: str) -> Optional[Task]:
        pass

    @abstractmethod
    async def find_by_id(self, task_id: str) -> Optional[Task]:
        pass

    @abstractmethod
    async def list_for_patient(self, patient_id: str) -> List[Task]:
        pass

    @abstractmethod
    async def toggle(self, task_id: str, user_id: str) -> Optional[Task]:
        pass

    @abstractmethod
    async def cancel(self, task_id: str, user_id: str) -> Optional[Task]:
        pass
