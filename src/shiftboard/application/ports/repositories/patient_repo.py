"""Patient repository interface."""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from ....domain.entities.aggregates import PatientWithTasks
from ....domain.entities.patient import Patient


class PatientRepository(ABC):
    """Abstract repository for patient data access."""

    @abstractmethod
    async def create(
        self,
        tc_no: str,
        creator_id: str,
        session_id: str,
        name: Optional[str] = None,
        default_tasks: Optional[Sequence[str]] = None,
    ) -> Patient:
        """Register a patient in a session together with its default tasks."""
        pass

    @abstractmethod
    async def find_by_id(self, patient_id: str) -> Optional[Patient]:
        pass

    @abstractmethod
    async def find_by_tc_no(self, tc_no: str) -> Optional[Patient]:
        """Resolve the global TC-number index."""
        pass

    @abstractmethod
    async def find_in_session_by_tc_no(
        self, session_id: str, tc_no: str
    ) -> Optional[Patient]:
        pass

    @abstractmethod
    async def find_all(self) -> List[Patient]:
        pass

    @abstractmethod
    async def complete(self, patient_id: str, user_id: str) -> Optional[Patient]:
        pass

    @abstractmethod
    async def get_with_tasks(self, patient_id: str) -> Optional[PatientWithTasks]:
        pass

    @abstractmethod
    async def get_all_with_tasks(self) -> List[PatientWithTasks]:
        pass

    @abstractmethod
    async def get_session_patients_with_tasks(
        self, session_id: str
    ) -> List[PatientWithTasks]:
        pass

    @abstractmethod
    async def delete_for_session(self, session_id: str) -> int:
        """Delete every patient (and task) of a session. Returns the count."""
        pass
