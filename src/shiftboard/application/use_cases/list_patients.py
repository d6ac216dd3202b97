"""List Patients use case: the patient board of a session."""

import asyncio
from typing import Dict, Iterable, List, Optional, Set

from ...domain.entities.aggregates import PatientWithTasks
from ...domain.errors import NotParticipantError, SessionNotFoundError
from ..dto.patient_dto import ListPatientsRequest, PatientBoardItemDTO, TaskDTO
from ..dto.session_dto import UserSummaryDTO
from ..ports.repositories.patient_repo import PatientRepository
from ..ports.repositories.session_repo import SessionRepository
from ..ports.repositories.user_repo import UserRepository

UNKNOWN_USERNAME = "Unknown"


def _referenced_user_ids(items: Iterable[PatientWithTasks]) -> Set[str]:
    user_ids: Set[str] = set()
    for item in items:
        user_ids.add(item.patient.created_by_id)
        if item.patient.completed_by_id:
            user_ids.add(item.patient.completed_by_id)
        for task in item.tasks:
            user_ids.add(task.created_by_id)
            if task.completed_by_id:
                user_ids.add(task.completed_by_id)
            if task.cancelled_by_id:
                user_ids.add(task.cancelled_by_id)
    return user_ids


def _board_order(item: PatientBoardItemDTO):
    """Open patients first, most outstanding tasks on top; then completed, latest first."""
    if item.completed:
        completed_ts = item.completed_at.timestamp() if item.completed_at else 0
        return (1, -completed_ts)
    return (0, -item.incomplete_tasks_count)


class ListPatientsUseCase:
    """Use case for the patient board, with usernames resolved."""

    def __init__(
        self,
        patient_repository: PatientRepository,
        session_repository: SessionRepository,
        user_repository: UserRepository,
    ):
        self._patient_repository = patient_repository
        self._session_repository = session_repository
        self._user_repository = user_repository

    async def execute(self, request: ListPatientsRequest) -> List[PatientBoardItemDTO]:
        """Execute the list patients use case."""
        if request.session_id:
            session = await self._session_repository.find_by_id(request.session_id)
            if not session:
                raise SessionNotFoundError(request.session_id)
            if not await self._session_repository.is_participant(
                request.user_id, request.session_id
            ):
                raise NotParticipantError(request.session_id, request.user_id)
            items = await self._patient_repository.get_session_patients_with_tasks(
                request.session_id
            )
        else:
            items = await self._patient_repository.get_all_with_tasks()

        usernames = await self._resolve_usernames(_referenced_user_ids(items))
        board = [self._to_board_item(item, usernames) for item in items]
        board.sort(key=_board_order)
        return board

    async def _resolve_usernames(self, user_ids: Set[str]) -> Dict[str, str]:
        ordered = sorted(user_ids)
        users = await asyncio.gather(
            *(self._user_repository.find_by_id(user_id) for user_id in ordered)
        )
        return {user.id: user.username for user in users if user}

    @staticmethod
    def _summary(user_id: Optional[str], usernames: Dict[str, str]) -> Optional[UserSummaryDTO]:
        if not user_id:
            return None
        return UserSummaryDTO(id=user_id, username=usernames.get(user_id, UNKNOWN_USERNAME))

    def _to_board_item(
        self, item: PatientWithTasks, usernames: Dict[str, str]
    ) -> PatientBoardItemDTO:
        patient = item.patient
        return PatientBoardItemDTO(
            id=patient.id,
            tc_no=patient.tc_no,
            name=patient.name,
            session_id=patient.session_id,
            created_at=patient.created_at,
            updated_at=patient.updated_at,
            completed=patient.completed,
            completed_at=patient.completed_at,
            completed_by=self._summary(patient.completed_by_id, usernames),
            created_by=self._summary(patient.created_by_id, usernames),
            incomplete_tasks_count=item.incomplete_count,
            tasks=[
                TaskDTO(
                    id=task.id,
                    name=task.name,
                    completed=task.completed,
                    cancelled=task.cancelled,
                    patient_id=task.patient_id,
                    created_at=task.created_at,
                    updated_at=task.updated_at,
                    created_by=self._summary(task.created_by_id, usernames),
                    completed_by=self._summary(task.completed_by_id, usernames),
                    completed_at=task.completed_at,
                    cancelled_by=self._summary(task.cancelled_by_id, usernames),
                    cancelled_at=task.cancelled_at,
                )
                for task in item.tasks
            ],
        )
