"""Register Patient use case."""

from ...domain.errors import NotParticipantError, SessionNotFoundError
from ...domain.value_objects.tc_number import TcNumber
from ..dto.patient_dto import RegisterPatientRequest, RegisterPatientResponse
from ..ports.repositories.patient_repo import PatientRepository
from ..ports.repositories.session_repo import SessionRepository
from ..ports.repositories.task_repo import TaskRepository


class RegisterPatientUseCase:
    """Use case for registering a patient in a session with the default checklist."""

    def __init__(
        self,
        patient_repository: PatientRepository,
        session_repository: SessionRepository,
        task_repository: TaskRepository,
    ):
        self._patient_repository = patient_repository
        self._session_repository = session_repository
        self._task_repository = task_repository

    async def execute(self, request: RegisterPatientRequest) -> RegisterPatientResponse:
        """Execute the register patient use case."""
        # Validate before touching the store
        tc_no = TcNumber.from_string(request.tc_no)

        session = await self._session_repository.find_by_id(request.session_id)
        if not session:
            raise SessionNotFoundError(request.session_id)
        if not await self._session_repository.is_participant(
            request.user_id, request.session_id
        ):
            raise NotParticipantError(request.session_id, request.user_id)

        # Raises DuplicatePatientError for a TC number already in this session
        patient = await self._patient_repository.create(
            tc_no.value,
            request.user_id,
            request.session_id,
            name=request.name,
        )
        tasks = await self._task_repository.list_for_patient(patient.id)

        return RegisterPatientResponse(
            patient_id=patient.id,
            task_ids=[task.id for task in tasks],
            message="Patient registered",
        )
