"""Patient and task API endpoints."""

import logging
from typing import List

from fastapi import APIRouter, status

from shiftboard.application.dto.patient_dto import (
    AddTaskRequest as AddTaskDTO,
    CompletePatientRequest,
    ListPatientsRequest,
    RegisterPatientRequest as RegisterPatientDTO,
    TaskActionRequest,
)
from shiftboard.application.use_cases.list_patients import ListPatientsUseCase
from shiftboard.application.use_cases.register_patient import RegisterPatientUseCase
from shiftboard.application.use_cases.task_actions import (
    AddTaskUseCase,
    CancelTaskUseCase,
    CompletePatientUseCase,
    ToggleTaskUseCase,
)

from ..deps import (
    CurrentUserDep,
    PatientRepositoryDep,
    SessionRepositoryDep,
    TaskRepositoryDep,
    UserRepositoryDep,
)
from ..schemas.patient import (
    AddTaskRequest,
    PatientBoardItemSchema,
    PatientStateSchema,
    RegisterPatientRequest,
    RegisterPatientResponse,
    TaskStateSchema,
)
from ..schemas.session import ErrorResponse

router = APIRouter(tags=["patients"])
logger = logging.getLogger(__name__)

TASK_MUTATION_RESPONSES = {
    404: {"model": ErrorResponse, "description": "Patient or task not found"},
    409: {"model": ErrorResponse, "description": "Patient already completed"},
}


@router.get(
    "/sessions/{session_id}/patients",
    response_model=List[PatientBoardItemSchema],
    responses={
        403: {"model": ErrorResponse, "description": "Not a participant"},
        404: {"model": ErrorResponse, "description": "Session not found"},
    },
)
async def list_session_patients(
    session_id: str,
    current_user: CurrentUserDep,
    patient_repo: PatientRepositoryDep,
    session_repo: SessionRepositoryDep,
    user_repo: UserRepositoryDep,
):
    """Patient board of a session: open patients first, busiest on top."""
    use_case = ListPatientsUseCase(patient_repo, session_repo, user_repo)
    board = await use_case.execute(
        ListPatientsRequest(user_id=current_user.id, session_id=session_id)
    )
    return [PatientBoardItemSchema.model_validate(item) for item in board]


@router.get("/patients", response_model=List[PatientBoardItemSchema])
async def list_all_patients(
    current_user: CurrentUserDep,
    patient_repo: PatientRepositoryDep,
    session_repo: SessionRepositoryDep,
    user_repo: UserRepositoryDep,
):
    use_case = ListPatientsUseCase(patient_repo, session_repo, user_repo)
    board = await use_case.execute(ListPatientsRequest(user_id=current_user.id))
    return [PatientBoardItemSchema.model_validate(item) for item in board]


@router.post(
    "/sessions/{session_id}/patients",
    response_model=RegisterPatientResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        403: {"model": ErrorResponse, "description": "Not a participant"},
        404: {"model": ErrorResponse, "description": "Session not found"},
        409: {"model": ErrorResponse, "description": "Duplicate patient"},
        422: {"model": ErrorResponse, "description": "Invalid TC number"},
    },
)
async def register_patient(
    session_id: str,
    request: RegisterPatientRequest,
    current_user: CurrentUserDep,
    patient_repo: PatientRepositoryDep,
    session_repo: SessionRepositoryDep,
    task_repo: TaskRepositoryDep,
):
    """
    Register a patient in a session.

    This endpoint:
    1. Validates the TC number
    2. Checks the caller participates in the session
    3. Creates the patient with the default checklist
    """
    use_case = RegisterPatientUseCase(patient_repo, session_repo, task_repo)
    result = await use_case.execute(
        RegisterPatientDTO(
            tc_no=request.tc_no,
            session_id=session_id,
            user_id=current_user.id,
            name=request.name,
        )
    )
    return RegisterPatientResponse(
        patient_id=result.patient_id,
        task_ids=result.task_ids,
        message=result.message,
    )


@router.post(
    "/patients/{patient_id}/tasks",
    response_model=TaskStateSchema,
    status_code=status.HTTP_201_CREATED,
    responses=TASK_MUTATION_RESPONSES,
)
async def add_task(
    patient_id: str,
    request: AddTaskRequest,
    current_user: CurrentUserDep,
    task_repo: TaskRepositoryDep,
):
    task = await AddTaskUseCase(task_repo).execute(
        AddTaskDTO(
            patient_id=patient_id, task_name=request.task_name, user_id=current_user.id
        )
    )
    return TaskStateSchema.model_validate(task)


@router.post(
    "/patients/{patient_id}/complete",
    response_model=PatientStateSchema,
    responses={404: {"model": ErrorResponse, "description": "Patient not found"}},
)
async def complete_patient(
    patient_id: str, current_user: CurrentUserDep, patient_repo: PatientRepositoryDep
):
    """Mark a patient completed; its tasks are frozen from then on."""
    patient = await CompletePatientUseCase(patient_repo).execute(
        CompletePatientRequest(patient_id=patient_id, user_id=current_user.id)
    )
    return PatientStateSchema.model_validate(patient)


@router.post(
    "/tasks/{task_id}/toggle",
    response_model=TaskStateSchema,
    responses=TASK_MUTATION_RESPONSES,
)
async def toggle_task(
    task_id: str, current_user: CurrentUserDep, task_repo: TaskRepositoryDep
):
    task = await ToggleTaskUseCase(task_repo).execute(
        TaskActionRequest(task_id=task_id, user_id=current_user.id)
    )
    return TaskStateSchema.model_validate(task)


@router.post(
    "/tasks/{task_id}/cancel",
    response_model=TaskStateSchema,
    responses=TASK_MUTATION_RESPONSES,
)
async def cancel_task(
    task_id: str, current_user: CurrentUserDep, task_repo: TaskRepositoryDep
):
    task = await CancelTaskUseCase(task_repo).execute(
        TaskActionRequest(task_id=task_id, user_id=current_user.id)
    )
    return TaskStateSchema.model_validate(task)
