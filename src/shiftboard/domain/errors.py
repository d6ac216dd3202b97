"""
Domain-specific exceptions for Shiftboard.

Not-found conditions are ordinary results in the repositories (``None`` or an
empty list); the NotFound errors below are raised only by use cases that
cannot continue without the entity.
"""

from typing import Any, Dict, Optional


class DomainError(Exception):
    """Base class for all domain errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}


# Validation


class ValidationError(DomainError):
    """Input rejected before any store interaction."""


class InvalidTcNumberError(ValidationError):
    """Raised when a national ID number is not exactly 11 digits."""

    def __init__(self, tc_no: Any) -> None:
        super().__init__(
            "TC number must be exactly 11 digits",
            error_code="INVALID_TC_NUMBER",
            details={"tc_no": tc_no},
        )


class InvalidNameError(ValidationError):
    """Raised when a username, session name or task name is too short."""

    def __init__(self, field: str, value: Any, min_length: int = 1) -> None:
        super().__init__(
            f"{field} must be at least {min_length} characters",
            error_code="INVALID_NAME",
            details={"field": field, "value": value, "min_length": min_length},
        )


# Authentication


class AuthenticationError(DomainError):
    """Caller could not be identified."""


class NotAuthenticatedError(AuthenticationError):
    def __init__(self) -> None:
        super().__init__("Login required", error_code="NOT_AUTHENTICATED")


# Permission


class PermissionDeniedError(DomainError):
    """Caller is not allowed to perform the operation."""


class SessionPermissionError(PermissionDeniedError):
    """Raised when someone other than the creator runs a creator-only operation."""

    def __init__(self, session_id: str, action: str) -> None:
        super().__init__(
            f"Only the session creator can {action}",
            error_code="SESSION_CREATOR_ONLY",
            details={"session_id": session_id, "action": action},
        )


class SessionAccessDeniedError(PermissionDeniedError):
    """Raised when a user is not on a restricted session's allowed list."""

    def __init__(self, session_id: str, user_id: str) -> None:
        super().__init__(
            "You are not allowed to join this session",
            error_code="SESSION_ACCESS_DENIED",
            details={"session_id": session_id, "user_id": user_id},
        )


class NotParticipantError(PermissionDeniedError):
    """Raised when a non-participant touches a session's patients."""

    def __init__(self, session_id: str, user_id: str) -> None:
        super().__init__(
            "You are not a participant of this session",
            error_code="NOT_PARTICIPANT",
            details={"session_id": session_id, "user_id": user_id},
        )


class CannotRemoveCreatorError(PermissionDeniedError):
    """Raised when the creator is removed from their own session."""

    def __init__(self, session_id: str) -> None:
        super().__init__(
            "The session creator cannot be removed",
            error_code="CANNOT_REMOVE_CREATOR",
            details={"session_id": session_id},
        )


# State conflicts


class StateConflictError(DomainError):
    """Operation conflicts with the current state of an entity."""


class AlreadyParticipantError(StateConflictError):
    def __init__(self, session_id: str, user_id: str) -> None:
        super().__init__(
            "You are already a participant of this session",
            error_code="ALREADY_PARTICIPANT",
            details={"session_id": session_id, "user_id": user_id},
        )


class ActiveSessionConflictError(StateConflictError):
    """Raised when a user in one session tries to join another without switching."""

    def __init__(self, session_id: str, session_name: str) -> None:
        super().__init__(
            f'You are already in session "{session_name}". Leave it first.',
            error_code="ACTIVE_SESSION_CONFLICT",
            details={"active_session_id": session_id, "active_session_name": session_name},
        )


class PatientCompletedError(StateConflictError):
    """Raised on any task mutation under a completed patient."""

    def __init__(self, patient_id: str) -> None:
        super().__init__(
            "Tasks of a completed patient cannot be changed",
            error_code="PATIENT_COMPLETED",
            details={"patient_id": patient_id},
        )


class DuplicatePatientError(StateConflictError):
    """Raised when a TC number is registered twice in the same session."""

    def __init__(self, tc_no: str, session_id: str) -> None:
        super().__init__(
            "A patient with this TC number already exists in this session",
            error_code="DUPLICATE_PATIENT",
            details={"tc_no": tc_no, "session_id": session_id},
        )


# Not found


class NotFoundError(DomainError):
    """Entity required by a use case does not exist (or has expired)."""

    entity = "Entity"

    def __init__(self, entity_id: str) -> None:
        super().__init__(
            f"{self.entity} not found: {entity_id}",
            error_code=f"{self.entity.upper()}_NOT_FOUND",
            details={"id": entity_id},
        )


class UserNotFoundError(NotFoundError):
    entity = "User"


class SessionNotFoundError(NotFoundError):
    entity = "Session"


class PatientNotFoundError(NotFoundError):
    entity = "Patient"


class TaskNotFoundError(NotFoundError):
    entity = "Task"
