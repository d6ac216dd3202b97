"""
Key naming scheme for everything Shiftboard stores in Redis.

Primary records live under ``{kind}:{id}``; the remaining keys are secondary
indices and membership structures maintained by the repositories.
"""

from typing import List


# Users
def user(user_id: str) -> str:
    return f"user:{user_id}"


def user_by_username(username: str) -> str:
    return f"user:username:{username}"


def users_all() -> str:
    return "users:all"


def user_sessions(user_id: str) -> str:
    """Set holding at most one session id: the user's current session."""
    return f"user:{user_id}:sessions"


# Sessions
def session(session_id: str) -> str:
    return f"session:{session_id}"


def sessions_all() -> str:
    return "sessions:all"


def session_participants(session_id: str) -> str:
    """Set of participant record keys (see ``participant``)."""
    return f"session:{session_id}:participants"


def session_patients(session_id: str) -> str:
    return f"session:{session_id}:patients"


def participant(user_id: str, session_id: str) -> str:
    return f"session:participant:{user_id}:{session_id}"


# Patients
def patient(patient_id: str) -> str:
    return f"patient:{patient_id}"


def patient_by_tc(tc_no: str) -> str:
    return f"patient:tc:{tc_no}"


def patients_all() -> str:
    return "patients:all"


def patient_tasks(patient_id: str) -> str:
    """List of task ids in insertion order."""
    return f"patient:{patient_id}:tasks"


# Tasks
def task(task_id: str) -> str:
    return f"task:{task_id}"


def patient_dependents(patient_id: str, session_id: str, tc_no: str) -> List[str]:
    """Index keys that must share the TTL of ``patient:{id}``."""
    return [
        patient_tasks(patient_id),
        patient_by_tc(tc_no),
        patients_all(),
        session_patients(session_id),
    ]
