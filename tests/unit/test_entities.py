"""
Unit tests for domain entities.

Tests the state rules for:
- Session allowed-user restriction
- Task toggle and cancel
- Patient completion
"""

from datetime import datetime, timedelta, timezone

import pytest

from shiftboard.domain.entities.aggregates import PatientWithTasks
from shiftboard.domain.entities.patient import Patient
from shiftboard.domain.entities.session import Session
from shiftboard.domain.entities.task import Task
from shiftboard.domain.entities.user import User
from shiftboard.domain.errors import InvalidNameError

T0 = datetime(2024, 6, 10, 8, 0, tzinfo=timezone.utc)


def make_task(**overrides):
    fields = dict(id="task_1", name="anamnez", patient_id="pat_1", created_by_id="u1")
    fields.update(overrides)
    return Task(**fields)


# =============================================================================
# User
# =============================================================================

class TestUser:
    def test_username_is_trimmed(self):
        assert User(id="user_1", username="  ayse ").username == "ayse"

    @pytest.mark.parametrize("username", ["", " ", "a", " b "])
    def test_validate_username_rejects_short_names(self, username):
        with pytest.raises(InvalidNameError):
            User.validate_username(username)

    def test_validate_username_returns_trimmed(self):
        assert User.validate_username(" ali ") == "ali"


# =============================================================================
# Session
# =============================================================================

class TestSession:
    """Tests for the allowed-user restriction."""

    def test_unrestricted_session_allows_anyone(self):
        session = Session(id="s1", name="Shift A", created_by_id="u1")
        assert not session.is_restricted
        assert session.allows("anyone")

    def test_restricted_session_allows_listed_users_and_creator(self):
        session = Session(id="s1", name="Shift A", created_by_id="u1", allowed_user_ids=["u3"])
        assert session.allows("u3")
        assert session.allows("u1")
        assert not session.allows("u2")

    def test_allowed_ids_are_deduplicated_in_order(self):
        session = Session(
            id="s1", name="Shift A", created_by_id="u1", allowed_user_ids=["u3", "", "u2", "u3"]
        )
        assert session.allowed_user_ids == ["u3", "u2"]

    def test_allow_user_is_idempotent(self):
        session = Session(id="s1", name="Shift A", created_by_id="u1", updated_at=T0)
        later = T0 + timedelta(minutes=5)

        assert session.allow_user("u2", at=later) is True
        assert session.updated_at == later
        assert session.allow_user("u2", at=later + timedelta(minutes=1)) is False
        assert session.updated_at == later
        assert session.allowed_user_ids == ["u2"]

    def test_disallow_on_unrestricted_session_changes_nothing(self):
        session = Session(id="s1", name="Shift A", created_by_id="u1", updated_at=T0)
        assert session.disallow_user("u2") is False
        assert session.updated_at == T0

    def test_disallow_removes_user(self):
        session = Session(id="s1", name="Shift A", created_by_id="u1", allowed_user_ids=["u2", "u3"])
        assert session.disallow_user("u2") is True
        assert session.allowed_user_ids == ["u3"]

    def test_removing_last_allowed_user_keeps_restriction(self):
        session = Session(id="s1", name="Shift A", created_by_id="u1", allowed_user_ids=["u3"])

        assert session.disallow_user("u3") is True

        assert session.is_restricted
        assert session.allowed_user_ids == ["u1"]
        assert not session.allows("u3")
        assert session.allows("u1")

    def test_validate_name(self):
        assert Session.validate_name("  Gece ") == "Gece"
        with pytest.raises(InvalidNameError):
            Session.validate_name("G")


# =============================================================================
# Task
# =============================================================================

class TestTask:
    """Tests for task state transitions."""

    def test_toggle_twice_restores_state_and_clears_completer(self):
        task = make_task()

        assert task.toggle("u2", at=T0)
        assert task.completed
        assert task.completed_by_id == "u2"
        assert task.completed_at == T0

        assert task.toggle("u2", at=T0 + timedelta(seconds=1))
        assert not task.completed
        assert task.completed_by_id is None
        assert task.completed_at is None

    def test_toggle_on_cancelled_task_is_noop(self):
        task = make_task()
        task.cancel("u1", at=T0)

        assert task.toggle("u2", at=T0 + timedelta(seconds=1)) is False
        assert not task.completed
        assert task.updated_at == T0

    def test_cancel_keeps_completion_flag(self):
        task = make_task()
        task.toggle("u1", at=T0)
        task.cancel("u2", at=T0 + timedelta(seconds=1))

        assert task.cancelled and task.completed
        assert task.cancelled_by_id == "u2"
        assert not task.is_pending

    def test_repeated_cancel_restamps(self):
        task = make_task()
        task.cancel("u1", at=T0)
        task.cancel("u2", at=T0 + timedelta(seconds=5))

        assert task.cancelled_by_id == "u2"
        assert task.cancelled_at == T0 + timedelta(seconds=5)

    def test_validate_name_rejects_blank(self):
        with pytest.raises(InvalidNameError):
            Task.validate_name("   ")


# =============================================================================
# Patient
# =============================================================================

class TestPatient:
    def test_complete_stamps_once(self):
        patient = Patient(id="pat_1", tc_no="12345678901", session_id="s1", created_by_id="u1")

        assert patient.complete("u2", at=T0) is True
        assert patient.complete("u3", at=T0 + timedelta(hours=1)) is False
        assert patient.completed_by_id == "u2"
        assert patient.completed_at == T0
        assert patient.updated_at == T0

    def test_blank_name_becomes_none(self):
        patient = Patient(
            id="pat_1", tc_no=" 12345678901 ", session_id="s1", created_by_id="u1", name="  "
        )
        assert patient.name is None
        assert patient.tc_no == "12345678901"

    def test_aggregate_counts(self):
        patient = Patient(id="pat_1", tc_no="12345678901", session_id="s1", created_by_id="u1")
        done, cancelled, pending = make_task(id="t1"), make_task(id="t2"), make_task(id="t3")
        done.toggle("u1")
        cancelled.cancel("u1")

        view = PatientWithTasks(patient=patient, tasks=[done, cancelled, pending])

        assert view.completed_count == 1
        assert view.cancelled_count == 1
        assert view.incomplete_count == 1
