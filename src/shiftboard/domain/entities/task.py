"""Task (checklist item) domain entity."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ...core.utils.timeutils import utcnow
from ..errors import InvalidNameError


@dataclass
class Task:
    """A checklist item of a patient.

    ``cancelled`` is terminal: a cancelled task can never become completed.
    """

    id: str
    name: str
    patient_id: str
    created_by_id: str
    completed: bool = False
    cancelled: bool = False
    completed_by_id: Optional[str] = None
    completed_at: Optional[datetime] = None
    cancelled_by_id: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        self.name = self.name.strip()

    @staticmethod
    def validate_name(name: str) -> str:
        cleaned = (name or "").strip()
        if not cleaned:
            raise InvalidNameError("task name", name, 1)
        return cleaned

    @property
    def is_pending(self) -> bool:
        return not self.completed and not self.cancelled

    def toggle(self, user_id: str, at: Optional[datetime] = None) -> bool:
        """Flip completion. Returns False (and changes nothing) if cancelled."""
        if self.cancelled:
            return False
        at = at or utcnow()
        self.completed = not self.completed
        if self.completed:
            self.completed_by_id = user_id
            self.completed_at = at
        else:
            self.completed_by_id = None
            self.completed_at = None
        self.updated_at = at
        return True

    def cancel(self, user_id: str, at: Optional[datetime] = None) -> None:
        """Cancel the task; repeating it only re-stamps canceller and time."""
        at = at or utcnow()
        self.cancelled = True
        self.cancelled_by_id = user_id
        self.cancelled_at = at
        self.updated_at = at
