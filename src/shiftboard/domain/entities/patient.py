"""Patient domain entity."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ...core.utils.timeutils import utcnow


@dataclass
class Patient:
    """A case tracked within a session, identified by TC number."""

    id: str
    tc_no: str
    session_id: str
    created_by_id: str
    name: Optional[str] = None
    completed: bool = False
    completed_at: Optional[datetime] = None
    completed_by_id: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        self.tc_no = self.tc_no.strip()
        if self.name is not None:
            self.name = self.name.strip() or None

    def complete(self, user_id: str, at: Optional[datetime] = None) -> bool:
        """Mark the patient completed. Completion is terminal.

        Returns False when the patient was already completed; the original
        completer and time are kept.
        """
        if self.completed:
            return False
        at = at or utcnow()
        self.completed = True
        self.completed_at = at
        self.completed_by_id = user_id
        self.updated_at = at
        return True

    def touch(self, at: Optional[datetime] = None) -> None:
        self.updated_at = at or utcnow()
