"""
Opaque record identifier value object.

Format: {prefix}_{epoch_millis}_{9 base36 chars}, e.g. ``pat_1718000000000_k3j9x0a2q``.
"""

import re
import secrets
import time
from dataclasses import dataclass
from typing import Any

_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"
_SUFFIX_LENGTH = 9
_PATTERN = re.compile(r"^[a-z]+_\d+_[0-9a-z]{9}$")

USER_PREFIX = "user"
SESSION_PREFIX = "session"
PARTICIPANT_PREFIX = "sp"
PATIENT_PREFIX = "pat"
TASK_PREFIX = "task"


@dataclass(frozen=True)
class EntityId:
    """Immutable record identifier value object."""

    value: str

    def __post_init__(self) -> None:
        """Validate identifier format."""
        if not self.value:
            raise ValueError("Entity ID cannot be empty")

        if not isinstance(self.value, str):
            raise ValueError("Entity ID must be a string")

        if not _PATTERN.match(self.value):
            raise ValueError(
                "Entity ID must follow format: {prefix}_{epoch_millis}_{suffix}"
            )

    def __str__(self) -> str:
        """String representation."""
        return self.value

    def __eq__(self, other: Any) -> bool:
        """Equality comparison."""
        if not isinstance(other, EntityId):
            return False
        return self.value == other.value

    def __hash__(self) -> int:
        """Hash for use in sets and dictionaries."""
        return hash(self.value)

    @property
    def prefix(self) -> str:
        return self.value.split("_", 1)[0]

    @classmethod
    def generate(cls, prefix: str) -> "EntityId":
        """Generate a new identifier from the clock and a random suffix."""
        suffix = "".join(secrets.choice(_ALPHABET) for _ in range(_SUFFIX_LENGTH))
        return cls(f"{prefix}_{time.time_ns() // 1_000_000}_{suffix}")


def new_id(prefix: str) -> str:
    """Shortcut returning the raw string of a freshly generated ID."""
    return EntityId.generate(prefix).value
