"""
Turkish national identity (TC) number value object.

Only the shape is checked (exactly 11 digits); the checksum digits are not
verified.
"""

import re
from dataclasses import dataclass
from typing import Any

from ..errors import InvalidTcNumberError

_PATTERN = re.compile(r"^\d{11}$")


@dataclass(frozen=True)
class TcNumber:
    """Immutable, trimmed TC number."""

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not _PATTERN.match(self.value):
            raise InvalidTcNumberError(self.value)

    def __str__(self) -> str:
        return self.value

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, TcNumber):
            return False
        return self.value == other.value

    def __hash__(self) -> int:
        return hash(self.value)

    @classmethod
    def from_string(cls, value: Any) -> "TcNumber":
        """Create from raw user input, trimming surrounding whitespace."""
        if not isinstance(value, str):
            raise InvalidTcNumberError(value)
        return cls(value.strip())
