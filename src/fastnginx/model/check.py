"""System check results - one per prerequisite."""

from dataclasses import dataclass
from enum import Enum


class CheckStatus(Enum):
    """Outcome of a single prerequisite check."""

    OK = "ok"
    WARNING = "warning"  # Proceed, but the operator should know
    ERROR = "error"  # Fatal unless dry-run


@dataclass(frozen=True)
class SystemCheck:
    """Result of probing one prerequisite.

    Attributes:
        name: Human readable prerequisite name (e.g. 'Nginx').
        status: ok, warning or error.
        message: Short explanation shown next to the status icon.
    """

    name: str
    status: CheckStatus
    message: str

    @property
    def is_error(self) -> bool:
        return self.status == CheckStatus.ERROR

    @property
    def icon(self) -> str:
        icons = {
            CheckStatus.OK: "✅",
            CheckStatus.WARNING: "⚠️",
            CheckStatus.ERROR: "❌",
        }
        return icons[self.status]
