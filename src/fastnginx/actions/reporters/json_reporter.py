"""JSON Reporter Implementation.

Progress output is suppressed; a single JSON document is printed when the
run ends, whether it succeeded or failed.
"""

import json
from dataclasses import asdict
from enum import Enum
from typing import Any

from rich.console import Console

from fastnginx.actions.reporters.base import BaseReporter
from fastnginx.errors import ConflictError, FastNginxError
from fastnginx.model.check import SystemCheck
from fastnginx.model.request import ProvisionRequest
from fastnginx.model.result import ProvisionResult, ProvisionStatus, StepWarning


def _json_default(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return str(value)


class JsonReporter(BaseReporter):
    """Generates machine-readable JSON output."""

    def __init__(self, console: Console) -> None:
        super().__init__(console)
        self.checks: list[SystemCheck] = []
        self.target: str | None = None

    def report_banner(self, target: str) -> None:
        self.target = target

    def report_checks(self, checks: list[SystemCheck]) -> None:
        self.checks = list(checks)

    def report_request(self, request: ProvisionRequest) -> None:
        pass

    def report_progress(self, message: str) -> None:
        pass

    def report_done(self, message: str) -> None:
        pass

    def report_dry_run(
        self, request: ProvisionRequest, rendered: str, config_path: str, enabled_path: str
    ) -> None:
        pass

    def report_warning(self, warning: StepWarning) -> None:
        pass

    def report_summary(self, result: ProvisionResult) -> None:
        data = asdict(result)
        data["target"] = self.target
        data["checks"] = [asdict(c) for c in self.checks]
        self._emit(data)

    def report_error(self, error: FastNginxError) -> None:
        data: dict[str, Any] = {
            "status": ProvisionStatus.CANCELLED if isinstance(error, ConflictError) else "error",
            "target": self.target,
            "error": type(error).__name__,
            "message": error.message,
            "hint": error.hint,
            "checks": [asdict(c) for c in self.checks],
        }
        for attr in ("field", "path", "output"):
            if hasattr(error, attr):
                data[attr] = getattr(error, attr)
        self._emit(data)

    def _emit(self, data: dict[str, Any]) -> None:
        self.console.print_json(json.dumps(data, default=_json_default))
