"""Error taxonomy for the provisioning workflow.

Every error carries the exit code the CLI should use and, where one exists,
a hint with the manual command that completes the step outside the tool.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fastnginx.model.check import SystemCheck


class FastNginxError(Exception):
    """Base class for all fastnginx errors."""

    exit_code = 1

    def __init__(self, message: str, hint: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.hint = hint


class ValidationError(FastNginxError):
    """A request field failed validation. Raised before any side effect."""

    def __init__(self, field: str, message: str, hint: str | None = None) -> None:
        super().__init__(message, hint)
        self.field = field


class PrerequisiteError(FastNginxError):
    """One or more system checks reported an error."""

    def __init__(self, checks: list["SystemCheck"]) -> None:
        names = ", ".join(check.name for check in checks)
        super().__init__(f"Critical system requirements not met: {names}")
        self.checks = checks


class ConflictError(FastNginxError):
    """The operator declined to overwrite an existing configuration.

    This is a cancellation, not a failure.
    """

    exit_code = 0


class PersistenceError(FastNginxError):
    """A privileged write, link or remove failed."""

    def __init__(self, path: str, message: str, hint: str | None = None) -> None:
        super().__init__(message, hint)
        self.path = path


class ConfigTestError(FastNginxError):
    """`nginx -t` rejected the configuration."""

    def __init__(self, message: str, output: str = "", hint: str | None = None) -> None:
        super().__init__(message, hint)
        self.output = output


class ConfigError(FastNginxError):
    """Malformed fastnginx settings or an unknown server profile."""


class StepFailure(FastNginxError):
    """Non-fatal failure of a step that runs after the config is live.

    Caught by the orchestrator and downgraded to a warning.
    """

    exit_code = 0
    step = "step"


class ReloadWarning(StepFailure):
    step = "reload"


class CertificateWarning(StepFailure):
    step = "tls"
