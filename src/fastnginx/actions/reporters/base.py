"""Base Reporter Interface."""

from abc import ABC, abstractmethod

from rich.console import Console

from fastnginx.errors import FastNginxError
from fastnginx.model.check import SystemCheck
from fastnginx.model.request import ProvisionRequest
from fastnginx.model.result import ProvisionResult, StepWarning


class BaseReporter(ABC):
    """Abstract base class for provisioning reporters."""

    def __init__(self, console: Console) -> None:
        self.console = console

    @abstractmethod
    def report_banner(self, target: str) -> None:
        """Announce the tool and where it is about to run."""

    @abstractmethod
    def report_checks(self, checks: list[SystemCheck]) -> None:
        """Show every collected system check."""

    @abstractmethod
    def report_request(self, request: ProvisionRequest) -> None:
        """Echo the validated inputs."""

    @abstractmethod
    def report_progress(self, message: str) -> None:
        """A step is starting."""

    @abstractmethod
    def report_done(self, message: str) -> None:
        """A step finished successfully."""

    @abstractmethod
    def report_dry_run(
        self, request: ProvisionRequest, rendered: str, config_path: str, enabled_path: str
    ) -> None:
        """Show the rendered config and the actions a real run would take."""

    @abstractmethod
    def report_warning(self, warning: StepWarning) -> None:
        """A non-fatal step failed."""

    @abstractmethod
    def report_summary(self, result: ProvisionResult) -> None:
        """Final structured summary."""

    @abstractmethod
    def report_error(self, error: FastNginxError) -> None:
        """A fatal error, or a cancellation, ended the run."""
