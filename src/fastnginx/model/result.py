"""Outcome of a provisioning run."""

from dataclasses import dataclass, field
from enum import Enum

from fastnginx.model.request import TemplateKind


class ProvisionStatus(Enum):
    SUCCESS = "success"
    DRY_RUN = "dry_run"
    CANCELLED = "cancelled"


class TLSOutcome(Enum):
    NOT_REQUESTED = "not_requested"
    ISSUED = "issued"
    FAILED = "failed"


@dataclass(frozen=True)
class StepWarning:
    """A non-fatal step failure reported to the operator.

    Attributes:
        step: Which step failed ('reload' or 'tls').
        message: What went wrong.
        hint: Manual command to finish the step, if any.
    """

    step: str
    message: str
    hint: str | None = None


@dataclass
class ProvisionResult:
    """Structured summary of a run, consumed by the reporters."""

    status: ProvisionStatus
    domain: str
    template: TemplateKind
    upstream: str
    config_path: str
    enabled_path: str
    reloaded: bool = False
    tls: TLSOutcome = TLSOutcome.NOT_REQUESTED
    warnings: list[StepWarning] = field(default_factory=list)
    rendered: str = ""

    @property
    def https_url(self) -> str | None:
        if self.tls == TLSOutcome.ISSUED:
            return f"https://{self.domain}"
        return None
