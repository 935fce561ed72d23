"""Model package - Data structures passed between provisioning steps."""

from fastnginx.model.check import CheckStatus, SystemCheck
from fastnginx.model.request import NginxPaths, ProvisionRequest, TemplateKind
from fastnginx.model.result import (
    ProvisionResult,
    ProvisionStatus,
    StepWarning,
    TLSOutcome,
)

__all__ = [
    "CheckStatus",
    "NginxPaths",
    "ProvisionRequest",
    "ProvisionResult",
    "ProvisionStatus",
    "StepWarning",
    "SystemCheck",
    "TemplateKind",
    "TLSOutcome",
]
