"""Actions package - Action layer with explicit contracts.

Each action declares:
- read_only: Whether it modifies the server
- requires_backup: Whether the pre-run state must be recoverable
- rollback_support: Whether it can undo its changes
- prerequisites: What must hold before the action runs
"""

from fastnginx.actions.certbot import CertbotAction
from fastnginx.actions.generate import GenerateAction
from fastnginx.actions.provision import ProvisionAction

__all__ = ["CertbotAction", "GenerateAction", "ProvisionAction"]
