"""System Scanner - Verifies prerequisites before provisioning.

Each prerequisite yields one SystemCheck. Missing directories and a missing
sites-enabled include can be repaired on the spot after confirmation; in
dry-run mode they are only reported.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from datetime import datetime

from fastnginx.connector.base import Connector
from fastnginx.connector.fileops import FileOperations
from fastnginx.errors import PersistenceError
from fastnginx.model.check import CheckStatus, SystemCheck
from fastnginx.model.request import NginxPaths

logger = logging.getLogger(__name__)

HTTP_BLOCK_RE = re.compile(r"(\bhttp\s*\{)")


class SystemScanner:
    """Collect prerequisite checks for one provisioning run."""

    def __init__(
        self,
        connector: Connector,
        fileops: FileOperations,
        confirm: Callable[[str], bool],
        paths: NginxPaths | None = None,
        *,
        dry_run: bool = False,
    ) -> None:
        self.connector = connector
        self.fileops = fileops
        self.confirm = confirm
        self.paths = paths or NginxPaths()
        self.dry_run = dry_run

    def scan(self) -> list[SystemCheck]:
        checks: list[SystemCheck] = []

        system = self.connector.system()
        if system != "Linux":
            checks.append(
                SystemCheck("Operating System", CheckStatus.ERROR, f"{system} is not supported")
            )
            return checks
        checks.append(SystemCheck("Operating System", CheckStatus.OK, system))

        checks.append(self._check_privileges())

        if self.connector.which("nginx"):
            checks.append(SystemCheck("Nginx", CheckStatus.OK, "Installed"))
        else:
            checks.append(SystemCheck("Nginx", CheckStatus.ERROR, "Not installed"))

        if not self.connector.is_dir(self.paths.root):
            checks.append(
                SystemCheck(
                    "Nginx Configuration",
                    CheckStatus.ERROR,
                    f"Config directory {self.paths.root} not found",
                )
            )
            return checks

        checks.append(self._check_directory("Nginx sites-available", self.paths.sites_available))
        checks.append(self._check_directory("Nginx sites-enabled", self.paths.sites_enabled))

        include_check = self._check_include_directive()
        if include_check is not None:
            checks.append(include_check)

        return checks

    def _check_privileges(self) -> SystemCheck:
        if self.connector.is_root():
            return SystemCheck("Permissions", CheckStatus.OK, "Running with sufficient privileges")
        if self.connector.use_sudo and self.connector.which("sudo"):
            return SystemCheck(
                "Permissions", CheckStatus.WARNING, "Not running as root - privileged steps use sudo"
            )
        return SystemCheck(
            "Permissions", CheckStatus.WARNING, "Not running as root - some operations may fail"
        )

    def _check_directory(self, name: str, path: str) -> SystemCheck:
        if self.connector.is_dir(path):
            return SystemCheck(name, CheckStatus.OK, "Directory exists")

        if self.dry_run:
            return SystemCheck(name, CheckStatus.WARNING, "Directory missing (would create)")

        if not self.confirm(f"Directory {path} does not exist. Create it?"):
            return SystemCheck(name, CheckStatus.ERROR, "Directory missing and not created")

        try:
            self.fileops.make_directory(path)
        except PersistenceError as e:
            logger.debug("mkdir %s failed: %s", path, e)
            return SystemCheck(name, CheckStatus.ERROR, f"Failed to create directory: {e.message}")
        return SystemCheck(name, CheckStatus.OK, "Directory created")

    def _check_include_directive(self) -> SystemCheck | None:
        name = "Nginx include directive"
        conf_path = self.paths.nginx_conf
        if not self.fileops.exists(conf_path):
            return None

        content = self.fileops.read(conf_path)
        if content is None:
            return SystemCheck(name, CheckStatus.ERROR, f"Cannot read {conf_path}")

        if self.paths.include_directive in content:
            return SystemCheck(name, CheckStatus.OK, "Present in nginx.conf")

        if self.dry_run:
            return SystemCheck(name, CheckStatus.WARNING, "sites-enabled include missing (would add)")

        if not self.confirm(f"{conf_path} doesn't include {self.paths.sites_enabled}. Add the include directive?"):
            return SystemCheck(name, CheckStatus.WARNING, "Include directive not added")

        updated = add_include_directive(content, self.paths.include_directive)
        if updated is None:
            return SystemCheck(name, CheckStatus.ERROR, f"No http block found in {conf_path}")

        backup_path = f"{conf_path}.backup.{datetime.now().strftime('%Y%m%d%H%M%S')}"
        try:
            self.fileops.write_protected(backup_path, content)
            self.fileops.write_protected(conf_path, updated)
        except PersistenceError as e:
            return SystemCheck(name, CheckStatus.ERROR, f"Failed to update nginx.conf: {e.message}")

        logger.debug("nginx.conf backed up to %s", backup_path)
        return SystemCheck(name, CheckStatus.OK, f"Added to nginx.conf (backup: {backup_path})")


def add_include_directive(content: str, directive: str) -> str | None:
    """Insert `directive;` at the top of the http block, or None without one."""
    if not HTTP_BLOCK_RE.search(content):
        return None
    insertion = f"\n\t# Include server blocks\n\t{directive};\n"
    return HTTP_BLOCK_RE.sub(lambda m: m.group(1) + insertion, content, count=1)
