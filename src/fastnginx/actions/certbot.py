"""Certbot Action - Obtain a Let's Encrypt certificate for a live site.

CONTRACT:
- read_only: False (certbot edits the server block it certifies)
- requires_backup: False
- rollback_support: False
- prerequisites: ["HTTP server block enabled", "nginx -t passes"]

Certificate issuance is entirely certbot's job. This action only makes sure
certbot is present and invokes it non-interactively. Every failure surfaces
as a CertificateWarning: the HTTP site is already live and stays in place.
"""

import logging
from collections.abc import Callable

from fastnginx.actions.nginx import NginxControl
from fastnginx.actions.report import ActionContract
from fastnginx.connector.base import Connector
from fastnginx.errors import CertificateWarning
from fastnginx.model.request import ProvisionRequest

logger = logging.getLogger(__name__)

CERTBOT_PACKAGES = ["certbot", "python3-certbot-nginx"]

MANUAL_INSTALL_HINT = (
    "Install certbot manually:\n"
    "   Ubuntu/Debian: sudo apt install certbot python3-certbot-nginx\n"
    "   CentOS/RHEL: sudo yum install certbot python3-certbot-nginx"
)


class CertbotAction:
    """Ensure certbot is installed, then request a certificate."""

    CONTRACT = ActionContract(
        read_only=False,
        requires_backup=False,
        rollback_support=False,
        prerequisites=["HTTP server block enabled", "nginx -t passes"],
    )

    def __init__(
        self,
        connector: Connector,
        nginx: NginxControl,
        confirm: Callable[[str], bool],
        timeout: float = 300,
        install_timeout: float = 600,
    ) -> None:
        self.connector = connector
        self.nginx = nginx
        self.confirm = confirm
        self.timeout = timeout
        self.install_timeout = install_timeout

    @staticmethod
    def build_command(request: ProvisionRequest) -> list[str]:
        argv = ["certbot", "--nginx"]
        for name in request.server_names:
            argv += ["-d", name]
        argv += ["--email", request.email or "", "--agree-tos", "--non-interactive", "--redirect"]
        return argv

    @staticmethod
    def manual_command(request: ProvisionRequest) -> str:
        domains = " ".join(f"-d {name}" for name in request.server_names)
        return f"sudo certbot --nginx {domains}"

    def provision(self, request: ProvisionRequest) -> None:
        """Obtain and install a certificate for the request's domains.

        Raises:
            CertificateWarning: certbot is missing and could not be installed,
                certbot failed or timed out, or nginx rejected certbot's edits.
        """
        self.ensure_installed()

        argv = self.build_command(request)
        logger.debug("requesting certificate for %s", ", ".join(request.server_names))
        result = self.connector.run(argv, sudo=True, timeout=self.timeout)
        if not result.success:
            reason = "timed out" if result.timed_out else f"exited with {result.exit_code}"
            raise CertificateWarning(
                f"certbot {reason} for {request.domain}: {result.output}",
                hint=self.manual_command(request),
            )

        check = self.nginx.test()
        if not check.success:
            raise CertificateWarning(
                f"nginx -t failed after certbot updated {request.domain}: {check.output}",
                hint="sudo nginx -t",
            )

    def ensure_installed(self) -> None:
        if self.connector.which("certbot"):
            return

        commands = self.install_commands()
        if commands is None:
            raise CertificateWarning(
                "certbot is not installed and this OS has no supported package manager",
                hint=MANUAL_INSTALL_HINT,
            )

        manager = commands[-1][0]
        if not self.confirm(f"certbot is not installed. Install it with {manager}?"):
            raise CertificateWarning("certbot is not installed", hint=MANUAL_INSTALL_HINT)

        for argv in commands:
            result = self.connector.run(argv, sudo=True, timeout=self.install_timeout)
            if not result.success:
                raise CertificateWarning(
                    f"Failed to install certbot ({' '.join(argv)}): {result.output}",
                    hint=MANUAL_INSTALL_HINT,
                )

    def install_commands(self) -> list[list[str]] | None:
        """Package manager commands for this distribution, or None."""
        if self.connector.exists("/etc/debian_version"):
            return [
                ["apt-get", "update"],
                ["apt-get", "install", "-y", *CERTBOT_PACKAGES],
            ]
        if self.connector.exists("/etc/redhat-release"):
            manager = "dnf" if self.connector.which("dnf") else "yum"
            return [[manager, "install", "-y", *CERTBOT_PACKAGES]]
        return None
