"""Nginx control - config test and reload through the web server binary."""

import logging

from fastnginx.connector.base import CommandResult, Connector

logger = logging.getLogger(__name__)


class NginxControl:
    """Runs `nginx -t` and reloads nginx, each with a coarse timeout."""

    def __init__(self, connector: Connector, timeout: float = 30) -> None:
        self.connector = connector
        self.timeout = timeout

    def installed(self) -> bool:
        return self.connector.which("nginx")

    def test(self) -> CommandResult:
        """Validate the whole configuration tree."""
        return self.connector.run(["nginx", "-t"], sudo=True, timeout=self.timeout)

    def reload(self) -> CommandResult:
        """Reload nginx, trying `nginx -s reload` then systemd."""
        result = self.connector.run(["nginx", "-s", "reload"], sudo=True, timeout=self.timeout)
        if result.success:
            return result

        logger.debug("nginx -s reload failed (%s), trying systemctl", result.stderr.strip())
        fallback = self.connector.run(
            ["systemctl", "reload", "nginx"], sudo=True, timeout=self.timeout
        )
        if fallback.success:
            return fallback
        return result
