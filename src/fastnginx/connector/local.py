"""Local connector - runs commands on this machine with subprocess."""

import logging
import os
import platform
import shlex
import subprocess

from fastnginx.connector.base import (
    TIMEOUT_EXIT_CODE,
    CommandResult,
    Connector,
    decode_diagnostic,
    decode_payload,
    encode_payload,
)

logger = logging.getLogger(__name__)


class LocalConnector(Connector):
    """Run commands locally, escalating with sudo when not already root."""

    @property
    def target(self) -> str:
        return "localhost"

    def is_root(self) -> bool:
        return os.geteuid() == 0

    def system(self) -> str:
        return platform.system()

    def _wrap(self, argv: list[str], sudo: bool) -> list[str]:
        if sudo and self.use_sudo and not self.is_root():
            return ["sudo", *argv]
        return list(argv)

    def run(
        self,
        argv: list[str],
        *,
        sudo: bool = False,
        input: str | None = None,
        timeout: float | None = None,
    ) -> CommandResult:
        full_argv = self._wrap(argv, sudo)
        command = shlex.join(full_argv)
        cmd_timeout = timeout if timeout is not None else self.timeout
        logger.debug("run: %s (timeout=%ss)", command, cmd_timeout)

        try:
            proc = subprocess.run(
                full_argv,
                input=encode_payload(input) if input is not None else None,
                capture_output=True,
                timeout=cmd_timeout,
            )
        except subprocess.TimeoutExpired:
            logger.debug("timed out: %s", command)
            return CommandResult(
                command=command,
                stdout="",
                stderr=f"Command timed out after {cmd_timeout}s: {command}",
                exit_code=TIMEOUT_EXIT_CODE,
                timed_out=True,
            )
        except FileNotFoundError:
            return CommandResult(
                command=command,
                stdout="",
                stderr=f"{full_argv[0]}: command not found",
                exit_code=127,
            )

        logger.debug("exit %s: %s", proc.returncode, command)
        return CommandResult(
            command=command,
            stdout=decode_payload(proc.stdout),
            stderr=decode_diagnostic(proc.stderr),
            exit_code=proc.returncode,
        )
