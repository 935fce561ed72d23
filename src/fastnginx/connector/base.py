"""Command execution seam shared by the local and SSH connectors.

Every probe and every privileged mutation is an external command, so the
same workflow runs unchanged against the local machine or a remote host.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

# Same convention as coreutils `timeout(1)`.
TIMEOUT_EXIT_CODE = 124

# Command payloads and stdout round-trip arbitrary bytes (nginx files are not
# guaranteed to be UTF-8); stderr is only ever displayed.
PAYLOAD_ERRORS = "surrogateescape"


def encode_payload(text: str) -> bytes:
    return text.encode("utf-8", PAYLOAD_ERRORS)


def decode_payload(raw: bytes) -> str:
    return raw.decode("utf-8", PAYLOAD_ERRORS)


def decode_diagnostic(raw: bytes) -> str:
    return raw.decode("utf-8", errors="replace")


@dataclass
class CommandResult:
    """Result of a command execution."""

    command: str
    stdout: str
    stderr: str
    exit_code: int
    timed_out: bool = False
    success: bool = field(init=False)

    def __post_init__(self) -> None:
        self.success = self.exit_code == 0

    @property
    def output(self) -> str:
        """Combined diagnostic output, stderr first (nginx -t writes there)."""
        text = "\n".join(part for part in (self.stderr.strip(), self.stdout.strip()) if part)
        return text.encode("utf-8", errors="replace").decode("utf-8")


class Connector(ABC):
    """Runs argv-style commands, optionally through sudo."""

    def __init__(self, use_sudo: bool = True, timeout: float = 30) -> None:
        self.use_sudo = use_sudo
        self.timeout = timeout

    @property
    @abstractmethod
    def target(self) -> str:
        """Where commands run, for display ('localhost', 'deploy@web1')."""

    @abstractmethod
    def run(
        self,
        argv: list[str],
        *,
        sudo: bool = False,
        input: str | None = None,
        timeout: float | None = None,
    ) -> CommandResult:
        """Execute a command.

        Args:
            argv: Program and arguments. Never passed through a shell locally.
            sudo: Run through the privilege-escalation helper when not root.
            input: Text streamed into the process's standard input.
            timeout: Seconds before the command is treated as failed.
                Defaults to the connector timeout.
        """

    def is_root(self) -> bool:
        result = self.run(["id", "-u"])
        return result.success and result.stdout.strip() == "0"

    def system(self) -> str:
        """Kernel name as reported by `uname -s` (e.g. 'Linux')."""
        result = self.run(["uname", "-s"])
        return result.stdout.strip() if result.success else "unknown"

    def which(self, program: str) -> bool:
        return self.run(["which", program]).success

    def exists(self, path: str) -> bool:
        """True for files, directories and symlinks (dangling ones included)."""
        return self.run(["test", "-e", path, "-o", "-L", path], sudo=True).success

    def is_dir(self, path: str) -> bool:
        return self.run(["test", "-d", path], sudo=True).success

    def read_file(self, path: str) -> str | None:
        result = self.run(["cat", path], sudo=True)
        if result.success:
            return result.stdout
        logger.debug("cannot read %s: %s", path, result.stderr.strip())
        return None
