"""SSH connector - runs the provisioning workflow on a remote server.

Commands are quoted with shlex and executed through paramiko. Privileged
commands are prefixed with sudo unless the login user is root.
"""

import logging
import secrets
import shlex
import socket
from dataclasses import dataclass
from pathlib import Path

import paramiko
from paramiko.ssh_exception import AuthenticationException, SSHException

from fastnginx.connector.base import (
    TIMEOUT_EXIT_CODE,
    CommandResult,
    Connector,
    decode_diagnostic,
    decode_payload,
    encode_payload,
)

logger = logging.getLogger(__name__)


@dataclass
class SSHConfig:
    """SSH connection configuration."""

    host: str
    user: str = "root"
    port: int = 22
    key_path: str | None = None
    password: str | None = None  # Fallback, prefer keys
    use_sudo: bool = True
    timeout: int = 30


class SSHConnector(Connector):
    """SSH connection manager for remote provisioning.

    Example:
        >>> config = SSHConfig(host="192.168.1.100", user="deploy")
        >>> with SSHConnector(config) as ssh:
        ...     ssh.run(["nginx", "-t"], sudo=True)
    """

    def __init__(self, config: SSHConfig) -> None:
        super().__init__(use_sudo=config.use_sudo, timeout=config.timeout)
        self.config = config
        self._client: paramiko.SSHClient | None = None

    @property
    def target(self) -> str:
        return f"{self.config.user}@{self.config.host}"

    def connect(self) -> None:
        """Establish SSH connection."""
        self._client = paramiko.SSHClient()
        self._client.set_missing_host_key_policy(paramiko.AutoAddPolicy())

        connect_kwargs: dict = {
            "hostname": self.config.host,
            "port": self.config.port,
            "username": self.config.user,
            "timeout": self.config.timeout,
        }

        if self.config.key_path:
            key_path = Path(self.config.key_path).expanduser()
            if key_path.exists():
                connect_kwargs["key_filename"] = str(key_path)
        elif self.config.password:
            connect_kwargs["password"] = self.config.password

        logger.debug("connecting to %s:%s", self.config.host, self.config.port)
        try:
            self._client.connect(**connect_kwargs)
        except AuthenticationException as e:
            raise ConnectionError(f"Authentication failed for {self.target}: {e}") from e
        except (SSHException, OSError) as e:
            raise ConnectionError(f"SSH error connecting to {self.target}: {e}") from e

    def disconnect(self) -> None:
        if self._client:
            self._client.close()
            self._client = None

    def __enter__(self) -> "SSHConnector":
        self.connect()
        return self

    def __exit__(self, *args: object) -> None:
        self.disconnect()

    def _password_sudo(self, sudo: bool) -> bool:
        return sudo and self.use_sudo and self.config.user != "root" and bool(self.config.password)

    def _wrap(self, argv: list[str], sudo: bool, input_path: str | None = None) -> str:
        """Build the remote command line.

        With a sudo password, stdin carries only the password line. sudo
        leaves it unread when no password is asked for, so the escalated
        command takes its input from `input_path` (or /dev/null) instead of
        inheriting stdin.
        """
        command = shlex.join(argv)
        if not (sudo and self.use_sudo and self.config.user != "root"):
            return command
        if not self.config.password:
            return f"sudo -n {command}"
        inner = shlex.join(["sh", "-c", 'exec "$@" < "$0"', input_path or "/dev/null", *argv])
        return f"sudo -S -p '' {inner}"

    def _upload(self, content: str) -> str:
        """Copy `content` into a private temp file on the server over SFTP."""
        path = f"/tmp/.fastnginx-{secrets.token_hex(8)}"
        with self._client.open_sftp() as sftp:
            with sftp.open(path, "wb") as f:
                sftp.chmod(path, 0o600)
                f.write(encode_payload(content))
        return path

    def _discard_upload(self, path: str) -> None:
        try:
            with self._client.open_sftp() as sftp:
                sftp.remove(path)
        except (OSError, SSHException) as e:
            logger.warning("could not remove %s on %s: %s", path, self.target, e)

    def run(
        self,
        argv: list[str],
        *,
        sudo: bool = False,
        input: str | None = None,
        timeout: float | None = None,
    ) -> CommandResult:
        if not self._client:
            raise RuntimeError("Not connected. Use 'with SSHConnector(config):' context.")

        display = shlex.join(argv)
        cmd_timeout = timeout if timeout is not None else self.config.timeout

        if self._password_sudo(sudo):
            upload = None
            if input is not None:
                try:
                    upload = self._upload(input)
                except (OSError, SSHException) as e:
                    return CommandResult(
                        command=display,
                        stdout="",
                        stderr=f"SFTP upload failed: {e}",
                        exit_code=255,
                    )
            try:
                # sudo -S takes the password from the first line of stdin
                return self._exec(
                    self._wrap(argv, sudo, upload),
                    f"{self.config.password}\n",
                    display,
                    cmd_timeout,
                )
            finally:
                if upload:
                    self._discard_upload(upload)

        return self._exec(self._wrap(argv, sudo), input, display, cmd_timeout)

    def _exec(
        self, command: str, stdin_data: str | None, display: str, cmd_timeout: float
    ) -> CommandResult:
        logger.debug("ssh %s: %s (timeout=%ss)", self.target, display, cmd_timeout)
        try:
            stdin, stdout, stderr = self._client.exec_command(command, timeout=cmd_timeout)
            if stdin_data is not None:
                stdin.write(encode_payload(stdin_data))
                stdin.flush()
            stdin.channel.shutdown_write()

            out = decode_payload(stdout.read())
            err = decode_diagnostic(stderr.read())
            exit_code = stdout.channel.recv_exit_status()
        except socket.timeout:
            return CommandResult(
                command=display,
                stdout="",
                stderr=f"Command timed out after {cmd_timeout}s: {display}",
                exit_code=TIMEOUT_EXIT_CODE,
                timed_out=True,
            )
        except SSHException as e:
            return CommandResult(
                command=display,
                stdout="",
                stderr=f"SSH Execution Error: {e}",
                exit_code=255,
            )

        return CommandResult(command=display, stdout=out, stderr=err, exit_code=exit_code)
