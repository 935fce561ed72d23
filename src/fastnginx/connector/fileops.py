"""Privileged file operations.

The nginx configuration tree is owned by root, so every mutation goes
through an elevated helper process (sudo) instead of in-process writes.
The orchestrator only sees the FileOperations capability, which lets tests
swap in an unprivileged implementation over a temporary directory.
"""

import logging
from abc import ABC, abstractmethod

from fastnginx.connector.base import Connector
from fastnginx.errors import PersistenceError

logger = logging.getLogger(__name__)

TEMP_SUFFIX = ".fastnginx.tmp"

# `ln -s` exits with 1 when the link path already exists.
LINK_EXISTS_EXIT_CODE = 1


class FileOperations(ABC):
    """Capability for reading and mutating protected paths."""

    @abstractmethod
    def write_protected(self, path: str, content: str) -> None:
        """Atomically replace `path` with `content`.

        Raises:
            PersistenceError: The file could not be written. `path` holds
                either its old content or the new content, never a mix.
        """

    @abstractmethod
    def link_protected(self, target: str, link_path: str) -> None:
        """Create symlink `link_path` -> `target`, replacing a stale link once.

        Raises:
            PersistenceError: Linking failed, or the link path kept
                conflicting after one removal and retry.
        """

    @abstractmethod
    def remove_protected(self, path: str) -> None:
        """Remove a file or link. Removing an absent path succeeds.

        Raises:
            PersistenceError: The path exists but could not be removed.
        """

    @abstractmethod
    def make_directory(self, path: str) -> None:
        """Create a directory and its parents."""

    @abstractmethod
    def exists(self, path: str) -> bool:
        """True for files, directories and symlinks (dangling ones included)."""

    @abstractmethod
    def read(self, path: str) -> str | None:
        """Return file contents, or None when unreadable or absent."""

    @abstractmethod
    def read_link(self, path: str) -> str | None:
        """Return a symlink's target, or None when `path` is not a symlink."""


class SudoFileOperations(FileOperations):
    """FileOperations backed by coreutils commands run through sudo."""

    def __init__(self, connector: Connector) -> None:
        self.connector = connector

    def write_protected(self, path: str, content: str) -> None:
        temp_path = f"{path}{TEMP_SUFFIX}"
        logger.debug("writing %d bytes to %s via %s", len(content), path, temp_path)

        result = self.connector.run(["tee", temp_path], sudo=True, input=content)
        if not result.success:
            self._discard(temp_path)
            raise PersistenceError(
                path,
                f"Failed to write {path} (exit {result.exit_code}): {result.stderr.strip()}",
                hint="Check that you can run sudo, or re-run as root",
            )

        # rename(2) within one directory is atomic
        result = self.connector.run(["mv", "-f", temp_path, path], sudo=True)
        if not result.success:
            self._discard(temp_path)
            raise PersistenceError(
                path,
                f"Failed to move configuration into {path}: {result.stderr.strip()}",
            )

    def link_protected(self, target: str, link_path: str) -> None:
        result = self.connector.run(["ln", "-s", target, link_path], sudo=True)
        if result.success:
            return

        if result.exit_code != LINK_EXISTS_EXIT_CODE:
            raise PersistenceError(
                link_path,
                f"Failed to create symlink {link_path}: {result.stderr.strip()}",
                hint=f"sudo ln -sf {target} {link_path}",
            )

        logger.debug("%s already exists, replacing it once", link_path)
        self.remove_protected(link_path)
        retry = self.connector.run(["ln", "-s", target, link_path], sudo=True)
        if not retry.success:
            raise PersistenceError(
                link_path,
                f"Symlink {link_path} still conflicts after removing it: {retry.stderr.strip()}",
                hint=f"sudo ln -sf {target} {link_path}",
            )

    def remove_protected(self, path: str) -> None:
        result = self.connector.run(["rm", "-f", path], sudo=True)
        if not result.success:
            raise PersistenceError(
                path,
                f"Failed to remove {path}: {result.stderr.strip()}",
                hint=f"sudo rm -f {path}",
            )

    def make_directory(self, path: str) -> None:
        result = self.connector.run(["mkdir", "-p", path], sudo=True)
        if not result.success:
            raise PersistenceError(path, f"Failed to create directory {path}: {result.stderr.strip()}")

    def exists(self, path: str) -> bool:
        return self.connector.exists(path)

    def read(self, path: str) -> str | None:
        return self.connector.read_file(path)

    def read_link(self, path: str) -> str | None:
        result = self.connector.run(["readlink", path], sudo=True)
        return result.stdout.rstrip("\n") if result.success else None

    def _discard(self, temp_path: str) -> None:
        cleanup = self.connector.run(["rm", "-f", temp_path], sudo=True)
        if not cleanup.success:
            logger.warning("could not remove temporary file %s: %s", temp_path, cleanup.stderr.strip())
