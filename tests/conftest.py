"""Pytest configuration and fixtures for fastnginx tests."""

import io
import os
from pathlib import Path

import pytest
from rich.console import Console

from fastnginx.actions.provision import ProvisionAction
from fastnginx.actions.reporters.rich_reporter import RichReporter
from fastnginx.connector.base import CommandResult, Connector
from fastnginx.connector.fileops import FileOperations
from fastnginx.errors import PersistenceError
from fastnginx.model.request import NginxPaths
from fastnginx.prompts import constant_confirm


class FakeConnector(Connector):
    """Records every command; answers from canned results keyed by argv prefix.

    Path probes (exists, is_dir, read_file) look at the real filesystem so
    they agree with TmpFileOperations.
    """

    def __init__(self, installed=("nginx", "certbot", "sudo"), system_name="Linux", root=True):
        super().__init__()
        self.commands: list[list[str]] = []
        self.inputs: list[str | None] = []
        self.results: dict[tuple[str, ...], CommandResult] = {}
        self.installed = set(installed)
        self.system_name = system_name
        self.root = root

    @property
    def target(self) -> str:
        return "test-host"

    def set_result(self, *prefix: str, exit_code=0, stdout="", stderr="", timed_out=False):
        self.results[prefix] = CommandResult(
            command=" ".join(prefix),
            stdout=stdout,
            stderr=stderr,
            exit_code=exit_code,
            timed_out=timed_out,
        )

    def run(self, argv, *, sudo=False, input=None, timeout=None):
        self.commands.append(list(argv))
        self.inputs.append(input)
        for prefix in sorted(self.results, key=len, reverse=True):
            if tuple(argv[: len(prefix)]) == prefix:
                return self.results[prefix]
        return CommandResult(command=" ".join(argv), stdout="", stderr="", exit_code=0)

    def is_root(self) -> bool:
        return self.root

    def system(self) -> str:
        return self.system_name

    def which(self, program: str) -> bool:
        return program in self.installed

    def exists(self, path: str) -> bool:
        return os.path.lexists(path)

    def is_dir(self, path: str) -> bool:
        return os.path.isdir(path)

    def read_file(self, path: str) -> str | None:
        try:
            return Path(path).read_bytes().decode("utf-8", "surrogateescape")
        except OSError:
            return None

    def ran(self, *prefix: str) -> list[list[str]]:
        """Commands that started with `prefix`."""
        return [cmd for cmd in self.commands if tuple(cmd[: len(prefix)]) == prefix]


class TmpFileOperations(FileOperations):
    """Unprivileged FileOperations over a temporary directory."""

    def __init__(self, fail_write: bool = False, fail_link: bool = False, fail_remove: bool = False) -> None:
        self.fail_write = fail_write
        self.fail_link = fail_link
        self.fail_remove = fail_remove
        self.operations: list[tuple[str, str]] = []

    def write_protected(self, path: str, content: str) -> None:
        self.operations.append(("write", path))
        if self.fail_write:
            raise PersistenceError(path, f"Failed to write {path}: permission denied")
        temp_path = f"{path}.tmp"
        Path(temp_path).write_bytes(content.encode("utf-8", "surrogateescape"))
        os.replace(temp_path, path)

    def link_protected(self, target: str, link_path: str) -> None:
        self.operations.append(("link", link_path))
        if self.fail_link:
            raise PersistenceError(link_path, f"Failed to create symlink {link_path}")
        try:
            os.symlink(target, link_path)
        except FileExistsError:
            os.unlink(link_path)
            os.symlink(target, link_path)

    def remove_protected(self, path: str) -> None:
        self.operations.append(("remove", path))
        if self.fail_remove:
            raise PersistenceError(path, f"Failed to remove {path}: operation not permitted")
        if os.path.lexists(path):
            os.unlink(path)

    def make_directory(self, path: str) -> None:
        self.operations.append(("mkdir", path))
        Path(path).mkdir(parents=True, exist_ok=True)

    def exists(self, path: str) -> bool:
        return os.path.lexists(path)

    def read(self, path: str) -> str | None:
        try:
            return Path(path).read_bytes().decode("utf-8", "surrogateescape")
        except OSError:
            return None

    def read_link(self, path: str) -> str | None:
        try:
            return os.readlink(path)
        except OSError:
            return None


def snapshot_tree(root: Path) -> dict[str, str]:
    """Every path under root mapped to its content or link target."""
    tree = {}
    for path in sorted(root.rglob("*")):
        if path.is_symlink():
            tree[str(path)] = "-> " + os.readlink(path)
        elif path.is_file():
            tree[str(path)] = path.read_text()
        else:
            tree[str(path)] = "<dir>"
    return tree


@pytest.fixture
def nginx_paths(tmp_path):
    """A complete nginx tree under tmp_path, include directive present."""
    paths = NginxPaths(root=str(tmp_path / "nginx"))
    Path(paths.sites_available).mkdir(parents=True)
    Path(paths.sites_enabled).mkdir(parents=True)
    Path(paths.nginx_conf).write_text(
        "events {}\n\nhttp {\n    include /etc/nginx/mime.types;\n"
        f"    {paths.include_directive};\n}}\n"
    )
    return paths


@pytest.fixture
def connector():
    return FakeConnector()


@pytest.fixture
def fileops():
    return TmpFileOperations()


@pytest.fixture
def console_output():
    return io.StringIO()


@pytest.fixture
def reporter(console_output):
    return RichReporter(Console(file=console_output, width=200, color_system=None))


@pytest.fixture
def make_action(connector, fileops, nginx_paths, reporter):
    """Build a ProvisionAction wired to the fakes."""

    def _make(confirm=None, ops=None):
        return ProvisionAction(
            connector,
            reporter,
            confirm or constant_confirm(True),
            fileops=ops or fileops,
            paths=nginx_paths,
        )

    return _make
