"""Tests for sudo-backed privileged file operations."""

from unittest.mock import MagicMock, call

import pytest

from fastnginx.connector.base import CommandResult, Connector
from fastnginx.connector.fileops import SudoFileOperations
from fastnginx.errors import PersistenceError


def _result(exit_code=0, stderr=""):
    return CommandResult(command="cmd", stdout="", stderr=stderr, exit_code=exit_code)


@pytest.fixture
def mock_connector():
    connector = MagicMock(spec=Connector)
    connector.run.return_value = _result()
    return connector


def test_write_streams_into_temp_file_then_renames(mock_connector):
    ops = SudoFileOperations(mock_connector)

    ops.write_protected("/etc/nginx/sites-available/myapp.com", "server {}\n")

    assert mock_connector.run.call_args_list == [
        call(["tee", "/etc/nginx/sites-available/myapp.com.fastnginx.tmp"], sudo=True, input="server {}\n"),
        call(
            ["mv", "-f", "/etc/nginx/sites-available/myapp.com.fastnginx.tmp", "/etc/nginx/sites-available/myapp.com"],
            sudo=True,
        ),
    ]


def test_write_failure_discards_temp_file(mock_connector):
    mock_connector.run.side_effect = [_result(1, "tee: Permission denied"), _result()]
    ops = SudoFileOperations(mock_connector)

    with pytest.raises(PersistenceError) as exc_info:
        ops.write_protected("/etc/nginx/sites-available/myapp.com", "x")

    assert exc_info.value.path == "/etc/nginx/sites-available/myapp.com"
    assert "Permission denied" in exc_info.value.message
    assert mock_connector.run.call_args_list[-1] == call(
        ["rm", "-f", "/etc/nginx/sites-available/myapp.com.fastnginx.tmp"], sudo=True
    )


def test_failed_rename_leaves_target_untouched(mock_connector):
    mock_connector.run.side_effect = [_result(), _result(1, "mv: cannot move"), _result()]
    ops = SudoFileOperations(mock_connector)

    with pytest.raises(PersistenceError, match="cannot move"):
        ops.write_protected("/etc/nginx/sites-available/myapp.com", "x")

    commands = [c.args[0] for c in mock_connector.run.call_args_list]
    assert commands[-1] == ["rm", "-f", "/etc/nginx/sites-available/myapp.com.fastnginx.tmp"]
    assert ["rm", "-f", "/etc/nginx/sites-available/myapp.com"] not in commands


def test_link_success(mock_connector):
    SudoFileOperations(mock_connector).link_protected("/a/site", "/e/site")

    mock_connector.run.assert_called_once_with(["ln", "-s", "/a/site", "/e/site"], sudo=True)


def test_link_replaces_existing_once(mock_connector):
    mock_connector.run.side_effect = [_result(1, "File exists"), _result(), _result()]

    SudoFileOperations(mock_connector).link_protected("/a/site", "/e/site")

    assert [c.args[0] for c in mock_connector.run.call_args_list] == [
        ["ln", "-s", "/a/site", "/e/site"],
        ["rm", "-f", "/e/site"],
        ["ln", "-s", "/a/site", "/e/site"],
    ]


def test_link_persistent_conflict(mock_connector):
    mock_connector.run.side_effect = [_result(1, "File exists"), _result(), _result(1, "File exists")]

    with pytest.raises(PersistenceError, match="still conflicts"):
        SudoFileOperations(mock_connector).link_protected("/a/site", "/e/site")

    assert mock_connector.run.call_count == 3


def test_link_other_failure_is_not_retried(mock_connector):
    mock_connector.run.return_value = _result(2, "sudo: a password is required")

    with pytest.raises(PersistenceError) as exc_info:
        SudoFileOperations(mock_connector).link_protected("/a/site", "/e/site")

    assert mock_connector.run.call_count == 1
    assert exc_info.value.hint == "sudo ln -sf /a/site /e/site"


def test_remove_is_idempotent_rm_f(mock_connector):
    ops = SudoFileOperations(mock_connector)

    ops.remove_protected("/e/site")
    ops.remove_protected("/e/site")

    assert mock_connector.run.call_args_list == [call(["rm", "-f", "/e/site"], sudo=True)] * 2


def test_remove_failure(mock_connector):
    mock_connector.run.return_value = _result(1, "Operation not permitted")

    with pytest.raises(PersistenceError) as exc_info:
        SudoFileOperations(mock_connector).remove_protected("/e/site")

    assert exc_info.value.hint == "sudo rm -f /e/site"


def test_read_and_exists_delegate_to_connector(mock_connector):
    mock_connector.exists.return_value = True
    mock_connector.read_file.return_value = "content"
    ops = SudoFileOperations(mock_connector)

    assert ops.exists("/etc/nginx/nginx.conf")
    assert ops.read("/etc/nginx/nginx.conf") == "content"


def test_read_link(mock_connector):
    mock_connector.run.return_value = CommandResult(
        command="readlink", stdout="/srv/sites/shared.conf\n", stderr="", exit_code=0
    )

    target = SudoFileOperations(mock_connector).read_link("/etc/nginx/sites-enabled/myapp.com")

    assert target == "/srv/sites/shared.conf"
    mock_connector.run.assert_called_once_with(
        ["readlink", "/etc/nginx/sites-enabled/myapp.com"], sudo=True
    )


def test_read_link_of_regular_file(mock_connector):
    mock_connector.run.return_value = _result(exit_code=1)

    assert SudoFileOperations(mock_connector).read_link("/etc/nginx/sites-enabled/myapp.com") is None
