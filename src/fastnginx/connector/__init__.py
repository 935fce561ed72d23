"""Connector package - Where provisioning commands actually run."""

from fastnginx.connector.base import CommandResult, Connector
from fastnginx.connector.fileops import FileOperations, SudoFileOperations
from fastnginx.connector.local import LocalConnector
from fastnginx.connector.ssh import SSHConfig, SSHConnector

__all__ = [
    "CommandResult",
    "Connector",
    "FileOperations",
    "LocalConnector",
    "SSHConfig",
    "SSHConnector",
    "SudoFileOperations",
]
