"""Reporters - Console renderings of a provisioning run."""

from fastnginx.actions.reporters.base import BaseReporter
from fastnginx.actions.reporters.json_reporter import JsonReporter
from fastnginx.actions.reporters.rich_reporter import RichReporter

__all__ = ["BaseReporter", "JsonReporter", "RichReporter"]
