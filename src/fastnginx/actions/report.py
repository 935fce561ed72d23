"""Report Action - Action contracts and reporter selection."""

from dataclasses import dataclass

from rich.console import Console

from fastnginx.actions.reporters.base import BaseReporter
from fastnginx.actions.reporters.json_reporter import JsonReporter
from fastnginx.actions.reporters.rich_reporter import RichReporter


@dataclass
class ActionContract:
    """Explicit contract for an action."""

    read_only: bool
    requires_backup: bool
    rollback_support: bool
    prerequisites: list[str]


def get_reporter(console: Console, fmt: str = "rich") -> BaseReporter:
    """Pick the reporter for an output format ('rich' or 'json')."""
    if fmt == "json":
        return JsonReporter(console)
    return RichReporter(console)
