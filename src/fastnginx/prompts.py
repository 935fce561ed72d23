"""Confirmation prompts injected into the provisioning workflow.

A Confirm is any callable taking a question and returning a bool. The
orchestrator never reads the console directly.
"""

import sys
from collections.abc import Callable

import click
from rich.console import Console

Confirm = Callable[[str], bool]


def constant_confirm(answer: bool) -> Confirm:
    """A Confirm that always gives the same answer, for scripted callers and tests."""

    def confirm(question: str) -> bool:
        return answer

    return confirm


def console_confirm(console: Console) -> Confirm:
    """Ask on the terminal; decline when stdin is not interactive."""

    def confirm(question: str) -> bool:
        if not sys.stdin.isatty():
            console.print(f"[dim]{question} (non-interactive: no)[/]")
            return False
        return click.confirm(click.style(question, fg="yellow"), default=False)

    return confirm
