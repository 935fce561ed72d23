"""
Click-based CLI for fastnginx.

This module only ORCHESTRATES wiring:
- Resolves where commands run (this machine or an SSH server)
- Builds the immutable ProvisionRequest from flags
- Hands off to ProvisionAction and maps the outcome to an exit code
"""

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler

from fastnginx import __version__
from fastnginx.actions.provision import ProvisionAction
from fastnginx.actions.report import get_reporter
from fastnginx.config import ConfigManager
from fastnginx.connector.base import Connector
from fastnginx.connector.local import LocalConnector
from fastnginx.connector.ssh import SSHConfig, SSHConnector
from fastnginx.errors import FastNginxError
from fastnginx.model.request import ProvisionRequest, TemplateKind
from fastnginx.prompts import console_confirm
from fastnginx.validators import parse_port

console = Console()
err_console = Console(stderr=True)


@click.group()
@click.version_option(version=__version__, prog_name="fastnginx")
@click.option("--config", "-c", type=click.Path(), help="Path to config directory")
@click.option("--verbose", "-v", is_flag=True, help="Log every command that runs")
@click.pass_context
def main(ctx: click.Context, config: str | None, verbose: bool) -> None:
    """🚀 fastnginx: Automate Nginx server block setup with SSL support."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )
    ctx.ensure_object(dict)
    config_dir = Path(config) if config else None
    ctx.obj["config_mgr"] = ConfigManager(config_dir)


def _connect(ctx: click.Context, server: str | None) -> Connector:
    """The connector for --server, or the local machine."""
    if not server:
        return LocalConnector()
    cfg = ctx.obj["config_mgr"].resolve_server(server)
    ssh = SSHConnector(cfg)
    ssh.connect()
    return ssh


@main.command()
@click.option("--domain", "-d", required=True, help="Domain name for the server block")
@click.option("--port", "-p", default="3000", show_default=True, help="Port of the upstream app")
@click.option("--ssl", is_flag=True, help="Set up an SSL certificate with Let's Encrypt")
@click.option("--email", help="Email for the SSL certificate (required with --ssl)")
@click.option("--www", is_flag=True, help="Include the www subdomain")
@click.option(
    "--template",
    type=click.Choice([kind.value for kind in TemplateKind]),
    default=TemplateKind.BASIC.value,
    show_default=True,
    help="Server block template",
)
@click.option("--force", is_flag=True, help="Overwrite existing configuration")
@click.option("--dry-run", is_flag=True, help="Show what would be done without executing")
@click.option("--no-reload", is_flag=True, help="Skip Nginx reload")
@click.option("--yes", "-y", is_flag=True, help="Auto-answer yes to all prompts")
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON")
@click.option("--server", "-s", help="Provision a remote server (profile name or [user@]host)")
@click.pass_context
def setup(
    ctx: click.Context,
    domain: str,
    port: str,
    ssl: bool,
    email: str | None,
    www: bool,
    template: str,
    force: bool,
    dry_run: bool,
    no_reload: bool,
    yes: bool,
    as_json: bool,
    server: str | None,
) -> None:
    """Create, enable and (optionally) secure a reverse-proxy server block."""
    reporter = get_reporter(console, "json" if as_json else "rich")
    # JSON output must stay parseable, so prompts go to stderr
    prompt_console = err_console if as_json else console

    try:
        request = ProvisionRequest(
            domain=domain.strip().lower(),
            port=parse_port(port),
            template=TemplateKind(template),
            ssl=ssl,
            email=email,
            www=www,
            force=force,
            dry_run=dry_run,
            reload=not no_reload,
            assume_yes=yes,
        )
        timeouts = ctx.obj["config_mgr"].load_timeouts()
    except FastNginxError as e:
        reporter.report_error(e)
        sys.exit(e.exit_code)

    try:
        connector = _connect(ctx, server)
    except ConnectionError as e:
        reporter.report_error(FastNginxError(str(e), hint="Check the profile with: fastnginx config list"))
        sys.exit(1)

    try:
        action = ProvisionAction(
            connector,
            reporter,
            console_confirm(prompt_console),
            timeouts=timeouts,
        )
        action.run(request)
    except FastNginxError as e:
        reporter.report_error(e)
        sys.exit(e.exit_code)
    finally:
        if server:
            connector.disconnect()


@main.group()
def config() -> None:
    """Manage SSH server profiles."""


@config.command("add")
@click.argument("name")
@click.option("--host", "-h", required=True, help="Server hostname or IP")
@click.option("--user", "-u", default="root", help="SSH username")
@click.option("--port", "-p", default=22, help="SSH port")
@click.option("--password", help="SSH password (stored in the OS keyring)")
@click.option("--key", "-k", type=click.Path(), help="Path to SSH private key")
@click.option("--sudo/--no-sudo", default=True, help="Use sudo for privileged commands")
@click.pass_context
def config_add(
    ctx: click.Context, name: str, host: str, user: str, port: int, password: str | None, key: str | None, sudo: bool
) -> None:
    """Add a new server profile."""
    config_mgr = ctx.obj["config_mgr"]
    cfg = SSHConfig(host=host, user=user, port=port, password=password, key_path=key, use_sudo=sudo)
    try:
        config_mgr.add_profile(name, cfg)
    except FastNginxError as e:
        console.print(f"[bold red]Error:[/] {e.message}")
        sys.exit(1)
    console.print(f"[bold green]✓ Added server profile:[/] {name}")


@config.command("list")
@click.pass_context
def config_list(ctx: click.Context) -> None:
    """List all server profiles."""
    config_mgr = ctx.obj["config_mgr"]
    try:
        profiles = config_mgr.list_profiles()
    except FastNginxError as e:
        console.print(f"[bold red]Error:[/] {e.message}")
        sys.exit(1)

    if not profiles:
        console.print("[dim]No profiles configured yet.[/]")
        return

    for name, data in profiles.items():
        console.print(f"[bold green]{name}[/]: {data.get('user', 'root')}@{data['host']}:{data.get('port', 22)}")


@config.command("remove")
@click.argument("name")
@click.pass_context
def config_remove(ctx: click.Context, name: str) -> None:
    """Remove a server profile."""
    config_mgr = ctx.obj["config_mgr"]
    if config_mgr.remove_profile(name):
        console.print(f"[bold green]✓ Removed profile:[/] {name}")
    else:
        console.print(f"[bold red]Error:[/] Profile {name} not found.")
        sys.exit(1)


if __name__ == "__main__":
    main()
