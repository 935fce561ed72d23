"""Rich Reporter Implementation."""

from rich.markup import escape
from rich.panel import Panel
from rich.rule import Rule
from rich.syntax import Syntax
from rich.table import Table

from fastnginx import __version__
from fastnginx.actions.reporters.base import BaseReporter
from fastnginx.errors import ConflictError, FastNginxError
from fastnginx.model.check import CheckStatus, SystemCheck
from fastnginx.model.request import ProvisionRequest
from fastnginx.model.result import ProvisionResult, StepWarning, TLSOutcome

STATUS_COLORS = {
    CheckStatus.OK: "green",
    CheckStatus.WARNING: "yellow",
    CheckStatus.ERROR: "red",
}


class RichReporter(BaseReporter):
    """Colored terminal output using Rich."""

    def report_banner(self, target: str) -> None:
        self.console.print(f"[bold blue]🚀 fastnginx v{__version__}[/]")
        self.console.print(f"[dim]Nginx Server Block Automation Tool ({target})[/]")
        self.console.print()

    def report_checks(self, checks: list[SystemCheck]) -> None:
        self.console.print("[yellow]🔍 Checking system requirements...[/]")
        for check in checks:
            color = STATUS_COLORS[check.status]
            self.console.print(f"[{color}]{check.icon} {check.name}: {escape(check.message)}[/]")
        self.console.print()

    def report_request(self, request: ProvisionRequest) -> None:
        self.console.print("[green]✅ Domain:[/]", request.domain)
        self.console.print("[green]✅ Port:[/]", request.port)
        self.console.print("[green]✅ Template:[/]", request.template.value)
        if request.ssl:
            self.console.print("[green]✅ SSL setup requested[/]")
            self.console.print("[green]✅ Email:[/]", request.email)
            if request.www:
                self.console.print("[green]✅ Including www subdomain[/]")

    def report_progress(self, message: str) -> None:
        self.console.print(f"[yellow]{message}[/]")

    def report_done(self, message: str) -> None:
        self.console.print(f"[green]✅ {message}[/]")

    def report_dry_run(
        self, request: ProvisionRequest, rendered: str, config_path: str, enabled_path: str
    ) -> None:
        self.console.print()
        self.console.print("[blue]🔍 DRY RUN - Configuration that would be created:[/]")
        self.console.print(Rule(style="dim"))
        self.console.print(Syntax(rendered, "nginx", theme="ansi_dark", word_wrap=True))
        self.console.print(Rule(style="dim"))
        self.console.print(f"[blue]📁 Would write to: {config_path}[/]")
        self.console.print(f"[blue]🔗 Would create symlink: {enabled_path}[/]")
        self.console.print("[blue]🧪 Would run: nginx -t[/]")
        if request.reload:
            self.console.print("[blue]🔄 Would reload Nginx[/]")
        if request.ssl:
            self.console.print(f"[blue]🔒 Would set up SSL for: {' and '.join(request.server_names)}[/]")

    def report_warning(self, warning: StepWarning) -> None:
        self.console.print(f"[bold yellow]⚠️  {escape(warning.message)}[/]")
        if warning.hint:
            self.console.print(f"[yellow]💡 Try: {escape(warning.hint)}[/]")

    def report_summary(self, result: ProvisionResult) -> None:
        grid = Table.grid(padding=(0, 2))
        grid.add_column(style="bold")
        grid.add_column()
        grid.add_row("Domain", result.domain)
        grid.add_row("Template", result.template.value)
        grid.add_row("Upstream", result.upstream)
        grid.add_row("Config", result.config_path)
        grid.add_row("Enabled", result.enabled_path)
        grid.add_row("Reloaded", "yes" if result.reloaded else "[yellow]no[/]")

        if result.tls == TLSOutcome.ISSUED:
            grid.add_row("SSL", "[green]✅ HTTPS enabled[/]")
            grid.add_row("URL", result.https_url or "")
        elif result.tls == TLSOutcome.FAILED:
            grid.add_row("SSL", "[yellow]⚠️ Setup attempted but failed[/]")

        border = "yellow" if result.warnings else "green"
        title = "Completed with warnings" if result.warnings else "🎉 Server block setup completed"
        self.console.print()
        self.console.print(Panel(grid, title=title, border_style=border))
        self._print_next_steps(result)

    def _print_next_steps(self, result: ProvisionResult) -> None:
        port = result.upstream.rsplit(":", 1)[-1]
        steps = [f"Ensure your app is running on port {port}"]
        if result.tls == TLSOutcome.ISSUED:
            steps.append(f"Your site is ready at {result.https_url}")
            steps.append("SSL will auto-renew (check: sudo certbot renew --dry-run)")
        elif result.tls == TLSOutcome.NOT_REQUESTED:
            steps.append("Point your domain DNS to this server")
            steps.append(f"Set up SSL: fastnginx setup -d {result.domain} --ssl --email your@email.com")
        steps.append(f"Monitor logs: sudo tail -f /var/log/nginx/{result.domain}_*.log")

        self.console.print("[dim]💡 Next steps:[/]")
        for number, step in enumerate(steps, start=1):
            self.console.print(f"[dim]   {number}. {step}[/]")

    def report_error(self, error: FastNginxError) -> None:
        if isinstance(error, ConflictError):
            self.console.print(f"[yellow]Cancelled:[/] {escape(error.message)}")
        else:
            self.console.print(f"[bold red]❌ Error:[/] {escape(error.message)}")
        output = getattr(error, "output", "")
        if output:
            self.console.print(f"[dim]Nginx test output:[/]\n{escape(output)}")
        if error.hint:
            self.console.print(f"[dim]   {escape(error.hint)}[/]")
