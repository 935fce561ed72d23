"""Provision Action - Create, enable and secure an nginx server block.

CONTRACT:
- read_only: False (MODIFIES SERVER)
- requires_backup: True
- rollback_support: True
- prerequisites: ["nginx installed", "sites-available and sites-enabled exist"]

Steps run strictly in order. Fatal failures after the first write roll the
site back to its pre-run state before the error propagates: the enabled
link never points at a file that failed `nginx -t`. Reload and certificate
failures happen after the config is live, so they are downgraded to
warnings and nothing is unwound.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from fastnginx.actions.certbot import CertbotAction
from fastnginx.actions.generate import GenerateAction
from fastnginx.actions.nginx import NginxControl
from fastnginx.actions.report import ActionContract
from fastnginx.actions.reporters.base import BaseReporter
from fastnginx.config import CommandTimeouts
from fastnginx.connector.base import Connector
from fastnginx.connector.fileops import FileOperations, SudoFileOperations
from fastnginx.errors import (
    CertificateWarning,
    ConfigTestError,
    ConflictError,
    FastNginxError,
    PersistenceError,
    PrerequisiteError,
    ReloadWarning,
    StepFailure,
)
from fastnginx.model.request import NginxPaths, ProvisionRequest
from fastnginx.model.result import ProvisionResult, ProvisionStatus, StepWarning, TLSOutcome
from fastnginx.scanner.system import SystemScanner
from fastnginx.validators import validate_request

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SiteSnapshot:
    """What existed for the domain before this run touched anything."""

    content: str | None
    enabled: bool
    link_target: str | None = None

    @property
    def existed(self) -> bool:
        return self.content is not None


class ProvisionAction:
    """Orchestrates one provisioning run for a single domain."""

    CONTRACT = ActionContract(
        read_only=False,
        requires_backup=True,
        rollback_support=True,
        prerequisites=["nginx installed", "sites-available and sites-enabled exist"],
    )

    def __init__(
        self,
        connector: Connector,
        reporter: BaseReporter,
        confirm: Callable[[str], bool],
        *,
        fileops: FileOperations | None = None,
        paths: NginxPaths | None = None,
        timeouts: CommandTimeouts | None = None,
        generator: GenerateAction | None = None,
    ) -> None:
        timeouts = timeouts or CommandTimeouts()
        self.connector = connector
        self.reporter = reporter
        self.confirm = confirm
        self.assume_yes = False
        self.fileops = fileops or SudoFileOperations(connector)
        self.paths = paths or NginxPaths()
        self.generator = generator or GenerateAction()
        self.nginx = NginxControl(connector, timeout=timeouts.nginx)
        self.certbot = CertbotAction(
            connector,
            self.nginx,
            self._ask,
            timeout=timeouts.certbot,
            install_timeout=timeouts.install,
        )

    def run(self, request: ProvisionRequest) -> ProvisionResult:
        """Provision the server block described by `request`.

        Returns:
            ProvisionResult with status success, dry_run, plus any warnings.

        Raises:
            ValidationError: Bad input, before any side effect.
            PrerequisiteError: A system check failed (never in dry-run).
            ConflictError: The operator declined to overwrite.
            PersistenceError: Write or link failed (rolled back).
            ConfigTestError: nginx -t rejected the config (rolled back).
        """
        self.assume_yes = request.assume_yes
        self.reporter.report_banner(self.connector.target)

        self.reporter.report_progress("📋 Validating inputs...")
        validate_request(request)
        self.reporter.report_request(request)

        checks = SystemScanner(
            self.connector,
            self.fileops,
            self._ask,
            self.paths,
            dry_run=request.dry_run,
        ).scan()
        self.reporter.report_checks(checks)
        failed = [check for check in checks if check.is_error]
        if failed and not request.dry_run:
            raise PrerequisiteError(failed)

        self.reporter.report_progress("📝 Generating Nginx configuration...")
        rendered = self.generator.render(request)
        config_path = self.paths.available(request.domain)
        enabled_path = self.paths.enabled(request.domain)

        result = ProvisionResult(
            status=ProvisionStatus.SUCCESS,
            domain=request.domain,
            template=request.template,
            upstream=request.upstream,
            config_path=config_path,
            enabled_path=enabled_path,
            tls=TLSOutcome.NOT_REQUESTED,
            rendered=rendered,
        )

        if request.dry_run:
            self.reporter.report_dry_run(request, rendered, config_path, enabled_path)
            result.status = ProvisionStatus.DRY_RUN
            return result

        snapshot = self._check_conflict(request, config_path, enabled_path)

        self.reporter.report_progress("📄 Writing configuration file...")
        self.fileops.write_protected(config_path, rendered)
        self.reporter.report_done(f"Configuration written to: {config_path}")

        self.reporter.report_progress("🔗 Creating symbolic link...")
        try:
            if self.fileops.exists(enabled_path):
                self.fileops.remove_protected(enabled_path)
            self.fileops.link_protected(config_path, enabled_path)
        except PersistenceError as e:
            self._rollback(request.domain, snapshot, e)
            raise
        self.reporter.report_done(f"Symbolic link created: {enabled_path}")

        self.reporter.report_progress("🧪 Testing Nginx configuration...")
        test = self.nginx.test()
        if not test.success:
            reason = "timed out" if test.timed_out else "failed"
            error = ConfigTestError(
                f"Nginx configuration test {reason} for {request.domain}; "
                f"rolled back {config_path} and {enabled_path}",
                output=test.output,
                hint="sudo nginx -t",
            )
            self._rollback(request.domain, snapshot, error)
            raise error
        self.reporter.report_done("Nginx configuration test passed")

        if request.reload:
            try:
                self._reload()
                result.reloaded = True
            except StepFailure as w:
                self._warn(result, w)

        if request.ssl:
            self.reporter.report_progress("🔒 Setting up SSL certificate with Let's Encrypt...")
            try:
                self.certbot.provision(request)
                result.tls = TLSOutcome.ISSUED
                self.reporter.report_done("SSL certificate installed successfully")
            except CertificateWarning as w:
                result.tls = TLSOutcome.FAILED
                self._warn(result, w)

        self.reporter.report_summary(result)
        return result

    def _check_conflict(
        self, request: ProvisionRequest, config_path: str, enabled_path: str
    ) -> SiteSnapshot:
        """Capture the pre-run state, asking before anything is overwritten."""
        available_exists = self.fileops.exists(config_path)
        enabled_exists = self.fileops.exists(enabled_path)

        if (available_exists or enabled_exists) and not request.force:
            existing = config_path if available_exists else enabled_path
            if not self._ask(
                f"Configuration for {request.domain} already exists at {existing}. Overwrite?"
            ):
                raise ConflictError(
                    f"Configuration for {request.domain} already exists at {existing}",
                    hint="Use --force to overwrite",
                )

        content = self.fileops.read(config_path) if available_exists else None
        link_target = self.fileops.read_link(enabled_path) if enabled_exists else None
        return SiteSnapshot(content=content, enabled=enabled_exists, link_target=link_target)

    def _ask(self, question: str) -> bool:
        if self.assume_yes:
            self.reporter.report_progress(f"{question} (auto-answered: yes)")
            return True
        return self.confirm(question)

    def _reload(self) -> None:
        self.reporter.report_progress("🔄 Reloading Nginx...")
        reload = self.nginx.reload()
        if not reload.success:
            raise ReloadWarning(
                f"Failed to reload Nginx: {reload.output}",
                hint="sudo systemctl reload nginx",
            )
        self.reporter.report_done("Nginx reloaded successfully")

    def _rollback(self, domain: str, snapshot: SiteSnapshot, cause: FastNginxError) -> None:
        """Return the domain's artifacts to their pre-run state.

        Without a previous version both artifacts are removed. With one, it is
        restored along with its link. Rollback failures are appended to the
        causing error so the operator knows manual cleanup is needed.
        """
        config_path = self.paths.available(domain)
        enabled_path = self.paths.enabled(domain)
        self.reporter.report_progress("🧹 Cleaning up...")
        logger.debug("rolling back %s (previous version: %s)", domain, snapshot.existed)

        try:
            if snapshot.existed:
                self.fileops.write_protected(config_path, snapshot.content or "")
                if snapshot.enabled:
                    self.fileops.link_protected(snapshot.link_target or config_path, enabled_path)
                else:
                    self.fileops.remove_protected(enabled_path)
            else:
                self.fileops.remove_protected(enabled_path)
                self.fileops.remove_protected(config_path)
        except PersistenceError as e:
            logger.error("rollback of %s failed: %s", domain, e.message)
            cause.message = f"{cause.message}. Rollback failed, manual cleanup required: {e.message}"
            cause.args = (cause.message,)
            return

        if snapshot.existed:
            self.reporter.report_done(f"Restored previous configuration for {domain}")
        else:
            self.reporter.report_done(f"Removed {config_path} and {enabled_path}")

    def _warn(self, result: ProvisionResult, failure: StepFailure) -> None:
        warning = StepWarning(step=failure.step, message=failure.message, hint=failure.hint)
        result.warnings.append(warning)
        self.reporter.report_warning(warning)
