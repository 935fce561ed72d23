"""Generate Action - Render nginx server blocks.

CONTRACT:
- read_only: True
- requires_backup: False
- rollback_support: N/A
- prerequisites: None

Rendering is a pure function of the request plus a generation timestamp.
Template kinds share one Jinja2 template; what differs between them lives
in the TEMPLATE_PROFILES table.
"""

import os
from dataclasses import dataclass
from datetime import datetime, timezone

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from fastnginx.actions.report import ActionContract
from fastnginx.model.request import ProvisionRequest, TemplateKind

GENERATED_ON_PREFIX = "# Generated on:"

CORS_HEADERS = [
    ("Access-Control-Allow-Origin", "*"),
    ("Access-Control-Allow-Methods", "GET, POST, PUT, DELETE, OPTIONS"),
    (
        "Access-Control-Allow-Headers",
        "DNT,User-Agent,X-Requested-With,If-Modified-Since,Cache-Control,Content-Type,Range,Authorization",
    ),
]


@dataclass(frozen=True)
class TemplateProfile:
    """Kind-specific fragments composed into the shared server block."""

    title: str
    headers_comment: str
    security_headers: tuple[tuple[str, str], ...]
    timeout: str = "60s"
    gzip: bool = True
    cors: bool = False
    spa: bool = False
    rate_limit: bool = False
    access_logs: bool = False


_SAMEORIGIN_HEADERS = (
    ("X-Frame-Options", "SAMEORIGIN"),
    ("X-XSS-Protection", "1; mode=block"),
    ("X-Content-Type-Options", "nosniff"),
    ("Referrer-Policy", "no-referrer-when-downgrade"),
)

TEMPLATE_PROFILES: dict[TemplateKind, TemplateProfile] = {
    TemplateKind.BASIC: TemplateProfile(
        title="basic",
        headers_comment="Security headers",
        security_headers=_SAMEORIGIN_HEADERS,
    ),
    TemplateKind.API: TemplateProfile(
        title="API",
        headers_comment="API-specific headers",
        security_headers=(
            ("X-Frame-Options", "DENY"),
            ("X-Content-Type-Options", "nosniff"),
            ("X-XSS-Protection", "1; mode=block"),
            ("Referrer-Policy", "strict-origin-when-cross-origin"),
        ),
        timeout="30s",
        gzip=False,
        cors=True,
        rate_limit=True,
        access_logs=True,
    ),
    TemplateKind.SPA: TemplateProfile(
        title="SPA",
        headers_comment="Security headers for SPA",
        security_headers=_SAMEORIGIN_HEADERS,
        spa=True,
    ),
}


class GenerateAction:
    """Render server block text for a provisioning request."""

    CONTRACT = ActionContract(
        read_only=True,
        requires_backup=False,
        rollback_support=False,
        prerequisites=[],
    )

    def __init__(self, template_dir: str | None = None) -> None:
        if template_dir is None:
            template_dir = os.path.join(os.path.dirname(__file__), "..", "templates")

        self.env = Environment(
            loader=FileSystemLoader(template_dir),
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        self.template = self.env.get_template("server_block.conf.j2")

    def render(self, request: ProvisionRequest, generated_at: datetime | None = None) -> str:
        """Render the server block.

        Args:
            request: Only domain, port, template and www are used.
            generated_at: Timestamp for the header line. Defaults to now (UTC).

        Returns:
            The configuration text, written verbatim to sites-available.
        """
        if generated_at is None:
            generated_at = datetime.now(timezone.utc)

        return self.template.render(
            domain=request.domain,
            server_names=request.server_names,
            upstream=request.upstream,
            profile=TEMPLATE_PROFILES[request.template],
            cors_headers=CORS_HEADERS,
            generated_at=generated_at.isoformat(),
        )


def strip_timestamp(config_text: str) -> str:
    """Drop the generation timestamp line, for content comparisons."""
    return "\n".join(
        line for line in config_text.splitlines() if not line.startswith(GENERATED_ON_PREFIX)
    )
