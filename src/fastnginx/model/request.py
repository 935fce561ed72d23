"""Provisioning request and the fixed nginx filesystem layout."""

from dataclasses import dataclass
from enum import Enum


class TemplateKind(Enum):
    """Server block flavours that can be rendered."""

    BASIC = "basic"
    API = "api"
    SPA = "spa"


@dataclass(frozen=True)
class ProvisionRequest:
    """Immutable input bundle for one provisioning run.

    Built once from CLI options and passed explicitly through every step.
    Nothing reads options from global state.

    Attributes:
        domain: Domain name the server block answers for.
        port: Upstream application port on 127.0.0.1.
        template: Which server block flavour to render.
        ssl: Request a Let's Encrypt certificate after the HTTP site is live.
        email: Contact email for certbot. Required iff ssl is set.
        www: Also answer for (and certify) www.<domain>.
        force: Overwrite existing configuration without asking.
        dry_run: Report what would happen without touching anything.
        reload: Reload nginx after a successful config test.
        assume_yes: Answer yes to every confirmation prompt.
    """

    domain: str
    port: int = 3000
    template: TemplateKind = TemplateKind.BASIC
    ssl: bool = False
    email: str | None = None
    www: bool = False
    force: bool = False
    dry_run: bool = False
    reload: bool = True
    assume_yes: bool = False

    @property
    def server_names(self) -> list[str]:
        names = [self.domain]
        if self.www:
            names.append(f"www.{self.domain}")
        return names

    @property
    def upstream(self) -> str:
        return f"http://127.0.0.1:{self.port}"


@dataclass(frozen=True)
class NginxPaths:
    """Locations of the nginx configuration tree.

    The CLI always uses the defaults; tests point `root` at a temporary
    directory.
    """

    root: str = "/etc/nginx"

    @property
    def sites_available(self) -> str:
        return f"{self.root}/sites-available"

    @property
    def sites_enabled(self) -> str:
        return f"{self.root}/sites-enabled"

    @property
    def nginx_conf(self) -> str:
        return f"{self.root}/nginx.conf"

    @property
    def include_directive(self) -> str:
        return f"include {self.sites_enabled}/*"

    def available(self, domain: str) -> str:
        return f"{self.sites_available}/{domain}"

    def enabled(self, domain: str) -> str:
        return f"{self.sites_enabled}/{domain}"
