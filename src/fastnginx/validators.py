"""Input validation for provisioning requests.

Validation is pure: nothing here touches the filesystem or runs commands.
"""

import re

from fastnginx.errors import ValidationError
from fastnginx.model.request import ProvisionRequest

DOMAIN_RE = re.compile(
    r"^[a-zA-Z0-9][a-zA-Z0-9-]{0,61}[a-zA-Z0-9]"
    r"(?:\.[a-zA-Z0-9][a-zA-Z0-9-]{0,61}[a-zA-Z0-9])*$"
)
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_valid_domain(domain: str) -> bool:
    return bool(domain) and DOMAIN_RE.match(domain) is not None


def is_valid_email(email: str) -> bool:
    return bool(email) and EMAIL_RE.match(email) is not None


def parse_port(value: int | str) -> int:
    """Parse and range-check an upstream port.

    Raises:
        ValidationError: Non-numeric input or outside 1-65535.
    """
    if isinstance(value, bool):
        raise ValidationError("port", f"Invalid port number: {value}")
    if isinstance(value, int):
        port = value
    else:
        text = str(value).strip()
        if not text.isdigit():
            raise ValidationError(
                "port", f"Invalid port number: {value!r}", hint="Port must be between 1 and 65535"
            )
        port = int(text)
    if not 1 <= port <= 65535:
        raise ValidationError(
            "port", f"Invalid port number: {value}", hint="Port must be between 1 and 65535"
        )
    return port


def validate_request(request: ProvisionRequest) -> None:
    """Check every field of a request, failing on the first bad one.

    Raises:
        ValidationError: `field` names the offending request field.
    """
    if not is_valid_domain(request.domain):
        raise ValidationError(
            "domain",
            f"Invalid domain format: {request.domain!r}",
            hint="Example: myapp.com or api.myapp.com",
        )

    parse_port(request.port)

    if request.ssl and not request.email:
        raise ValidationError(
            "email",
            "Email is required when using --ssl",
            hint=f"fastnginx setup -d {request.domain} --ssl --email you@{request.domain}",
        )

    if request.ssl and not is_valid_email(request.email or ""):
        raise ValidationError("email", f"Invalid email format: {request.email!r}")
