"""Tests for server block rendering."""

from datetime import datetime, timezone

import pytest

from fastnginx.actions.generate import GenerateAction, strip_timestamp
from fastnginx.model.request import ProvisionRequest, TemplateKind

FIXED = datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


@pytest.fixture(scope="module")
def generator():
    return GenerateAction()


@pytest.mark.parametrize("domain,port", [("example.com", 1), ("api.example.co.uk", 65535), ("myapp.com", 3000)])
@pytest.mark.parametrize("www", [False, True])
def test_render_is_pure_apart_from_timestamp(generator, domain, port, www):
    request = ProvisionRequest(domain=domain, port=port, template=TemplateKind.BASIC, www=www)

    first = generator.render(request, generated_at=FIXED)
    second = generator.render(request, generated_at=FIXED)
    later = generator.render(request)

    assert first == second
    assert strip_timestamp(first) == strip_timestamp(later)
    assert "# Generated on: 2025-01-02T03:04:05+00:00" in first


def test_basic_template(generator):
    text = generator.render(ProvisionRequest(domain="myapp.com", port=3000), generated_at=FIXED)

    assert text.startswith("# fastnginx basic configuration for myapp.com\n")
    assert "    server_name myapp.com;\n" in text
    assert "        proxy_pass http://127.0.0.1:3000;\n" in text
    assert "proxy_set_header X-Forwarded-For $proxy_add_x_forwarded_for;" in text
    assert "proxy_set_header X-Forwarded-Proto $scheme;" in text
    assert 'add_header X-Frame-Options "SAMEORIGIN" always;' in text
    assert "gzip on;" in text
    assert "proxy_read_timeout 60s;" in text
    assert "Access-Control-Allow-Origin" not in text
    assert text.count("{") == text.count("}")


def test_www_adds_server_name(generator):
    text = generator.render(ProvisionRequest(domain="myapp.com", www=True), generated_at=FIXED)

    assert "server_name myapp.com www.myapp.com;" in text


def test_api_template_has_cors_and_preflight(generator):
    text = generator.render(
        ProvisionRequest(domain="api.myapp.com", port=8000, template=TemplateKind.API),
        generated_at=FIXED,
    )

    assert 'add_header Access-Control-Allow-Origin "*" always;' in text
    assert "if ($request_method = 'OPTIONS')" in text
    assert "return 204;" in text
    assert 'add_header X-Frame-Options "DENY" always;' in text
    assert "proxy_read_timeout 30s;" in text
    assert "access_log /var/log/nginx/api.myapp.com_access.log;" in text
    assert "proxy_pass http://127.0.0.1:8000;" in text
    # limit_req_zone belongs to the http block, so it is only suggested
    assert "\n    limit_req_zone" not in text
    assert text.count("{") == text.count("}")


def test_spa_template_falls_back_to_proxy(generator):
    text = generator.render(
        ProvisionRequest(domain="myapp.com", port=5173, template=TemplateKind.SPA),
        generated_at=FIXED,
    )

    assert "try_files $uri $uri/ @proxy;" in text
    assert "location @proxy {" in text
    assert "        proxy_pass http://127.0.0.1:5173;\n" in text
    assert "        proxy_redirect off;\n    }" in text
    assert 'add_header Cache-Control "public, immutable";' in text
    assert "gzip on;" in text
    assert text.count("{") == text.count("}")


@pytest.mark.parametrize("kind", list(TemplateKind))
def test_every_template_names_domain_and_upstream(generator, kind):
    text = generator.render(ProvisionRequest(domain="myapp.com", port=3000, template=kind), generated_at=FIXED)

    assert "server_name myapp.com;" in text
    assert "proxy_pass http://127.0.0.1:3000;" in text
    assert "server_tokens off;" in text
