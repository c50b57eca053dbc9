import time
from types import SimpleNamespace

import pytest
from starlette.requests import Request

from app.core.ratelimit import client_ip


def make_request(settings, forwarded=None, peer="10.0.0.1"):
    headers = [(b"x-forwarded-for", forwarded.encode())] if forwarded else []
    app = SimpleNamespace(state=SimpleNamespace(settings=settings))
    return Request({"type": "http", "headers": headers, "client": (peer, 4321), "app": app})


@pytest.mark.parametrize("hops,expected", [(0, "10.0.0.1"), (1, "2.2.2.2"), (2, "1.1.1.1"), (5, "1.1.1.1")])
def test_client_ip_trusts_configured_hops(settings_factory, hops, expected):
    request = make_request(settings_factory(TRUST_PROXY_HOPS=hops), forwarded="1.1.1.1, 2.2.2.2")
    assert client_ip(request) == expected


def test_client_ip_without_forwarded_header(settings):
    assert client_ip(make_request(settings)) == "10.0.0.1"


def _submit(client, ip):
    return client.post("/api/form/submit", json={"email": "a@b.com"}, headers={"X-Forwarded-For": ip})


def test_31st_request_is_throttled(client, mailer):
    for _ in range(30):
        assert _submit(client, "203.0.113.5").status_code == 200

    response = _submit(client, "203.0.113.5")
    assert response.status_code == 429
    assert response.json() == {"ok": False, "error": "RateLimitExceeded"}
    assert response.headers["RateLimit-Limit"] == "30"
    assert response.headers["RateLimit-Remaining"] == "0"
    assert 0 < int(response.headers["Retry-After"]) <= 60
    assert len(mailer.sent) == 60


def test_only_standard_headers_are_sent(client):
    response = _submit(client, "203.0.113.9")
    assert response.headers["RateLimit-Limit"] == "30"
    assert response.headers["RateLimit-Remaining"] == "29"
    assert response.headers["RateLimit-Policy"] == "30;w=60"
    # secondes restantes dans la fenêtre, pas un timestamp
    assert 0 < int(response.headers["RateLimit-Reset"]) <= 60
    assert not [name for name in response.headers if name.lower().startswith("x-ratelimit")]


def test_limit_is_per_client_ip(client):
    for _ in range(30):
        _submit(client, "203.0.113.5")
    assert _submit(client, "203.0.113.5").status_code == 429
    assert _submit(client, "198.51.100.7").status_code == 200


def test_limit_covers_every_api_path(client):
    for _ in range(30):
        _submit(client, "203.0.113.5")

    response = client.post("/api/other", headers={"X-Forwarded-For": "203.0.113.5"})
    assert response.status_code == 429
    response = client.get("/api/form/unknown", headers={"X-Forwarded-For": "203.0.113.5"})
    assert response.status_code == 429


def test_unknown_api_paths_are_counted(client):
    for _ in range(30):
        assert client.get("/api/nothing-here", headers={"X-Forwarded-For": "203.0.113.7"}).status_code == 404
    assert _submit(client, "203.0.113.7").status_code == 429


def test_window_resets(build_client, settings_factory, mailer):
    client = build_client(settings_factory(RATE_LIMIT="2/second"), mailer)
    assert _submit(client, "203.0.113.5").status_code == 200
    assert _submit(client, "203.0.113.5").status_code == 200
    assert _submit(client, "203.0.113.5").status_code == 429

    time.sleep(1.1)
    response = _submit(client, "203.0.113.5")
    assert response.status_code == 200
    assert response.headers["RateLimit-Remaining"] == "1"


def test_health_is_not_throttled(client):
    for _ in range(40):
        response = client.get("/health")
        assert response.status_code == 200
        assert "RateLimit-Limit" not in response.headers
