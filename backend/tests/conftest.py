"""
Fixtures partagées : settings explicites, faux mailer qui enregistre les envois,
et client de test FastAPI construit via create_app.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.core.ratelimit import limiter


class RecordingMailer:
    """Enregistre chaque tentative d'envoi ; peut échouer au n-ième appel."""

    def __init__(self, fail_on: int | None = None):
        self.sent = []
        self.fail_on = fail_on

    async def send(self, email):
        self.sent.append(email)
        if self.fail_on is not None and len(self.sent) == self.fail_on:
            raise RuntimeError("provider unavailable")
        return {"id": f"fake-{len(self.sent)}"}


def make_settings(**overrides) -> Settings:
    values = {
        "RESEND_API_KEY": "re_test_key",
        "MAIL_FROM": "noreply@example.com",
        "MAIL_TO": "owner@example.com",
        "CORS_ORIGIN": None,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def reset_rate_limits():
    limiter.reset()
    yield
    limiter.reset()


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def build_client():
    from main import create_app

    clients = []

    def _build(settings: Settings | None = None, mailer=None) -> TestClient:
        app = create_app(settings or make_settings(), mailer or RecordingMailer())
        client = TestClient(app)
        clients.append(client)
        return client

    yield _build
    for client in clients:
        client.close()


@pytest.fixture
def client(build_client, settings, mailer):
    return build_client(settings, mailer)


@pytest.fixture
def settings_factory():
    return make_settings


@pytest.fixture
def mailer_factory():
    return RecordingMailer
