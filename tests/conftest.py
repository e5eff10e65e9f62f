import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.core.rate_limit import limiter
from app.main import create_app
from tests.helpers import RecordingMailer


def make_settings(**overrides) -> Settings:
    values = {
        "DATABASE_URL": "sqlite://",
        "SECRET_KEY": "test-secret-key",
        "ENVIRONMENT": "test",
        "RATE_LIMIT_ENABLED": False,
        "FRONTEND_URL": "http://frontend.test",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def app(settings, mailer):
    limiter.reset()
    application = create_app(settings)
    application.state.mailer = mailer
    yield application
    limiter.reset()


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db(client, app):
    session = app.state.session_factory()
    yield session
    session.close()
