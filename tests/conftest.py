import pytest
from fastapi.testclient import TestClient

from docucloud_site.config import Settings
from docucloud_site.database import create_db_engine, create_session_factory, init_db
from docucloud_site.main import create_app
from docucloud_site.services.notifications import Notifier


class RecordingNotifier(Notifier):
    """Keeps sent emails in memory; ``fail_for`` makes sends to that address raise."""

    def __init__(self, fail_for=None):
        super().__init__("noreply@example.com", "admin@example.com")
        self.sent = []
        self.fail_for = fail_for

    def send_email(self, to, subject, html):
        if self.fail_for and to == self.fail_for:
            raise RuntimeError("mail provider unavailable")
        self.sent.append({"to": to, "subject": subject, "html": html})


def make_settings(tmp_path, **overrides):
    values = {
        "database_url": f"sqlite:///{tmp_path}/test.db",
        "app_env": "development",
        "sendgrid_api_key": None,
        "static_dir": None,
        "rate_limit_max": 1000,
        "rate_limit_window_seconds": 900,
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def app(tmp_path, notifier):
    return create_app(make_settings(tmp_path), notifier=notifier)


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def app_db(app):
    db = app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def db(tmp_path):
    engine = create_db_engine(f"sqlite:///{tmp_path}/service.db")
    init_db(engine)
    session = create_session_factory(engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()
