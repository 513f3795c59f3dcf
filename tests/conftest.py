from datetime import datetime, timedelta

import pytest

from resume_gate import create_app, db
from resume_gate.errors import NotificationError


class FakeMailer:
    """Records notifications instead of talking to SMTP."""

    def __init__(self):
        self.admin = []
        self.requester = []
        self.fail = False

    def notify_admin(self, req, approve_link):
        if self.fail:
            raise NotificationError("smtp down")
        self.admin.append((req.id, req.email, approve_link))
        return True

    def notify_requester(self, req, download_link, validity_minutes):
        if self.fail:
            raise NotificationError("smtp down")
        self.requester.append((req.id, req.email, download_link, validity_minutes))
        return True

    def send_test(self, to_email=None):
        if self.fail:
            raise NotificationError("smtp down")
        return to_email or "me@example.com"


class Clock:
    def __init__(self, now=None):
        self.now = now or datetime(2024, 1, 1, 12, 0, 0)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def resume_dir(tmp_path):
    (tmp_path / "resume.pdf").write_bytes(b"%PDF-1.4 resume")
    return tmp_path


@pytest.fixture
def app(mailer, clock, resume_dir):
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
        "RATELIMIT_ENABLED": False,
        "EXPIRY_TIMER_ENABLED": False,
        "LINK_EXPIRY_MS": 3 * 60 * 1000,
        "BACKEND_URL": "http://api.test",
        "RESUME_DIR": str(resume_dir),
        "RESUME_FILENAME": "resume.pdf",
        "MAILER": mailer,
        "CLOCK": clock,
    })
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def lifecycle(app):
    return app.extensions["resume_gate"]
