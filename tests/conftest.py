"""
Shared fixtures for the contact form backend tests.

Apps are built with the testing config, so the caller's environment (a real
DATABASE_URL or SMTP credentials) never leaks in. Memory-mode fixtures need no
services; database-mode fixtures use a throwaway SQLite file.
"""

from __future__ import annotations

import pytest

from app import create_app
from core.database_models import db
from tasks import email_sender

VALID_SUBMISSION = {
    "name": "Jo",
    "email": "a@b.co",
    "subject": "Hi there",
    "message": "1234567890",
}


@pytest.fixture
def valid_submission():
    return dict(VALID_SUBMISSION)


@pytest.fixture
def app():
    """Memory-backed app (no DATABASE_URL)."""
    return create_app("testing")


@pytest.fixture
def client(app):
    with app.test_client() as client:
        yield client


@pytest.fixture
def db_app(tmp_path):
    """App backed by a SQLite file in a temp dir."""
    app = create_app("testing", {"DATABASE_URL": f"sqlite:///{tmp_path / 'contact.db'}"})
    yield app
    with app.app_context():
        db.session.remove()
        db.engine.dispose()


@pytest.fixture
def db_client(db_app):
    with db_app.test_client() as client:
        yield client


class RecordingTransport:
    """Stands in for SMTP delivery and keeps every message it is given."""

    def __init__(self):
        self.sent = []
        self.error = None

    def __call__(self, settings, msg):
        if self.error is not None:
            raise self.error
        self.sent.append((settings, msg))

    @property
    def recipients(self):
        return [msg["To"] for _, msg in self.sent]


@pytest.fixture
def transport(monkeypatch):
    recorder = RecordingTransport()
    monkeypatch.setattr(email_sender, "send_email", recorder)
    return recorder


EMAIL_CONFIG = {
    "SEND_EMAIL_NOTIFICATIONS": True,
    "EMAIL_USER": "owner@gracebites.test",
    "EMAIL_PASSWORD": "app-password",
    "ADMIN_EMAIL": "admin@gracebites.test",
}


@pytest.fixture
def email_app():
    return create_app("testing", EMAIL_CONFIG)


@pytest.fixture
def email_client(email_app, transport):
    with email_app.test_client() as client:
        yield client
