"""
Best-effort notification behaviour: what gets sent, and that failures never
reach the HTTP response.
"""

import logging
from concurrent.futures import ThreadPoolExecutor

import pytest

from services.notifications import Notifier
from tasks.email_sender import EmailSenderError, SMTPConfigurationError, SMTPSettings, build_message
from tests.conftest import EMAIL_CONFIG


def _html_part(msg):
    return msg.get_payload()[1].get_payload(decode=True).decode("utf-8")


def _text_part(msg):
    return msg.get_payload()[0].get_payload(decode=True).decode("utf-8")


def test_submission_sends_admin_and_user_emails(email_client, transport, valid_submission):
    r = email_client.post("/api/contact", json=valid_submission)
    assert r.status_code == 201

    assert transport.recipients == ["admin@gracebites.test", "a@b.co"]
    (_, admin), (_, user) = transport.sent

    assert admin["Subject"] == "New Contact Form Submission: Hi there"
    assert admin["Reply-To"] == "a@b.co"
    assert "Jo" in _html_part(admin)
    assert f"Submission ID: {r.get_json()['submissionId']}" in _text_part(admin)

    assert user["Subject"] == "We received your message - Grace Bites"
    assert "Hi Jo," in _text_part(user)


def test_health_reports_email_enabled(email_client):
    assert email_client.get("/api/health").get_json()["emailNotifications"] == "Enabled"


def test_validation_failure_sends_nothing(email_client, transport, valid_submission):
    valid_submission["name"] = "J"
    assert email_client.post("/api/contact", json=valid_submission).status_code == 400
    assert transport.sent == []


def test_transport_failure_is_swallowed(email_client, transport, valid_submission, caplog):
    transport.error = EmailSenderError("SMTP delivery to a@b.co failed: 535")

    with caplog.at_level(logging.ERROR, logger="services.notifications"):
        r = email_client.post("/api/contact", json=valid_submission)

    assert r.status_code == 201
    assert "Error sending admin notification" in caplog.text
    assert "Error sending user confirmation" in caplog.text


def test_disabled_notifications_send_nothing(client, transport, valid_submission):
    assert client.post("/api/contact", json=valid_submission).status_code == 201
    assert transport.sent == []


def test_missing_credentials_send_nothing(transport):
    notifier = Notifier({**EMAIL_CONFIG, "EMAIL_PASSWORD": None})
    assert notifier.notify_submission({"id": 1, "email": "a@b.co"}) is None
    assert transport.sent == []


def test_admin_email_defaults_to_sender():
    notifier = Notifier({**EMAIL_CONFIG, "ADMIN_EMAIL": None})
    assert notifier.admin_email == "owner@gracebites.test"


def test_user_content_is_escaped(email_client, transport, valid_submission):
    valid_submission["name"] = "<b>Mallory</b>"
    valid_submission["message"] = "<script>alert('x')</script>\nsecond line"
    assert email_client.post("/api/contact", json=valid_submission).status_code == 201

    admin_html = _html_part(transport.sent[0][1])
    assert "<script>" not in admin_html
    assert "<b>Mallory</b>" not in admin_html
    assert "&lt;b&gt;Mallory&lt;/b&gt;" in admin_html


def test_background_delivery(transport):
    executor = ThreadPoolExecutor(max_workers=1)
    notifier = Notifier(EMAIL_CONFIG, executor=executor)
    submission = {
        "id": 7, "name": "Jo", "email": "a@b.co", "subject": "Hi there",
        "message": "1234567890", "status": "new", "createdAt": "2026-01-01T10:00:00+00:00",
    }
    try:
        future = notifier.notify_submission(submission)
        assert future is not None
        future.result(timeout=10)
    finally:
        executor.shutdown(wait=True)

    assert transport.recipients == ["admin@gracebites.test", "a@b.co"]


# ---- SMTP settings and messages ----
def test_smtp_settings_from_service_preset():
    settings = SMTPSettings.from_config(EMAIL_CONFIG)
    assert (settings.host, settings.port) == ("smtp.gmail.com", 587)
    assert settings.from_address == "owner@gracebites.test"


def test_smtp_settings_explicit_host_wins():
    settings = SMTPSettings.from_config({**EMAIL_CONFIG, "EMAIL_HOST": "mail.local", "EMAIL_PORT": "2525"})
    assert (settings.host, settings.port) == ("mail.local", 2525)


def test_smtp_settings_unknown_service():
    with pytest.raises(SMTPConfigurationError):
        SMTPSettings.from_config({**EMAIL_CONFIG, "EMAIL_SERVICE": "carrier-pigeon"})


def test_build_message_headers():
    settings = SMTPSettings.from_config({**EMAIL_CONFIG, "SITE_NAME": "Grace Bites"})
    msg = build_message(settings, "a@b.co", "Subject line", "<p>Hi</p>", "Hi")
    assert msg["To"] == "a@b.co"
    assert msg["From"] == "Grace Bites <owner@gracebites.test>"
    assert msg["Message-ID"].endswith("@gracebites.test>")
    assert [part.get_content_type() for part in msg.get_payload()] == ["text/plain", "text/html"]
