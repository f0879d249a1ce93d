"""Environment overrides applied by the application factory."""

from app import create_app
from config.settings import BaseConfig, environment_overrides


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite:///contact.db")
    monkeypatch.setenv("EMAIL_PORT", "2525")
    monkeypatch.setenv("SEND_EMAIL_NOTIFICATIONS", "TRUE")
    monkeypatch.delenv("SITE_NAME", raising=False)

    overrides = environment_overrides()
    assert overrides["DATABASE_URL"] == "sqlite:///contact.db"
    assert overrides["EMAIL_PORT"] == 2525
    assert overrides["SEND_EMAIL_NOTIFICATIONS"] is True
    assert "SITE_NAME" not in overrides


def test_no_session_secret_configured(monkeypatch):
    # Nothing signs sessions or cookies, so no secret is read or generated
    monkeypatch.setenv("SECRET_KEY", "from-env")
    assert "SECRET_KEY" not in environment_overrides()
    assert not hasattr(BaseConfig, "SECRET_KEY")
    assert create_app("testing").config["SECRET_KEY"] is None
