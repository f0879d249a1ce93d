# config/settings.py
"""
Configuration for the Contact Form Backend

Config classes hold defaults; environment variables (optionally loaded from a
.env file) override them when the application factory runs.
"""

import os
from typing import Any, Dict

from dotenv import load_dotenv

load_dotenv()


# Well-known SMTP providers, selected through EMAIL_SERVICE
SMTP_SERVICES = {
    'gmail': ('smtp.gmail.com', 587),
    'outlook': ('smtp-mail.outlook.com', 587),
    'hotmail': ('smtp-mail.outlook.com', 587),
    'yahoo': ('smtp.mail.yahoo.com', 465),
}


def _env_flag(name: str, default: str = 'false') -> bool:
    return os.environ.get(name, default).strip().lower() == 'true'


class BaseConfig:
    """Settings shared by every environment"""

    # Durable backend; unset means in-memory storage only
    DATABASE_URL = None
    DB_POOL_SIZE = 5
    DB_MAX_OVERFLOW = 10

    # Email notifications
    SEND_EMAIL_NOTIFICATIONS = False
    NOTIFY_ASYNC = True
    NOTIFY_WORKERS = 2
    EMAIL_SERVICE = 'gmail'
    EMAIL_HOST = None
    EMAIL_PORT = None
    EMAIL_USER = None
    EMAIL_PASSWORD = None
    EMAIL_TIMEOUT = 30
    ADMIN_EMAIL = None
    SITE_NAME = 'Grace Bites'

    # HTTP
    CORS_ORIGINS = '*'
    PORT = 3000
    SLOW_REQUEST_THRESHOLD = 1000  # ms

    # Logging
    LOG_LEVEL = 'INFO'
    LOG_FILE = None

    SECURITY_HEADERS = {
        'X-Content-Type-Options': 'nosniff',
        'X-Frame-Options': 'DENY',
        'Referrer-Policy': 'strict-origin-when-cross-origin',
    }


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    LOG_LEVEL = 'DEBUG'


class TestingConfig(BaseConfig):
    TESTING = True
    NOTIFY_ASYNC = False
    LOG_LEVEL = 'WARNING'


class ProductionConfig(BaseConfig):
    DEBUG = False


CONFIGS = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
}


def environment_overrides() -> Dict[str, Any]:
    """Read configuration from the process environment at call time"""
    overrides: Dict[str, Any] = {
        'SEND_EMAIL_NOTIFICATIONS': _env_flag('SEND_EMAIL_NOTIFICATIONS'),
        'NOTIFY_ASYNC': _env_flag('NOTIFY_ASYNC', 'true'),
    }

    for key in ('DATABASE_URL', 'EMAIL_SERVICE', 'EMAIL_HOST',
                'EMAIL_USER', 'EMAIL_PASSWORD', 'ADMIN_EMAIL', 'SITE_NAME',
                'CORS_ORIGINS', 'LOG_LEVEL', 'LOG_FILE'):
        value = os.environ.get(key)
        if value:
            overrides[key] = value

    for key in ('EMAIL_PORT', 'PORT', 'SLOW_REQUEST_THRESHOLD'):
        value = os.environ.get(key)
        if value:
            overrides[key] = int(value)

    return overrides
