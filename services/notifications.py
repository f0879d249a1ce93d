# services/notifications.py
"""
Best-effort email notifications for new contact submissions

Two messages go out per submission: an alert to the administrator and a
confirmation to the submitter. Failures are logged and dropped; nothing is
retried and nothing reaches the HTTP response.
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Dict, Mapping, Optional

from flask import Flask, current_app

from core.email_templates import (
    ADMIN_NOTIFICATION_HTML,
    ADMIN_NOTIFICATION_SUBJECT,
    USER_CONFIRMATION_HTML,
    USER_CONFIRMATION_SUBJECT,
)
from core.template_engine import EmailTemplateEngine
from tasks import email_sender
from tasks.email_sender import SMTPSettings

logger = logging.getLogger(__name__)

NOTIFIER_KEY = 'contact_notifier'


class Notifier:
    """Renders and delivers the two submission emails"""

    def __init__(self,
                 config: Mapping[str, Any],
                 template_engine: Optional[EmailTemplateEngine] = None,
                 executor: Optional[ThreadPoolExecutor] = None):
        self.enabled = bool(config.get('SEND_EMAIL_NOTIFICATIONS'))
        self.username = config.get('EMAIL_USER')
        self.password = config.get('EMAIL_PASSWORD')
        self.admin_email = config.get('ADMIN_EMAIL') or self.username
        self.site_name = config.get('SITE_NAME') or ''
        self.config = dict(config)
        self.template_engine = template_engine or EmailTemplateEngine()
        self.executor = executor

    @property
    def credentials_configured(self) -> bool:
        return bool(self.username and self.password)

    def notify_submission(self, submission: Dict[str, Any]) -> Optional[Future]:
        """
        Queue both emails for a newly created submission

        Returns the background future when delivery runs on the executor,
        otherwise None after sending inline.
        """
        if not self.enabled:
            logger.info("Email notifications disabled")
            return None

        if not self.credentials_configured:
            logger.error("Email credentials not configured (EMAIL_USER / EMAIL_PASSWORD)")
            return None

        submission = dict(submission)
        if self.executor is not None:
            try:
                return self.executor.submit(self._deliver_all, submission)
            except RuntimeError as e:
                # Executor already shut down (interpreter exiting)
                logger.error(f"Could not queue notifications for submission {submission.get('id')}: {e}")
                return None

        self._deliver_all(submission)
        return None

    def _deliver_all(self, submission: Dict[str, Any]) -> None:
        self._deliver('admin notification', self.send_admin_notification, submission)
        self._deliver('user confirmation', self.send_user_confirmation, submission)

    @staticmethod
    def _deliver(label: str, send: Callable[[Dict[str, Any]], None],
                 submission: Dict[str, Any]) -> None:
        try:
            send(submission)
        except Exception as e:
            logger.error(f"Error sending {label} for submission {submission.get('id')}: {e}",
                         exc_info=True)

    def send_admin_notification(self, submission: Dict[str, Any]) -> None:
        self._send(
            recipient=self.admin_email,
            subject_template=ADMIN_NOTIFICATION_SUBJECT,
            html_template=ADMIN_NOTIFICATION_HTML,
            submission=submission,
            reply_to=submission.get('email'),
        )
        logger.info(f"Admin notification sent to: {self.admin_email}")

    def send_user_confirmation(self, submission: Dict[str, Any]) -> None:
        self._send(
            recipient=submission['email'],
            subject_template=USER_CONFIRMATION_SUBJECT,
            html_template=USER_CONFIRMATION_HTML,
            submission=submission,
        )
        logger.info(f"User confirmation sent to: {submission['email']}")

    def _send(self, recipient: str, subject_template: str, html_template: str,
              submission: Dict[str, Any], reply_to: Optional[str] = None) -> None:
        rendered = self.template_engine.render(
            subject_template,
            html_template,
            {'submission': submission, 'site_name': self.site_name},
        )
        settings = SMTPSettings.from_config(self.config)
        msg = email_sender.build_message(
            settings,
            recipient=recipient,
            subject=rendered.subject,
            html_body=rendered.html,
            text_body=rendered.text,
            reply_to=reply_to,
        )
        email_sender.send_email(settings, msg)

    def shutdown(self) -> None:
        if self.executor is not None:
            self.executor.shutdown(wait=False)


def init_notifier(app: Flask) -> Notifier:
    executor = None
    if app.config.get('NOTIFY_ASYNC'):
        executor = ThreadPoolExecutor(
            max_workers=app.config.get('NOTIFY_WORKERS', 2),
            thread_name_prefix='contact-notify',
        )
    notifier = Notifier(app.config, executor=executor)
    app.extensions[NOTIFIER_KEY] = notifier
    return notifier


def get_notifier() -> Notifier:
    return current_app.extensions[NOTIFIER_KEY]
