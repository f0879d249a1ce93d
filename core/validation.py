# core/validation.py
"""
Input validation for contact form submissions and status updates
"""

import re
from typing import Any, Dict, Mapping

from core.database_models import SUBMISSION_STATUSES

REQUIRED_FIELDS = ('name', 'email', 'subject', 'message')

EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')

# (field, minimum trimmed length, error message)
MINIMUM_LENGTHS = (
    ('name', 2, 'Name must be at least 2 characters'),
    ('subject', 3, 'Subject must be at least 3 characters'),
    ('message', 10, 'Message must be at least 10 characters'),
)


class ValidationError(ValueError):
    """Raised when request data fails validation; the message is user-facing"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


def validate_email(email: str) -> bool:
    return EMAIL_PATTERN.fullmatch(email) is not None


def validate_submission(data: Mapping[str, Any]) -> Dict[str, str]:
    """
    Check a contact form payload and return the trimmed fields.

    Checks run in a fixed order so the first failing rule decides the message:
    presence, name length, email shape, subject length, message length.
    """
    values = {field: data.get(field) for field in REQUIRED_FIELDS}

    if any(not value or not isinstance(value, str) for value in values.values()):
        raise ValidationError('All fields are required')

    name_rule, *other_rules = MINIMUM_LENGTHS
    _check_length(values, *name_rule)

    # Email is matched as received, before trimming
    if not validate_email(values['email']):
        raise ValidationError('Please provide a valid email address')

    for rule in other_rules:
        _check_length(values, *rule)

    return {field: value.strip() for field, value in values.items()}


def _check_length(values: Mapping[str, str], field: str, minimum: int, message: str) -> None:
    if len(values[field].strip()) < minimum:
        raise ValidationError(message)


def validate_status(status: Any) -> str:
    if not isinstance(status, str) or status not in SUBMISSION_STATUSES:
        raise ValidationError(
            f"Invalid status. Must be one of: {', '.join(SUBMISSION_STATUSES)}"
        )
    return status
