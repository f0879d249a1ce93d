# api/contact.py
"""
Contact form submission endpoint
"""

import logging

from flask import Blueprint, jsonify

from api.responses import GENERIC_ERROR, error_response, request_data
from core.storage import StorageError, get_submission_store
from core.validation import ValidationError, validate_submission
from services.notifications import get_notifier

contact_bp = Blueprint('contact', __name__)
logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = ('Thank you! Your message has been sent successfully. '
                   'We will get back to you soon.')


@contact_bp.route('', methods=['POST'], strict_slashes=False)
def submit():
    """
    Validate and store a contact form submission, then notify by email

    Email delivery is best-effort and never changes the response.
    """
    try:
        fields = validate_submission(request_data())
    except ValidationError as e:
        return error_response(e.message, 400)

    try:
        submission = get_submission_store().create(fields)
    except StorageError as e:
        logger.error(f"Submission error: {e}", exc_info=True)
        return error_response(GENERIC_ERROR, 500)

    get_notifier().notify_submission(submission)

    return jsonify({
        'success': True,
        'message': SUCCESS_MESSAGE,
        'submissionId': submission['id'],
    }), 201
