# api/submissions.py
"""
Submission management API: list, fetch, update status, delete
"""

import logging

from flask import Blueprint, jsonify

from api.responses import error_response, request_data
from core.storage import StorageError, get_submission_store
from core.validation import ValidationError, validate_status

submissions_bp = Blueprint('submissions', __name__)
logger = logging.getLogger(__name__)

NOT_FOUND = 'Submission not found'


@submissions_bp.route('', methods=['GET'], strict_slashes=False)
def list_submissions():
    """All submissions, newest first, with the backend they came from"""
    store = get_submission_store()
    try:
        submissions = store.list_all()
    except StorageError as e:
        logger.error(f"Listing submissions failed: {e}")
        return error_response('Failed to retrieve submissions', 500)

    return jsonify({
        'success': True,
        'count': len(submissions),
        'source': store.source,
        'submissions': submissions,
    })


@submissions_bp.route('/<submission_id>', methods=['GET'])
def get_submission(submission_id):
    try:
        submission = get_submission_store().get_by_id(submission_id)
    except StorageError as e:
        logger.error(f"Fetching submission {submission_id} failed: {e}")
        return error_response('Failed to retrieve submission', 500)

    if submission is None:
        return error_response(NOT_FOUND, 404)

    return jsonify({'success': True, 'submission': submission})


@submissions_bp.route('/<submission_id>', methods=['PATCH'])
def update_submission(submission_id):
    """Set the workflow status (new, read, replied, archived)"""
    try:
        status = validate_status(request_data().get('status'))
    except ValidationError as e:
        return error_response(e.message, 400)

    try:
        submission = get_submission_store().update_status(submission_id, status)
    except StorageError as e:
        logger.error(f"Updating submission {submission_id} failed: {e}")
        return error_response('Failed to update submission', 500)

    if submission is None:
        return error_response(NOT_FOUND, 404)

    logger.info(f"Submission {submission_id} marked as {status}")
    return jsonify({'success': True, 'submission': submission})


@submissions_bp.route('/<submission_id>', methods=['DELETE'])
def delete_submission(submission_id):
    try:
        submission = get_submission_store().delete_by_id(submission_id)
    except StorageError as e:
        logger.error(f"Deleting submission {submission_id} failed: {e}")
        return error_response('Failed to delete submission', 500)

    if submission is None:
        return error_response(NOT_FOUND, 404)

    logger.info(f"Submission {submission_id} deleted")
    return jsonify({
        'success': True,
        'message': 'Submission deleted',
        'submission': submission,
    })
