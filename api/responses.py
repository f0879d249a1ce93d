# api/responses.py
"""
Shared request parsing and the JSON error envelope
"""

from typing import Any, Dict

from flask import jsonify, request

GENERIC_ERROR = 'An error occurred. Please try again later.'


def error_response(message: str, status_code: int):
    return jsonify({'success': False, 'error': message}), status_code


def request_data() -> Dict[str, Any]:
    """Return the request body as a dict from JSON or form fields"""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    if request.form:
        return request.form.to_dict()
    return {}
