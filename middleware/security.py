# middleware/security.py
"""
Response middleware: baseline security headers and slow request logging
"""

import logging
import time

from flask import Flask, current_app, g, request

logger = logging.getLogger(__name__)


def security_headers(response):
    """Add the configured security headers to a response"""
    for header, value in current_app.config.get('SECURITY_HEADERS', {}).items():
        response.headers.setdefault(header, value)
    return response


def init_request_middleware(app: Flask) -> None:
    @app.before_request
    def start_timer():
        g.start_time = time.perf_counter()

    @app.after_request
    def finish_request(response):
        response = security_headers(response)

        if hasattr(g, 'start_time'):
            duration = (time.perf_counter() - g.start_time) * 1000
            if duration > app.config.get('SLOW_REQUEST_THRESHOLD', 1000):
                logger.warning(f"Slow request ({duration:.0f}ms): {request.method} {request.path}")

        return response
