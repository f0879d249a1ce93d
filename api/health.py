# api/health.py
from datetime import datetime, timezone

from flask import Blueprint, current_app, jsonify

from core.storage import database_connected

health_bp = Blueprint('health', __name__)


@health_bp.route('/health', methods=['GET'])
def health_check():
    """Report server, database and email notification state"""
    return jsonify({
        'status': 'Server is running',
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'database': 'Connected' if database_connected() else 'Disconnected',
        'emailNotifications': 'Enabled' if current_app.config.get('SEND_EMAIL_NOTIFICATIONS') else 'Disabled',
    })
