# Contact form REST API blueprints.

from api.health import health_bp
from api.contact import contact_bp
from api.submissions import submissions_bp

__all__ = [
    "health_bp",
    "contact_bp",
    "submissions_bp",
]
