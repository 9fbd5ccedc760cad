"""API routes package."""
from flask import Blueprint

api_bp = Blueprint("api", __name__)

# Import API route modules so they register on the blueprint
from . import health, posts, custom, collections  # noqa: E402,F401
