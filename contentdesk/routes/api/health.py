"""API health check."""
from flask import jsonify

from contentdesk.services.post_service import current_timestamp
from . import api_bp


@api_bp.route("/health")
def api_health():
    """Liveness probe; does not check that the content store is reachable."""
    return jsonify({
        "status": "ok",
        "timestamp": current_timestamp(),
        "payload": "running",
    })
