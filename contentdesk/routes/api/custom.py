"""Custom post API, separate from the generated collection CRUD.

GET  /api/custom/posts  -> list posts
POST /api/custom/posts  -> create a post, filling in defaults
"""
from flask import current_app, jsonify, request

from contentdesk.services.post_service import get_post_service, parse_limit
from . import api_bp


@api_bp.route("/custom/posts", methods=["GET"])
def custom_list_posts():
    """List posts with one level of relationships expanded."""
    settings = current_app.extensions["content_settings"]
    limit = parse_limit(request.args.get("limit"), settings.custom_posts_default_limit)
    return jsonify(get_post_service().list_posts(limit))


@api_bp.route("/custom/posts", methods=["POST"])
def custom_create_post():
    """Create a post; a body that is not a JSON object is treated as empty."""
    body = request.get_json(force=True, silent=True)
    if not isinstance(body, dict):
        body = {}
    return jsonify(get_post_service().create_post(body))
