"""Generated REST CRUD routes for every registered collection."""
import logging
import re
from flask import current_app, jsonify, request

from contentdesk.store import get_content_store
from contentdesk.store.filters import parse_where_args
from . import api_bp
from .intercept import observe_post_creates

logger = logging.getLogger(__name__)


def _label(collection: str) -> str:
    """Singular display label for messages, e.g. ``Field Showcase``."""
    model = get_content_store().model_for(collection)
    return re.sub(r"(?<!^)(?=[A-Z])", " ", model.__name__)


def _depth() -> int:
    settings = current_app.extensions["content_settings"]
    return request.args.get("depth", settings.rest_default_depth, type=int)


def _json_body() -> dict:
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else {}


@api_bp.route("/<collection>", methods=["GET", "POST"])
@observe_post_creates
def collection_root(collection):
    """List (GET) or create (POST) documents in a collection."""
    store = get_content_store()

    if request.method == "POST":
        doc = store.create(collection, _json_body(), depth=_depth())
        return jsonify({
            "message": f"{_label(collection)} successfully created.",
            "doc": doc,
        }), 201

    result = store.find(
        collection,
        where=parse_where_args(request.args),
        limit=request.args.get("limit", 10, type=int),
        page=request.args.get("page", 1, type=int),
        depth=_depth(),
        sort=request.args.get("sort"),
    )
    return jsonify(result.to_dict())


@api_bp.route("/<collection>/<document_id>", methods=["GET"])
def collection_get(collection, document_id):
    """Fetch one document."""
    return jsonify(get_content_store().find_by_id(collection, document_id, depth=_depth()))


@api_bp.route("/<collection>/<document_id>", methods=["PATCH"])
def collection_update(collection, document_id):
    """Apply a partial update to one document."""
    doc = get_content_store().update(collection, document_id, _json_body(), depth=_depth())
    return jsonify({
        "message": "Updated successfully.",
        "doc": doc,
    })


@api_bp.route("/<collection>/<document_id>", methods=["DELETE"])
def collection_delete(collection, document_id):
    """Delete one document."""
    doc = get_content_store().delete(collection, document_id)
    logger.info(f"Deleted {collection} document {document_id}")
    return jsonify({
        "message": "Deleted successfully.",
        "doc": doc,
    })
