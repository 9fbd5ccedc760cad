"""Observation shim for the generated collection create route."""
import json
import logging
from functools import wraps
from typing import Optional

from flask import request

logger = logging.getLogger(__name__)

POSTS_CREATE_PATH = "/api/posts"


def _title_from_body() -> Optional[str]:
    """Read ``title`` from a private parse of the raw body; ``None`` if absent or unparseable."""
    try:
        body = json.loads(request.get_data(cache=True))
    except ValueError:
        return None
    title = body.get("title") if isinstance(body, dict) else None
    return title if isinstance(title, str) else None


def observe_post_creates(view):
    """
    Wrap the multi-verb collection view to log post creation requests.

    For ``POST`` requests whose path ends in ``/api/posts`` the raw body is
    parsed (best effort) and its ``title`` logged. The request's cached JSON
    is left untouched, so the wrapped view sees exactly what it would see
    unwrapped. The view always runs; other verbs pass straight through.
    """
    @wraps(view)
    def wrapper(*args, **kwargs):
        if request.method == "POST" and request.path.rstrip("/").endswith(POSTS_CREATE_PATH):
            try:
                logger.info(f"[REST OVERRIDE] POST {POSTS_CREATE_PATH} (create) title={_title_from_body()!r}")
            except Exception as e:
                # Logging must never get in the way of the create itself
                logger.debug(f"Could not inspect post create request: {str(e)}")

        return view(*args, **kwargs)

    return wrapper
