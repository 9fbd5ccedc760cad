"""Main routes: the read-only content dashboard."""
import logging
from flask import Blueprint, current_app, render_template, request

from contentdesk.errors import StoreError
from contentdesk.services.dashboard import (
    LOCAL_UNAVAILABLE_MESSAGE,
    base_url_from_headers,
    get_dashboard_service,
)

logger = logging.getLogger(__name__)

main_bp = Blueprint("main", __name__)


@main_bp.route("/")
def dashboard():
    """Dashboard comparing local store reads, REST reads and the stats route."""
    settings = current_app.extensions["content_settings"]
    base_url = base_url_from_headers(request.headers, settings.server_url)
    service = get_dashboard_service(base_url)

    local_data = {
        "authors": [],
        "posts": [],
        "categories": [],
        "totalAuthors": 0,
        "totalPosts": 0,
        "totalCategories": 0,
    }
    local_error = None
    try:
        local_data = service.fetch_local()
    except StoreError as e:
        logger.error(f"Local store error: {str(e)}")
        local_error = LOCAL_UNAVAILABLE_MESSAGE

    rest_data = service.fetch_rest()
    post_stats = service.fetch_post_stats()

    return render_template(
        "dashboard.html",
        title="Dashboard",
        base_url=base_url,
        local_data=local_data,
        local_error=local_error,
        rest_data=rest_data,
        post_stats=post_stats,
    )
