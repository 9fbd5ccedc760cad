"""Dashboard data access through the local store, the REST API and custom routes."""
import logging
from typing import Any, Dict, Mapping, Optional

import requests
from flask import current_app

from contentdesk.config import ContentSettings
from contentdesk.store import ContentRepository, get_content_store

logger = logging.getLogger(__name__)

DASHBOARD_COLLECTIONS = ("authors", "posts", "categories")

LOCAL_UNAVAILABLE_MESSAGE = (
    "The content store is not ready, or the database is unavailable. "
    "Start the dev server and run `flask db_cli init` to create the tables."
)


def base_url_from_headers(headers: Mapping[str, str], fallback: str) -> str:
    """Rebuild the public base URL from proxy headers, else use ``fallback``."""
    proto = headers.get("X-Forwarded-Proto") or "http"
    host = headers.get("X-Forwarded-Host") or headers.get("Host")
    if host:
        return f"{proto}://{host}"
    return fallback


class DashboardService:
    """Collects the data the dashboard compares across access paths."""

    def __init__(self, store: ContentRepository, settings: ContentSettings,
                 base_url: str, session: Optional[requests.Session] = None):
        self.store = store
        self.settings = settings
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()

    def fetch_local(self) -> Dict[str, Any]:
        """
        Read authors, posts and categories directly from the store.

        Raises:
            StoreError: If the store cannot be read; callers show an advisory.
        """
        size = self.settings.dashboard_page_size
        authors = self.store.find("authors", limit=size)
        posts = self.store.find("posts", limit=size, depth=1)
        categories = self.store.find("categories", limit=size)

        return {
            "authors": authors.docs,
            "posts": posts.docs,
            "categories": categories.docs,
            "totalAuthors": authors.total_docs,
            "totalPosts": posts.total_docs,
            "totalCategories": categories.total_docs,
        }

    def fetch_rest(self) -> Dict[str, Any]:
        """
        Read the same collections over the generated REST API.

        Returns:
            ``{"data": {collection: page}}`` on success, otherwise
            ``{"errors": [{"message": ...}]}``
        """
        data = {}
        for collection in DASHBOARD_COLLECTIONS:
            try:
                response = self.session.get(
                    f"{self.base_url}/api/{collection}",
                    params={"limit": self.settings.dashboard_page_size, "depth": 0},
                    timeout=self.settings.dashboard_http_timeout,
                )
                response.raise_for_status()
                data[collection] = response.json()
            except (requests.RequestException, ValueError) as e:
                logger.error(f"REST fetch error for {collection}: {str(e)}")
                return {"errors": [{"message": "Failed to fetch REST API data"}]}
        return {"data": data}

    def fetch_post_stats(self) -> Optional[Dict[str, Any]]:
        """Read ``/api/posts/stats``; ``None`` on any failure."""
        try:
            response = self.session.get(
                f"{self.base_url}/api/posts/stats",
                timeout=self.settings.dashboard_http_timeout,
            )
        except requests.RequestException as e:
            logger.warning(f"Post stats fetch failed: {str(e)}")
            return None

        if not response.ok:
            return None
        try:
            return response.json()
        except ValueError:
            return None


def get_dashboard_service(base_url: str) -> DashboardService:
    """Get a dashboard service for the current application."""
    return DashboardService(get_content_store(), current_app.extensions["content_settings"], base_url)
