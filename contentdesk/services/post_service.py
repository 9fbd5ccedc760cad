"""Post service for statistics, bulk publishing and the custom post API."""
import logging
import math
import re
from typing import Any, Dict, Optional

from flask import current_app

from contentdesk.config import ContentSettings
from contentdesk.errors import StoreError
from contentdesk.models.base import format_timestamp, utcnow
from contentdesk.models.post import PostStatus
from contentdesk.services.batch import BatchResult
from contentdesk.store import ContentRepository, get_content_store

logger = logging.getLogger(__name__)

CUSTOM_API_SOURCE = "custom-api"
CUSTOM_API_NOTE = (
    "This response is from /api/custom/posts (custom route), "
    "not the built-in collection CRUD."
)
DEFAULT_POST_TITLE = "Custom API Post"
DEFAULT_POST_EXCERPT = "Created by custom API"
API_BOT_BIO = "Created automatically by /api/custom/posts"


def slugify(value: str) -> str:
    """
    Derive a URL slug from a title.

    Lower-cases, drops everything except ``[a-z0-9]``, whitespace and
    hyphens, turns whitespace runs into single hyphens, collapses repeated
    hyphens and trims hyphens from both ends.
    """
    slug = value.lower().strip()
    slug = re.sub(r"[^a-z0-9\s-]", "", slug)
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")


def parse_limit(raw: Optional[str], default: int) -> int:
    """Parse a ``limit`` query value, falling back to ``default``.

    Non-numeric and non-finite values use the default; fractional values are
    truncated toward zero.
    """
    if raw is None:
        return default
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(value):
        return default
    return int(value)


def current_timestamp() -> str:
    return format_timestamp(utcnow())


class PostService:
    """Service for post statistics, bulk status changes and custom creation."""

    def __init__(self, store: ContentRepository, settings: ContentSettings):
        self.store = store
        self.settings = settings

    def get_stats(self) -> Dict[str, Any]:
        """
        Count posts by status.

        One bounded read (``stats_read_cap``) without relationship expansion.
        ``total`` is the collection size reported by the store, while the
        per-status counts only cover the documents actually read, so above
        the cap ``published + draft`` is smaller than ``total``.

        Raises:
            StoreError: If the read fails.
        """
        result = self.store.find("posts", limit=self.settings.stats_read_cap, depth=0)

        published = sum(1 for doc in result.docs if doc.get("status") == PostStatus.PUBLISHED.value)
        draft = sum(1 for doc in result.docs if doc.get("status") == PostStatus.DRAFT.value)

        return {
            "total": result.total_docs,
            "published": published,
            "draft": draft,
            "timestamp": current_timestamp(),
        }

    def publish_all_drafts(self) -> BatchResult:
        """
        Move draft posts to published, one update at a time.

        Reads up to ``bulk_publish_limit`` drafts. A failing update is
        recorded and the loop moves on, unless ``bulk_publish_stop_on_error``
        is set, in which case it stops there. Completed updates stay applied.

        Raises:
            StoreError: If the initial read of drafts fails.
        """
        drafts = self.store.find(
            "posts",
            where={"status": {"equals": PostStatus.DRAFT.value}},
            limit=self.settings.bulk_publish_limit,
            depth=0,
        )

        batch = BatchResult(operation="publish")
        for doc in drafts.docs:
            try:
                self.store.update("posts", doc["id"], {"status": PostStatus.PUBLISHED.value})
            except StoreError as e:
                logger.error(f"Failed to publish post {doc['id']}: {str(e)}")
                batch.record_failure(doc["id"], str(e))
                if self.settings.bulk_publish_stop_on_error:
                    batch.stopped_early = True
                    break
            else:
                batch.record_success(doc["id"])

        logger.info(
            f"Bulk publish finished - published: {len(batch.succeeded)}, "
            f"failed: {len(batch.failures)}, stopped early: {batch.stopped_early}"
        )
        return batch

    def list_posts(self, limit: int) -> Dict[str, Any]:
        """List posts with one level of relationship expansion."""
        result = self.store.find("posts", limit=limit, depth=1)
        return {
            "source": CUSTOM_API_SOURCE,
            "note": CUSTOM_API_NOTE,
            **result.to_dict(),
        }

    def create_post(self, body: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create a post from a free-form request body.

        Args:
            body: Parsed JSON body; any missing or mistyped field falls back
                to its default.

        Returns:
            Dict with the source tag and the created document
        """
        title = body.get("title") if isinstance(body.get("title"), str) else DEFAULT_POST_TITLE
        slug = body.get("slug") if isinstance(body.get("slug"), str) else slugify(title)

        author_id = body.get("authorId")
        if author_id is None or author_id == "":
            author_id = self.resolve_default_author()

        is_published = body.get("status") == PostStatus.PUBLISHED.value
        data = {
            "title": title,
            "slug": slug,
            "excerpt": body.get("excerpt") if isinstance(body.get("excerpt"), str) else DEFAULT_POST_EXCERPT,
            "status": PostStatus.PUBLISHED.value if is_published else PostStatus.DRAFT.value,
            "author": author_id,
        }
        if isinstance(body.get("categoryIds"), list):
            data["categories"] = body["categoryIds"]
        if is_published:
            data["publishedOn"] = current_timestamp()

        created = self.store.create("posts", data)
        logger.info(f"Custom API created post {created['id']} ({created['status']})")

        return {
            "source": CUSTOM_API_SOURCE,
            "created": created,
        }

    def resolve_default_author(self) -> Any:
        """
        Find the bot author by exact name, creating it when absent.

        Lookup and creation are separate store calls, so two concurrent
        callers can both miss the lookup and each create a bot author.
        """
        name = self.settings.api_bot_name
        existing = self.store.find("authors", where={"name": {"equals": name}}, limit=1, depth=0)
        if existing.docs and existing.docs[0].get("id"):
            return existing.docs[0]["id"]

        created = self.store.create("authors", {"name": name, "bio": API_BOT_BIO})
        logger.info(f"Created default author '{name}' with id {created['id']}")
        return created["id"]


def get_post_service() -> PostService:
    """Get a post service bound to the current application's store and settings."""
    return PostService(get_content_store(), current_app.extensions["content_settings"])
