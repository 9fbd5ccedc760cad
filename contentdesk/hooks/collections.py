"""Lifecycle hooks registered on the content collections."""
import logging
from typing import Any, Dict

from contentdesk.hooks.dispatcher import AFTER_CHANGE, BEFORE_CHANGE, HookDispatcher

logger = logging.getLogger(__name__)


def log_post_before_change(data: Dict[str, Any], operation: str, **context) -> Dict[str, Any]:
    """Log a post write before it is persisted; the payload is not modified."""
    logger.info(f"[posts] before_change ({operation}): title={data.get('title')!r}")
    return data


def log_post_after_change(doc: Dict[str, Any], operation: str, **context) -> Dict[str, Any]:
    """Log a persisted post."""
    logger.info(
        f"[posts] after_change ({operation}): id={doc.get('id')} "
        f"title={doc.get('title')!r} status={doc.get('status')}"
    )

    if operation == "create":
        # New-post side effects (notifications, webhooks) hook in here
        pass

    return doc


def log_author_after_change(doc: Dict[str, Any], operation: str, **context) -> Dict[str, Any]:
    """Log a persisted author."""
    logger.info(f"[authors] after_change ({operation}): id={doc.get('id')} name={doc.get('name')!r}")
    return doc


def register_collection_hooks(dispatcher: HookDispatcher) -> HookDispatcher:
    """Attach the collection hooks to a dispatcher."""
    dispatcher.register("posts", BEFORE_CHANGE, log_post_before_change)
    dispatcher.register("posts", AFTER_CHANGE, log_post_after_change)
    dispatcher.register("authors", AFTER_CHANGE, log_author_after_change)
    return dispatcher
