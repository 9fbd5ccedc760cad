"""Content store: repository contract and the SQL-backed implementation."""
from flask import current_app

from contentdesk.store.interfaces import ContentRepository, Document, PageResult, Where
from contentdesk.store.sql import SQLContentStore


def get_content_store() -> ContentRepository:
    """Get the content store configured for the current application."""
    return current_app.extensions["content_store"]


__all__ = [
    "ContentRepository",
    "Document",
    "PageResult",
    "SQLContentStore",
    "Where",
    "get_content_store",
]
