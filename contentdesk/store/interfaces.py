"""Content repository contract.

Endpoints and services depend on this Protocol rather than on a concrete
store, so the SQL-backed store can be swapped for any client offering the
same capability set.

Contract guidelines
-------------------

- Documents are plain dicts with camelCase keys and an ``id``.
- ``where`` filters use the ``{field: {operator: value}}`` shape.
- ``depth`` is the number of relationship levels expanded into nested
  documents; depth 0 leaves relationship fields as ids.
- Writes run the collection's before/after change hooks.
- Failures raise ``contentdesk.errors.StoreError`` subclasses.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol

Document = Dict[str, Any]
Where = Dict[str, Any]


@dataclass
class PageResult:
    """One page of documents plus pagination metadata."""

    docs: List[Document] = field(default_factory=list)
    total_docs: int = 0
    limit: int = 10
    page: int = 1

    @property
    def total_pages(self) -> int:
        if self.limit <= 0:
            return 1
        return max(1, math.ceil(self.total_docs / self.limit))

    @property
    def has_prev_page(self) -> bool:
        return self.page > 1

    @property
    def has_next_page(self) -> bool:
        return self.page < self.total_pages

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the camelCase keys API clients expect."""
        paging_counter = (self.page - 1) * self.limit + 1 if self.limit > 0 else 1
        return {
            "docs": self.docs,
            "totalDocs": self.total_docs,
            "limit": self.limit,
            "totalPages": self.total_pages,
            "page": self.page,
            "pagingCounter": paging_counter,
            "hasPrevPage": self.has_prev_page,
            "hasNextPage": self.has_next_page,
            "prevPage": self.page - 1 if self.has_prev_page else None,
            "nextPage": self.page + 1 if self.has_next_page else None,
        }


class ContentRepository(Protocol):
    """Query and mutate documents in named collections."""

    def find(
        self,
        collection: str,
        where: Optional[Where] = None,
        limit: int = 10,
        depth: int = 0,
        page: int = 1,
        sort: Optional[str] = None,
    ) -> PageResult:
        """
        Query a collection.

        Args:
            collection: Collection slug.
            where: Optional filter.
            limit: Page size; ``limit <= 0`` returns every match.
            depth: Relationship expansion depth.
            page: 1-based page number.
            sort: Field name, prefixed with ``-`` for descending order.
        """
        ...

    def find_by_id(self, collection: str, document_id: Any, depth: int = 0) -> Document:
        """Fetch one document or raise ``DocumentNotFoundError``."""
        ...

    def create(self, collection: str, data: Document, depth: int = 0) -> Document:
        """Create a document and return it as persisted."""
        ...

    def update(self, collection: str, document_id: Any, data: Document, depth: int = 0) -> Document:
        """Apply a partial update and return the persisted document."""
        ...

    def delete(self, collection: str, document_id: Any) -> Document:
        """Delete a document and return its last state."""
        ...
