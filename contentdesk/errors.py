"""Exceptions raised by the content store and services."""


class ContentDeskError(Exception):
    """Base exception for application errors."""
    pass


class StoreError(ContentDeskError):
    """Raised when a content store operation fails."""
    pass


class StoreValidationError(StoreError):
    """Raised when a document fails field validation or a store constraint."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.message = message
        self.field = field


class CollectionNotFoundError(StoreError):
    """Raised for an unknown collection slug."""

    def __init__(self, collection: str):
        super().__init__(f"Collection '{collection}' not found")
        self.collection = collection


class DocumentNotFoundError(StoreError):
    """Raised when no document exists for the given id."""

    def __init__(self, collection: str, document_id):
        super().__init__(f"Document {document_id} not found in '{collection}'")
        self.collection = collection
        self.document_id = document_id
