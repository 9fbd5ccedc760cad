"""Database models package."""

# Import all models to ensure they're registered with SQLAlchemy
from contentdesk.models.base import BaseModel
from contentdesk.models.author import Author
from contentdesk.models.post import Post, PostStatus, post_categories
from contentdesk.models.category import Category
from contentdesk.models.field_showcase import FieldShowcase

# Collections exposed through the content store, keyed by slug
COLLECTIONS: dict[str, type[BaseModel]] = {
    model.__collection__: model
    for model in (Author, Category, Post, FieldShowcase)
}

__all__ = [
    'BaseModel',
    'Author',
    'Category',
    'Post',
    'PostStatus',
    'post_categories',
    'FieldShowcase',
    'COLLECTIONS',
]
