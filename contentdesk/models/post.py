"""Post model for blog posts."""
import enum
from sqlalchemy import Column, String, Text, Integer, DateTime, ForeignKey, JSON, Enum, Index, Table
from sqlalchemy.orm import relationship, validates
from contentdesk.errors import StoreValidationError
from contentdesk.extensions import db
from contentdesk.models.base import BaseModel


class PostStatus(str, enum.Enum):
    """Publication status of a post."""

    DRAFT = "draft"
    PUBLISHED = "published"


post_categories = Table(
    "post_categories",
    db.metadata,
    Column("post_id", Integer, ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True),
    Column("category_id", Integer, ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True),
)


class Post(BaseModel):
    """Model for posts with an author and any number of categories."""

    __tablename__ = "posts"
    __collection__ = "posts"
    __relations__ = ("author", "categories")

    # Post content
    title = Column(String(200), nullable=False)
    slug = Column(String(200), unique=True, index=True, nullable=False)
    excerpt = Column(Text, nullable=True)
    content = Column(JSON, nullable=True)  # Rich-text editor state

    # Relationships
    author_id = Column(Integer, ForeignKey("authors.id"), nullable=False)
    author = relationship("Author", backref="posts")
    categories = relationship("Category", secondary=post_categories, order_by="Category.id")

    # Publication
    published_on = Column(DateTime, nullable=True)
    status = Column(
        Enum(*[s.value for s in PostStatus], name="post_status", native_enum=False),
        default=PostStatus.DRAFT.value,
        nullable=False,
    )

    __table_args__ = (
        Index("idx_posts_status_created", "status", "created_at"),
    )

    @validates("status")
    def validate_status(self, key, value):
        if isinstance(value, PostStatus):
            return value.value
        if value not in {s.value for s in PostStatus}:
            raise StoreValidationError(f"status: '{value}' is not a valid option", field="status")
        return value

    @property
    def is_published(self) -> bool:
        return self.status == PostStatus.PUBLISHED.value

    def __repr__(self) -> str:
        """String representation of post."""
        return f"<Post '{self.slug}' ({self.status})>"
