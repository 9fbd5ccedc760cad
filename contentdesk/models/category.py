"""Category model for grouping posts."""
from sqlalchemy import Column, String, Text
from sqlalchemy.orm import relationship
from contentdesk.models.base import BaseModel
from contentdesk.models.post import post_categories


class Category(BaseModel):
    """Model for post categories."""

    __tablename__ = "categories"
    __collection__ = "categories"
    __joins__ = ("posts",)

    title = Column(String(120), nullable=False)
    description = Column(Text, nullable=True)

    # Back-reference only; posts own the association
    posts = relationship(
        "Post",
        secondary=post_categories,
        order_by="Post.id",
        viewonly=True,
    )

    def __repr__(self) -> str:
        """String representation of category."""
        return f"<Category {self.title}>"
