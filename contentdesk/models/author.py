"""Author model."""
from sqlalchemy import Column, String, Text
from contentdesk.models.base import BaseModel


class Author(BaseModel):
    """Model for post authors."""

    __tablename__ = "authors"
    __collection__ = "authors"

    name = Column(String(120), nullable=False, index=True)
    bio = Column(Text, nullable=True)
    avatar = Column(String(255), nullable=True)  # Media URL or upload key

    def __repr__(self) -> str:
        """String representation of author."""
        return f"<Author {self.name}>"
