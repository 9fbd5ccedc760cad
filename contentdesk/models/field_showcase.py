"""Demonstration model carrying one of every supported field primitive."""
import re
from sqlalchemy import Column, String, Text, Integer, Float, Boolean, Date, DateTime, ForeignKey, JSON, Enum
from sqlalchemy.orm import relationship, validates
from contentdesk.errors import StoreValidationError
from contentdesk.models.base import BaseModel

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

SIZE_OPTIONS = ("small", "medium", "large")
COLOR_OPTIONS = ("red", "green", "blue")


class FieldShowcase(BaseModel):
    """Model exercising each field type the store understands."""

    __tablename__ = "field_showcase"
    __collection__ = "field-showcase"
    __relations__ = ("related_author",)

    # Text-like
    title = Column(String(200), nullable=False)  # text
    description = Column(Text, nullable=True)  # textarea
    email = Column(String(254), nullable=True)
    snippet = Column(Text, nullable=True)  # code
    attachment = Column(String(255), nullable=True)  # upload reference

    # Scalars
    quantity = Column(Float, nullable=True)  # number
    is_featured = Column(Boolean, default=False, nullable=False)  # checkbox
    launch_date = Column(Date, nullable=True)
    happens_at = Column(DateTime, nullable=True)

    # Options
    size = Column(Enum(*SIZE_OPTIONS, name="showcase_size", native_enum=False), nullable=True)  # select
    color = Column(Enum(*COLOR_OPTIONS, name="showcase_color", native_enum=False), nullable=True)  # radio

    # Structured
    settings = Column(JSON, nullable=True)  # json
    body = Column(JSON, nullable=True)  # richText
    location = Column(JSON, nullable=True)  # point as [lng, lat]
    tags = Column(JSON, nullable=True)  # array
    seo = Column(JSON, nullable=True)  # group

    related_author_id = Column(Integer, ForeignKey("authors.id"), nullable=True)
    related_author = relationship("Author")

    @validates("email")
    def validate_email(self, key, value):
        if value is not None and not EMAIL_PATTERN.match(value):
            raise StoreValidationError("email: Please enter a valid email address.", field="email")
        return value

    @validates("location")
    def validate_location(self, key, value):
        if value is None:
            return value
        if (
            not isinstance(value, (list, tuple))
            or len(value) != 2
            or not all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in value)
        ):
            raise StoreValidationError("location: Point must be [longitude, latitude].", field="location")
        lng, lat = value
        if not -180 <= lng <= 180 or not -90 <= lat <= 90:
            raise StoreValidationError("location: Point is out of range.", field="location")
        return [float(lng), float(lat)]

    @validates("tags")
    def validate_tags(self, key, value):
        if value is not None and not isinstance(value, list):
            raise StoreValidationError("tags: Must be an array.", field="tags")
        return value

    @validates("seo")
    def validate_seo(self, key, value):
        if value is not None and not isinstance(value, dict):
            raise StoreValidationError("seo: Must be an object.", field="seo")
        return value

    def __repr__(self) -> str:
        return f"<FieldShowcase {self.title}>"
