"""Base model with common fields and document serialization."""
from datetime import date, datetime, timezone
from typing import Any, ClassVar
from sqlalchemy import Column, Integer, DateTime
from contentdesk.extensions import db


def utcnow() -> datetime:
    """Current UTC time as a naive datetime, the way rows store it."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def camelize(name: str) -> str:
    """Convert a snake_case attribute name to its camelCase document key."""
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def format_timestamp(value: datetime) -> str:
    """Render a naive UTC datetime as ISO-8601 with millisecond precision."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.isoformat(timespec="milliseconds") + "Z"


def serialize_value(value: Any) -> Any:
    """Convert a column value into its JSON document form."""
    if isinstance(value, datetime):
        return format_timestamp(value)
    if isinstance(value, date):
        return value.isoformat()
    return value


class BaseModel(db.Model):
    """Base model class for collection documents.

    Subclasses set ``__collection__`` to the slug the collection is exposed
    under, list writable relationship attributes in ``__relations__`` and
    read-only back-references in ``__joins__``.
    """

    __abstract__ = True

    __collection__: ClassVar[str] = ""
    __relations__: ClassVar[tuple[str, ...]] = ()
    __joins__: ClassVar[tuple[str, ...]] = ()
    __readonly__: ClassVar[tuple[str, ...]] = ("id", "created_at", "updated_at")

    id = Column(Integer, primary_key=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def to_dict(self, depth: int = 0) -> dict[str, Any]:
        """Convert model instance to a document.

        Relationship fields are emitted as ids at depth 0 and as nested
        documents (serialized at ``depth - 1``) otherwise.
        """
        result = {}
        for column in self.__table__.columns:
            if column.foreign_keys:
                continue
            result[camelize(column.key)] = serialize_value(getattr(self, column.key))

        for name in self.__relations__ + self.__joins__:
            value = getattr(self, name)
            if value is None:
                result[camelize(name)] = None
            elif isinstance(value, (list, tuple)):
                result[camelize(name)] = [self._related(item, depth) for item in value]
            else:
                result[camelize(name)] = self._related(value, depth)
        return result

    @staticmethod
    def _related(item: "BaseModel", depth: int) -> Any:
        if depth > 0:
            return item.to_dict(depth - 1)
        return item.id

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.id}>"
