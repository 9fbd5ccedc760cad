"""Field name mapping and value coercion for document payloads."""
import re
from datetime import date, datetime, timezone
from typing import Any
from sqlalchemy import Boolean, Column, Date, DateTime, Enum, Float, Integer, Numeric, String

from contentdesk.errors import StoreValidationError

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def snakify(key: str) -> str:
    """Convert a camelCase document key to the model attribute name."""
    return _CAMEL_BOUNDARY.sub("_", key).lower()


def parse_datetime(value: Any, field: str) -> datetime:
    """Parse an ISO-8601 value into a naive UTC datetime."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError as e:
            raise StoreValidationError(f"{field}: '{value}' is not a valid date", field=field) from e
    else:
        raise StoreValidationError(f"{field}: '{value}' is not a valid date", field=field)

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def parse_date(value: Any, field: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError as e:
            raise StoreValidationError(f"{field}: '{value}' is not a valid date", field=field) from e
    raise StoreValidationError(f"{field}: '{value}' is not a valid date", field=field)


def coerce_value(column: Column, value: Any, field: str) -> Any:
    """Coerce a raw payload value to the Python type of ``column``.

    Raises:
        StoreValidationError: If the value cannot represent the column type.
    """
    if value is None:
        return None

    column_type = column.type

    # Enum subclasses String, so it has to be checked first
    if isinstance(column_type, Enum):
        if value not in column_type.enums:
            raise StoreValidationError(f"{field}: '{value}' is not a valid option", field=field)
        return value

    if isinstance(column_type, Boolean):
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.lower() in ("true", "false"):
            return value.lower() == "true"
        raise StoreValidationError(f"{field}: Must be true or false", field=field)

    if isinstance(column_type, Integer):
        if isinstance(value, bool):
            raise StoreValidationError(f"{field}: Must be a number", field=field)
        try:
            return int(value)
        except (TypeError, ValueError) as e:
            raise StoreValidationError(f"{field}: Must be a number", field=field) from e

    if isinstance(column_type, (Float, Numeric)):
        if isinstance(value, bool):
            raise StoreValidationError(f"{field}: Must be a number", field=field)
        try:
            return float(value)
        except (TypeError, ValueError) as e:
            raise StoreValidationError(f"{field}: Must be a number", field=field) from e

    if isinstance(column_type, DateTime):
        return parse_datetime(value, field)

    if isinstance(column_type, Date):
        return parse_date(value, field)

    if isinstance(column_type, String):
        if not isinstance(value, str):
            raise StoreValidationError(f"{field}: Must be text", field=field)
        if column_type.length and len(value) > column_type.length:
            raise StoreValidationError(
                f"{field}: Must be at most {column_type.length} characters", field=field
            )
        return value

    # JSON and anything else is stored as given
    return value
