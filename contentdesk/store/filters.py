"""Translate ``where`` filters and sort strings into SQLAlchemy clauses."""
import re
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import and_, inspect as sa_inspect, or_
from sqlalchemy.sql.elements import ColumnElement

from contentdesk.errors import StoreValidationError
from contentdesk.store.fields import coerce_value, snakify

_BRACKETS = re.compile(r"\[([^\]]*)\]")

SCALAR_OPERATORS = (
    "equals",
    "not_equals",
    "greater_than",
    "greater_than_equal",
    "less_than",
    "less_than_equal",
)
LIST_OPERATORS = ("in", "not_in")
TEXT_OPERATORS = ("like", "contains")
OPERATORS = SCALAR_OPERATORS + LIST_OPERATORS + TEXT_OPERATORS + ("exists",)


def build_filters(model, where: Optional[Mapping[str, Any]]) -> List[ColumnElement]:
    """Build the list of filter clauses for ``model`` from a where mapping."""
    if not where:
        return []

    clauses = []
    for key, condition in where.items():
        if key in ("and", "or"):
            if not isinstance(condition, list):
                raise StoreValidationError(f"'{key}' must be a list of conditions")
            nested = [and_(*build_filters(model, item)) for item in condition if item]
            if nested:
                clauses.append(and_(*nested) if key == "and" else or_(*nested))
            continue

        if not isinstance(condition, Mapping):
            condition = {"equals": condition}
        for operator, value in condition.items():
            clauses.append(_clause(model, key, operator, value))
    return clauses


def _clause(model, field: str, operator: str, value: Any) -> ColumnElement:
    if operator not in OPERATORS:
        raise StoreValidationError(f"Unknown operator '{operator}' for {field}", field=field)

    mapper = sa_inspect(model)
    attr = snakify(field)

    if attr in mapper.relationships:
        relation = mapper.relationships[attr]
        if relation.uselist:
            return _to_many_clause(model, relation, field, operator, value)
        # Many-to-one filters go against the local foreign key
        column = next(iter(relation.local_columns))
    elif attr in mapper.columns:
        column = mapper.columns[attr]
    else:
        raise StoreValidationError(f"The following path cannot be queried: {field}", field=field)

    target = getattr(model, column.key)

    if operator == "exists":
        return target.isnot(None) if _truthy(value) else target.is_(None)
    if operator in TEXT_OPERATORS:
        return target.ilike(f"%{value}%")
    if operator in LIST_OPERATORS:
        values = [coerce_value(column, v, field) for v in _as_list(value)]
        return target.in_(values) if operator == "in" else target.notin_(values)

    coerced = coerce_value(column, value, field)
    if operator == "equals":
        return target.is_(None) if coerced is None else target == coerced
    if operator == "not_equals":
        return target.isnot(None) if coerced is None else target != coerced
    if operator == "greater_than":
        return target > coerced
    if operator == "greater_than_equal":
        return target >= coerced
    if operator == "less_than":
        return target < coerced
    return target <= coerced


def _to_many_clause(model, relation, field: str, operator: str, value: Any) -> ColumnElement:
    related = getattr(model, relation.key)
    target_id = relation.mapper.class_.id

    if operator == "exists":
        return related.any() if _truthy(value) else ~related.any()
    if operator in ("equals", "contains"):
        return related.any(target_id == _ref_id(value, field))
    if operator == "not_equals":
        return ~related.any(target_id == _ref_id(value, field))
    if operator in LIST_OPERATORS:
        ids = [_ref_id(v, field) for v in _as_list(value)]
        clause = related.any(target_id.in_(ids))
        return clause if operator == "in" else ~clause
    raise StoreValidationError(f"Operator '{operator}' is not supported on {field}", field=field)


def _ref_id(value: Any, field: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise StoreValidationError(f"{field}: '{value}' is not a valid id", field=field) from e


def _as_list(value: Any) -> List[Any]:
    if isinstance(value, str):
        return [v for v in value.split(",") if v != ""]
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def _truthy(value: Any) -> bool:
    if isinstance(value, str):
        return value.lower() not in ("false", "0", "")
    return bool(value)


def build_ordering(model, sort: Optional[str]) -> List[ColumnElement]:
    """Order by ``sort`` (``-`` prefix for descending), newest first by default."""
    sort = sort or "-createdAt"
    descending = sort.startswith("-")
    attr = snakify(sort.lstrip("-"))

    mapper = sa_inspect(model)
    if attr not in mapper.columns:
        raise StoreValidationError(f"Cannot sort by {sort.lstrip('-')}")

    column = getattr(model, attr)
    if descending:
        return [column.desc(), model.id.desc()]
    return [column.asc(), model.id.asc()]


def parse_where_args(args: Mapping[str, str]) -> Dict[str, Any]:
    """Rebuild a nested where filter from ``where[field][op]=value`` query args."""
    where: Dict[str, Any] = {}
    for key, value in args.items():
        if not key.startswith("where["):
            continue
        parts = _BRACKETS.findall(key[len("where"):])
        if not parts:
            continue
        node = where
        for part in parts[:-1]:
            node = node.setdefault(part, {})
        node[parts[-1]] = value
    return _listify(where)


def _listify(node: Any) -> Any:
    """Turn ``{"0": a, "1": b}`` index maps produced by and/or args into lists."""
    if not isinstance(node, dict):
        return node
    converted = {key: _listify(value) for key, value in node.items()}
    if converted and all(key.isdigit() for key in converted):
        return [converted[key] for key in sorted(converted, key=int)]
    return converted
