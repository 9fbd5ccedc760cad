"""Content store backed by Flask-SQLAlchemy."""
import logging
import re
from typing import Any, Dict, Mapping, Optional

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import selectinload

from contentdesk.errors import (
    CollectionNotFoundError,
    DocumentNotFoundError,
    StoreError,
    StoreValidationError,
)
from contentdesk.hooks import HookDispatcher
from contentdesk.models.base import BaseModel, camelize
from contentdesk.store.fields import coerce_value, snakify
from contentdesk.store.filters import build_filters, build_ordering
from contentdesk.store.interfaces import Document, PageResult, Where

logger = logging.getLogger(__name__)

# Bounds that keep LIMIT/OFFSET inside a 64-bit SQL integer
MAX_PAGE_SIZE = 10_000
MAX_PAGE = 1_000_000

_UNIQUE_FIELD = re.compile(r"UNIQUE constraint failed: \w+\.(\w+)|Key \((\w+)\)=")


class SQLContentStore:
    """Collection store over the application's SQLAlchemy session.

    The session is looked up on every call, so the store itself holds no
    per-request state and can be shared by the whole application.
    """

    def __init__(self, db: SQLAlchemy, collections: Mapping[str, type[BaseModel]],
                 hooks: Optional[HookDispatcher] = None, max_depth: int = 10):
        self.db = db
        self.collections = dict(collections)
        self.hooks = hooks or HookDispatcher()
        self.max_depth = max_depth

    @property
    def session(self):
        return self.db.session

    def model_for(self, collection: str) -> type[BaseModel]:
        try:
            return self.collections[collection]
        except KeyError:
            raise CollectionNotFoundError(collection) from None

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def find(self, collection: str, where: Optional[Where] = None, limit: int = 10,
             depth: int = 0, page: int = 1, sort: Optional[str] = None) -> PageResult:
        model = self.model_for(collection)
        page = min(max(1, int(page or 1)), MAX_PAGE)
        limit = min(int(limit), MAX_PAGE_SIZE)

        query = model.query.filter(*build_filters(model, where))
        try:
            total = query.count()
            query = query.order_by(*build_ordering(model, sort)).options(*self._eager_loads(model))
            if limit > 0:
                query = query.offset((page - 1) * limit).limit(limit)
            rows = query.all()
            docs = [row.to_dict(self._depth(depth)) for row in rows]
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Error querying {collection}: {str(e)}")
            raise StoreError(f"Failed to query {collection}") from e

        return PageResult(docs=docs, total_docs=total, limit=limit, page=page)

    def find_by_id(self, collection: str, document_id: Any, depth: int = 0) -> Document:
        model = self.model_for(collection)
        return self._get(model, collection, document_id).to_dict(self._depth(depth))

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create(self, collection: str, data: Document, depth: int = 0) -> Document:
        model = self.model_for(collection)
        data = self.hooks.before_change(collection, dict(data or {}), operation="create")

        try:
            instance = model()
            self._assign(instance, data)
            self._check_required(instance)
            self.session.add(instance)
        except StoreValidationError:
            self.session.rollback()
            raise
        self._commit(collection)

        doc = instance.to_dict(self._depth(depth))
        logger.debug(f"Created {collection} document {doc['id']}")
        return self.hooks.after_change(collection, doc, operation="create")

    def update(self, collection: str, document_id: Any, data: Document, depth: int = 0) -> Document:
        model = self.model_for(collection)
        instance = self._get(model, collection, document_id)
        previous = instance.to_dict(0)

        data = self.hooks.before_change(
            collection, dict(data or {}), operation="update", original_doc=previous
        )
        try:
            self._assign(instance, data)
            self._check_required(instance)
        except StoreValidationError:
            self.session.rollback()
            raise
        self._commit(collection)

        doc = instance.to_dict(self._depth(depth))
        return self.hooks.after_change(collection, doc, operation="update", previous_doc=previous)

    def delete(self, collection: str, document_id: Any) -> Document:
        model = self.model_for(collection)
        instance = self._get(model, collection, document_id)
        doc = instance.to_dict(0)
        self.session.delete(instance)
        self._commit(collection)
        return doc

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _depth(self, depth: int) -> int:
        return max(0, min(int(depth or 0), self.max_depth))

    @staticmethod
    def _eager_loads(model: type[BaseModel]) -> list:
        """Batch-load the relationships ``to_dict`` reads, one query each per page."""
        return [selectinload(getattr(model, name)) for name in model.__relations__ + model.__joins__]

    def _get(self, model: type[BaseModel], collection: str, document_id: Any) -> BaseModel:
        try:
            key = int(document_id)
        except (TypeError, ValueError):
            raise DocumentNotFoundError(collection, document_id) from None

        try:
            instance = self.session.get(model, key)
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StoreError(f"Failed to load {collection} document {document_id}") from e

        if instance is None:
            raise DocumentNotFoundError(collection, document_id)
        return instance

    def _assign(self, instance: BaseModel, data: Dict[str, Any]) -> None:
        """Copy payload values onto ``instance``; unknown keys are ignored."""
        with self.session.no_autoflush:
            for key, value in data.items():
                self._assign_field(instance, key, value)

    def _assign_field(self, instance: BaseModel, key: str, value: Any) -> None:
        model = type(instance)
        mapper = sa_inspect(model)
        attr = snakify(key)

        if attr in model.__readonly__:
            return
        if attr in model.__relations__:
            self._assign_relation(instance, mapper.relationships[attr], key, value)
            return
        if attr not in mapper.columns or mapper.columns[attr].foreign_keys:
            return

        column = mapper.columns[attr]
        if value is None and not column.nullable:
            if column.default is not None:
                # Leave the default (create) or current value (update) in place
                return
            raise StoreValidationError(f"{key}: This field is required.", field=key)
        setattr(instance, attr, coerce_value(column, value, key))

    def _assign_relation(self, instance: BaseModel, relation, key: str, value: Any) -> None:
        target = relation.mapper.class_
        if relation.uselist:
            if value is None:
                setattr(instance, relation.key, [])
                return
            if not isinstance(value, (list, tuple)):
                raise StoreValidationError(f"{key}: Must be a list of ids", field=key)
            setattr(instance, relation.key, [self._resolve_reference(target, item, key) for item in value])
        elif value is None or value == "":
            setattr(instance, relation.key, None)
        else:
            setattr(instance, relation.key, self._resolve_reference(target, value, key))

    def _resolve_reference(self, target: type[BaseModel], value: Any, key: str) -> BaseModel:
        if isinstance(value, Mapping):
            value = value.get("id")
        if isinstance(value, bool):
            raise StoreValidationError(f"{key}: '{value}' is not a valid id", field=key)
        try:
            related = self.session.get(target, int(value))
        except (TypeError, ValueError):
            raise StoreValidationError(f"{key}: '{value}' is not a valid id", field=key) from None
        if related is None:
            raise StoreValidationError(f"{key}: Referenced document {value} does not exist", field=key)
        return related

    def _check_required(self, instance: BaseModel) -> None:
        mapper = sa_inspect(type(instance))
        required_relations = {
            column.key: relation.key
            for relation in mapper.relationships
            for column in relation.local_columns
            if not relation.uselist and column.table is instance.__table__
        }

        missing = []
        for column in mapper.columns:
            if column.primary_key or column.nullable:
                continue
            if column.default is not None or column.server_default is not None:
                continue
            if column.key in required_relations:
                relation_key = required_relations[column.key]
                if getattr(instance, relation_key) is None and getattr(instance, column.key) is None:
                    missing.append(camelize(relation_key))
                continue
            value = getattr(instance, column.key)
            if value is None or (isinstance(value, str) and not value.strip()):
                missing.append(camelize(column.key))

        if missing:
            raise StoreValidationError(f"The following fields are invalid: {', '.join(missing)}")

    def _commit(self, collection: str) -> None:
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            logger.warning(f"Constraint violation writing {collection}: {e.orig}")
            raise StoreValidationError(self._constraint_message(e)) from e
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Error writing {collection}: {str(e)}")
            raise StoreError(f"Failed to write {collection}") from e

    @staticmethod
    def _constraint_message(error: IntegrityError) -> str:
        match = _UNIQUE_FIELD.search(str(error.orig))
        if match:
            field = camelize(match.group(1) or match.group(2))
            return f"{field}: Value must be unique"
        return f"Constraint violation: {error.orig}"
