"""
SQLAlchemy statement helpers shared by the hooks.

Looks up the base entity of a ``Select``, its declared keys, and derives
the cheap statement used to count rows for pagination.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import inspect

from .exceptions import InvalidParameterError

if TYPE_CHECKING:
    from sqlalchemy import Select


def base_entity(stmt: Select[Any]) -> Any:
    """
    Return the first ORM entity selected by *stmt*.

    Raises:
        InvalidParameterError: If the statement selects no mapped entity.
    """
    for description in stmt.column_descriptions:
        entity = description.get("entity")
        if entity is not None:
            return entity
    raise InvalidParameterError(
        "Cannot determine the base entity of the statement; "
        "pass `entity` explicitly in the options"
    )


def entity_name(entity: Any) -> str:
    return getattr(entity, "__name__", None) or str(entity)


def primary_key_attribute(entity: Any) -> Any | None:
    """
    Return the instrumented attribute of a single-column primary key.

    ``None`` when the entity declares a composite key.
    """
    mapper = inspect(entity).mapper
    if len(mapper.primary_key) != 1:
        return None
    prop = mapper.get_property_by_column(mapper.primary_key[0])
    return getattr(entity, prop.key)


def primary_key_name(entity: Any) -> str | None:
    attr = primary_key_attribute(entity)
    return attr.key if attr is not None else None


def is_unique_key(entity: Any, name: str) -> bool:
    """True if *name* maps to a single-column primary key or a unique column."""
    mapper = inspect(entity).mapper
    if name not in mapper.column_attrs:
        return False
    prop = mapper.column_attrs[name]
    if len(prop.columns) != 1:
        return False
    column = prop.columns[0]
    if column.primary_key:
        return len(mapper.primary_key) == 1
    return bool(column.unique)


def count_statement(stmt: Select[Any], entity: Any = None) -> Select[Any]:
    """
    Derive the statement whose row count is the paginated total.

    Ordering, limit and offset are dropped.  With a single-column primary
    key the selection is replaced by ``DISTINCT key`` so joins that fan out
    rows are not double counted; otherwise full rows are made distinct.
    """
    base = stmt.order_by(None).limit(None).offset(None)
    key = primary_key_attribute(entity if entity is not None else base_entity(stmt))
    if key is not None:
        return base.with_only_columns(key).distinct()
    return base.distinct()
