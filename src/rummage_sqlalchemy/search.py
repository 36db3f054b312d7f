"""
Compile search specs into SQLAlchemy filter conditions.

A search map ``{field_name: SearchSpec}`` is folded left to right into one
grouped condition: each field's condition joins the group according to its
``CombineMode`` and the finished group is ANDed onto the statement, so a
search never loosens filters already present on the incoming statement.

Association joins needed by a field are added to the statement as the fold
goes; blank terms skip the field entirely (no join, no condition).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from sqlalchemy import and_, not_, or_

from .associations import AssociationPath, resolve_associations
from .fields import FieldRef, resolve_field
from .operators import DEFAULT_SEARCH_REGISTRY
from .types import CombineMode, SearchOperator

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement, Select

    from .operators import SearchOperatorRegistry
    from .registry import RummageRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchSpec:
    """One field's search.

    ``operator`` holds a raw string only for the legacy family, where an
    unknown operator is kept and later ignored.
    """

    field: FieldRef
    operator: SearchOperator | str
    term: Any
    assoc: AssociationPath = ()
    combine: CombineMode = CombineMode.WHERE


def combine_condition(
    group: ColumnElement[bool] | None,
    condition: ColumnElement[bool],
    mode: CombineMode,
) -> ColumnElement[bool]:
    if mode is CombineMode.NOT_WHERE:
        condition = not_(condition)
    if group is None:
        return condition
    if mode is CombineMode.OR_WHERE:
        return or_(group, condition)
    return and_(group, condition)


def build_search_condition(
    stmt: Select[Any],
    spec: SearchSpec,
    *,
    operators: SearchOperatorRegistry = DEFAULT_SEARCH_REGISTRY,
    registry: RummageRegistry | None = None,
    entity: Any = None,
    strict: bool = True,
) -> tuple[Select[Any], ColumnElement[bool] | None]:
    """
    Build the condition for one spec.

    Returns ``(stmt, condition)``; *stmt* carries any association joins.
    ``condition`` is ``None`` for a blank term, or for an unknown operator
    when ``strict`` is off.

    Raises:
        UnsupportedOperatorError: Unknown operator with ``strict`` on.
    """
    if strict:
        strategy = operators.require(spec.operator)
    else:
        strategy = operators.get(spec.operator)
        if strategy is None:
            logger.warning("Ignoring unsupported search operator %r", spec.operator)
            return stmt, None

    if strategy.is_blank(spec.term):
        return stmt, None

    stmt, target = resolve_associations(stmt, spec.assoc, entity)
    column = resolve_field(spec.field, target, registry)
    return stmt, strategy.apply(column, spec.term)


def compile_search(
    stmt: Select[Any],
    specs: Mapping[str, SearchSpec] | Iterable[SearchSpec],
    *,
    operators: SearchOperatorRegistry = DEFAULT_SEARCH_REGISTRY,
    registry: RummageRegistry | None = None,
    entity: Any = None,
    strict: bool = True,
) -> Select[Any]:
    """Fold every spec into one condition group and attach it to *stmt*."""
    items = specs.values() if isinstance(specs, Mapping) else specs
    group: ColumnElement[bool] | None = None
    for spec in items:
        stmt, condition = build_search_condition(
            stmt,
            spec,
            operators=operators,
            registry=registry,
            entity=entity,
            strict=strict,
        )
        if condition is not None:
            group = combine_condition(group, condition, spec.combine)

    if group is None:
        return stmt
    return stmt.where(group)


def compile_search_field(
    stmt: Select[Any],
    field_name: str,
    spec: SearchSpec,
    **kwargs: Any,
) -> Select[Any]:
    """Compile a single field; a blank term returns *stmt* unchanged."""
    return compile_search(stmt, {field_name: spec}, **kwargs)
