"""Compile sort specs into ``ORDER BY`` clauses."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from sqlalchemy import asc, desc, func

from .associations import AssociationPath, resolve_associations
from .fields import FieldRef, resolve_field
from .types import SortOrder

if TYPE_CHECKING:
    from sqlalchemy import Select

    from .registry import RummageRegistry


@dataclass(frozen=True)
class SortSpec:
    field: FieldRef
    order: SortOrder | None
    assoc: AssociationPath = ()
    ci: bool = False


def compile_sort(
    stmt: Select[Any],
    spec: SortSpec,
    *,
    registry: RummageRegistry | None = None,
    entity: Any = None,
) -> Select[Any]:
    """
    Append one ordering key to *stmt*.

    Earlier orderings are kept, so repeated calls build multi-key sorts.
    ``ci`` wraps the column in ``lower()``; no type check is made, a
    non-text column fails when the statement executes.  A spec without an
    order leaves *stmt* unchanged.
    """
    if spec.order is None:
        return stmt

    stmt, target = resolve_associations(stmt, spec.assoc, entity)
    column = resolve_field(spec.field, target, registry)
    if spec.ci:
        column = func.lower(column)
    direction = asc if spec.order is SortOrder.ASC else desc
    return stmt.order_by(direction(column))


def compile_sorts(
    stmt: Select[Any],
    specs: Iterable[SortSpec],
    **kwargs: Any,
) -> Select[Any]:
    for spec in specs:
        stmt = compile_sort(stmt, spec, **kwargs)
    return stmt
