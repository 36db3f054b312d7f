"""
Association path parsing and join resolution.

An association path is an ordered list of ``(join_kind, relation)`` steps.
Resolving it onto a ``Select`` adds one join per step, each from the
entity joined by the previous step (or the base entity), and returns the
aliased target of the last join so later clauses can reference it.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from sqlalchemy import inspect, true
from sqlalchemy.orm import aliased

from .exceptions import InvalidParameterError
from .query_utils import base_entity
from .types import JoinKind

if TYPE_CHECKING:
    from sqlalchemy import Select


@dataclass(frozen=True)
class AssociationStep:
    join_kind: JoinKind
    relation: str

    def to_wire(self) -> tuple[str, str]:
        return (self.join_kind.value, self.relation)


AssociationPath = tuple[AssociationStep, ...]


def parse_association_path(raw: Any, *, path: str = "assoc") -> AssociationPath:
    """
    Parse the wire form of an association path.

    Accepted forms::

        [("inner", "category"), ("left", "parent")]
        [{"inner": "category"}, {"left": "parent"}]
        {"inner": "category"}
        None / []  -> empty path
    """
    if raw is None:
        return ()
    if isinstance(raw, AssociationStep):
        return (raw,)
    if isinstance(raw, Mapping):
        raw = list(raw.items())
    if isinstance(raw, (str, bytes)) or not hasattr(raw, "__iter__"):
        raise InvalidParameterError(
            f"Association path must be a list of (join, relation) pairs, got {raw!r}",
            path=path,
        )

    steps: list[AssociationStep] = []
    for index, item in enumerate(raw):
        item_path = f"{path}[{index}]"
        if isinstance(item, AssociationStep):
            steps.append(item)
            continue
        if isinstance(item, Mapping):
            if len(item) != 1:
                raise InvalidParameterError(
                    f"Association step must have exactly one join, got {item!r}",
                    path=item_path,
                )
            item = next(iter(item.items()))
        try:
            join, relation = item
        except (TypeError, ValueError):
            raise InvalidParameterError(
                f"Association step must be a (join, relation) pair, got {item!r}",
                path=item_path,
            ) from None
        steps.append(
            AssociationStep(JoinKind.parse(join, path=item_path), str(relation))
        )
    return tuple(steps)


def resolve_associations(
    stmt: Select[Any],
    assoc: AssociationPath,
    entity: Any = None,
) -> tuple[Select[Any], Any]:
    """
    Fold *assoc* onto *stmt* and return ``(stmt, target)``.

    Every call introduces fresh aliases; callers that need de-duplication
    must track joined targets themselves.  Relation names are looked up on
    the mapped class, so an unknown name surfaces as SQLAlchemy's own
    ``AttributeError``.
    """
    current = entity if entity is not None else base_entity(stmt)
    for step in assoc:
        relationship = getattr(current, step.relation)
        target = aliased(relationship.property.mapper.class_)
        if step.join_kind is JoinKind.INNER:
            stmt = stmt.join(relationship.of_type(target))
        elif step.join_kind is JoinKind.LEFT:
            stmt = stmt.outerjoin(relationship.of_type(target))
        else:
            stmt = stmt.join_from(current, target, true())
        current = target
    return stmt, current


def target_entity(entity: Any, assoc: AssociationPath) -> Any:
    """The mapped class reached by following *assoc* from *entity*."""
    current = inspect(entity).mapper.class_
    for step in assoc:
        current = getattr(current, step.relation).property.mapper.class_
    return current
