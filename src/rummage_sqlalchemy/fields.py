"""
Field references and their resolution to SQLAlchemy column expressions.

A field is either a plain column name or a computed field: a whitelisted
template applied to one or two columns.  Templates are data drawn from
``TEMPLATES``; callers can never supply expression text, which keeps
search and sort params from injecting SQL.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Union

from sqlalchemy import extract, func, inspect

from .exceptions import InvalidParameterError, UnsupportedTemplateError

if TYPE_CHECKING:
    from .registry import RummageRegistry


@dataclass(frozen=True)
class FieldTemplate:
    name: str
    arity: int
    build: Callable[..., Any]


TEMPLATES: dict[str, FieldTemplate] = {
    t.name: t
    for t in (
        FieldTemplate("year_of", 1, lambda c: extract("year", c)),
        FieldTemplate("month_of", 1, lambda c: extract("month", c)),
        FieldTemplate("day_of", 1, lambda c: extract("day", c)),
        FieldTemplate("hour_of", 1, lambda c: extract("hour", c)),
        FieldTemplate("lowercase", 1, lambda c: func.lower(c)),
        FieldTemplate("uppercase", 1, lambda c: func.upper(c)),
        FieldTemplate("concat_two", 2, lambda a, b: a.concat(b)),
        FieldTemplate("coalesce_two", 2, lambda a, b: func.coalesce(a, b)),
    )
}


@dataclass(frozen=True)
class PlainField:
    name: str


@dataclass(frozen=True)
class ComputedField:
    template: str
    columns: tuple[str, ...]

    def __post_init__(self) -> None:
        template = TEMPLATES.get(self.template)
        if template is None:
            raise UnsupportedTemplateError(self.template, list(TEMPLATES))
        if len(self.columns) != template.arity:
            raise InvalidParameterError(
                f"Template '{self.template}' takes {template.arity} column(s), "
                f"got {len(self.columns)}",
                path="columns",
            )


FieldRef = Union[PlainField, ComputedField]


def computed(template: str, *columns: str) -> ComputedField:
    """Shorthand: ``computed("concat_two", "first_name", "last_name")``."""
    return ComputedField(template, tuple(columns))


def parse_field_ref(raw: Any, *, path: str = "field") -> FieldRef:
    """
    Parse a field from params.

    Strings are plain fields (or names of registered computed fields,
    resolved later against the target entity).  Mappings describe a
    computed field: ``{"template": "year_of", "columns": ["inserted_at"]}``.
    """
    if isinstance(raw, (PlainField, ComputedField)):
        return raw
    if isinstance(raw, str) and raw:
        return PlainField(raw)
    if isinstance(raw, Mapping) and "template" in raw:
        columns = raw.get("columns") or ()
        if isinstance(columns, str):
            columns = (columns,)
        return ComputedField(str(raw["template"]), tuple(str(c) for c in columns))
    raise InvalidParameterError(f"Invalid field reference {raw!r}", path=path)


def field_to_wire(field: FieldRef) -> Any:
    if isinstance(field, PlainField):
        return field.name
    return {"template": field.template, "columns": list(field.columns)}


def resolve_field(
    field: FieldRef,
    target: Any,
    registry: RummageRegistry | None = None,
) -> Any:
    """
    Resolve *field* to a column expression on *target*.

    *target* is the base entity or the alias of the last association join.
    A plain name that matches a computed field registered for the target's
    entity expands to that computed field.
    """
    if isinstance(field, PlainField) and registry is not None:
        registered = registry.computed_field(inspect(target).mapper.class_, field.name)
        if registered is not None:
            field = registered

    if isinstance(field, ComputedField):
        columns = [getattr(target, name) for name in field.columns]
        return TEMPLATES[field.template].build(*columns)
    return getattr(target, field.name)
