"""
Hook: the contract every rummage stage implements.

A hook turns one section of the params map into a statement transform in
two steps:

``format_params(stmt, params, options)``
    Fills in defaults, resolves named scopes and validates required keys.
    Returns normalized params; formatting normalized params again returns
    them unchanged.

``run(stmt, params, entity=None)``
    Pure transform of *stmt* using normalized params.  *entity* is the
    class params were formatted against; ``None`` means the statement's
    first selected entity.

Both methods raise ``NotImplementedError`` here so a partially written
custom hook fails on first use instead of silently passing statements
through.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, ClassVar

from ..associations import target_entity
from ..exceptions import (
    InvalidParameterError,
    MissingRequiredKeyError,
    UnknownScopeError,
)
from ..fields import PlainField
from ..query_utils import base_entity, entity_name
from ..types import ScopeKind

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sqlalchemy import Select

    from ..associations import AssociationPath
    from ..config import RummageOptions
    from ..fields import FieldRef


class Hook:
    """Base class for search, sort and paginate stages."""

    #: Params section this hook is meant for (``search``, ``sort``, ``paginate``).
    stage: ClassVar[str] = ""

    def format_params(
        self,
        stmt: Select[Any],
        params: Any,
        options: RummageOptions,
    ) -> Any:
        raise NotImplementedError(
            f"{type(self).__name__} does not implement format_params()"
        )

    def run(
        self, stmt: Select[Any], params: Any, entity: Any = None
    ) -> Select[Any]:
        raise NotImplementedError(f"{type(self).__name__} does not implement run()")

    # ── Helpers for subclasses ───────────────────────────────────

    @staticmethod
    def entity(stmt: Select[Any], options: RummageOptions | None = None) -> Any:
        if options is not None and options.entity is not None:
            return options.entity
        return base_entity(stmt)

    def require_keys(self, params: Mapping[str, Any], keys: Iterable[str]) -> None:
        """
        Raises:
            MissingRequiredKeyError: Listing every key absent from *params*.
        """
        missing = [key for key in keys if key not in params]
        if missing:
            raise MissingRequiredKeyError(missing, hook=type(self).__name__)

    @staticmethod
    def resolve_scope(
        options: RummageOptions,
        entity: Any,
        kind: ScopeKind,
        name: str,
        value: Any,
    ) -> Any:
        if options.registry is None:
            raise UnknownScopeError(name, kind.value, entity_name(entity))
        return options.registry.resolve_scope(entity, kind, name, value)

    @staticmethod
    def scope_reference(params: Any, value_key: str) -> tuple[str, Any] | None:
        """
        Recognize a scope reference in a stage's params.

        ``("name", value)`` and ``{"scope": "name", value_key: value}`` both
        name a scope; anything else is returned as ``None``.
        """
        if isinstance(params, tuple) and len(params) == 2 and isinstance(params[0], str):
            return params[0], params[1]
        if isinstance(params, Mapping) and "scope" in params:
            return str(params["scope"]), params.get(value_key)
        return None

    def expand_scope(
        self,
        params: Any,
        entity: Any,
        options: RummageOptions,
        kind: ScopeKind,
        value_key: str,
    ) -> Any:
        reference = self.scope_reference(params, value_key)
        if reference is None:
            return params
        name, value = reference
        return self.resolve_scope(options, entity, kind, name, value)

    @staticmethod
    def expand_computed_field(
        field: FieldRef,
        entity: Any,
        assoc: AssociationPath,
        options: RummageOptions,
    ) -> FieldRef:
        """Replace a registered computed-field name by its definition."""
        if not isinstance(field, PlainField) or options.registry is None:
            return field
        registered = options.registry.computed_field(
            target_entity(entity, assoc), field.name
        )
        return registered if registered is not None else field

    @staticmethod
    def parse_flag(value: Any, *, path: str) -> bool:
        if isinstance(value, bool):
            return value
        if value is None:
            return False
        if isinstance(value, str) and value.strip().lower() in ("true", "1"):
            return True
        if isinstance(value, str) and value.strip().lower() in ("false", "0", ""):
            return False
        if isinstance(value, int):
            return bool(value)
        raise InvalidParameterError(f"Expected a boolean, got {value!r}", path=path)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"
