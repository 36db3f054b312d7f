"""
SearchHook: the strict search stage.

Params are a map of field names to search params::

    {
        "name": {"search_type": "ilike", "search_term": "%pen%"},
        "name_of_category": {
            "field": "name",
            "assoc": [("inner", "category")],
            "search_type": "like",
            "search_term": "1",
            "search_expr": "or_where",
        },
        "cheap": 20,  # named search scope
    }

A value that is not a mapping refers to a search scope registered for the
entity; the scope producer turns it into ``(field_name, field_params)``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, ClassVar

from ..associations import parse_association_path
from ..exceptions import InvalidParameterError
from ..fields import field_to_wire, parse_field_ref
from ..operators import DEFAULT_SEARCH_REGISTRY, SearchOperatorRegistry
from ..search import SearchSpec, compile_search
from ..types import CombineMode, ScopeKind, SearchOperator
from .base import Hook

if TYPE_CHECKING:
    from sqlalchemy import Select

    from ..config import RummageOptions

logger = logging.getLogger(__name__)


class SearchHook(Hook):
    """Search with associations, computed fields and scopes.

    ``search_type`` and ``search_term`` are required for every field and an
    unknown ``search_type`` raises ``UnsupportedOperatorError`` while
    params are formatted.  ``like``/``ilike`` terms are used verbatim.
    """

    stage: ClassVar[str] = "search"
    required_keys: ClassVar[tuple[str, ...]] = ("search_type", "search_term")
    operators: ClassVar[SearchOperatorRegistry] = DEFAULT_SEARCH_REGISTRY
    strict: ClassVar[bool] = True
    supports_assoc: ClassVar[bool] = True

    def format_params(
        self,
        stmt: Select[Any],
        params: Any,
        options: RummageOptions,
    ) -> dict[str, Any]:
        if not params:
            return {}
        if not isinstance(params, Mapping):
            raise InvalidParameterError(
                f"Search params must be a mapping of fields, got {params!r}",
                path="search",
            )

        entity = self.entity(stmt, options)
        normalized: dict[str, Any] = {}
        for name, value in params.items():
            name = str(name)
            if not isinstance(value, Mapping):
                name, value = self._from_scope(entity, name, value, options)
            normalized[name] = self.format_field(entity, name, value, options)
        logger.debug("Formatted search params for %d field(s)", len(normalized))
        return normalized

    def _from_scope(
        self, entity: Any, name: str, term: Any, options: RummageOptions
    ) -> tuple[str, Mapping[str, Any]]:
        produced = self.resolve_scope(options, entity, ScopeKind.SEARCH, name, term)
        try:
            field_name, field_params = produced
        except (TypeError, ValueError):
            raise InvalidParameterError(
                f"Search scope '{name}' must return (field, params), got {produced!r}",
                path=f"search.{name}",
            ) from None
        if not isinstance(field_params, Mapping):
            raise InvalidParameterError(
                f"Search scope '{name}' returned non-mapping params {field_params!r}",
                path=f"search.{name}",
            )
        return str(field_name), field_params

    def format_field(
        self,
        entity: Any,
        name: str,
        value: Mapping[str, Any],
        options: RummageOptions,
    ) -> dict[str, Any]:
        path = f"search.{name}"
        self.require_keys(value, self.required_keys)

        assoc = (
            parse_association_path(value.get("assoc"), path=f"{path}.assoc")
            if self.supports_assoc
            else ()
        )
        field = parse_field_ref(
            value.get("field", value.get("search_field", name)), path=f"{path}.field"
        )
        field = self.expand_computed_field(field, entity, assoc, options)
        combine = CombineMode.parse(
            value.get("search_expr", CombineMode.WHERE), path=f"{path}.search_expr"
        )

        return {
            "field": field_to_wire(field),
            "assoc": [step.to_wire() for step in assoc],
            "search_type": self.format_operator(value.get("search_type")),
            "search_term": value["search_term"],
            "search_expr": combine.value,
        }

    def format_operator(self, raw: Any) -> str:
        return self.operators.require(raw).name.value

    def operator_for(self, raw: Any) -> SearchOperator | str:
        """Operator as stored on a ``SearchSpec``."""
        return self.operators.require(raw).name

    def run(
        self, stmt: Select[Any], params: Any, entity: Any = None
    ) -> Select[Any]:
        if not params:
            return stmt
        specs = [self.build_spec(str(name), value) for name, value in params.items()]
        return compile_search(
            stmt,
            specs,
            operators=self.operators,
            entity=entity,
            strict=self.strict,
        )

    def build_spec(self, name: str, value: Mapping[str, Any]) -> SearchSpec:
        path = f"search.{name}"
        self.require_keys(value, self.required_keys)
        assoc = (
            parse_association_path(value.get("assoc"), path=f"{path}.assoc")
            if self.supports_assoc
            else ()
        )
        return SearchSpec(
            field=parse_field_ref(value.get("field", name), path=f"{path}.field"),
            operator=self.operator_for(value.get("search_type")),
            term=value["search_term"],
            assoc=assoc,
            combine=CombineMode.parse(
                value.get("search_expr", CombineMode.WHERE), path=f"{path}.search_expr"
            ),
        )
