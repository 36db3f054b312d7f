"""
SortHook: the strict sort stage.

Accepted params::

    {"field": "name", "order": "asc"}
    {"field": "name", "assoc": [("inner", "category")], "order": "desc", "ci": True}
    [{"field": "price", "order": "desc"}, {"field": "name", "order": "asc"}]
    {"scope": "category_name", "order": "asc"}   # named sort scope
    ("category_name", "asc")                     # same, tuple form

A single mapping stays a single mapping after formatting and a list stays a
list.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, ClassVar

from ..associations import parse_association_path
from ..exceptions import InvalidParameterError
from ..fields import field_to_wire, parse_field_ref
from ..sort import SortSpec, compile_sorts
from ..types import ScopeKind, SortOrder
from .base import Hook

if TYPE_CHECKING:
    from sqlalchemy import Select

    from ..config import RummageOptions

logger = logging.getLogger(__name__)


class SortHook(Hook):
    """Sort with associations, ``ci`` and computed fields; ``order`` is required."""

    stage: ClassVar[str] = "sort"
    required_keys: ClassVar[tuple[str, ...]] = ("field", "order")
    supports_assoc: ClassVar[bool] = True

    def format_params(
        self,
        stmt: Select[Any],
        params: Any,
        options: RummageOptions,
    ) -> Any:
        entity = self.entity(stmt, options)
        params = self.expand_scope(params, entity, options, ScopeKind.SORT, "order")

        if isinstance(params, (list, tuple)):
            return [
                self.format_sort(
                    entity,
                    self.expand_scope(item, entity, options, ScopeKind.SORT, "order"),
                    options,
                    path=f"sort[{index}]",
                )
                for index, item in enumerate(params)
            ]
        return self.format_sort(entity, params, options, path="sort")

    def format_sort(
        self,
        entity: Any,
        value: Any,
        options: RummageOptions,
        *,
        path: str,
    ) -> dict[str, Any]:
        if not isinstance(value, Mapping):
            raise InvalidParameterError(
                f"Sort params must be a mapping, got {value!r}", path=path
            )
        self.require_keys(value, self.required_keys)

        assoc = self.parse_assoc(value, path=path)
        field = parse_field_ref(value["field"], path=f"{path}.field")
        field = self.expand_computed_field(field, entity, assoc, options)
        order = self.parse_order(value.get("order"), path=f"{path}.order")
        return {
            "field": field_to_wire(field),
            "assoc": [step.to_wire() for step in assoc],
            "order": order.value if order is not None else None,
            "ci": self.parse_flag(value.get("ci"), path=f"{path}.ci"),
        }

    def parse_assoc(self, value: Mapping[str, Any], *, path: str) -> Any:
        if not self.supports_assoc:
            return ()
        return parse_association_path(value.get("assoc"), path=f"{path}.assoc")

    def parse_order(self, raw: Any, *, path: str) -> SortOrder | None:
        return SortOrder.parse(raw, path=path)

    def run(
        self, stmt: Select[Any], params: Any, entity: Any = None
    ) -> Select[Any]:
        if not params:
            return stmt
        items = params if isinstance(params, (list, tuple)) else [params]
        specs = [
            self.build_spec(item, path=f"sort[{index}]")
            for index, item in enumerate(items)
        ]
        logger.debug("Applying %d sort key(s)", len(specs))
        return compile_sorts(stmt, specs, entity=entity)

    def build_spec(self, value: Mapping[str, Any], *, path: str) -> SortSpec:
        self.require_keys(value, self.required_keys)
        return SortSpec(
            field=parse_field_ref(value["field"], path=f"{path}.field"),
            order=self.parse_order(value.get("order"), path=f"{path}.order"),
            assoc=self.parse_assoc(value, path=path),
            ci=self.parse_flag(value.get("ci"), path=f"{path}.ci"),
        )
