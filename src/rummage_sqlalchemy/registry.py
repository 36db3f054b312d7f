"""RummageRegistry: per-entity scopes and computed fields."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from .exceptions import UnknownScopeError
from .fields import ComputedField, computed
from .query_utils import entity_name
from .types import ScopeKind

logger = logging.getLogger(__name__)

ScopeProducer = Callable[[Any], Any]


class RummageRegistry:
    """Collects named scopes and computed fields, keyed by mapped class.

    A *scope* is a producer function turning one wire value into concrete
    params:

    - ``search``: ``producer(term) -> (field_name, field_params)``
    - ``sort``: ``producer(order) -> sort_params``
    - ``paginate``: ``producer(page) -> paginate_params``

    A *computed field* is a whitelisted template registered under a name,
    usable wherever a field name is accepted.

    Populate the registry at startup; lookups during a rummage call only
    read it.
    """

    def __init__(self) -> None:
        self._scopes: dict[tuple[type[Any], ScopeKind], dict[str, ScopeProducer]] = {}
        self._fields: dict[type[Any], dict[str, ComputedField]] = {}

    # ── Scopes ───────────────────────────────────────────────────

    def register_scope(
        self,
        entity: type[Any],
        kind: ScopeKind | str,
        name: str,
        producer: ScopeProducer,
    ) -> None:
        scope_kind = ScopeKind.parse(kind, path="kind")
        self._scopes.setdefault((entity, scope_kind), {})[name] = producer
        logger.debug(
            "Registered %s scope %r for %s", scope_kind.value, name, entity_name(entity)
        )

    def scope(self, entity: type[Any], kind: ScopeKind | str, name: str) -> Any:
        """Decorator-style registration.

        Usage::

            @registry.scope(Product, "sort", "category_name")
            def _category_name(order):
                return {"field": "name", "assoc": [("inner", "category")],
                        "order": order}
        """

        def wrapper(fn: ScopeProducer) -> ScopeProducer:
            self.register_scope(entity, kind, name, fn)
            return fn

        return wrapper

    def has_scope(self, entity: type[Any], kind: ScopeKind | str, name: str) -> bool:
        return name in self._scopes.get((entity, ScopeKind.parse(kind)), {})

    def resolve_scope(
        self,
        entity: type[Any],
        kind: ScopeKind | str,
        name: str,
        value: Any,
    ) -> Any:
        """
        Run the producer registered for *name*.

        Raises:
            UnknownScopeError: If no producer is registered.
        """
        scope_kind = ScopeKind.parse(kind, path="kind")
        producers = self._scopes.get((entity, scope_kind), {})
        producer = producers.get(name)
        if producer is None:
            raise UnknownScopeError(
                name, scope_kind.value, entity_name(entity), list(producers)
            )
        logger.debug(
            "Resolving %s scope %r for %s", scope_kind.value, name, entity_name(entity)
        )
        return producer(value)

    # ── Computed fields ──────────────────────────────────────────

    def register_field(
        self,
        entity: type[Any],
        name: str,
        template: str | ComputedField,
        *columns: str,
    ) -> None:
        field = template if isinstance(template, ComputedField) else computed(
            template, *columns
        )
        self._fields.setdefault(entity, {})[name] = field
        logger.debug(
            "Registered computed field %r (%s) for %s",
            name,
            field.template,
            entity_name(entity),
        )

    def computed_field(self, entity: type[Any], name: str) -> ComputedField | None:
        return self._fields.get(entity, {}).get(name)

    # ── Cleanup ──────────────────────────────────────────────────

    def clear(self) -> None:
        """Remove all registrations (testing utility)."""
        self._scopes.clear()
        self._fields.clear()
