"""SimpleSearchHook: the legacy search stage."""

from __future__ import annotations

from typing import Any, ClassVar

from ..operators import LEGACY_SEARCH_REGISTRY, SearchOperatorRegistry
from ..types import SearchOperator
from .search import SearchHook


class SimpleSearchHook(SearchHook):
    """Search on the base entity's own columns.

    Differences from :class:`SearchHook`:

    - ``assoc`` is ignored; every field is searched on the base entity.
    - ``search_type`` defaults to ``eq``.
    - An unknown ``search_type`` is kept as given and the field is skipped
      (with a warning) when the statement is built.
    - ``like``/``ilike`` terms are wrapped as ``%term%`` with ``%`` and ``_``
      escaped.
    """

    required_keys: ClassVar[tuple[str, ...]] = ("search_term",)
    operators: ClassVar[SearchOperatorRegistry] = LEGACY_SEARCH_REGISTRY
    strict: ClassVar[bool] = False
    supports_assoc: ClassVar[bool] = False

    def format_operator(self, raw: Any) -> str:
        operator = self.operator_for(raw)
        return operator.value if isinstance(operator, SearchOperator) else operator

    def operator_for(self, raw: Any) -> SearchOperator | str:
        if raw is None:
            return SearchOperator.EQ
        normalized = raw.strip().lower() if isinstance(raw, str) else raw
        strategy = self.operators.get(normalized)
        if strategy is None:
            return str(raw)
        return strategy.name
