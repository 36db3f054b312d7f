"""SimpleSortHook: the legacy sort stage."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar

from ..types import SortOrder
from .sort import SortHook

if TYPE_CHECKING:
    from ..config import RummageOptions


def parse_sort_string(raw: str) -> dict[str, Any]:
    """
    ``"name"`` -> ascending, ``"-name"`` or ``"name.desc"`` -> descending.

    A suffix other than ``asc``/``desc`` is part of the field name.
    """
    raw = raw.strip()
    if raw.startswith("-"):
        return {"field": raw[1:], "order": SortOrder.DESC.value}
    field, _, suffix = raw.rpartition(".")
    if field and suffix.lower() in SortOrder.values():
        return {"field": field, "order": suffix.lower()}
    return {"field": raw, "order": SortOrder.ASC.value}


class SimpleSortHook(SortHook):
    """Sort on the base entity's own columns.

    ``assoc`` is ignored and a mapping without ``order`` leaves the
    statement unsorted instead of raising.
    """

    required_keys: ClassVar[tuple[str, ...]] = ("field",)
    supports_assoc: ClassVar[bool] = False

    def format_sort(
        self,
        entity: Any,
        value: Any,
        options: RummageOptions,
        *,
        path: str,
    ) -> dict[str, Any]:
        if isinstance(value, str):
            value = parse_sort_string(value)
        return super().format_sort(entity, value, options, path=path)

    def parse_order(self, raw: Any, *, path: str) -> SortOrder | None:
        if raw is None or raw == "":
            return None
        return SortOrder.parse(raw, path=path)

    def build_spec(self, value: Any, *, path: str) -> Any:
        if isinstance(value, str):
            value = parse_sort_string(value)
        return super().build_spec(value, path=path)
