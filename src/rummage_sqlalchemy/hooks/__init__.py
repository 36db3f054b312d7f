"""Built-in rummage hooks, addressable by name through ``HOOKS``."""

from __future__ import annotations

from .base import Hook
from .paginate import KeysetPaginateHook, PaginateHook
from .search import SearchHook
from .simple_search import SimpleSearchHook
from .simple_sort import SimpleSortHook
from .sort import SortHook

HOOKS: dict[str, type[Hook]] = {
    "search": SearchHook,
    "simple_search": SimpleSearchHook,
    "sort": SortHook,
    "simple_sort": SimpleSortHook,
    "paginate": PaginateHook,
    "keyset_paginate": KeysetPaginateHook,
}

__all__ = [
    "HOOKS",
    "Hook",
    "KeysetPaginateHook",
    "PaginateHook",
    "SearchHook",
    "SimpleSearchHook",
    "SimpleSortHook",
    "SortHook",
]
