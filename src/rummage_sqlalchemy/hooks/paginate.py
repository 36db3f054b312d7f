"""
PaginateHook and KeysetPaginateHook.

Offset params ``{"page": 2, "per_page": 20}`` come back from formatting
with ``total_count`` and ``max_page`` filled in.  Keyset params come back
with ``key`` and ``last_seen_key`` filled in.  Both accept a named paginate
scope as ``{"scope": name, "page": n}`` or ``(name, n)``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar

from ..exceptions import MissingRequiredKeyError
from ..paginate import (
    DEFAULT_PER_PAGE,
    KeysetPaginateParams,
    KeysetPaginateSpec,
    PaginateSpec,
    clamp_page,
    keyset_paginate,
    page_offset,
    paginate,
    precompute,
    validate_key,
    validate_params,
)
from ..query_utils import primary_key_name
from ..types import ScopeKind
from .base import Hook

if TYPE_CHECKING:
    from sqlalchemy import Select

    from ..config import RummageOptions


def _default_per_page(options: RummageOptions) -> int:
    return options.per_page if options.per_page is not None else DEFAULT_PER_PAGE


class PaginateHook(Hook):
    """Offset pagination; counts rows through ``options.repo``."""

    stage: ClassVar[str] = "paginate"

    def format_params(
        self,
        stmt: Select[Any],
        params: Any,
        options: RummageOptions,
    ) -> dict[str, Any]:
        entity = self.entity(stmt, options)
        params = self.expand_scope(
            params or {}, entity, options, ScopeKind.PAGINATE, "page"
        )
        spec = PaginateSpec.from_params(
            params or {}, default_per_page=_default_per_page(options)
        )
        if options.repo is None:
            raise MissingRequiredKeyError(["repo"], hook=type(self).__name__)
        return precompute(stmt, spec, options.repo, entity=entity).to_params()

    def run(
        self, stmt: Select[Any], params: Any, entity: Any = None
    ) -> Select[Any]:
        return paginate(stmt, PaginateSpec.from_params(params or {}))


class KeysetPaginateHook(Hook):
    """
    Keyset pagination: ``WHERE key > last_seen_key LIMIT per_page``.

    No count query is issued.  ``key`` defaults to the entity's
    single-column primary key and ``last_seen_key`` to
    ``per_page * (page - 1)``, which only lines up with dense integer keys;
    callers paging through sparse keys pass the last key they saw.  The
    statement must be ordered by the key ascending.
    """

    stage: ClassVar[str] = "paginate"
    required_keys: ClassVar[tuple[str, ...]] = (
        "per_page",
        "page",
        "last_seen_key",
        "key",
    )

    def format_params(
        self,
        stmt: Select[Any],
        params: Any,
        options: RummageOptions,
    ) -> dict[str, Any]:
        entity = self.entity(stmt, options)
        params = self.expand_scope(
            params or {}, entity, options, ScopeKind.PAGINATE, "page"
        )
        raw = validate_params(KeysetPaginateParams, params or {}, path="paginate")

        per_page = max(
            raw.per_page if raw.per_page is not None else _default_per_page(options), 1
        )
        page = clamp_page(raw.page)
        key = validate_key(entity, raw.key or primary_key_name(entity))
        last_seen_key = (
            raw.last_seen_key
            if raw.last_seen_key is not None
            else page_offset(page, per_page)
        )
        return KeysetPaginateSpec(
            per_page=per_page, page=page, last_seen_key=last_seen_key, key=key
        ).to_params()

    def run(
        self, stmt: Select[Any], params: Any, entity: Any = None
    ) -> Select[Any]:
        self.require_keys(params or {}, self.required_keys)
        spec = KeysetPaginateSpec(
            per_page=int(params["per_page"]),
            page=int(params["page"]),
            last_seen_key=params["last_seen_key"],
            key=str(params["key"]),
        )
        return keyset_paginate(stmt, spec, entity=entity)
