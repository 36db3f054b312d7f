"""
Offset and keyset pagination.

Offset pagination counts the rows of the statement once (through the
repository) to derive ``total_count`` and ``max_page`` and clamps the
requested page; keyset pagination filters on ``key > last_seen_key`` and
never counts.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from .exceptions import InvalidParameterError, MissingRequiredKeyError
from .query_utils import base_entity, count_statement, entity_name, is_unique_key

if TYPE_CHECKING:
    from sqlalchemy import Select

    from .repository import IRepository

logger = logging.getLogger(__name__)

DEFAULT_PER_PAGE = 10


# ---------------------------------------------------------------------------
# Wire models
# ---------------------------------------------------------------------------


class PaginateParams(BaseModel):
    """Paginate params as received; integer-like strings are coerced."""

    model_config = ConfigDict(extra="ignore")

    page: int = 1
    per_page: int | None = None
    total_count: int | None = None
    max_page: int | None = None


class KeysetPaginateParams(BaseModel):
    model_config = ConfigDict(extra="ignore")

    page: int = 1
    per_page: int | None = None
    last_seen_key: Any = None
    key: str | None = None


def validate_params(model: type[BaseModel], raw: Any, *, path: str) -> Any:
    """Validate *raw* through *model*, converting pydantic errors."""
    try:
        return model.model_validate(dict(raw))
    except PydanticValidationError as exc:
        error = exc.errors()[0]
        loc = ".".join(str(p) for p in error.get("loc", ()))
        raise InvalidParameterError(
            error.get("msg", "validation error"),
            path=f"{path}.{loc}" if loc else path,
        ) from exc
    except (TypeError, ValueError) as exc:
        raise InvalidParameterError(
            f"Paginate params must be a mapping, got {raw!r}", path=path
        ) from exc


# ---------------------------------------------------------------------------
# Arithmetic
# ---------------------------------------------------------------------------


def page_offset(page: int, per_page: int) -> int:
    return per_page * (page - 1)


def max_page_for(total_count: int, per_page: int) -> int:
    """``ceil(total_count / per_page)``; 0 when there are no rows."""
    return -(-total_count // per_page)


def clamp_page(page: int, max_page: int | None = None) -> int:
    """Clamp *page* into ``[1, max(max_page, 1)]``; no upper bound when unknown."""
    if max_page is None:
        return max(page, 1)
    return min(max(page, 1), max(max_page, 1))


# ---------------------------------------------------------------------------
# Offset strategy
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PaginateSpec:
    page: int
    per_page: int
    total_count: int | None = None
    max_page: int | None = None

    @property
    def offset(self) -> int:
        return page_offset(self.page, self.per_page)

    @classmethod
    def from_params(
        cls, raw: Any, *, default_per_page: int = DEFAULT_PER_PAGE
    ) -> PaginateSpec:
        params = validate_params(PaginateParams, raw, path="paginate")
        per_page = params.per_page if params.per_page is not None else default_per_page
        return cls(
            page=clamp_page(params.page),
            per_page=max(per_page, 1),
            total_count=params.total_count,
            max_page=params.max_page,
        )

    def to_params(self) -> dict[str, Any]:
        params: dict[str, Any] = {"page": self.page, "per_page": self.per_page}
        if self.total_count is not None:
            params["total_count"] = self.total_count
        if self.max_page is not None:
            params["max_page"] = self.max_page
        return params


def precompute(
    stmt: Select[Any],
    spec: PaginateSpec,
    repo: IRepository,
    *,
    entity: Any = None,
) -> PaginateSpec:
    """Count the rows of *stmt* and return *spec* with totals filled in."""
    total_count = int(repo.count(count_statement(stmt, entity)))
    max_page = max_page_for(total_count, spec.per_page)
    page = clamp_page(spec.page, max_page)
    logger.debug(
        "Paginate count: total_count=%d max_page=%d page=%d", total_count, max_page, page
    )
    return PaginateSpec(
        page=page,
        per_page=spec.per_page,
        total_count=total_count,
        max_page=max_page,
    )


def paginate(stmt: Select[Any], spec: PaginateSpec) -> Select[Any]:
    return stmt.limit(spec.per_page).offset(spec.offset)


# ---------------------------------------------------------------------------
# Keyset strategy
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class KeysetPaginateSpec:
    per_page: int
    page: int
    last_seen_key: Any
    key: str

    def to_params(self) -> dict[str, Any]:
        return {
            "page": self.page,
            "per_page": self.per_page,
            "last_seen_key": self.last_seen_key,
            "key": self.key,
        }


def validate_key(entity: Any, key: str | None) -> str:
    """
    Check that *key* is a single-column unique key of *entity*.

    Raises:
        MissingRequiredKeyError: No key given and none declared.
        InvalidParameterError: The column is not a unique key.
    """
    if not key:
        raise MissingRequiredKeyError(["key"], hook="keyset pagination")
    if not is_unique_key(entity, key):
        raise InvalidParameterError(
            f"Keyset key '{key}' is not a single-column unique key of "
            f"'{entity_name(entity)}'",
            path="paginate.key",
        )
    return key


def keyset_paginate(
    stmt: Select[Any],
    spec: KeysetPaginateSpec,
    *,
    entity: Any = None,
) -> Select[Any]:
    """
    Filter on ``key > last_seen_key`` and limit to one page.

    The statement must already be ordered by the key ascending; this
    function adds no ordering.
    """
    target = entity if entity is not None else base_entity(stmt)
    column = getattr(target, spec.key)
    return stmt.where(column > spec.last_seen_key).limit(spec.per_page)
