"""Closed value sets used in rummage params."""

from __future__ import annotations

from enum import Enum
from typing import Any, TypeVar

from .exceptions import InvalidParameterError

E = TypeVar("E", bound="ParamEnum")


class ParamEnum(str, Enum):
    """String enum parsed from wire values with an explicit error path."""

    @classmethod
    def parse(cls: type[E], value: Any, *, path: str | None = None) -> E:
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            normalized = value.strip().lower()
            for member in cls:
                if member.value == normalized:
                    return member
        valid = ", ".join(m.value for m in cls)
        raise InvalidParameterError(
            f"Invalid {cls.__name__} value {value!r}; expected one of: {valid}",
            path=path,
        )

    @classmethod
    def values(cls) -> list[str]:
        return [m.value for m in cls]


class JoinKind(ParamEnum):
    INNER = "inner"
    LEFT = "left"
    CROSS = "cross"


class SearchOperator(ParamEnum):
    """Operators understood by the search compiler."""

    LIKE = "like"
    ILIKE = "ilike"
    EQ = "eq"
    GT = "gt"
    LT = "lt"
    GTEQ = "gteq"
    LTEQ = "lteq"
    IS_NULL = "is_null"
    IN = "in"
    NOT_IN = "not_in"
    BETWEEN = "between"


class CombineMode(ParamEnum):
    """How a field's condition attaches to the search group.

    ``where`` ANDs, ``or_where`` ORs, ``not_where`` ANDs the negation.
    """

    WHERE = "where"
    OR_WHERE = "or_where"
    NOT_WHERE = "not_where"


class SortOrder(ParamEnum):
    ASC = "asc"
    DESC = "desc"


class ScopeKind(ParamEnum):
    SEARCH = "search"
    SORT = "sort"
    PAGINATE = "paginate"
