"""
Search operator compilation strategy.

Each ``SearchOperator`` is an isolated strategy class turning a column
expression and a search term into a SQLAlchemy ``ColumnElement[bool]``.
Strategies are collected in a ``SearchOperatorRegistry``; the strict and
legacy hook families each get their own registry.
"""

from __future__ import annotations

import operator as op_module
from abc import ABC, abstractmethod
from collections.abc import Collection
from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import and_

from .exceptions import InvalidParameterError, UnsupportedOperatorError
from .types import SearchOperator

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement


def is_blank(term: Any) -> bool:
    """``None``, empty string or empty collection."""
    if term is None:
        return True
    if isinstance(term, str):
        return term.strip() == ""
    if isinstance(term, Collection):
        return len(term) == 0
    return False


class SearchOperatorStrategy(ABC):
    """
    Strategy interface for compiling a search operator
    into a SQLAlchemy ``ColumnElement[bool]``.
    """

    @property
    @abstractmethod
    def name(self) -> SearchOperator:
        """The operator this strategy handles."""
        ...

    @abstractmethod
    def apply(self, column: Any, term: Any) -> ColumnElement[bool]:
        """
        Build a SQLAlchemy filter clause.

        Args:
            column: A column, instrumented attribute or computed expression.
            term: The search term from params.

        Returns:
            A SQLAlchemy boolean expression.
        """
        ...

    def is_blank(self, term: Any) -> bool:
        """Whether *term* makes this search a no-op."""
        return is_blank(term)


# ---------------------------------------------------------------------------
# String matching
# ---------------------------------------------------------------------------


class LikeOperator(SearchOperatorStrategy):
    """``LIKE`` with the term used verbatim; callers add their own wildcards."""

    @property
    def name(self) -> SearchOperator:
        return SearchOperator.LIKE

    def apply(self, column: Any, term: Any) -> ColumnElement[bool]:
        return cast("ColumnElement[bool]", column.like(term))


class ILikeOperator(SearchOperatorStrategy):
    @property
    def name(self) -> SearchOperator:
        return SearchOperator.ILIKE

    def apply(self, column: Any, term: Any) -> ColumnElement[bool]:
        return cast("ColumnElement[bool]", column.ilike(term))


LIKE_ESCAPE = "\\"


def wrap_like_term(term: Any) -> str:
    """``abc%`` -> ``%abc\\%%``: substring match with wildcards escaped."""
    text = str(term)
    for char in (LIKE_ESCAPE, "%", "_"):
        text = text.replace(char, LIKE_ESCAPE + char)
    return f"%{text}%"


class WrappedLikeOperator(LikeOperator):
    """``LIKE '%term%'``, escaping wildcards inside the term."""

    def apply(self, column: Any, term: Any) -> ColumnElement[bool]:
        return cast(
            "ColumnElement[bool]",
            column.like(wrap_like_term(term), escape=LIKE_ESCAPE),
        )


class WrappedILikeOperator(ILikeOperator):
    def apply(self, column: Any, term: Any) -> ColumnElement[bool]:
        return cast(
            "ColumnElement[bool]",
            column.ilike(wrap_like_term(term), escape=LIKE_ESCAPE),
        )


# ---------------------------------------------------------------------------
# Comparison
# ---------------------------------------------------------------------------


class EqualOperator(SearchOperatorStrategy):
    @property
    def name(self) -> SearchOperator:
        return SearchOperator.EQ

    def apply(self, column: Any, term: Any) -> ColumnElement[bool]:
        return cast("ColumnElement[bool]", op_module.eq(column, term))


class GreaterThanOperator(SearchOperatorStrategy):
    @property
    def name(self) -> SearchOperator:
        return SearchOperator.GT

    def apply(self, column: Any, term: Any) -> ColumnElement[bool]:
        return cast("ColumnElement[bool]", op_module.gt(column, term))


class LessThanOperator(SearchOperatorStrategy):
    @property
    def name(self) -> SearchOperator:
        return SearchOperator.LT

    def apply(self, column: Any, term: Any) -> ColumnElement[bool]:
        return cast("ColumnElement[bool]", op_module.lt(column, term))


class GreaterEqualOperator(SearchOperatorStrategy):
    @property
    def name(self) -> SearchOperator:
        return SearchOperator.GTEQ

    def apply(self, column: Any, term: Any) -> ColumnElement[bool]:
        return cast("ColumnElement[bool]", op_module.ge(column, term))


class LessEqualOperator(SearchOperatorStrategy):
    @property
    def name(self) -> SearchOperator:
        return SearchOperator.LTEQ

    def apply(self, column: Any, term: Any) -> ColumnElement[bool]:
        return cast("ColumnElement[bool]", op_module.le(column, term))


# ---------------------------------------------------------------------------
# Null / set
# ---------------------------------------------------------------------------


class IsNullOperator(SearchOperatorStrategy):
    """``True`` -> ``IS NULL``, ``False`` -> ``IS NOT NULL``."""

    @property
    def name(self) -> SearchOperator:
        return SearchOperator.IS_NULL

    def is_blank(self, term: Any) -> bool:
        return term is None or term == ""

    def apply(self, column: Any, term: Any) -> ColumnElement[bool]:
        if _truthy(term):
            return cast("ColumnElement[bool]", column.is_(None))
        return cast("ColumnElement[bool]", column.is_not(None))


def _truthy(term: Any) -> bool:
    if isinstance(term, str):
        return term.strip().lower() in ("true", "1", "yes")
    return bool(term)


def _as_collection(term: Any, operator: SearchOperator) -> list[Any]:
    if isinstance(term, (str, bytes)) or not isinstance(term, Collection):
        raise InvalidParameterError(
            f"Operator '{operator.value}' expects a collection term, got {term!r}",
            path="search_term",
        )
    return list(term)


class InOperator(SearchOperatorStrategy):
    @property
    def name(self) -> SearchOperator:
        return SearchOperator.IN

    def apply(self, column: Any, term: Any) -> ColumnElement[bool]:
        return cast("ColumnElement[bool]", column.in_(_as_collection(term, self.name)))


class NotInOperator(SearchOperatorStrategy):
    @property
    def name(self) -> SearchOperator:
        return SearchOperator.NOT_IN

    def apply(self, column: Any, term: Any) -> ColumnElement[bool]:
        return cast(
            "ColumnElement[bool]", column.not_in(_as_collection(term, self.name))
        )


class BetweenOperator(SearchOperatorStrategy):
    """``[low, high]`` -> ``col >= low AND col <= high``."""

    @property
    def name(self) -> SearchOperator:
        return SearchOperator.BETWEEN

    def apply(self, column: Any, term: Any) -> ColumnElement[bool]:
        bounds = _as_collection(term, self.name)
        if len(bounds) != 2:
            raise InvalidParameterError(
                f"Operator 'between' expects [low, high], got {term!r}",
                path="search_term",
            )
        low, high = bounds
        return and_(column >= low, column <= high)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class SearchOperatorRegistry:
    """
    Registry of ``SearchOperatorStrategy`` instances keyed by
    :class:`SearchOperator`.
    """

    def __init__(self) -> None:
        self._operators: dict[SearchOperator, SearchOperatorStrategy] = {}

    def register(self, operator: SearchOperatorStrategy) -> None:
        self._operators[operator.name] = operator

    def register_all(self, *operators: SearchOperatorStrategy) -> None:
        for op in operators:
            self.register(op)

    def unregister(self, name: SearchOperator) -> None:
        self._operators.pop(name, None)

    def get(self, name: SearchOperator | str) -> SearchOperatorStrategy | None:
        for key, strategy in self._operators.items():
            if key == name or key.value == name:
                return strategy
        return None

    def has(self, name: SearchOperator | str) -> bool:
        return self.get(name) is not None

    @property
    def supported_operators(self) -> set[SearchOperator]:
        return set(self._operators.keys())

    def require(self, name: Any) -> SearchOperatorStrategy:
        """
        Look up the strategy for *name*.

        Raises:
            UnsupportedOperatorError: If the operator is not registered.
        """
        strategy = self.get(name.strip().lower() if isinstance(name, str) else name)
        if strategy is None:
            raise UnsupportedOperatorError(
                str(getattr(name, "value", name)),
                [op.value for op in self._operators],
            )
        return strategy

    def apply(self, name: Any, column: Any, term: Any) -> ColumnElement[bool]:
        return self.require(name).apply(column, term)


def build_default_search_registry() -> SearchOperatorRegistry:
    """Registry with every built-in operator; ``like`` terms used verbatim."""
    registry = SearchOperatorRegistry()
    registry.register_all(
        LikeOperator(),
        ILikeOperator(),
        EqualOperator(),
        GreaterThanOperator(),
        LessThanOperator(),
        GreaterEqualOperator(),
        LessEqualOperator(),
        IsNullOperator(),
        InOperator(),
        NotInOperator(),
        BetweenOperator(),
    )
    return registry


def build_legacy_search_registry() -> SearchOperatorRegistry:
    """The seven legacy search types; ``like``/``ilike`` wrap the term."""
    registry = SearchOperatorRegistry()
    registry.register_all(
        WrappedLikeOperator(),
        WrappedILikeOperator(),
        EqualOperator(),
        GreaterThanOperator(),
        LessThanOperator(),
        GreaterEqualOperator(),
        LessEqualOperator(),
    )
    return registry


DEFAULT_SEARCH_REGISTRY: SearchOperatorRegistry = build_default_search_registry()
LEGACY_SEARCH_REGISTRY: SearchOperatorRegistry = build_legacy_search_registry()
