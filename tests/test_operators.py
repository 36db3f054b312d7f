from __future__ import annotations

import pytest

from rummage_sqlalchemy import (
    InvalidParameterError,
    SearchOperator,
    UnsupportedOperatorError,
)
from rummage_sqlalchemy.operators import (
    DEFAULT_SEARCH_REGISTRY,
    LEGACY_SEARCH_REGISTRY,
    EqualOperator,
    SearchOperatorRegistry,
    is_blank,
    wrap_like_term,
)

from models import Product


def compiled(expr) -> str:
    return str(expr.compile())


def test_default_registry_covers_every_operator() -> None:
    assert DEFAULT_SEARCH_REGISTRY.supported_operators == set(SearchOperator)


def test_legacy_registry_has_seven_operators() -> None:
    assert {op.value for op in LEGACY_SEARCH_REGISTRY.supported_operators} == {
        "like",
        "ilike",
        "eq",
        "gt",
        "lt",
        "gteq",
        "lteq",
    }


def test_like_is_verbatim() -> None:
    expr = DEFAULT_SEARCH_REGISTRY.apply("like", Product.name, "Pro%")

    assert compiled(expr) == "products.name LIKE :name_1"
    assert expr.right.value == "Pro%"


def test_ilike_lowers_both_sides() -> None:
    expr = DEFAULT_SEARCH_REGISTRY.apply(SearchOperator.ILIKE, Product.name, "pro%")

    assert compiled(expr) == "lower(products.name) LIKE lower(:name_1)"


def test_legacy_like_wraps_and_escapes_term() -> None:
    expr = LEGACY_SEARCH_REGISTRY.apply("like", Product.name, "50%_off")

    assert "ESCAPE" in compiled(expr)
    assert expr.right.value == "%50\\%\\_off%"


def test_wrap_like_term_escapes_escape_char() -> None:
    assert wrap_like_term("a\\b") == "%a\\\\b%"


def test_comparisons() -> None:
    assert compiled(DEFAULT_SEARCH_REGISTRY.apply("eq", Product.price, 1)) == (
        "products.price = :price_1"
    )
    assert compiled(DEFAULT_SEARCH_REGISTRY.apply("gt", Product.price, 1)) == (
        "products.price > :price_1"
    )
    assert compiled(DEFAULT_SEARCH_REGISTRY.apply("lt", Product.price, 1)) == (
        "products.price < :price_1"
    )
    assert compiled(DEFAULT_SEARCH_REGISTRY.apply("gteq", Product.price, 1)) == (
        "products.price >= :price_1"
    )
    assert compiled(DEFAULT_SEARCH_REGISTRY.apply("lteq", Product.price, 1)) == (
        "products.price <= :price_1"
    )


def test_is_null_accepts_false_and_strings() -> None:
    registry = DEFAULT_SEARCH_REGISTRY

    assert compiled(registry.apply("is_null", Product.name, True)) == (
        "products.name IS NULL"
    )
    assert compiled(registry.apply("is_null", Product.name, False)) == (
        "products.name IS NOT NULL"
    )
    assert compiled(registry.apply("is_null", Product.name, "true")) == (
        "products.name IS NULL"
    )
    assert not registry.require("is_null").is_blank(False)
    assert registry.require("is_null").is_blank(None)


def test_between_expands_to_bounds() -> None:
    expr = DEFAULT_SEARCH_REGISTRY.apply("between", Product.price, [10, 20])

    assert compiled(expr) == "products.price >= :price_1 AND products.price <= :price_2"


def test_between_requires_two_bounds() -> None:
    with pytest.raises(InvalidParameterError):
        DEFAULT_SEARCH_REGISTRY.apply("between", Product.price, [10])


@pytest.mark.parametrize("operator", ["in", "not_in"])
def test_membership_rejects_scalar_terms(operator) -> None:
    with pytest.raises(InvalidParameterError) as exc_info:
        DEFAULT_SEARCH_REGISTRY.apply(operator, Product.price, "10")
    assert exc_info.value.path == "search_term"


def test_membership_operators() -> None:
    assert "products.price IN" in compiled(
        DEFAULT_SEARCH_REGISTRY.apply("in", Product.price, [1, 2])
    )
    assert "products.price NOT IN" in compiled(
        DEFAULT_SEARCH_REGISTRY.apply("not_in", Product.price, (1, 2))
    )


def test_require_normalizes_case() -> None:
    assert DEFAULT_SEARCH_REGISTRY.require(" EQ ").name is SearchOperator.EQ


def test_require_unknown_operator_suggests() -> None:
    with pytest.raises(UnsupportedOperatorError) as exc_info:
        DEFAULT_SEARCH_REGISTRY.require("gteqq")

    assert exc_info.value.operator == "gteqq"
    assert "gteq" in exc_info.value.suggestions
    assert "Did you mean" in str(exc_info.value)


def test_custom_registry() -> None:
    registry = SearchOperatorRegistry()
    registry.register(EqualOperator())

    assert registry.has("eq")
    assert not registry.has("like")
    registry.unregister(SearchOperator.EQ)
    assert registry.get("eq") is None


@pytest.mark.parametrize(
    ("term", "blank"),
    [
        (None, True),
        ("", True),
        ("  ", True),
        ([], True),
        ((), True),
        ("x", False),
        (0, False),
        (False, False),
        ([0], False),
    ],
)
def test_is_blank(term, blank) -> None:
    assert is_blank(term) is blank
