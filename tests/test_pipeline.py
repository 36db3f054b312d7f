from __future__ import annotations

import logging

import pytest
from sqlalchemy import select

from rummage_sqlalchemy import (
    MissingRequiredKeyError,
    Rummage,
    RummageConfig,
    RummageOptions,
    SimpleSortHook,
    UnknownScopeError,
    rummage,
)

from models import Category, Product, names

PARAMS = {
    "search": {"price": {"search_type": "gteq", "search_term": 30}},
    "sort": {"field": "name", "order": "desc"},
    "paginate": {"page": 1, "per_page": 3},
}


class ExplodingRepository:
    def count(self, stmt) -> int:
        raise AssertionError("count must not be called")

    def all(self, stmt) -> list:
        raise AssertionError("all must not be called")


def test_all_stages(options, repo) -> None:
    stmt, params = rummage(select(Product), PARAMS, options)

    assert names(repo.all(stmt)) == ["Product 8", "Product 7", "Product 6"]
    assert params["search"]["price"]["search_expr"] == "where"
    assert params["sort"]["order"] == "desc"


def test_count_uses_unfiltered_statement_by_default(options) -> None:
    _, params = rummage(select(Product), PARAMS, options)

    assert params["paginate"]["total_count"] == 8
    assert params["paginate"]["max_page"] == 3


def test_count_after_filter(repo, registry) -> None:
    options = RummageOptions(repo=repo, registry=registry, count_after_filter=True)
    stmt, params = rummage(select(Product), PARAMS, options)

    assert params["paginate"]["total_count"] == 4
    assert params["paginate"]["max_page"] == 2
    assert len(repo.all(stmt)) == 3


def test_absent_stages_are_skipped(options) -> None:
    stmt, params = rummage(select(Product), {"sort": PARAMS["sort"]}, options)

    assert "WHERE" not in str(stmt)
    assert "LIMIT" not in str(stmt)
    assert set(params) == {"sort"}


def test_empty_params_paginate_with_defaults(options) -> None:
    stmt, params = rummage(select(Product), {}, options)

    assert params == {
        "paginate": {"page": 1, "per_page": 10, "total_count": 8, "max_page": 1}
    }
    assert "LIMIT" in str(stmt)


def test_empty_result_reports_first_page(options) -> None:
    stmt, params = rummage(
        select(Product).where(Product.price > 100),
        {"paginate": {"page": 5, "per_page": 10}},
        options,
    )

    assert params["paginate"] == {
        "page": 1,
        "per_page": 10,
        "total_count": 0,
        "max_page": 0,
    }
    assert "OFFSET 0" in str(stmt.compile(compile_kwargs={"literal_binds": True}))


def test_empty_params_without_repo_are_a_no_op() -> None:
    stmt = select(Product)
    result, params = rummage(stmt, None)

    assert result is stmt
    assert params == {}


def test_formatted_params_reformat_to_themselves(options) -> None:
    _, once = rummage(select(Product), PARAMS, options)
    _, twice = rummage(select(Product), once, options)

    assert twice == once


def test_unknown_scope_stops_before_execution(registry) -> None:
    options = RummageOptions(repo=ExplodingRepository(), registry=registry)
    params = {"search": {"bogus": "x"}, "paginate": {"page": 1}}

    with pytest.raises(UnknownScopeError) as exc_info:
        rummage(select(Product), params, options)
    assert exc_info.value.name == "bogus"


def test_stages_limit_what_runs(options) -> None:
    stmt, params = rummage(
        select(Product), PARAMS, options.merge(RummageOptions(stages=("search",)))
    )

    assert "ORDER BY" not in str(stmt)
    assert "LIMIT" not in str(stmt)
    assert params["paginate"] == PARAMS["paginate"]


def test_call_site_hook_override(options, repo) -> None:
    stmt, params = rummage(
        select(Product),
        {"sort": "-price"},
        options.merge(RummageOptions(hooks={"sort": SimpleSortHook()})),
    )

    assert params["sort"] == {"field": "price", "assoc": [], "order": "desc", "ci": False}
    assert str(stmt).endswith("ORDER BY products.price DESC")


def test_config_per_entity_hooks(config, repo) -> None:
    config = RummageConfig(
        defaults=config.defaults,
        entity_options={Product: RummageOptions(hooks={"search": "simple_search"})},
        registry=config.registry,
    )
    stmt, _ = rummage(
        select(Product).order_by(Product.id),
        {"search": {"name": {"search_type": "like", "search_term": "uct 3"}}},
        config=config,
    )

    assert names(repo.all(stmt)) == ["Product 3"]


def test_explicit_entity_used_when_running(options) -> None:
    stmt = select(Category, Product).join(Category.products)
    stmt, _ = rummage(
        stmt,
        {
            "search": {"price": {"search_type": "gteq", "search_term": 30}},
            "sort": {"field": "price", "order": "desc"},
        },
        options.merge(RummageOptions(entity=Product)),
    )
    sql = str(stmt)

    assert "WHERE products.price >= :price_1" in sql
    assert sql.endswith("ORDER BY products.price DESC")


def test_debug_logging(options, caplog) -> None:
    with caplog.at_level(logging.DEBUG, logger="rummage_sqlalchemy"):
        rummage(select(Product), PARAMS, options)

    assert "Formatting stage 'search'" in caplog.text
    assert "Paginate count: total_count=8" in caplog.text


class TestRummage:
    def test_fetch(self, config) -> None:
        rows, params = Rummage(Product, config).fetch(PARAMS)

        assert names(rows) == ["Product 8", "Product 7", "Product 6"]
        assert params["paginate"]["total_count"] == 8

    def test_rummage_with_statement(self, config, repo) -> None:
        products = Rummage(Product, config)
        stmt, _ = products.rummage(
            {"sort": {"field": "id", "order": "asc"}},
            stmt=select(Product).where(Product.price == 20),
        )

        assert names(repo.all(stmt)) == ["Product 3", "Product 4"]

    def test_fetch_requires_repo(self) -> None:
        with pytest.raises(MissingRequiredKeyError):
            Rummage(Product, RummageConfig()).fetch(PARAMS)
