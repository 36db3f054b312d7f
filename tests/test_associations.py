from __future__ import annotations

import pytest
from sqlalchemy import select

from rummage_sqlalchemy import (
    AssociationStep,
    InvalidParameterError,
    JoinKind,
    parse_association_path,
    resolve_associations,
)
from rummage_sqlalchemy.associations import target_entity

from models import Category, Product


class TestParseAssociationPath:
    def test_empty(self) -> None:
        assert parse_association_path(None) == ()
        assert parse_association_path([]) == ()

    def test_tuples(self) -> None:
        path = parse_association_path([("inner", "category"), ("left", "parent")])

        assert path == (
            AssociationStep(JoinKind.INNER, "category"),
            AssociationStep(JoinKind.LEFT, "parent"),
        )

    def test_single_key_mappings_and_lists(self) -> None:
        assert parse_association_path([{"left": "category"}, ["cross", "parent"]]) == (
            AssociationStep(JoinKind.LEFT, "category"),
            AssociationStep(JoinKind.CROSS, "parent"),
        )

    def test_mapping_is_a_single_step(self) -> None:
        assert parse_association_path({"INNER": "category"}) == (
            AssociationStep(JoinKind.INNER, "category"),
        )

    def test_unknown_join_kind(self) -> None:
        with pytest.raises(InvalidParameterError) as exc_info:
            parse_association_path([("outer", "category")], path="search.name.assoc")

        assert exc_info.value.path == "search.name.assoc[0]"

    def test_malformed_step(self) -> None:
        with pytest.raises(InvalidParameterError):
            parse_association_path(["category"])
        with pytest.raises(InvalidParameterError):
            parse_association_path("category")

    def test_wire_round_trip(self) -> None:
        path = parse_association_path([("inner", "category")])

        assert [step.to_wire() for step in path] == [("inner", "category")]


class TestResolveAssociations:
    def test_empty_path_returns_base_entity(self) -> None:
        stmt = select(Product)
        result, target = resolve_associations(stmt, ())

        assert result is stmt
        assert target is Product

    def test_inner_join(self) -> None:
        path = parse_association_path([("inner", "category")])
        stmt, _ = resolve_associations(select(Product), path)

        assert (
            "FROM products JOIN categories AS categories_1 "
            "ON categories_1.id = products.category_id"
        ) in str(stmt)

    def test_left_join(self) -> None:
        path = parse_association_path([("left", "category")])
        stmt, _ = resolve_associations(select(Product), path)

        assert "LEFT OUTER JOIN categories AS categories_1" in str(stmt)

    def test_cross_join(self) -> None:
        path = parse_association_path([("cross", "category")])
        stmt, _ = resolve_associations(select(Product), path)
        sql = str(stmt)

        assert "JOIN categories AS categories_1 ON " in sql
        assert "OUTER" not in sql
        assert "products.category_id" not in sql.split("FROM", 1)[1]

    def test_steps_chain_from_previous_join(self) -> None:
        path = parse_association_path([("inner", "category"), ("left", "parent")])
        stmt, target = resolve_associations(select(Product), path)
        sql = str(stmt)

        assert "JOIN categories AS categories_1" in sql
        assert "LEFT OUTER JOIN categories AS categories_2 ON" in sql
        assert "categories_1.parent_id" in sql
        assert target is not Category

    def test_path_resolves_like_its_prefix_then_suffix(self) -> None:
        both = parse_association_path([("inner", "category"), ("inner", "parent")])
        prefix, suffix = both[:1], both[1:]

        whole, whole_target = resolve_associations(select(Product), both)
        stepwise, first_target = resolve_associations(select(Product), prefix)
        stepwise, last_target = resolve_associations(
            stepwise, suffix, entity=first_target
        )

        assert str(whole.where(whole_target.name == "x")) == str(
            stepwise.where(last_target.name == "x")
        )

    def test_same_path_compiles_identically(self) -> None:
        path = parse_association_path([("inner", "category")])
        first, _ = resolve_associations(select(Product), path)
        second, _ = resolve_associations(select(Product), path)

        assert str(first) == str(second)

    def test_unknown_relation_surfaces_attribute_error(self) -> None:
        path = parse_association_path([("inner", "supplier")])

        with pytest.raises(AttributeError):
            resolve_associations(select(Product), path)


def test_target_entity_walks_relations() -> None:
    path = parse_association_path([("inner", "category"), ("inner", "parent")])

    assert target_entity(Product, path) is Category
    assert target_entity(Product, ()) is Product
