from __future__ import annotations

from collections.abc import Iterator
from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from rummage_sqlalchemy import (
    RummageConfig,
    RummageOptions,
    RummageRegistry,
    SQLAlchemyRepository,
)

from models import PRICES, Base, Category, Employee, Product


@pytest.fixture
def session() -> Iterator[Session]:
    """In-memory SQLite database seeded with 2 categories and 8 products.

    Products 1-4 belong to ``Category 1`` (inserted 2023), products 5-8 to
    ``Category 2`` (inserted 2024).  Prices are ``PRICES`` in id order.
    """
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    with Session(engine) as session:
        parent = Category(id=10, name="Parent")
        first = Category(id=1, name="Category 1", parent=parent)
        second = Category(id=2, name="Category 2", parent=parent)
        session.add_all([parent, first, second])
        for index, price in enumerate(PRICES, start=1):
            session.add(
                Product(
                    id=index,
                    name=f"Product {index}",
                    internal_code=f"P{index:03d}",
                    price=price,
                    available=index % 2 == 0,
                    inserted_at=datetime(2023 if index <= 4 else 2024, index, 1),
                    category=first if index <= 4 else second,
                )
            )
        session.add_all(
            [
                Employee(company="acme", number=1, first_name="Ada", last_name="Byron"),
                Employee(company="acme", number=2, first_name="Alan", last_name="Turing"),
            ]
        )
        session.commit()
        yield session
    engine.dispose()


@pytest.fixture
def repo(session: Session) -> SQLAlchemyRepository:
    return SQLAlchemyRepository(session)


@pytest.fixture
def registry() -> RummageRegistry:
    return RummageRegistry()


@pytest.fixture
def options(repo: SQLAlchemyRepository, registry: RummageRegistry) -> RummageOptions:
    return RummageOptions(repo=repo, registry=registry)


@pytest.fixture
def config(repo: SQLAlchemyRepository, registry: RummageRegistry) -> RummageConfig:
    return RummageConfig(defaults=RummageOptions(repo=repo), registry=registry)

