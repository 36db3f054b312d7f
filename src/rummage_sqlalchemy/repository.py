"""IRepository: the execution collaborator rummage needs."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from sqlalchemy import func, select

if TYPE_CHECKING:
    from sqlalchemy import Select
    from sqlalchemy.orm import Session


@runtime_checkable
class IRepository(Protocol):
    """
    Executes statements on behalf of the pipeline.

    Only the offset paginate hook calls ``count``; ``all`` is used by
    :meth:`Rummage.fetch`.  Statement timeouts and thread safety are the
    implementation's concern.
    """

    def count(self, stmt: Select[Any]) -> int: ...

    def all(self, stmt: Select[Any]) -> list[Any]: ...


class SQLAlchemyRepository:
    """
    ``IRepository`` over a synchronous SQLAlchemy ``Session``.

    ``count`` wraps the statement in a subquery and counts its rows::

        repo = SQLAlchemyRepository(session)
        stmt, params = rummage(select(Product), params, RummageOptions(repo=repo))
        products = repo.all(stmt)
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def count(self, stmt: Select[Any]) -> int:
        counted = select(func.count()).select_from(stmt.subquery())
        return int(self.session.execute(counted).scalar_one())

    def all(self, stmt: Select[Any]) -> list[Any]:
        return list(self.session.scalars(stmt).all())
