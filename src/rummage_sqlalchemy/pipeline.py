"""
The rummage pipeline: format every stage's params, then run every stage.

::

    stmt, params = rummage(
        select(Product),
        {"search": {"price": {"search_type": "lteq", "search_term": 10}},
         "sort": {"field": "name", "order": "asc"},
         "paginate": {"page": 2, "per_page": 20}},
        RummageOptions(repo=SQLAlchemyRepository(session)),
    )

By default every stage is formatted against the statement passed in, so the
paginate count covers the unfiltered statement.  With
``count_after_filter=True`` each stage is formatted against the statement
the previous stages produced, and the count reflects the search.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import select

from .config import DEFAULT_CONFIG, RummageConfig, RummageOptions
from .exceptions import MissingRequiredKeyError
from .query_utils import base_entity

if TYPE_CHECKING:
    from collections.abc import Mapping

    from sqlalchemy import Select

    from .hooks import Hook

logger = logging.getLogger(__name__)


def _stage_plan(
    params: Mapping[str, Any], options: RummageOptions
) -> list[tuple[str, Hook]]:
    plan: list[tuple[str, Hook]] = []
    for stage in options.stages or ():
        hook = options.hook(stage)
        if hook is None:
            logger.debug("No hook configured for stage %r", stage)
            continue
        if stage in params:
            plan.append((stage, hook))
    return plan


def rummage(
    stmt: Select[Any],
    params: Mapping[str, Any] | None,
    options: RummageOptions | None = None,
    *,
    config: RummageConfig | None = None,
) -> tuple[Select[Any], dict[str, Any]]:
    """
    Apply search, sort and paginate params to *stmt*.

    Returns the transformed statement and the normalized params.  Stages
    whose key is absent from *params* are skipped.  Empty params paginate
    with defaults when a repository is configured and leave the statement
    untouched otherwise.

    Raises:
        RummageError: Any formatting error; nothing is executed in that case
            apart from a paginate count already performed.
    """
    config = config if config is not None else DEFAULT_CONFIG
    if options is not None and options.entity is not None:
        entity = options.entity
    else:
        entity = base_entity(stmt)
    resolved = config.resolve(entity, options)

    raw: dict[str, Any] = dict(params or {})
    if not raw:
        if resolved.repo is None or "paginate" not in (resolved.stages or ()):
            return stmt, {}
        raw = {"paginate": {}}

    plan = _stage_plan(raw, resolved)
    normalized = dict(raw)

    if resolved.count_after_filter:
        for stage, hook in plan:
            logger.debug("Formatting and running stage %r with %r", stage, hook)
            normalized[stage] = hook.format_params(stmt, raw[stage], resolved)
            stmt = hook.run(stmt, normalized[stage], entity=resolved.entity)
        return stmt, normalized

    for stage, hook in plan:
        logger.debug("Formatting stage %r with %r", stage, hook)
        normalized[stage] = hook.format_params(stmt, raw[stage], resolved)
    for stage, hook in plan:
        logger.debug("Running stage %r with %r", stage, hook)
        stmt = hook.run(stmt, normalized[stage], entity=resolved.entity)
    return stmt, normalized


class Rummage:
    """
    A config bound to one entity, for repeated calls.

    Usage::

        products = Rummage(Product, config)
        rows, params = products.fetch(request_params)
    """

    def __init__(
        self,
        entity: Any,
        config: RummageConfig | None = None,
        options: RummageOptions | None = None,
    ) -> None:
        self.entity = entity
        self.config = config if config is not None else DEFAULT_CONFIG
        self.options = options if options is not None else RummageOptions()

    def _options(self, options: RummageOptions | None) -> RummageOptions:
        bound = self.options.merge(RummageOptions(entity=self.entity))
        return bound.merge(options) if options is not None else bound

    def statement(self) -> Select[Any]:
        return select(self.entity)

    def rummage(
        self,
        params: Mapping[str, Any] | None,
        stmt: Select[Any] | None = None,
        options: RummageOptions | None = None,
    ) -> tuple[Select[Any], dict[str, Any]]:
        stmt = stmt if stmt is not None else self.statement()
        return rummage(stmt, params, self._options(options), config=self.config)

    def fetch(
        self,
        params: Mapping[str, Any] | None,
        stmt: Select[Any] | None = None,
        options: RummageOptions | None = None,
    ) -> tuple[list[Any], dict[str, Any]]:
        """
        Rummage, then execute through the configured repository.

        Raises:
            MissingRequiredKeyError: No repository configured.
        """
        merged = self._options(options)
        repo = self.config.resolve(self.entity, merged).repo
        if repo is None:
            raise MissingRequiredKeyError(["repo"], hook=type(self).__name__)
        stmt, params = self.rummage(params, stmt, options)
        return repo.all(stmt), params
