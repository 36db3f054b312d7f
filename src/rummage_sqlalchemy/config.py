"""
Rummage options and configuration.

``RummageOptions`` is the call-site value handed to :func:`rummage`;
``RummageConfig`` holds process-wide defaults, per-entity overrides and the
scope/field registry.  Both are immutable.  Options are resolved once per
call with the precedence::

    call-site options > per-entity options > global defaults > built-ins
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

from .exceptions import InvalidParameterError
from .hooks import HOOKS, Hook
from .paginate import DEFAULT_PER_PAGE
from .registry import RummageRegistry

if TYPE_CHECKING:
    from .repository import IRepository

DEFAULT_STAGES: tuple[str, ...] = ("search", "sort", "paginate")

_OPTION_KEYS = frozenset(
    {"hooks", "stages", "per_page", "count_after_filter", "repo"}
)


@dataclass(frozen=True)
class RummageOptions:
    """
    Immutable per-call options.

    Attributes:
        hooks: Stage name to hook.  A hook is a :class:`Hook` instance, a
            ``Hook`` subclass or a built-in name from ``HOOKS``.
        stages: Stage order.  ``None`` inherits.
        repo: Repository used by the offset paginate hook to count rows.
        per_page: Default page size when params carry none.
        count_after_filter: Format each stage against the statement built
            by the previous stages, so the paginate count sees search
            filters.
        entity: Base entity override; defaults to the statement's first
            selected entity.
        registry: Scopes and computed fields.
    """

    hooks: Mapping[str, Hook | type[Hook] | str] = field(default_factory=dict)
    stages: tuple[str, ...] | None = None
    repo: IRepository | None = None
    per_page: int | None = None
    count_after_filter: bool | None = None
    entity: Any = None
    registry: RummageRegistry | None = None

    def merge(self, other: RummageOptions) -> RummageOptions:
        """
        Layer *other* on top of ``self``.

        - Hook maps are combined, ``other`` winning per stage.
        - Every other attribute set on ``other`` replaces ``self``'s.
        """
        return RummageOptions(
            hooks={**self.hooks, **other.hooks},
            stages=other.stages if other.stages is not None else self.stages,
            repo=other.repo if other.repo is not None else self.repo,
            per_page=other.per_page if other.per_page is not None else self.per_page,
            count_after_filter=(
                other.count_after_filter
                if other.count_after_filter is not None
                else self.count_after_filter
            ),
            entity=other.entity if other.entity is not None else self.entity,
            registry=other.registry if other.registry is not None else self.registry,
        )

    def hook(self, stage: str) -> Hook | None:
        """
        The hook configured for *stage*, or ``None``.

        Hooks declaring a ``stage`` may only be configured for that stage;
        hooks with an empty ``stage`` fit any.

        Raises:
            InvalidParameterError: A hook name not present in ``HOOKS``, or a
                hook configured for a stage other than its own.
        """
        configured = self.hooks.get(stage)
        if configured is None:
            return None
        if isinstance(configured, Hook):
            hook = configured
        elif isinstance(configured, type) and issubclass(configured, Hook):
            hook = configured()
        else:
            hook_class = HOOKS.get(str(configured))
            if hook_class is None:
                raise InvalidParameterError(
                    f"Unknown hook {configured!r} for stage '{stage}'; "
                    f"expected one of: {', '.join(sorted(HOOKS))}",
                    path=f"hooks.{stage}",
                )
            hook = hook_class()
        if hook.stage and hook.stage != stage:
            raise InvalidParameterError(
                f"{hook!r} runs in stage '{hook.stage}', not '{stage}'",
                path=f"hooks.{stage}",
            )
        return hook

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> RummageOptions:
        """
        Build options from plain data.

        Stage names map to hooks directly; ``hooks`` may also be given as a
        nested mapping::

            RummageOptions.from_mapping(
                {"search": "simple_search", "per_page": 20}
            )
        """
        hooks: dict[str, Any] = dict(data.get("hooks") or {})
        values: dict[str, Any] = {}
        for key, value in data.items():
            if key in DEFAULT_STAGES:
                hooks[key] = value
            elif key == "stages":
                values["stages"] = tuple(value)
            elif key in _OPTION_KEYS - {"hooks"}:
                values[key] = value
            elif key != "hooks":
                raise InvalidParameterError(
                    f"Unknown rummage option '{key}'", path=str(key)
                )

        options = cls(hooks=hooks, **values)
        for stage in hooks:
            options.hook(stage)
        return options


BUILTIN_OPTIONS = RummageOptions(
    hooks={"search": "search", "sort": "sort", "paginate": "paginate"},
    stages=DEFAULT_STAGES,
    per_page=DEFAULT_PER_PAGE,
    count_after_filter=False,
)


@dataclass(frozen=True)
class RummageConfig:
    """Global defaults plus per-entity overrides.

    Usage::

        config = RummageConfig(
            defaults=RummageOptions(repo=repo, per_page=20),
            entity_options={Product: RummageOptions(hooks={"sort": "simple_sort"})},
        )
        stmt, params = rummage(select(Product), params, config=config)
    """

    defaults: RummageOptions = field(default_factory=RummageOptions)
    entity_options: Mapping[Any, RummageOptions] = field(default_factory=dict)
    registry: RummageRegistry = field(default_factory=RummageRegistry)

    def resolve(
        self, entity: Any, options: RummageOptions | None = None
    ) -> RummageOptions:
        resolved = (
            BUILTIN_OPTIONS.merge(RummageOptions(registry=self.registry))
            .merge(self.defaults)
            .merge(self.entity_options.get(entity, RummageOptions()))
        )
        if options is not None:
            resolved = resolved.merge(options)
        if resolved.entity is None:
            resolved = replace(resolved, entity=entity)
        return resolved

    @classmethod
    def from_mapping(
        cls,
        data: Mapping[str, Any],
        *,
        registry: RummageRegistry | None = None,
    ) -> RummageConfig:
        """
        Build a config from plain data.

        ``entities`` maps mapped classes to option mappings; every other key
        is a global option (see :meth:`RummageOptions.from_mapping`).
        """
        data = dict(data)
        entities = data.pop("entities", None) or {}
        return cls(
            defaults=RummageOptions.from_mapping(data),
            entity_options={
                entity: RummageOptions.from_mapping(values)
                for entity, values in entities.items()
            },
            registry=registry if registry is not None else RummageRegistry(),
        )


DEFAULT_CONFIG = RummageConfig()
