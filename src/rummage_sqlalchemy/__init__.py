from .associations import AssociationStep, parse_association_path, resolve_associations
from .config import DEFAULT_STAGES, RummageConfig, RummageOptions
from .exceptions import (
    InvalidParameterError,
    MissingRequiredKeyError,
    RummageError,
    UnknownScopeError,
    UnsupportedOperatorError,
    UnsupportedTemplateError,
)
from .fields import ComputedField, PlainField, computed, resolve_field
from .hooks import (
    HOOKS,
    Hook,
    KeysetPaginateHook,
    PaginateHook,
    SearchHook,
    SimpleSearchHook,
    SimpleSortHook,
    SortHook,
)
from .operators import SearchOperatorRegistry, SearchOperatorStrategy
from .paginate import KeysetPaginateSpec, PaginateSpec, keyset_paginate, paginate
from .pipeline import Rummage, rummage
from .registry import RummageRegistry
from .repository import IRepository, SQLAlchemyRepository
from .search import SearchSpec, compile_search, compile_search_field
from .sort import SortSpec, compile_sort, compile_sorts
from .types import CombineMode, JoinKind, ScopeKind, SearchOperator, SortOrder

__all__ = [
    # Pipeline
    "rummage",
    "Rummage",
    "RummageOptions",
    "RummageConfig",
    "DEFAULT_STAGES",
    "RummageRegistry",
    # Hooks
    "HOOKS",
    "Hook",
    "SearchHook",
    "SimpleSearchHook",
    "SortHook",
    "SimpleSortHook",
    "PaginateHook",
    "KeysetPaginateHook",
    # Compilers
    "SearchSpec",
    "compile_search",
    "compile_search_field",
    "SortSpec",
    "compile_sort",
    "compile_sorts",
    "PaginateSpec",
    "KeysetPaginateSpec",
    "paginate",
    "keyset_paginate",
    "AssociationStep",
    "parse_association_path",
    "resolve_associations",
    "PlainField",
    "ComputedField",
    "computed",
    "resolve_field",
    "SearchOperatorRegistry",
    "SearchOperatorStrategy",
    # Value types
    "CombineMode",
    "JoinKind",
    "ScopeKind",
    "SearchOperator",
    "SortOrder",
    # Repository
    "IRepository",
    "SQLAlchemyRepository",
    # Exceptions
    "RummageError",
    "InvalidParameterError",
    "MissingRequiredKeyError",
    "UnknownScopeError",
    "UnsupportedOperatorError",
    "UnsupportedTemplateError",
]
