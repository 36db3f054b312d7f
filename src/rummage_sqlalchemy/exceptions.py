"""
Rummage exception hierarchy.

All exceptions inherit from ``RummageError`` and provide ``to_dict()``
for API-friendly error responses.  They are configuration errors: the
pipeline never retries or swallows them.
"""

from __future__ import annotations

from difflib import get_close_matches
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterable


class RummageError(Exception):
    """Base exception for all rummage errors."""

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.__class__.__name__,
            "message": str(self),
        }


class InvalidParameterError(RummageError):
    """A parameter value could not be parsed or is out of its domain."""

    def __init__(self, message: str, path: str | None = None) -> None:
        self.message = message
        self.path = path
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "INVALID_PARAMETER",
            "message": self.message,
            "path": self.path,
        }


class MissingRequiredKeyError(RummageError):
    """
    A spec is missing keys its hook requires.

    Example error message::

        Error in params for SearchHook, no values given for keys: search_term
    """

    def __init__(self, keys: Iterable[str], hook: str | None = None) -> None:
        self.keys = list(keys)
        self.hook = hook
        where = f" for {hook}" if hook else ""
        super().__init__(
            f"Error in params{where}, no values given for keys: "
            f"{', '.join(self.keys)}"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "MISSING_REQUIRED_KEY",
            "keys": self.keys,
            "hook": self.hook,
        }


class UnknownScopeError(RummageError):
    """
    A named scope reference has no registered producer.

    Provides fuzzy-matched suggestions from the scopes registered for the
    same entity and kind.
    """

    def __init__(
        self,
        name: str,
        kind: str,
        entity_name: str,
        available: list[str] | None = None,
    ) -> None:
        self.name = name
        self.kind = kind
        self.entity_name = entity_name
        self.available = available or []
        self.suggestions = get_close_matches(name, self.available, n=3, cutoff=0.6)

        message = f"No scope '{name}' of type {kind} defined for '{entity_name}'."
        if self.suggestions:
            message += f" Did you mean: {', '.join(self.suggestions)}?"
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "UNKNOWN_SCOPE",
            "scope": self.name,
            "kind": self.kind,
            "entity": self.entity_name,
            "suggestions": self.suggestions,
        }


class UnsupportedTemplateError(RummageError):
    """A computed field names a template outside the whitelist."""

    def __init__(self, template: str, supported: list[str]) -> None:
        self.template = template
        self.supported = sorted(supported)
        super().__init__(
            f"Unsupported computed field template: '{template}'. "
            f"Supported templates: {', '.join(self.supported)}"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "UNSUPPORTED_TEMPLATE",
            "template": self.template,
            "supported": self.supported,
        }


class UnsupportedOperatorError(RummageError):
    """
    Unknown search operator.

    Provides fuzzy-matched suggestions for likely intended operators.
    """

    def __init__(self, operator: str, valid_operators: list[str]) -> None:
        self.operator = operator
        self.valid_operators = valid_operators
        self.suggestions = get_close_matches(operator, valid_operators, n=3, cutoff=0.6)

        message = f"Unsupported search operator: '{operator}'."
        if self.suggestions:
            message += f" Did you mean: {', '.join(self.suggestions)}?"
        message += f" Valid operators: {', '.join(sorted(valid_operators))}"
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "UNSUPPORTED_OPERATOR",
            "operator": self.operator,
            "suggestions": self.suggestions,
            "valid_operators": sorted(self.valid_operators),
        }


__all__: list[str] = [
    "InvalidParameterError",
    "MissingRequiredKeyError",
    "RummageError",
    "UnknownScopeError",
    "UnsupportedOperatorError",
    "UnsupportedTemplateError",
]
