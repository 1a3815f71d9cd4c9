"""Typed failures raised while resolving or applying a data scope."""

from __future__ import annotations


class DataScopeError(RuntimeError):
    """Base class for every data-scope failure."""


class InvalidScopeRule(DataScopeError, ValueError):
    """Raised when a scope rule is malformed (bad column, missing template, ...)."""


class InvalidScopeType(InvalidScopeRule):
    """Raised when a rule type is not one of the recognized scope types."""

    def __init__(self, value: object) -> None:
        super().__init__(f"Unrecognized data scope type: {value!r}")
        self.value = value


class UnresolvedRule(DataScopeError):
    """Raised when no rule was found for a query and no default was supplied."""

    def __init__(self, mapper_id: str | None = None, code: str | None = None) -> None:
        detail = f"No data scope rule for mapper {mapper_id!r}" if mapper_id else "No data scope rule"
        if code:
            detail += f" or resource code {code!r}"
        super().__init__(detail)
        self.mapper_id = mapper_id
        self.code = code


class TemplateResolutionError(DataScopeError):
    """Raised when a CUSTOM template references attributes the user does not have."""

    def __init__(self, template: str | None, missing: list[str], reason: str = "Unresolved placeholders") -> None:
        super().__init__(f"{reason} {missing} in data scope template {template!r}")
        self.template = template
        self.missing = missing


class MissingUserContext(DataScopeError):
    """Raised when a scoped query runs without a user bound to it."""
