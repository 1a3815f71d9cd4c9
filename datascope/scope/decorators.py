from __future__ import annotations

import functools
from collections.abc import Callable
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Any, TypeVar

from .types import DataScope, ScopeRule, ScopeType

F = TypeVar("F", bound=Callable[..., Any])


@dataclass
class _ActiveScope:
    declaration: DataScope
    claimed: bool = False


_current_scope: ContextVar[_ActiveScope | None] = ContextVar("data_scope", default=None)


def current_data_scope() -> DataScope | None:
    """Declaration of the innermost ``@data_scope`` function currently running."""
    active = _current_scope.get()
    return active.declaration if active is not None else None


def claim_data_scope() -> DataScope | None:
    """
    Take the running function's declaration for the statement about to run.

    A declaration covers one statement, like a mapper id: the first query of
    the call claims it and later queries in the same call return None here.
    """

    active = _current_scope.get()
    if active is None or active.claimed:
        return None
    active.claimed = True
    return active.declaration


def data_scope(
    *,
    code: str | None = None,
    type: ScopeType | int | str = ScopeType.ALL,
    column: str | None = "create_dept",
    field: str = "*",
    value: str | None = None,
    mapper_id: str | None = None,
) -> Callable[[F], F]:
    """
    Declare a data scope for a data-access function.

    The first query the function executes is scoped by the interceptor in
    ``datascope.db.filters``; follow-up queries (lookups on other tables,
    relationship loads) run as written. Keep one scoped statement per
    decorated function. The declared rule is only the default: a stored rule
    for the mapper id (``module.QualName`` unless given) or for ``code``
    takes precedence.
    """

    default = ScopeRule(code=code, type=ScopeType.of(type), column=column, field=field, value=value)

    def decorator(fn: F) -> F:
        declaration = DataScope(mapper_id=mapper_id or f"{fn.__module__}.{fn.__qualname__}", default=default)

        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            token = _current_scope.set(_ActiveScope(declaration))
            try:
                return fn(*args, **kwargs)
            finally:
                _current_scope.reset(token)

        setattr(wrapper, "__data_scope__", declaration)
        return wrapper  # type: ignore[return-value]

    return decorator
