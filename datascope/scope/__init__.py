"""
Row-level data scope resolution.

This package has no dependency on the web layer (fastapi, routers, settings).
Build a ``ScopeResolver`` from a store and a cache, then call
``sql_condition()`` with a ``DataScope`` declaration, a ``UserContext`` and
the SQL about to run.
"""

from .cache import NOT_FOUND, InMemoryScopeCache, ScopeCache
from .config import ScopeConfig, load_scope_config
from .decorators import claim_data_scope, current_data_scope, data_scope
from .errors import (
    DataScopeError,
    InvalidScopeRule,
    InvalidScopeType,
    MissingUserContext,
    TemplateResolutionError,
    UnresolvedRule,
)
from .resolver import ScopeResolver
from .store import ScopeStore, SqlScopeStore
from .template import resolve_placeholders, resolve_sql_placeholders
from .types import DataScope, ScopeRule, ScopeType, UserContext

__all__ = [
    "NOT_FOUND",
    "InMemoryScopeCache",
    "ScopeCache",
    "ScopeConfig",
    "load_scope_config",
    "claim_data_scope",
    "current_data_scope",
    "data_scope",
    "DataScopeError",
    "InvalidScopeRule",
    "InvalidScopeType",
    "MissingUserContext",
    "TemplateResolutionError",
    "UnresolvedRule",
    "ScopeResolver",
    "ScopeStore",
    "SqlScopeStore",
    "resolve_placeholders",
    "resolve_sql_placeholders",
    "DataScope",
    "ScopeRule",
    "ScopeType",
    "UserContext",
]
