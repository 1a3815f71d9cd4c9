from __future__ import annotations

import logging
import re
from collections.abc import Callable
from contextvars import ContextVar
from typing import Any

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from datascope.scope.config import ScopeConfig
from datascope.scope.decorators import claim_data_scope
from datascope.scope.errors import MissingUserContext
from datascope.scope.resolver import ScopeResolver
from datascope.scope.types import DataScope, UserContext

logger = logging.getLogger(__name__)

# Set while the resolver runs so its own store queries are never scoped.
_resolving: ContextVar[bool] = ContextVar("data_scope_resolving", default=False)


@event.listens_for(Session, "do_orm_execute")
def _bind_scope_user(execute_state) -> None:
    """
    Carry the request's user from ``Session.info`` to the statement.

    Existing query code stays unchanged:
        db.execute(text("select * from employees"))
    is scoped by the cursor-level listener below using this option.
    """

    user = execute_state.session.info.get("scope_user")
    if user is None:
        return
    execute_state.update_execution_options(scope_user=user)


def _declaration_for(options: dict[str, Any], config: ScopeConfig | None) -> DataScope | None:
    declaration = options.get("data_scope")
    if declaration is not None:
        return declaration

    declaration = claim_data_scope()
    if declaration is not None:
        return declaration

    mapper_id = options.get("mapper_id")
    if mapper_id and config is not None:
        return config.default_for(mapper_id)
    return None


# Leading whitespace, comments and opening parentheses before the first keyword.
_PREFIX_RE = re.compile(r"\A(?:\s+|--[^\n]*(?:\n|\Z)|/\*.*?\*/|\()*", re.DOTALL)
_VERB_RE = re.compile(r"[A-Za-z]+")

# Statements that do not return rows to filter; anything else is wrapped.
_NON_QUERY_VERBS = frozenset(
    {
        "insert",
        "update",
        "delete",
        "replace",
        "merge",
        "upsert",
        "create",
        "drop",
        "alter",
        "truncate",
        "begin",
        "commit",
        "rollback",
        "savepoint",
        "release",
        "pragma",
        "set",
    }
)


def _statement_verb(statement: str) -> str:
    match = _VERB_RE.match(statement, _PREFIX_RE.match(statement).end())
    return match.group(0).lower() if match else ""


def _is_write(statement: str, context) -> bool:
    if context.isinsert or context.isupdate or context.isdelete or context.isddl:
        return True
    return _statement_verb(statement) in _NON_QUERY_VERBS


def install_data_scope(engine: Engine, resolver: ScopeResolver, config: ScopeConfig | None = None) -> Callable | None:
    """
    Register the query rewrite on ``engine``.

    Every statement that is not a write is rewritten when a declaration is
    found: the ``data_scope`` execution option, the running ``@data_scope``
    function (its first statement only), or the config default for the
    ``mapper_id`` execution option. Statements the listener cannot classify
    are wrapped too, so an unusual prefix (comments, parentheses) fails in
    the database instead of returning unfiltered rows. Returns the listener so
    it can be removed with ``uninstall_data_scope``.
    """

    if config is not None and not config.enabled:
        logger.info("Data scope disabled by config; queries will not be rewritten")
        return None

    def _apply_data_scope(conn, cursor, statement, parameters, context, executemany):
        if executemany or context is None or _resolving.get():
            return statement, parameters
        if _is_write(statement, context):
            return statement, parameters

        options = dict(context.execution_options)
        declaration = _declaration_for(options, config)
        if declaration is None:
            return statement, parameters

        user: UserContext | None = options.get("scope_user")
        if user is None:
            raise MissingUserContext(f"Scoped query for mapper {declaration.mapper_id!r} has no user bound")

        token = _resolving.set(True)
        try:
            scoped = resolver.sql_condition(declaration, user, statement)
        finally:
            _resolving.reset(token)

        if scoped is None:
            return statement, parameters
        logger.debug("Rewrote query for mapper=%s user=%s", declaration.mapper_id, user.user_id)
        return scoped, parameters

    event.listen(engine, "before_cursor_execute", _apply_data_scope, retval=True)
    return _apply_data_scope


def uninstall_data_scope(engine: Engine, listener: Callable | None) -> None:
    if listener is not None:
        event.remove(engine, "before_cursor_execute", listener)
