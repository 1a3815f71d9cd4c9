from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Protocol

from sqlalchemy import literal, select
from sqlalchemy.orm import Session

from datascope.models.scope import Department, ScopeData, role_scope

from .types import ScopeRule

logger = logging.getLogger(__name__)


class ScopeStore(Protocol):
    """Read-only queries the resolver needs from the relational store."""

    def rules_by_mapper(self, mapper_id: str, role_ids: Sequence[int]) -> list[ScopeRule]: ...

    def rules_by_code(self, code: str) -> list[ScopeRule]: ...

    def department_ancestors(self, dept_id: int) -> list[int]: ...


_RULE_COLUMNS = (
    ScopeData.resource_code,
    ScopeData.scope_column,
    ScopeData.scope_field,
    ScopeData.scope_type,
    ScopeData.scope_value,
)


class SqlScopeStore:
    """
    SQLAlchemy-backed store.

    Each lookup opens a short-lived session from ``session_factory`` so the
    store never shares a transaction with the query being scoped.
    """

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def rules_by_mapper(self, mapper_id: str, role_ids: Sequence[int]) -> list[ScopeRule]:
        if not role_ids:
            return []

        bound_scopes = select(role_scope.c.scope_id).where(role_scope.c.role_id.in_(list(role_ids)))
        stmt = (
            select(*_RULE_COLUMNS)
            .where(
                ScopeData.scope_class == mapper_id,
                ScopeData.is_deleted.is_(False),
                ScopeData.id.in_(bound_scopes),
            )
            .order_by(ScopeData.id)
        )
        with self._session_factory() as db:
            rows = db.execute(stmt).mappings().all()
        logger.debug("Loaded %d scope rules mapper=%s roles=%s", len(rows), mapper_id, list(role_ids))
        return [ScopeRule.from_row(row) for row in rows]

    def rules_by_code(self, code: str) -> list[ScopeRule]:
        stmt = (
            select(*_RULE_COLUMNS)
            .where(ScopeData.resource_code == code, ScopeData.is_deleted.is_(False))
            .order_by(ScopeData.id)
        )
        with self._session_factory() as db:
            rows = db.execute(stmt).mappings().all()
        logger.debug("Loaded %d scope rules code=%s", len(rows), code)
        return [ScopeRule.from_row(row) for row in rows]

    def department_ancestors(self, dept_id: int) -> list[int]:
        """
        Departments whose ancestor chain contains ``dept_id``.

        Matches whole tokens of the comma-delimited ``ancestors`` column, so
        department 1 does not pick up a chain that only mentions 10.
        """

        chain = literal(",") + Department.ancestors + literal(",")
        stmt = (
            select(Department.id)
            .where(chain.like(f"%,{int(dept_id)},%"), Department.is_deleted.is_(False))
            .order_by(Department.id)
        )
        with self._session_factory() as db:
            return [int(dept) for dept in db.scalars(stmt).all()]
