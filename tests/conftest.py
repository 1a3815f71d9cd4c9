"""
Pytest fixtures for the test suite.

Data-layer tests use an in-memory SQLite engine and a connection-level
transaction that is rolled back after each test, so tests do not affect each
other. Resolver tests use ``FakeScopeStore``, which counts store hits so
caching behavior can be asserted.
"""
from __future__ import annotations

from collections.abc import Sequence

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from datascope.scope.cache import InMemoryScopeCache
from datascope.scope.resolver import ScopeResolver
from datascope.scope.types import ScopeRule, UserContext


TEST_DB_URL = "sqlite:///:memory:"


class FakeScopeStore:
    """In-memory ScopeStore keyed like the SQL tables."""

    def __init__(self) -> None:
        self.mapper_rules: list[tuple[str, int, ScopeRule]] = []
        self.code_rules: dict[str, list[ScopeRule]] = {}
        self.children: dict[int, list[int]] = {}
        self.calls: list[tuple[str, object]] = []

    def add_mapper_rule(self, mapper_id: str, role_id: int, rule: ScopeRule) -> None:
        self.mapper_rules.append((mapper_id, role_id, rule))

    def add_code_rule(self, rule: ScopeRule) -> None:
        self.code_rules.setdefault(rule.code, []).append(rule)

    def rules_by_mapper(self, mapper_id: str, role_ids: Sequence[int]) -> list[ScopeRule]:
        self.calls.append(("mapper", (mapper_id, tuple(role_ids))))
        return [rule for m, r, rule in self.mapper_rules if m == mapper_id and r in role_ids]

    def rules_by_code(self, code: str) -> list[ScopeRule]:
        self.calls.append(("code", code))
        return list(self.code_rules.get(code, []))

    def department_ancestors(self, dept_id: int) -> list[int]:
        self.calls.append(("dept", dept_id))
        return list(self.children.get(dept_id, []))

    def count(self, kind: str) -> int:
        return sum(1 for k, _ in self.calls if k == kind)


@pytest.fixture
def store() -> FakeScopeStore:
    return FakeScopeStore()


@pytest.fixture
def cache() -> InMemoryScopeCache:
    return InMemoryScopeCache()


@pytest.fixture
def resolver(store, cache) -> ScopeResolver:
    return ScopeResolver(store, cache)


@pytest.fixture
def user() -> UserContext:
    return UserContext(
        user_id=7,
        dept_id="10,20",
        role_id="1,2",
        tenant_id="000000",
        account="ed",
        user_name="Ed Engineer",
        role_name="staff",
    )


@pytest.fixture
def engine():
    """Create a fresh in-memory SQLite engine for each test."""
    return create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        echo=False,
    )


@pytest.fixture
def tables(engine):
    """Create all ORM tables on the test engine."""
    from datascope.db.base import Base
    import datascope.models.hr  # noqa: F401
    import datascope.models.scope  # noqa: F401

    Base.metadata.create_all(bind=engine)
    return engine


@pytest.fixture
def connection(tables):
    """Connection with an open transaction, rolled back after the test."""
    connection = tables.connect()
    transaction = connection.begin()
    yield connection
    transaction.rollback()
    connection.close()


@pytest.fixture
def session_factory(connection):
    """Session factory bound to the test connection (sees uncommitted test data)."""
    return sessionmaker(
        bind=connection,
        autocommit=False,
        autoflush=False,
        class_=Session,
    )


@pytest.fixture
def db_session(session_factory):
    """
    Provide a Session bound to the test DB.

    Use this in tests that need a database (e.g. data layer tests). The
    surrounding transaction is rolled back so the next test gets a clean state.
    """
    session = session_factory()
    yield session
    session.close()
