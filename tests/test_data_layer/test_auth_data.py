"""
Tests for user-loading data access (ORM) and the UserContext snapshot.

Uses db_session fixture: in-memory SQLite, rolled back after each test.
"""
from __future__ import annotations

import pytest
from fastapi import HTTPException

from datascope.models.scope import Department, Role, User
from datascope.security.auth import load_user, to_user_context


def _department(db_session) -> Department:
    dept = Department(name="IT", code="IT", parent_id=1, ancestors="0,1")
    db_session.add(dept)
    db_session.flush()
    return dept


def test_load_user_returns_user_with_department_and_roles(db_session):
    # Arrange: create department, role, user (like init_db does)
    dept = _department(db_session)

    role = Role(name="manager", description="Manager role")
    db_session.add(role)
    db_session.flush()

    user = User(account="testuser", name="Test User", email="test@example.com", dept_id=dept.id, is_active=True)
    user.roles.append(role)
    db_session.add(user)
    db_session.commit()

    # Act
    loaded = load_user(db_session, user.id)

    # Assert
    assert loaded.id == user.id
    assert loaded.account == "testuser"
    assert loaded.department is not None
    assert loaded.department.code == "IT"
    assert len(loaded.roles) == 1
    assert loaded.roles[0].name == "manager"


def test_to_user_context_flattens_roles_and_department(db_session):
    dept = _department(db_session)
    staff = Role(name="staff")
    manager = Role(name="manager")
    db_session.add_all([staff, manager])
    db_session.flush()

    user = User(account="mona", name="Mona", email="mona@example.com", dept_id=dept.id)
    user.roles.extend([manager, staff])
    db_session.add(user)
    db_session.commit()

    ctx = to_user_context(load_user(db_session, user.id))

    assert ctx.user_id == user.id
    assert ctx.dept_ids == [dept.id]
    assert ctx.role_ids == sorted([staff.id, manager.id])
    assert ctx.role_name == "staff,manager"
    assert ctx.tenant_id == "000000"
    assert ctx.to_attributes()["account"] == "mona"


def test_load_user_raises_when_not_found(db_session):
    with pytest.raises(HTTPException) as exc_info:
        load_user(db_session, 99999)
    assert exc_info.value.status_code == 401


def test_load_user_raises_when_inactive(db_session):
    dept = _department(db_session)
    user = User(account="inactive", name="Inactive", email="inactive@example.com", dept_id=dept.id, is_active=False)
    db_session.add(user)
    db_session.commit()

    with pytest.raises(HTTPException) as exc_info:
        load_user(db_session, user.id)
    assert exc_info.value.status_code == 401
