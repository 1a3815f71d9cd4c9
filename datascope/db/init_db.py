from __future__ import annotations

from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import Session

from datascope.db.base import Base
from datascope.db.session import SessionLocal, engine
from datascope.models.hr import Employee
from datascope.models.scope import Department, Role, ScopeData, User
from datascope.scope.types import ScopeType


def init_db() -> None:
    """
    Create tables + seed demo data.

    Small and deterministic: a four-department tree, three roles, one
    resource-level rule and role-specific mapper overrides.
    """

    Base.metadata.create_all(bind=engine)

    with SessionLocal() as db:
        if _has_seed_data(db):
            return
        _seed(db)


def _has_seed_data(db: Session) -> bool:
    return db.execute(select(Department.id).limit(1)).first() is not None


def _seed(db: Session) -> None:
    # Department tree: Head Office > Engineering > Platform, Head Office > Finance
    head = Department(id=1, parent_id=0, ancestors="0", name="Head Office", code="HQ")
    eng = Department(id=2, parent_id=1, ancestors="0,1", name="Engineering", code="ENG")
    platform = Department(id=3, parent_id=2, ancestors="0,1,2", name="Platform", code="PLT")
    fin = Department(id=4, parent_id=1, ancestors="0,1", name="Finance", code="FIN")
    db.add_all([head, eng, platform, fin])
    db.flush()

    # Roles
    admin = Role(name="administrator", description="Sees every row")
    manager = Role(name="manager", description="Sees own department and sub-departments")
    staff = Role(name="staff", description="Sees own department")
    db.add_all([admin, manager, staff])
    db.flush()

    # Users
    u1 = User(account="alice", name="Alice Admin", email="alice@example.com", dept_id=head.id)
    u1.roles.append(admin)

    u2 = User(account="mona", name="Mona Manager", email="mona@example.com", dept_id=eng.id)
    u2.roles.append(manager)

    u3 = User(account="ed", name="Ed Engineer", email="ed@example.com", dept_id=platform.id)
    u3.roles.append(staff)

    u4 = User(account="fran", name="Fran Finance", email="fran@example.com", dept_id=fin.id)
    u4.roles.append(staff)

    db.add_all([u1, u2, u3, u4])
    db.flush()

    # Scope rules
    by_code = ScopeData(
        resource_code="employee_list",
        scope_name="Employees of own department",
        scope_column="create_dept",
        scope_type=int(ScopeType.OWN_DEPT),
    )
    admin_override = ScopeData(
        scope_class="EmployeeMapper.list",
        scope_name="Administrators see all employees",
        scope_type=int(ScopeType.ALL),
    )
    admin_override.roles.append(admin)
    admin_detail_override = ScopeData(
        scope_class="EmployeeMapper.detail",
        scope_name="Administrators see any employee",
        scope_type=int(ScopeType.ALL),
    )
    admin_detail_override.roles.append(admin)
    manager_override = ScopeData(
        scope_class="EmployeeMapper.list",
        scope_name="Managers see their department tree",
        scope_column="create_dept",
        scope_type=int(ScopeType.OWN_DEPT_CHILD),
    )
    manager_override.roles.append(manager)
    db.add_all([by_code, admin_override, admin_detail_override, manager_override])
    db.flush()

    # Employees
    db.add_all(
        [
            Employee(
                employee_no="E-1001",
                first_name="Ed",
                last_name="Engineer",
                email="ed.engineer@example.com",
                position="Software Engineer",
                salary=120000.00,
                hire_date=date(2022, 6, 1),
                create_user=u3.id,
                create_dept=platform.id,
            ),
            Employee(
                employee_no="E-1002",
                first_name="Ivy",
                last_name="Infra",
                email="ivy.infra@example.com",
                position="Engineering Lead",
                salary=140000.00,
                hire_date=date(2021, 2, 15),
                create_user=u2.id,
                create_dept=eng.id,
            ),
            Employee(
                employee_no="E-2001",
                first_name="Fran",
                last_name="Finance",
                email="fran.finance@example.com",
                position="Accountant",
                salary=90000.00,
                hire_date=date(2021, 9, 10),
                create_user=u4.id,
                create_dept=fin.id,
            ),
        ]
    )

    db.commit()
