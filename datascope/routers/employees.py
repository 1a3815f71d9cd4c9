from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from datascope.db.session import get_db
from datascope.models.hr import Employee
from datascope.schemas.hr import EmployeeOut
from datascope.schemas.scope import UserContextOut
from datascope.scope.decorators import data_scope
from datascope.scope.types import ScopeType, UserContext
from datascope.security.dependencies import get_current_user

router = APIRouter(tags=["employees"])


@data_scope(mapper_id="EmployeeMapper.list", code="employee_list", type=ScopeType.OWN, column="create_user")
def list_employees(db: Session) -> list[Employee]:
    return list(db.scalars(select(Employee).order_by(Employee.id)).all())


@data_scope(mapper_id="EmployeeMapper.detail", code="employee_list", type=ScopeType.OWN, column="create_user")
def get_employee_by_id(db: Session, id: int) -> Employee | None:
    return db.scalars(select(Employee).where(Employee.id == id)).first()


@router.get("/me", response_model=UserContextOut)
def me(user: UserContext = Depends(get_current_user)) -> UserContextOut:
    return UserContextOut.model_validate(user)


@router.get("/employees", response_model=list[EmployeeOut])
def employees(db: Session = Depends(get_db)) -> list[Employee]:
    return list_employees(db)


@router.get("/employees/{id}", response_model=EmployeeOut)
def employee(id: int, db: Session = Depends(get_db)) -> Employee:
    found = get_employee_by_id(db, id)
    if found is None:
        # Rows outside the caller's data scope look the same as missing rows.
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Employee not found")
    return found
