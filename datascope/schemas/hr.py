from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict


class EmployeeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    employee_no: str
    first_name: str
    last_name: str
    email: str
    position: str | None
    salary: float | None
    hire_date: date | None
    create_user: int
    create_dept: int
    created_at: datetime
