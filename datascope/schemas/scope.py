from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class ScopeRuleOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    scope_name: str
    resource_code: str | None
    scope_class: str | None
    scope_column: str | None
    scope_field: str | None
    scope_type: int
    scope_value: str | None


class UserContextOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: int
    dept_ids: list[int]
    role_ids: list[int]
    tenant_id: str | None
    account: str | None
    user_name: str | None
    role_name: str | None
