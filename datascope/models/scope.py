from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Table, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from datascope.db.base import Base


class Department(Base):
    __tablename__ = "departments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    parent_id: Mapped[int] = mapped_column(Integer, default=0, nullable=False, index=True)
    # Comma-delimited ids from the root down to the parent, e.g. "0,1,10".
    ancestors: Mapped[str] = mapped_column(String(255), default="0", nullable=False)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    code: Mapped[str] = mapped_column(String(10), unique=True, nullable=False)
    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    users: Mapped[list["User"]] = relationship(back_populates="department")


user_roles = Table(
    "user_roles",
    Base.metadata,
    Column("user_id", ForeignKey("users.id"), primary_key=True),
    Column("role_id", ForeignKey("roles.id"), primary_key=True),
)


role_scope = Table(
    "role_scope",
    Base.metadata,
    Column("role_id", ForeignKey("roles.id"), primary_key=True),
    Column("scope_id", ForeignKey("scope_data.id"), primary_key=True),
)


class Role(Base):
    __tablename__ = "roles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    users: Mapped[list["User"]] = relationship(
        secondary=user_roles,
        back_populates="roles",
    )
    scopes: Mapped[list["ScopeData"]] = relationship(
        secondary=role_scope,
        back_populates="roles",
    )


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        UniqueConstraint("account"),
        UniqueConstraint("email"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    account: Mapped[str] = mapped_column(String(50), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(100), nullable=False)
    tenant_id: Mapped[str] = mapped_column(String(12), default="000000", nullable=False)

    dept_id: Mapped[int] = mapped_column(ForeignKey("departments.id"), nullable=False, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    department: Mapped[Department] = relationship(back_populates="users")
    roles: Mapped[list[Role]] = relationship(
        secondary=user_roles,
        back_populates="users",
    )


class ScopeData(Base):
    """
    Stored data scope rule.

    ``scope_class`` binds the rule to a mapper id (role-specific override via
    ``role_scope``); ``resource_code`` binds it to a named resource.
    """

    __tablename__ = "scope_data"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    resource_code: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    scope_name: Mapped[str] = mapped_column(String(100), nullable=False)
    scope_class: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    scope_column: Mapped[str | None] = mapped_column(String(64), nullable=True)
    scope_field: Mapped[str | None] = mapped_column(String(255), default="*", nullable=True)
    scope_type: Mapped[int] = mapped_column(Integer, nullable=False)
    scope_value: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    roles: Mapped[list[Role]] = relationship(
        secondary=role_scope,
        back_populates="scopes",
    )
