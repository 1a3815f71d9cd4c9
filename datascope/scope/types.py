from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

from .errors import InvalidScopeRule, InvalidScopeType

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class ScopeType(IntEnum):
    """Closed set of data scope rule types (stored as integers)."""

    ALL = 1
    OWN = 2
    OWN_DEPT = 3
    OWN_DEPT_CHILD = 4
    CUSTOM = 5

    @classmethod
    def of(cls, value: object) -> ScopeType:
        """
        Coerce a stored or configured value into a ScopeType.

        Accepts members, ints, numeric strings and member names. Anything
        else raises InvalidScopeType; there is no fallback to ALL.
        """

        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise InvalidScopeType(value)
        if isinstance(value, int):
            try:
                return cls(value)
            except ValueError:
                raise InvalidScopeType(value) from None
        if isinstance(value, str):
            text = value.strip()
            if text.lstrip("-").isdigit():
                return cls.of(int(text))
            try:
                return cls[text.upper()]
            except KeyError:
                raise InvalidScopeType(value) from None
        raise InvalidScopeType(value)


def parse_id_list(value: object) -> list[int]:
    """
    Parse a multi-valued identifier.

    Ids arrive as an int, an iterable of ints, or a comma-delimited string
    (``"10,20"``). Order is preserved; blank segments are skipped.
    """

    if value is None:
        return []
    if isinstance(value, bool):
        raise ValueError(f"Invalid identifier: {value!r}")
    if isinstance(value, int):
        return [value]
    if isinstance(value, str):
        parts: Iterable[object] = value.split(",")
    else:
        parts = value  # type: ignore[assignment]

    ids: list[int] = []
    for part in parts:
        if isinstance(part, str):
            part = part.strip()
            if not part:
                continue
        ids.append(int(part))  # type: ignore[arg-type]
    return ids


@dataclass(frozen=True)
class ScopeRule:
    """
    Resolved data scope rule.

    ``value`` is only used for CUSTOM rules: a template such as
    ``"where scope.create_user = ${user_id}"``.
    """

    code: str | None
    type: ScopeType
    column: str | None = None
    field: str | None = "*"
    value: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "type", ScopeType.of(self.type))
        if self.column is not None and not _IDENTIFIER_RE.match(self.column):
            raise InvalidScopeRule(f"Invalid scope column: {self.column!r}")

    @property
    def projection(self) -> str:
        return self.field.strip() if self.field and self.field.strip() else "*"

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> ScopeRule:
        """Build a rule from a ``scope_data`` row (explicit column mapping)."""

        if row.get("scope_type") is None:
            raise InvalidScopeType(None)
        return cls(
            code=row.get("resource_code"),
            type=ScopeType.of(row["scope_type"]),
            column=row.get("scope_column") or None,
            field=row.get("scope_field") or "*",
            value=row.get("scope_value"),
        )


@dataclass(frozen=True)
class UserContext:
    """
    Identity of the user a query runs for.

    Supplied per request by the identity layer and read-only here. ``dept_id``
    and ``role_id`` may be multi-valued (``"10,20"``).
    """

    user_id: int
    dept_id: int | str | tuple[int, ...]
    role_id: int | str | tuple[int, ...]
    tenant_id: str | None = None
    account: str | None = None
    user_name: str | None = None
    role_name: str | None = None
    attributes: Mapping[str, Any] = field(default_factory=dict)

    @property
    def dept_ids(self) -> list[int]:
        return parse_id_list(self.dept_id)

    @property
    def role_ids(self) -> list[int]:
        return parse_id_list(self.role_id)

    def to_attributes(self) -> dict[str, str]:
        """Flattened attribute map used to resolve CUSTOM templates."""

        attrs: dict[str, Any] = {
            "user_id": self.user_id,
            "dept_id": ",".join(str(i) for i in self.dept_ids),
            "role_id": ",".join(str(i) for i in self.role_ids),
            "tenant_id": self.tenant_id,
            "account": self.account,
            "user_name": self.user_name,
            "role_name": self.role_name,
        }
        attrs.update(self.attributes)
        return {key: str(value) for key, value in attrs.items() if value is not None}


@dataclass(frozen=True)
class DataScope:
    """
    Scope declaration attached to a query.

    ``default`` is used when neither a per-mapper nor a per-code rule is
    stored; its ``code`` is the resource code looked up in the store.
    """

    mapper_id: str
    default: ScopeRule | None = None

    @property
    def code(self) -> str | None:
        return self.default.code if self.default is not None else None
