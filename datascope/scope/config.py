from __future__ import annotations

from fnmatch import fnmatchcase
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

from .types import DataScope, ScopeRule, ScopeType


class CacheConfig(BaseModel):
    ttl_seconds: float | None = None


class MapperRule(BaseModel):
    mapper: str
    code: str | None = None
    type: ScopeType = ScopeType.ALL
    column: str | None = "create_dept"
    field: str = "*"
    value: str | None = None

    @field_validator("type", mode="before")
    @classmethod
    def _coerce_type(cls, value: Any) -> ScopeType:
        return ScopeType.of(value)

    def to_rule(self) -> ScopeRule:
        return ScopeRule(code=self.code, type=self.type, column=self.column, field=self.field, value=self.value)


class ScopeConfigModel(BaseModel):
    enabled: bool = True
    cache: CacheConfig = Field(default_factory=CacheConfig)
    mappers: list[MapperRule] = Field(default_factory=list)


class ScopeConfig:
    """
    Runtime helper around validated config + mapper matching.
    """

    def __init__(self, model: ScopeConfigModel):
        self.model = model

        # Prefer exact matches over glob patterns.
        self._exact_rules: dict[str, MapperRule] = {}
        self._patterns: list[MapperRule] = []
        for entry in self.model.mappers:
            if any(ch in entry.mapper for ch in "*?["):
                self._patterns.append(entry)
            else:
                self._exact_rules.setdefault(entry.mapper, entry)

    @property
    def enabled(self) -> bool:
        return self.model.enabled

    def default_for(self, mapper_id: str) -> DataScope | None:
        """
        Default scope declaration for a mapper id, or None when unconfigured.
        """

        # 1) exact mapper id
        entry = self._exact_rules.get(mapper_id)

        # 2) first matching pattern, in file order
        if entry is None:
            entry = next((p for p in self._patterns if fnmatchcase(mapper_id, p.mapper)), None)

        if entry is None:
            return None
        return DataScope(mapper_id=mapper_id, default=entry.to_rule())


def load_scope_config(path: Path) -> ScopeConfig:
    raw_text = path.read_text(encoding="utf-8")
    raw: dict[str, Any] = yaml.safe_load(raw_text) or {}

    if "data_scope" not in raw:
        raise ValueError(f"Missing top-level 'data_scope' key in config: {path}")

    model = ScopeConfigModel.model_validate(raw["data_scope"] or {})
    return ScopeConfig(model)
