from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Process-level settings, read from ``DATASCOPE_*`` environment variables.

    Without overrides the service uses a SQLite file next to the package and
    the rule defaults in ``config/data_scope.yaml``.
    """

    model_config = SettingsConfigDict(env_prefix="DATASCOPE_", extra="ignore")

    db_url: str | None = None
    scope_config_path: str | None = None
    log_level: str = "INFO"
    authorization_header: str = "Authorization"
    bearer_prefix: str = "Bearer"
    # Overrides data_scope.cache.ttl_seconds from the YAML config when set.
    cache_ttl_seconds: float | None = None

    def resolved_db_url(self) -> str:
        if self.db_url:
            return self.db_url

        repo_root = Path(__file__).resolve().parents[1]
        db_path = repo_root / "datascope.db"
        return f"sqlite:///{db_path}"

    def resolved_scope_config_path(self) -> Path:
        if self.scope_config_path:
            return Path(self.scope_config_path)

        repo_root = Path(__file__).resolve().parents[1]
        return repo_root / "config" / "data_scope.yaml"


@lru_cache
def get_settings() -> Settings:
    return Settings()
