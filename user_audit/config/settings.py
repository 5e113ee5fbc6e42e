# user_audit/config/settings.py

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from user_audit.security.rbac import Role, parse_roles


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- Application ---
    app_name: str = "user-audit"
    environment: Literal["dev", "test", "prod"] = "dev"
    debug: bool = False
    version: str = "0.1.0"

    # --- Token validation ---
    jwt_secret: str = Field(..., min_length=32)
    jwt_algorithm: Literal["HS256", "HS384", "HS512"] = "HS256"

    # --- Roles ---
    # MUTATING_ROLES is read as a JSON list, e.g. '["SUPERADMIN", "ADMIN", "USER"]'
    privileged_role: str = "SUPERADMIN"
    mutating_roles: list[str] = Field(default_factory=lambda: ["SUPERADMIN", "ADMIN"], min_length=1)

    # --- Database ---
    database_url: str

    # --- Pagination ---
    pagination_default_limit: int = Field(10, ge=1)

    # --- Observability ---
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    @field_validator("privileged_role")
    @classmethod
    def known_privileged_role(cls, v: str) -> str:
        (role,) = parse_roles([v])
        return role.value

    @field_validator("mutating_roles")
    @classmethod
    def known_mutating_roles(cls, v: list[str]) -> list[str]:
        return list(dict.fromkeys(Role(r.strip().upper()).value for r in v))


@lru_cache
def get_settings() -> AppSettings:
    return AppSettings()
