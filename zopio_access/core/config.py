"""
Access engine configuration using Pydantic Settings.
"""

from functools import lru_cache
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AccessSettings(BaseSettings):
    """Access evaluation, audit and logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="ACCESS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Evaluation policy
    missing_field_policy: str = Field(
        default="allow",
        description="Fields absent from a rule's field map: allow or deny",
    )
    strict_placeholders: bool = Field(
        default=False,
        description="Unresolved ${user.*} placeholders fail the condition instead of becoming ''",
    )

    # Audit
    audit_enabled: bool = Field(default=True)
    audit_sink: str = Field(
        default="console",
        description="Audit sink: console, memory, http, null",
    )
    audit_timeout: float = Field(
        default=2.0,
        gt=0,
        description="Upper bound in seconds for a blocking audit write",
    )
    audit_http_url: str = Field(default="https://in.logs.betterstack.com")
    audit_http_token: str = Field(default="")

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json", description="json or text")

    @field_validator("missing_field_policy")
    @classmethod
    def validate_missing_field_policy(cls, v: str) -> str:
        allowed = {"allow", "deny"}
        if v not in allowed:
            raise ValueError(f"missing_field_policy must be one of {allowed}")
        return v

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        allowed = {"json", "text"}
        if v not in allowed:
            raise ValueError(f"log_format must be one of {allowed}")
        return v

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.upper()


@lru_cache
def get_settings() -> AccessSettings:
    """Get cached settings instance."""
    return AccessSettings()
