"""Centralized configuration for ministate using Pydantic Settings."""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ministate.utils.path_resolver import DEFAULT_RESOURCES_PATH


StrategyName = Literal["replace", "append", "skip_existing", "merge_by_id"]


class Settings(BaseSettings):
    """Strictly typed configuration loaded from ``MINISTATE_*`` environment variables.

    These are the values the bootstrap layer hands to the persistence engine.
    Values given explicitly to ``AppRunner`` take precedence.
    """

    model_config = SettingsConfigDict(
        env_prefix="MINISTATE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",  # Ignore extra env vars not defined in model
    )

    # Application identity, also the default import/export file stem
    app_name: str = Field(default="MiniApp", min_length=1, description="Owning application name")

    # Storage
    resources_path: str = Field(
        default=DEFAULT_RESOURCES_PATH,
        description="Base directory for relative import/export paths",
    )
    default_strategy: StrategyName = Field(
        default="replace", description="Import strategy used when import_data() is called without one"
    )

    # Logging
    log_level: str = Field(default="info", description="Logging level")
    json_logs: bool = Field(default=False, description="Emit structured JSON logs instead of plain text")
    logger_levels: dict[str, str] = Field(
        default_factory=dict, description="Per-logger level overrides, e.g. {'ministate.registry': 'debug'}"
    )

    @field_validator("default_strategy", mode="before")
    @classmethod
    def _normalize_strategy(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower().replace("-", "_")
        return value

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        normalized = value.strip().upper()
        if normalized not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unsupported log level: {value}")
        return normalized.lower()

    def get_resources_path(self) -> str:
        """Return the resources path, falling back to the default when blank."""
        return self.resources_path.strip() or DEFAULT_RESOURCES_PATH
