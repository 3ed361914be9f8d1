"""
Settings for the Offering Ledger

Three groups, each read from the environment (and .env) by pydantic-settings:
- GEMINI_*          narrative report model and key
- LEDGER_STORAGE_*  where the document file lives
- plain names       reconciliation tolerance, report and export options

DESIGN DECISION: The ledger runs with no configuration at all. The Gemini
key is the only value without a usable default, and missing it only
disables the narrative report.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional, Union

from pydantic import AliasChoices, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from offering_ledger.models.ledger import HONORARIUM_CATEGORY


class GeminiSettings(BaseSettings):
    """
    Gemini LLM configuration.

    The key is optional: without it the narrative report falls back
    to a fixed message instead of failing.
    """

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("GEMINI_API_KEY", "API_KEY"),
        description="Key for the narrative report; optional"
    )
    model_name: str = Field(
        default="gemini-1.5-flash",
        description="Model used for the narrative report"
    )
    max_tokens: int = Field(
        default=1024,
        ge=100,
        le=8192,
        description="Upper bound on the narrative length"
    )
    temperature: float = Field(
        default=0.4,
        ge=0.0,
        le=1.0,
        description="Model temperature"
    )

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key and self.api_key.strip())


class StorageSettings(BaseSettings):
    """Local document storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    data_dir: Path = Field(
        default=Path("data"),
        description="Directory holding the persisted document"
    )
    storage_key: str = Field(
        default="grace_ledger_v1",
        min_length=1,
        description="Fixed key the document is stored under"
    )
    write_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="How many times a failed save is retried"
    )

    @field_validator("storage_key")
    @classmethod
    def validate_storage_key(cls, v: str) -> str:
        """The key becomes a file name, so no path separators."""
        if "/" in v or "\\" in v:
            raise ValueError(f"Storage key must not contain path separators: {v}")
        return v

    @property
    def document_path(self) -> Path:
        return self.data_dir / f"{self.storage_key}.json"


class AppSettings(BaseSettings):
    """Reconciliation, report and export options (no prefix)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="development or production"
    )
    debug_mode: bool = Field(
        default=False,
        description="Verbose logging and extra diagnostics"
    )

    # Reconciliation
    settle_tolerance: int = Field(
        default=10,
        ge=0,
        description="Absolute difference (KRW) still treated as settled"
    )

    # Reports
    honorarium_category: str = Field(
        default=HONORARIUM_CATEGORY,
        description="Category always listed first on reports"
    )
    report_title: str = Field(
        default="Assembly Financial Settlement Report",
        description="Title printed on the settlement report"
    )

    # Export
    export_filename_prefix: str = Field(
        default="church_finance",
        description="Prefix of date-stamped export file names"
    )


class Settings(BaseSettings):
    """
    Entry point to every settings group.

    Each property builds its group on access, so an invalid storage value
    does not stop the Gemini settings from loading and vice versa.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def gemini(self) -> GeminiSettings:
        return GeminiSettings()

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """Process-wide settings; get_settings.cache_clear() forces a reload."""
    return Settings()


def validate_all_settings() -> dict[str, Union[bool, str]]:
    """
    Status of each settings group for the settings page.

    Returns {group: ok} plus {group}_error messages for the groups that
    failed to load. Gemini counts as not ok while its key is missing.
    """
    settings = get_settings()
    results: dict[str, Union[bool, str]] = {}

    for group in ("gemini", "storage", "app"):
        try:
            loaded = getattr(settings, group)
        except ValidationError as e:
            results[group] = False
            results[f"{group}_error"] = f"{e.error_count()} invalid value(s): {e.errors()[0]['msg']}"
            continue
        results[group] = True

        if group == "gemini" and not loaded.is_configured:
            results[group] = False
            results[f"{group}_error"] = "GEMINI_API_KEY is not set"

    return results
