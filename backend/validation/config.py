"""
Validation engine configuration.
Uses MV_VALIDATION_ prefix; default thresholds feed the ValidationConfig handed to the engine.
"""
from __future__ import annotations

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from shared.models.domain import ValidationConfig, ValidationThresholds


class ValidationSettings(BaseSettings):
    """Engine-level settings; use get_settings() for Redis and logging."""

    model_config = SettingsConfigDict(
        env_prefix="MV_VALIDATION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Percentage thresholds (difference relative to the authoritative value)
    critical_percent: float = Field(default=25.0, description="At or above this %: critical")
    warning_percent: float = Field(default=15.0, description="At or above this %: warning")
    minor_percent: float = Field(default=5.0, description="At or above this %: minor")

    # Absolute thresholds (checked first, for low-count fields)
    critical_absolute: float = Field(default=5.0, description="At or above this count: critical")
    warning_absolute: float = Field(default=3.0, description="At or above this count: warning")
    minor_absolute: float = Field(default=1.0, description="At or above this count: minor")

    check_total_score: bool = Field(default=False, description="Compare scouted point estimate to alliance score")

    # Batch runs
    max_concurrent_validations: int = Field(default=8, description="Worker bound for event-wide validation")
    result_ttl_s: Optional[int] = Field(default=None, description="TTL for stored results; None keeps them")

    def thresholds(self) -> ValidationThresholds:
        return ValidationThresholds(
            critical=self.critical_percent,
            warning=self.warning_percent,
            minor=self.minor_percent,
            critical_absolute=self.critical_absolute,
            warning_absolute=self.warning_absolute,
            minor_absolute=self.minor_absolute,
        )

    def to_validation_config(
        self,
        category_thresholds: Optional[dict[str, ValidationThresholds]] = None,
        disabled_categories: Optional[set[str]] = None,
    ) -> ValidationConfig:
        return ValidationConfig(
            thresholds=self.thresholds(),
            category_thresholds=category_thresholds or {},
            disabled_categories=frozenset(disabled_categories or ()),
            check_total_score=self.check_total_score,
        )


def get_validation_settings() -> ValidationSettings:
    """Load validation settings from env."""
    return ValidationSettings()


def resolve_thresholds(category: str, config: ValidationConfig) -> ValidationThresholds:
    """Category override if one is configured, else the default thresholds."""
    override = config.category_thresholds.get(category)
    return override if override is not None else config.thresholds
