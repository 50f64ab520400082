"""Centralized configuration for memsearch using Pydantic Settings."""

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    """Strictly typed engine tuning loaded from environment variables.

    Every value has a default, so ``EngineSettings()`` is always valid. Values
    can be overridden through ``MEMSEARCH_*`` environment variables or passed
    explicitly when embedding the engine.
    """

    model_config = SettingsConfigDict(
        env_prefix="MEMSEARCH_",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    engine_name: str = Field(default="default", description="Label used in logs, spans and metrics")

    # Mutation settings
    batch_size: int = Field(default=100, ge=1, description="Documents processed per add/remove batch")

    # Matching and scoring
    match_distance_threshold: int = Field(
        default=3,
        ge=1,
        description="Terms match when their edit distance is strictly below this threshold",
    )
    phrase_weight_factor: float = Field(
        default=5.0,
        gt=0,
        description="Multiplier applied to phrase matches relative to single word matches",
    )
    min_field_weight: float = Field(default=1.0, gt=0, description="Lower bound for field weights")
    max_field_weight: float = Field(default=5.0, gt=0, description="Upper bound for field weights")

    # Query cache
    query_cache_enabled: bool = Field(default=True, description="Cache ranked hit lists per query")
    query_cache_max_entries: int | None = Field(
        default=None,
        ge=1,
        description="Evict least recently used queries beyond this many entries (unbounded when unset)",
    )

    # Logging
    log_level: str = Field(default="info", description="Logging level")

    @model_validator(mode="after")
    def _check_weight_bounds(self) -> "EngineSettings":
        if self.min_field_weight > self.max_field_weight:
            raise ValueError(
                f"MIN_FIELD_WEIGHT ({self.min_field_weight}) must not exceed MAX_FIELD_WEIGHT ({self.max_field_weight})"
            )
        return self
