"""Settings for the wordguard sensitive-word filter."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


def _env_field(default, *env_names: str):
    if env_names:
        alias = AliasChoices(*env_names) if len(env_names) > 1 else env_names[0]
        return Field(default=default, validation_alias=alias)
    return Field(default=default)


class Settings(BaseSettings):
    mask_char: str = _env_field("*", "WORDGUARD_MASK_CHAR")
    enable_fuzzy_matching: bool = _env_field(True, "WORDGUARD_FUZZY_MATCHING")
    case_sensitive: bool = _env_field(False, "WORDGUARD_CASE_SENSITIVE")

    # Term sources, consulted in this order on initialise/reload
    load_builtin_terms: bool = _env_field(True, "WORDGUARD_LOAD_BUILTIN_TERMS")
    terms: Dict[str, Any] = _env_field({}, "WORDGUARD_TERMS")
    terms_file: Optional[str] = _env_field(None, "WORDGUARD_TERMS_FILE")
    terms_redis_url: Optional[str] = _env_field(None, "WORDGUARD_TERMS_REDIS_URL")
    terms_redis_prefix: str = _env_field("wordguard:terms:", "WORDGUARD_TERMS_REDIS_PREFIX")

    # Manual review policy
    review_on_high: bool = _env_field(True, "WORDGUARD_REVIEW_ON_HIGH")
    medium_review_threshold: int = _env_field(3, "WORDGUARD_MEDIUM_REVIEW_THRESHOLD")

    batch_max_workers: int = _env_field(4, "WORDGUARD_BATCH_MAX_WORKERS")

    environment: str = _env_field("production", "ENV", "APP_ENV", "ENVIRONMENT")
    service_name: str = _env_field("wordguard", "SERVICE_NAME")
    git_commit: str = _env_field("unknown", "GIT_COMMIT", "COMMIT_SHA", "SOURCE_VERSION")
    obs_log_level: str = _env_field("INFO", "LOG_LEVEL")
    obs_log_sampling_rate_info: float = _env_field(1.0, "LOG_SAMPLING_RATE_INFO")

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        case_sensitive=False,
        env_nested_delimiter="__",
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("terms", mode="before")
    def _parse_terms(cls, value):  # type: ignore[override]
        """Normalise env/JSON formats for the per-tier word lists.

        Supports:
        - empty / missing -> {}
        - JSON object string -> dict
        - mapping whose values are lists or comma-separated strings

        Individual entries are validated later by the term loader, which
        skips and logs malformed ones instead of failing startup.
        """
        if value in (None, ""):
            return {}
        if isinstance(value, str):
            text = value.strip()
            if not text:
                return {}
            try:
                value = json.loads(text)
            except json.JSONDecodeError as exc:
                logger.warning("WORDGUARD_TERMS is not valid JSON; ignoring configured terms: %s", exc)
                return {}
        if not isinstance(value, dict):
            logger.warning("WORDGUARD_TERMS must be a mapping of tier to terms, got %s; ignoring", type(value).__name__)
            return {}
        parsed: dict[str, Any] = {}
        for tier, words in value.items():
            if isinstance(words, str):
                parsed[str(tier)] = [part.strip() for part in words.split(",") if part.strip()]
            else:
                parsed[str(tier)] = words
        return parsed

    @field_validator("mask_char", mode="before")
    def _first_char(cls, value):  # type: ignore[override]
        if not value:
            return "*"
        return str(value)[0]

    @field_validator("medium_review_threshold", "batch_max_workers", mode="after")
    def _at_least_one(cls, value: int) -> int:  # type: ignore[override]
        return max(1, value)


def _normalise_level(level: str) -> str:
    return level.upper()


settings = Settings()
settings.obs_log_level = _normalise_level(settings.obs_log_level)
