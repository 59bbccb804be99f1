"""Configuration for cartsync."""

from __future__ import annotations

import os
from decimal import Decimal
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from cartsync.pricing import DEFAULT_FEE


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: Literal["text", "json"] = "text"
    file: str | None = None

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Invalid log level: {v}")
        return v.upper()


class CartConfig(BaseModel):
    """Service location, pricing constant and session defaults."""

    base_url: str = "https://flipkart-backend4.onrender.com"
    timeout: float = Field(default=10.0, gt=0)

    platform_fee: Decimal = Field(default=DEFAULT_FEE, ge=0)
    default_user_id: str = "1"

    # home page shelves
    category_limit: int = Field(default=8, ge=0)
    shelf_size: int = Field(default=8, ge=0)

    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge override into base recursively."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_from_env() -> dict[str, Any]:
    """Load configuration from environment variables."""
    config: dict[str, Any] = {}

    if url := os.getenv("CARTSYNC_BASE_URL"):
        config["base_url"] = url

    if timeout := os.getenv("CARTSYNC_TIMEOUT"):
        config["timeout"] = float(timeout)

    if fee := os.getenv("CARTSYNC_PLATFORM_FEE"):
        config["platform_fee"] = Decimal(fee)

    if user := os.getenv("CARTSYNC_USER_ID"):
        config["default_user_id"] = user

    if level := os.getenv("CARTSYNC_LOG_LEVEL"):
        config.setdefault("logging", {})["level"] = level.upper()

    return config


def load_config(overrides: dict[str, Any] | None = None) -> CartConfig:
    """Defaults < environment < explicit overrides."""
    merged = deep_merge(load_from_env(), overrides or {})
    return CartConfig.model_validate(merged)


__all__ = ("LoggingConfig", "CartConfig", "deep_merge", "load_from_env", "load_config")
