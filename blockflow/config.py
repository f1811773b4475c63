"""
Configuration loading and validation.

Engine tuning (card size, connector curvature) comes from an optional YAML
file; process-level settings come from ``BLOCKFLOW_*`` environment variables.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GeometryConfig(BaseModel):
    card_width: float = Field(default=272.0, gt=0)
    card_height: float = Field(default=164.0, gt=0)
    curve_min: float = Field(default=24.0, ge=0)
    curve_max: float = Field(default=56.0, ge=0)
    curve_factor: float = Field(default=0.22, ge=0)

    @model_validator(mode="after")
    def _check_clamp(self) -> "GeometryConfig":
        if self.curve_min > self.curve_max:
            raise ValueError("curve_min must not exceed curve_max")
        return self


class LoggingConfig(BaseModel):
    level: str = "info"
    format: Literal["json", "text"] = "json"


class EngineConfig(BaseModel):
    geometry: GeometryConfig = Field(default_factory=GeometryConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_config(path: str | Path) -> EngineConfig:
    """Load and validate engine configuration from a YAML file."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    return EngineConfig.model_validate(raw)


class Settings(BaseSettings):
    """Process settings for the command line entry point."""

    model_config = SettingsConfigDict(env_prefix="BLOCKFLOW_", env_file=".env", extra="ignore")

    config_path: Optional[str] = None
    log_level: Optional[str] = None
    log_format: Optional[Literal["json", "text"]] = None


@lru_cache
def get_settings() -> Settings:
    return Settings()
