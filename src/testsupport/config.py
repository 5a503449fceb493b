from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from expandvars import expandvars
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

CONFIG_FILENAME = "testsupport.yaml"
CONFIG_ENV_VAR = "TESTSUPPORT_CONFIG"


class EventuallyConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")
    timeout: float = Field(default=5.0, gt=0)
    poll_interval: float = Field(default=0.05, gt=0)

    @model_validator(mode="after")
    def poll_interval_within_timeout(self) -> EventuallyConfig:
        if self.poll_interval > self.timeout:
            raise ValueError(
                f"poll_interval ({self.poll_interval}s) must not exceed timeout ({self.timeout}s)"
            )
        return self


class LoggingConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")
    debug_file: str | None = None
    verbose: bool = False


class JUnitConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")
    path: str | None = None


class SupportConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")
    eventually: EventuallyConfig = Field(default_factory=EventuallyConfig)
    subject: str = "this"
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    junit: JUnitConfig = Field(default_factory=JUnitConfig)

    @field_validator("subject")
    @classmethod
    def subject_must_not_be_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("subject must not be blank")
        return v


def _expand(value: Any) -> Any:
    """Expand ${VAR} references in every string of a parsed YAML document."""
    if isinstance(value, str):
        return expandvars(value, nounset=True)
    if isinstance(value, dict):
        return {k: _expand(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_expand(v) for v in value]
    return value


def load_config(path: Path) -> SupportConfig:
    """Load and validate a testsupport config from a YAML file.

    Raises ValueError when a ${VAR} reference without a default is unset.
    """
    config_dir = path.parent.resolve()

    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    if not isinstance(raw, dict):
        raise ValueError(f"{path}: top-level YAML value must be a mapping")

    try:
        raw = _expand(raw)
    except Exception as e:
        raise ValueError(f"{path}: {e}") from e

    config = SupportConfig(**raw)

    # Resolve relative output paths relative to config file location
    if config.logging.debug_file and not Path(config.logging.debug_file).is_absolute():
        config.logging.debug_file = str((config_dir / config.logging.debug_file).resolve())
    if config.junit.path and not Path(config.junit.path).is_absolute():
        config.junit.path = str((config_dir / config.junit.path).resolve())

    return config


def find_config(start: Path) -> Path | None:
    """Locate the config file from the environment or in ``start``."""
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    candidate = start / CONFIG_FILENAME
    if candidate.is_file():
        return candidate
    return None
