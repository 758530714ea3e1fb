"""Runtime configuration loaded from the environment and ``.env``."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from valuation.errors import TrackerError
from valuation.history import HISTORY_SIZE
from valuation.quotes import DEFAULT_BASE_URL

DEFAULT_RETRY_COOLDOWN_SEC = 60.0
DEFAULT_CLOCK_INTERVAL_SEC = 5.0
DEFAULT_RESIZE_DEBOUNCE_SEC = 0.05

# environment variable -> settings field
ENV_FIELDS = {
    "APIKEY": "api_key",
    "DELAY": "delay_minutes",
    "PORTFOLIO_FILE": "portfolio_file",
    "RETRY_COOLDOWN": "retry_cooldown",
    "CLOCK_INTERVAL": "clock_interval",
    "CMC_BASE_URL": "base_url",
    "LOG_LEVEL": "log_level",
    "TRACKER_LOG": "log_file",
}


class ConfigError(TrackerError):
    """Required configuration is missing or invalid."""


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    api_key: str = Field(min_length=1)
    delay_minutes: float = Field(gt=0)
    portfolio_file: Path = Path("portfolio.json")
    retry_cooldown: float = Field(default=DEFAULT_RETRY_COOLDOWN_SEC, gt=0)
    clock_interval: float = Field(default=DEFAULT_CLOCK_INTERVAL_SEC, gt=0)
    resize_debounce: float = Field(default=DEFAULT_RESIZE_DEBOUNCE_SEC, ge=0)
    history_size: int = Field(default=HISTORY_SIZE, ge=2)
    base_url: str = DEFAULT_BASE_URL
    log_level: str = "INFO"
    log_file: str = "portfolio_tracker.log"


def load_settings(
    env_file: Optional[str | Path] = None,
    environ: Optional[Mapping[str, str]] = None,
    **overrides: Any,
) -> Settings:
    """Build :class:`Settings` from ``environ`` (default: ``.env`` + ``os.environ``).

    Keyword ``overrides`` that are not ``None`` win over the environment.
    """
    if environ is None:
        load_dotenv(env_file)
        environ = os.environ

    values: dict[str, Any] = {
        field: environ[name]
        for name, field in ENV_FIELDS.items()
        if environ.get(name) not in (None, "")
    }
    values.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return Settings(**values)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        raise ConfigError(f"invalid configuration - {problems}") from exc
