"""
Configuration and logging setup for lazyweave.

Settings come from ``LAZYWEAVE_*`` environment variables and are validated
with pydantic. Nothing here runs at import time: call ``setup_logging()``
from the application that wants lazyweave's debug output.
"""

import logging
import os
import sys
from typing import Mapping, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import ConstructionError

DEFAULT_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(funcName)s:%(lineno)d] - %(message)s'
DEFAULT_MEMO_CAPACITY = 4096

ENV_PREFIX = "LAZYWEAVE_"

_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET")


class Settings(BaseModel):
    """Library-wide tunables"""
    memo_capacity: int = Field(
        DEFAULT_MEMO_CAPACITY,
        description="Initial slot count of a memoization buffer (rounded up to a power of two)",
        ge=1,
    )
    log_level: str = Field("WARNING", description="Level applied by setup_logging()")
    log_format: str = Field(DEFAULT_LOG_FORMAT, description="Format applied by setup_logging()")

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        """Accept any standard level name, case-insensitively"""
        level = v.strip().upper()
        if level not in _LEVELS:
            raise ValueError(f"Invalid log level: {v}. Valid levels: {list(_LEVELS)}")
        return level


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build Settings from the environment (``os.environ`` unless given)."""
    environ = os.environ if environ is None else environ
    values = {}
    for name in Settings.model_fields:
        raw = environ.get(f"{ENV_PREFIX}{name.upper()}")
        if raw is not None:
            values[name] = raw
    try:
        return Settings(**values)
    except ValidationError as e:
        raise ConstructionError(f"Invalid lazyweave settings: {e}") from e


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Forget cached settings so the environment is read again."""
    global _settings
    _settings = None


def setup_logging(settings: Optional[Settings] = None, stream=None) -> logging.Logger:
    """Attach a stream handler to the ``lazyweave`` logger"""
    settings = settings or get_settings()
    logger = logging.getLogger('lazyweave')
    logger.setLevel(settings.log_level)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(logging.Formatter(settings.log_format))
    handler.set_name('lazyweave')
    for existing in list(logger.handlers):
        if existing.get_name() == 'lazyweave':
            logger.removeHandler(existing)
    logger.addHandler(handler)
    return logger
