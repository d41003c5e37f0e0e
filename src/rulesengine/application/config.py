"""Application configuration for the rules engine."""

import os
from collections.abc import Mapping
from enum import Enum
from typing import Optional

from rulesengine.domain.engine.options import Options, structlog_leaf_logger
from rulesengine.shared.logging import configure_logging

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class Environment(Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TEST = "test"


class LogFormat(Enum):
    """Log renderer selection."""

    JSON = "json"
    CONSOLE = "console"


class Config:
    """Environment-backed configuration for evaluation and logging."""

    def __init__(self, source: Optional[Mapping[str, str]] = None):
        """
        Initialize configuration.

        Args:
            source: Key/value source (defaults to ``os.environ``)
        """
        self.source = source if source is not None else os.environ
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from the source mapping."""
        # Environment
        self.ENVIRONMENT = Environment(self.source.get("ENVIRONMENT", "development").lower())

        # Logging
        self.LOG_LEVEL = self.source.get("LOG_LEVEL", "INFO").upper()
        if self.LOG_LEVEL not in _LOG_LEVELS:
            raise ValueError(
                f"LOG_LEVEL {self.LOG_LEVEL} not supported. "
                f"Use one of {', '.join(sorted(_LOG_LEVELS))}"
            )
        self.LOG_FORMAT = LogFormat(self.source.get("LOG_FORMAT", "json").lower())

        # Evaluation
        self.TIMING_ENABLED = self._get_bool("RULESENGINE_TIMING", "false")
        self.LEAF_LOGGING_ENABLED = self._get_bool("RULESENGINE_LEAF_LOGGING", "false")

    def _get_bool(self, key: str, default: str) -> bool:
        raw = self.source.get(key, default).strip().lower()
        if raw in _TRUE_VALUES:
            return True
        if raw in _FALSE_VALUES:
            return False
        raise ValueError(f"{key} must be a boolean, got '{raw}'")

    def build_options(self) -> Options:
        """Evaluation options derived from the configuration."""
        options = Options(timing=self.TIMING_ENABLED)
        if self.LEAF_LOGGING_ENABLED:
            options = options.with_logger(structlog_leaf_logger())
        return options

    def configure_logging(self) -> None:
        """Configure structured logging for this environment."""
        configure_logging(
            environment=self.ENVIRONMENT.value,
            log_level=self.LOG_LEVEL,
            json_logs=self.LOG_FORMAT is LogFormat.JSON,
            include_caller_info=self.ENVIRONMENT is Environment.DEVELOPMENT,
        )
