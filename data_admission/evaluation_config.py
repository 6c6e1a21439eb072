"""
============================================================================
Data Admission Control - Configuration
============================================================================

Reliability Level: L6 Critical
Traceability: Configuration loading is logged

This module provides configuration management for data evaluation
publishing:
- Environment variable parsing with type safety (.env honoured)
- Default values for optional configuration
- Validation with fail-closed behavior on invalid config (DEV-040)

ENVIRONMENT VARIABLES:
    - DATA_EVAL_DISPLAY_UTC: Render debug timestamps in UTC (default: false)
    - DATA_EVAL_METRICS_ENABLED: Record Prometheus counters (default: true)
    - DATA_EVAL_AUDIT_LOG_ENABLED: Emit audit log lines (default: true)
    - DATA_EVAL_LOG_LEVEL: Package log level name (default: INFO)

ERROR CODES:
    - DEV-040: Configuration invalid

============================================================================
"""

from dataclasses import dataclass
from datetime import timezone, tzinfo
from typing import List, Optional
import logging
import os

from dotenv import load_dotenv

# Configure module logger
logger = logging.getLogger(__name__)

# Package logger the configured level is applied to
PACKAGE_LOGGER_NAME = "data_admission"


# =============================================================================
# Error Codes
# =============================================================================

class DataEvaluationConfigErrorCode:
    """Configuration-specific error codes for audit logging."""
    CONFIG_INVALID = "DEV-040"


# =============================================================================
# Default Values
# =============================================================================

DEFAULT_DISPLAY_UTC = False
DEFAULT_METRICS_ENABLED = True
DEFAULT_AUDIT_LOG_ENABLED = True
DEFAULT_LOG_LEVEL = "INFO"

VALID_LOG_LEVELS: List[str] = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

_TRUE_VALUES = ("true", "1", "yes", "on")
_FALSE_VALUES = ("false", "0", "no", "off")


# =============================================================================
# Configuration Exception
# =============================================================================

class DataEvaluationConfigurationError(Exception):
    """
    Raised when data evaluation configuration is invalid.

    Reliability Level: L6 Critical
    """

    def __init__(
        self,
        message: str,
        error_code: str = DataEvaluationConfigErrorCode.CONFIG_INVALID
    ):
        self.error_code = error_code
        self.message = message
        super().__init__(f"[{error_code}] {message}")


# =============================================================================
# DataEvaluationConfig Class
# =============================================================================

@dataclass
class DataEvaluationConfig:
    """
    Data evaluation publishing configuration.

    Attributes:
        display_utc: Render debug timestamps in UTC instead of local time
        metrics_enabled: Record Prometheus counters on publish
        audit_log_enabled: Emit the audit log line on publish
        log_level: Level name applied to the package logger
    """
    display_utc: bool = DEFAULT_DISPLAY_UTC
    metrics_enabled: bool = DEFAULT_METRICS_ENABLED
    audit_log_enabled: bool = DEFAULT_AUDIT_LOG_ENABLED
    log_level: str = DEFAULT_LOG_LEVEL

    @property
    def display_tz(self) -> Optional[tzinfo]:
        """Timezone for debug timestamps; None means local time."""
        return timezone.utc if self.display_utc else None

    def validate(self) -> None:
        """
        Validate configuration.

        Raises:
            DataEvaluationConfigurationError: If any value is invalid (DEV-040)
        """
        errors: List[str] = []

        if self.log_level not in VALID_LOG_LEVELS:
            errors.append(
                f"DATA_EVAL_LOG_LEVEL must be one of {VALID_LOG_LEVELS}, "
                f"got: {self.log_level}"
            )

        if errors:
            error_msg = "Data evaluation configuration validation failed: " + "; ".join(errors)
            logger.error(f"[{DataEvaluationConfigErrorCode.CONFIG_INVALID}] {error_msg}")
            raise DataEvaluationConfigurationError(error_msg)

        logger.info(
            f"[DATA-EVAL-CONFIG] Configuration validated | "
            f"display_utc={self.display_utc} | "
            f"metrics_enabled={self.metrics_enabled} | "
            f"audit_log_enabled={self.audit_log_enabled} | "
            f"log_level={self.log_level}"
        )

    def apply_log_level(self) -> None:
        """Set the package logger level."""
        logging.getLogger(PACKAGE_LOGGER_NAME).setLevel(self.log_level)

    @classmethod
    def from_environment(cls, validate: bool = True) -> "DataEvaluationConfig":
        """
        Load configuration from environment variables (and .env if present).

        Args:
            validate: Whether to validate configuration after loading

        Returns:
            DataEvaluationConfig instance with values from environment

        Raises:
            DataEvaluationConfigurationError: If validation fails (DEV-040)
        """
        load_dotenv()

        config = cls(
            display_utc=_read_bool("DATA_EVAL_DISPLAY_UTC", DEFAULT_DISPLAY_UTC),
            metrics_enabled=_read_bool("DATA_EVAL_METRICS_ENABLED", DEFAULT_METRICS_ENABLED),
            audit_log_enabled=_read_bool("DATA_EVAL_AUDIT_LOG_ENABLED", DEFAULT_AUDIT_LOG_ENABLED),
            log_level=os.environ.get("DATA_EVAL_LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper(),
        )

        logger.info(
            f"[DATA-EVAL-CONFIG] Loading configuration from environment | "
            f"DATA_EVAL_DISPLAY_UTC={config.display_utc} | "
            f"DATA_EVAL_METRICS_ENABLED={config.metrics_enabled} | "
            f"DATA_EVAL_AUDIT_LOG_ENABLED={config.audit_log_enabled} | "
            f"DATA_EVAL_LOG_LEVEL={config.log_level}"
        )

        if validate:
            config.validate()
            config.apply_log_level()

        return config

    def to_dict(self) -> dict:
        return {
            "display_utc": self.display_utc,
            "metrics_enabled": self.metrics_enabled,
            "audit_log_enabled": self.audit_log_enabled,
            "log_level": self.log_level,
        }


def _read_bool(name: str, default: bool) -> bool:
    """Parse a boolean environment variable, falling back to default."""
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default

    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False

    logger.warning(
        f"[DATA-EVAL-CONFIG] Invalid {name} value: {raw}, using default: {default}"
    )
    return default


# =============================================================================
# Module-Level Configuration Instance
# =============================================================================

_config_instance: Optional[DataEvaluationConfig] = None


def get_data_eval_config(validate: bool = True) -> DataEvaluationConfig:
    """
    Get the global configuration instance, loading it on first access.

    Raises:
        DataEvaluationConfigurationError: If validation fails (DEV-040)
    """
    global _config_instance

    if _config_instance is None:
        _config_instance = DataEvaluationConfig.from_environment(validate=validate)

    return _config_instance


def reset_data_eval_config() -> None:
    """Reset the global configuration instance. Used by tests."""
    global _config_instance
    _config_instance = None
    logger.debug("[DATA-EVAL-CONFIG] Configuration instance reset")


__all__ = [
    "DataEvaluationConfig",
    "DataEvaluationConfigurationError",
    "DataEvaluationConfigErrorCode",
    "DEFAULT_DISPLAY_UTC",
    "DEFAULT_METRICS_ENABLED",
    "DEFAULT_AUDIT_LOG_ENABLED",
    "DEFAULT_LOG_LEVEL",
    "VALID_LOG_LEVELS",
    "PACKAGE_LOGGER_NAME",
    "get_data_eval_config",
    "reset_data_eval_config",
]
