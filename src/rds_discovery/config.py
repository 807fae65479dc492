"""Configuration management for RDS discovery.

Two layers live here: ambient ``Settings`` read from the environment (and an
optional ``.env`` file), and the per-run ``DiscoveryConfig`` resolved from the
command line.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path

import botocore.session
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from rds_discovery.domain.models import TagFilter
from rds_discovery.errors import ConfigurationError

_config_logger = logging.getLogger(__name__)


class LoggingSettings(BaseModel):
    level: str = Field(default="WARNING", description="Python logging level name")
    file: str | None = Field(default=None, description="Optional log file path")


class ExecutionSettings(BaseModel):
    sdk_timeout_seconds: int = Field(default=30, ge=1, le=300)
    max_workers: int = Field(
        default=1,
        ge=1,
        le=32,
        description="Concurrent tag lookups. 1 keeps lookups strictly sequential.",
    )


class AWSSettings(BaseModel):
    session_name: str = Field(default="zabbix-discovery", min_length=2, max_length=64)
    duration_seconds: int = Field(default=3600, ge=900, le=43200)
    sts_region: str | None = Field(
        default=None,
        description="STS endpoint region. Defaults to the discovery region.",
    )


class Settings(BaseModel):
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    execution: ExecutionSettings = Field(default_factory=ExecutionSettings)
    aws: AWSSettings = Field(default_factory=AWSSettings)


ENV_KEYS = {
    "log_level": "LOG_LEVEL",
    "log_file": "LOG_FILE",
    "session_name": "DISCOVERY_SESSION_NAME",
    "duration_seconds": "DISCOVERY_ROLE_DURATION_SECONDS",
    "sts_region": "AWS_STS_REGION",
    "sdk_timeout_seconds": "SDK_TIMEOUT_SECONDS",
    "max_workers": "DISCOVERY_MAX_WORKERS",
}


def _env_int(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        _config_logger.warning(
            "Invalid integer value for %s: %r, using default %d", key, value, default
        )
        return default


def _env_str(key: str) -> str | None:
    value = os.getenv(key, "").strip()
    return value or None


def load_settings() -> Settings:
    """Load configuration and cache the result."""

    return _load_settings_cached()


@lru_cache(maxsize=1)
def _load_settings_cached() -> Settings:
    load_dotenv(dotenv_path=Path.cwd() / ".env")
    log_file_env = _env_str(ENV_KEYS["log_file"])

    settings_data: dict[str, object] = {
        "logging": {
            "level": os.getenv(ENV_KEYS["log_level"], LoggingSettings().level),
            "file": str(Path(log_file_env).expanduser().resolve()) if log_file_env else None,
        },
        "execution": {
            "sdk_timeout_seconds": _env_int(
                ENV_KEYS["sdk_timeout_seconds"],
                ExecutionSettings().sdk_timeout_seconds,
            ),
            "max_workers": _env_int(
                ENV_KEYS["max_workers"],
                ExecutionSettings().max_workers,
            ),
        },
        "aws": {
            "session_name": os.getenv(ENV_KEYS["session_name"], AWSSettings().session_name),
            "duration_seconds": _env_int(
                ENV_KEYS["duration_seconds"],
                AWSSettings().duration_seconds,
            ),
            "sts_region": _env_str(ENV_KEYS["sts_region"]),
        },
    }

    try:
        return Settings.model_validate(settings_data)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid configuration: {exc}") from exc


# ---------------------------------------------------------------------------
# Run configuration
# ---------------------------------------------------------------------------

_TAG_FILTERS = TypeAdapter(list[TagFilter])


@lru_cache(maxsize=1)
def known_regions() -> frozenset[str]:
    """Every region botocore ships endpoint data for, across all partitions."""
    session = botocore.session.get_session()
    regions: set[str] = set()
    for partition in session.get_available_partitions():
        regions.update(session.get_available_regions("rds", partition_name=partition))
    return frozenset(regions)


def parse_region(value: str) -> str:
    region = (value or "").strip().lower()
    if not region:
        raise ConfigurationError("Region must not be empty")
    if region not in known_regions():
        raise ConfigurationError(f"Unknown AWS region: {value!r}")
    return region


def parse_role(value: str) -> str:
    role = (value or "").strip()
    if not role:
        raise ConfigurationError("Role ARN must not be empty")
    return role


def parse_tag_filters(raw: str | None) -> tuple[TagFilter, ...] | None:
    """Parse a JSON array of ``{"key": ..., "value": ...}`` objects.

    ``None`` means no filter was requested and every instance is selected.
    """
    if raw is None:
        return None
    try:
        filters = _TAG_FILTERS.validate_json(raw)
    except ValidationError as exc:
        raise ConfigurationError(f"Could not parse tags JSON: {exc}") from exc
    if not filters:
        raise ConfigurationError("Tags JSON must contain at least one key/value pair")
    return tuple(filters)


class DiscoveryConfig(BaseModel):
    """Resolved, immutable parameters of one discovery run."""

    model_config = ConfigDict(frozen=True)

    region: str
    role_arn: str
    tag_filters: tuple[TagFilter, ...] | None = None

    @classmethod
    def from_arguments(
        cls,
        region: str,
        role: str,
        tags: str | None = None,
    ) -> "DiscoveryConfig":
        return cls(
            region=parse_region(region),
            role_arn=parse_role(role),
            tag_filters=parse_tag_filters(tags),
        )
