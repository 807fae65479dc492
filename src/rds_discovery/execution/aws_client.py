"""RDS client factory and remote call wrapper."""

from __future__ import annotations

import logging
from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from rds_discovery.config import Settings
from rds_discovery.errors import RemoteCallError

logger = logging.getLogger(__name__)


def _get_service_config(settings: Settings) -> Config:
    # A single attempt per call: failures are fatal and never retried.
    return Config(
        read_timeout=settings.execution.sdk_timeout_seconds,
        connect_timeout=settings.execution.sdk_timeout_seconds,
        retries={"max_attempts": 1, "mode": "standard"},
        max_pool_connections=max(10, settings.execution.max_workers),
    )


def create_rds_client(session: boto3.Session, region: str, settings: Settings) -> Any:
    return session.client("rds", region_name=region, config=_get_service_config(settings))


def call_rds(
    client: Any,
    operation: str,
    *,
    target: str | None = None,
    **kwargs: Any,
) -> dict[str, Any]:
    """Invoke one RDS API operation by its snake_case method name.

    ``target`` names the resource in error messages.

    Raises:
        RemoteCallError: carrying the provider's error code and message
    """
    method = getattr(client, operation)
    label = f"{operation} ({target})" if target else operation
    try:
        return method(**kwargs)
    except ClientError as exc:
        error = exc.response.get("Error", {})
        error_code = error.get("Code", "Unknown")
        error_message = error.get("Message", str(exc))
        logger.debug("RDS %s failed: %s: %s", operation, error_code, error_message)
        raise RemoteCallError(
            label,
            f"{error_code}: {error_message}",
            code=error_code,
        ) from exc
    except BotoCoreError as exc:
        raise RemoteCallError(label, str(exc)) from exc
