"""STS AssumeRole credential provider.

The discovery role is assumed with the base credentials found by the default
botocore chain (environment, shared config, instance profile). The resulting
session refreshes the assumed-role credentials on its own before they expire.
"""

from __future__ import annotations

import hashlib
import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any

import boto3
import botocore.session
from botocore.config import Config
from botocore.credentials import RefreshableCredentials
from botocore.exceptions import BotoCoreError, ClientError

from rds_discovery.errors import CredentialError

logger = logging.getLogger(__name__)

_STS_ERROR_CODES = {
    "AccessDenied": "access_denied",
    "ExpiredToken": "token_expired",
    "ExpiredTokenException": "token_expired",
    "InvalidClientTokenId": "invalid_token",
    "MalformedPolicyDocument": "policy_error",
    "PackedPolicyTooLarge": "policy_too_large",
    "RegionDisabledException": "region_disabled",
}


@dataclass(frozen=True)
class TemporaryCredentials:
    """Immutable temporary AWS credentials from STS."""

    access_key_id: str
    secret_access_key: str
    session_token: str
    expiration: datetime
    assumed_role_arn: str

    def __repr__(self) -> str:
        return (
            f"TemporaryCredentials(access_key_id={self.access_key_id[:8]}***, "
            f"expiration={self.expiration.isoformat()})"
        )

    def to_refresh_metadata(self) -> dict[str, str]:
        """Shape expected by ``RefreshableCredentials``."""
        return {
            "access_key": self.access_key_id,
            "secret_key": self.secret_access_key,
            "token": self.session_token,
            "expiry_time": self.expiration.isoformat(),
        }


class AssumeRoleProvider:
    """Obtain and refresh credentials for a single assumed role."""

    def __init__(
        self,
        role_arn: str,
        region: str,
        session_name: str = "zabbix-discovery",
        duration_seconds: int = 3600,
        sts_region: str | None = None,
    ) -> None:
        self._role_arn = role_arn
        self._region = region
        self._sts_region = sts_region or region
        self._session_name = self._sanitize_session_name(session_name)
        self._duration_seconds = duration_seconds
        self._client: Any = None

    @property
    def role_arn(self) -> str:
        return self._role_arn

    @property
    def session_name(self) -> str:
        return self._session_name

    def _get_client(self) -> Any:
        if self._client is None:
            session = botocore.session.get_session()
            self._client = session.create_client(
                "sts",
                region_name=self._sts_region,
                config=Config(
                    connect_timeout=5,
                    read_timeout=15,
                    retries={"max_attempts": 1, "mode": "standard"},
                ),
            )
            logger.debug("STS client initialized (region=%s)", self._sts_region)
        return self._client

    def fetch(self) -> TemporaryCredentials:
        """Call sts:AssumeRole once.

        Raises:
            CredentialError: if base credentials are missing or STS rejects the call
        """
        try:
            client = self._get_client()
            response = client.assume_role(
                RoleArn=self._role_arn,
                RoleSessionName=self._session_name,
                DurationSeconds=self._duration_seconds,
            )
        except ClientError as exc:
            error_code = exc.response.get("Error", {}).get("Code", "Unknown")
            error_message = exc.response.get("Error", {}).get("Message", str(exc))
            logger.warning(
                "STS failed: role=%s, session=%s, error=%s: %s",
                self._role_arn,
                self._session_name,
                error_code,
                error_message,
            )
            raise CredentialError(
                f"Could not assume role {self._role_arn}: {error_message}",
                code=_STS_ERROR_CODES.get(error_code, "sts_error"),
            ) from exc
        except BotoCoreError as exc:
            raise CredentialError(
                f"Could not assume role {self._role_arn}: {exc}",
                code="sts_error",
            ) from exc

        creds = response["Credentials"]
        logger.info("Assumed role: %s, session=%s", self._role_arn, self._session_name)

        return TemporaryCredentials(
            access_key_id=creds["AccessKeyId"],
            secret_access_key=creds["SecretAccessKey"],
            session_token=creds["SessionToken"],
            expiration=creds["Expiration"],
            assumed_role_arn=response["AssumedRoleUser"]["Arn"],
        )

    def _refresh(self) -> dict[str, str]:
        return self.fetch().to_refresh_metadata()

    def create_session(self) -> boto3.Session:
        """Return a boto3 session whose credentials refresh via AssumeRole.

        The role is assumed immediately, so an auth failure surfaces here
        rather than on the first RDS call.
        """
        credentials = RefreshableCredentials.create_from_metadata(
            metadata=self._refresh(),
            refresh_using=self._refresh,
            method="sts-assume-role",
        )
        botocore_session = botocore.session.get_session()
        botocore_session._credentials = credentials  # noqa: SLF001
        return boto3.Session(botocore_session=botocore_session, region_name=self._region)

    @staticmethod
    def _sanitize_session_name(name: str) -> str:
        """Sanitize for STS (2-64 chars, word characters and +=,.@-)."""
        safe = re.sub(r"[^\w+=,.@-]", "-", name, flags=re.ASCII)
        safe = re.sub(r"-+", "-", safe).strip("-")
        if len(safe) > 64:
            suffix = hashlib.sha256(name.encode()).hexdigest()[:8]
            safe = safe[:55] + "-" + suffix
        return safe if len(safe) >= 2 else "zabbix-discovery-" + safe
