"""AWS credential utilities."""

from rds_discovery.aws_credentials.sts_provider import (
    AssumeRoleProvider,
    TemporaryCredentials,
)

__all__ = [
    "AssumeRoleProvider",
    "TemporaryCredentials",
]
