"""Domain types for RDS discovery."""

from rds_discovery.domain.models import (
    DbInstance,
    DiscoveryDocument,
    DiscoveryEntry,
    TagFilter,
)

__all__ = [
    "DbInstance",
    "DiscoveryDocument",
    "DiscoveryEntry",
    "TagFilter",
]
