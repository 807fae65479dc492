"""RDS instance enumeration and tag-filtered projection.

Only the first page of ``DescribeDBInstances`` is read (the API default of 100
instances). A continuation marker is logged, never followed.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import Any

from rds_discovery.aws_credentials import AssumeRoleProvider
from rds_discovery.config import DiscoveryConfig, Settings
from rds_discovery.domain.models import (
    DbInstance,
    DiscoveryDocument,
    DiscoveryEntry,
    TagFilter,
)
from rds_discovery.execution.aws_client import call_rds, create_rds_client

logger = logging.getLogger(__name__)

TagSet = frozenset[tuple[str, str]]


def enumerate_instances(client: Any) -> list[DbInstance]:
    """Return the instances of the first DescribeDBInstances page, in API order."""
    response = call_rds(client, "describe_db_instances")
    items = response.get("DBInstances") or []
    if response.get("Marker"):
        # TODO: follow Marker once more than one page of instances is needed.
        logger.warning(
            "DescribeDBInstances returned more results than one page; "
            "only the first %d instances are discovered",
            len(items),
        )
    instances = [DbInstance.from_api(item) for item in items]
    logger.info("Enumerated %d DB instances", len(instances))
    return instances


def fetch_tags(client: Any, instance: DbInstance) -> TagSet:
    arn = instance.require_arn()
    response = call_rds(
        client,
        "list_tags_for_resource",
        target=arn,
        ResourceName=arn,
    )
    return frozenset(
        (tag.get("Key"), tag.get("Value")) for tag in response.get("TagList") or []
    )


def matches_tags(tags: TagSet, filters: Iterable[TagFilter]) -> bool:
    """True if any filter pair equals one of the instance's tags exactly."""
    return any(tag_filter.as_pair() in tags for tag_filter in filters)


def select_instances(
    client: Any,
    instances: Sequence[DbInstance],
    filters: Sequence[TagFilter] | None,
    max_workers: int = 1,
) -> list[DiscoveryEntry]:
    """Project instances into discovery entries, applying the tag filter if set.

    Entries keep the enumeration order. Any failed tag lookup aborts the whole
    selection; when lookups run in parallel the earliest instance's failure
    is the one raised.
    """
    if filters is None:
        return [instance.to_entry() for instance in instances]

    if max_workers > 1 and len(instances) > 1:
        tag_sets = _fetch_tags_parallel(client, instances, max_workers)
    else:
        tag_sets = (fetch_tags(client, instance) for instance in instances)

    entries: list[DiscoveryEntry] = []
    for instance, tags in zip(instances, tag_sets):
        if matches_tags(tags, filters):
            entries.append(instance.to_entry())
        else:
            logger.debug("Skipping %s: no matching tag", instance.label)
    return entries


def _fetch_tags_parallel(
    client: Any,
    instances: Sequence[DbInstance],
    max_workers: int,
) -> list[TagSet]:
    pool = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="rds-tags")
    try:
        return list(pool.map(partial(fetch_tags, client), instances))
    finally:
        pool.shutdown(wait=True, cancel_futures=True)


def run_discovery(config: DiscoveryConfig, settings: Settings) -> DiscoveryDocument:
    """Assume the role, enumerate instances and build the discovery document."""
    provider = AssumeRoleProvider(
        role_arn=config.role_arn,
        region=config.region,
        session_name=settings.aws.session_name,
        duration_seconds=settings.aws.duration_seconds,
        sts_region=settings.aws.sts_region,
    )
    session = provider.create_session()
    client = create_rds_client(session, config.region, settings)

    instances = enumerate_instances(client)
    entries = select_instances(
        client,
        instances,
        config.tag_filters,
        max_workers=settings.execution.max_workers,
    )
    logger.info("Selected %d of %d DB instances", len(entries), len(instances))
    return DiscoveryDocument(data=entries)
