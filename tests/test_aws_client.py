from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from rds_discovery.errors import RemoteCallError
from rds_discovery.execution.aws_client import call_rds, create_rds_client


def _settings(max_workers: int = 1) -> SimpleNamespace:
    return SimpleNamespace(
        execution=SimpleNamespace(sdk_timeout_seconds=30, max_workers=max_workers),
    )


def test_create_rds_client_disables_retries() -> None:
    session = MagicMock()

    client = create_rds_client(session, "eu-central-1", _settings())

    assert client is session.client.return_value
    args, kwargs = session.client.call_args
    assert args == ("rds",)
    assert kwargs["region_name"] == "eu-central-1"
    config = kwargs["config"]
    assert config.retries == {"max_attempts": 1, "mode": "standard"}
    assert config.read_timeout == 30
    assert config.connect_timeout == 30


def test_create_rds_client_sizes_pool_for_workers() -> None:
    session = MagicMock()

    create_rds_client(session, "eu-central-1", _settings(max_workers=24))

    assert session.client.call_args.kwargs["config"].max_pool_connections == 24


def test_call_rds_returns_response() -> None:
    client = MagicMock()
    client.describe_db_instances.return_value = {"DBInstances": []}

    assert call_rds(client, "describe_db_instances") == {"DBInstances": []}
    client.describe_db_instances.assert_called_once_with()


def test_call_rds_wraps_client_error() -> None:
    client = MagicMock()
    client.list_tags_for_resource.side_effect = ClientError(
        {"Error": {"Code": "DBInstanceNotFound", "Message": "gone"}},
        "ListTagsForResource",
    )

    with pytest.raises(RemoteCallError) as exc_info:
        call_rds(client, "list_tags_for_resource", target="arn:db", ResourceName="arn:db")

    assert exc_info.value.code == "DBInstanceNotFound"
    assert exc_info.value.operation == "list_tags_for_resource (arn:db)"
    assert "gone" in str(exc_info.value)
    client.list_tags_for_resource.assert_called_once_with(ResourceName="arn:db")


def test_call_rds_wraps_transport_error() -> None:
    client = MagicMock()
    client.describe_db_instances.side_effect = EndpointConnectionError(
        endpoint_url="https://rds.eu-central-1.amazonaws.com"
    )

    with pytest.raises(RemoteCallError, match="describe_db_instances failed"):
        call_rds(client, "describe_db_instances")
