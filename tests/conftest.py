from __future__ import annotations

from typing import Any

import pytest
from botocore.exceptions import ClientError

from rds_discovery import config


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config, "load_dotenv", lambda **_: None)
    for key in config.ENV_KEYS.values():
        monkeypatch.delenv(key, raising=False)
    config._load_settings_cached.cache_clear()
    yield
    config._load_settings_cached.cache_clear()


def make_instance(
    identifier: str,
    address: str | None = None,
    port: int | None = 5432,
    arn: str | None = None,
) -> dict[str, Any]:
    item: dict[str, Any] = {
        "DBInstanceIdentifier": identifier,
        "DBInstanceArn": arn or f"arn:aws:rds:eu-central-1:111111111111:db:{identifier}",
        "DBInstanceStatus": "available",
    }
    if address is not None or port is not None:
        endpoint: dict[str, Any] = {}
        if address is not None:
            endpoint["Address"] = address
        if port is not None:
            endpoint["Port"] = port
        item["Endpoint"] = endpoint
    return item


class FakeRDSClient:
    """Stand-in for a botocore RDS client serving canned responses."""

    def __init__(
        self,
        instances: list[dict[str, Any]],
        tags: dict[str, dict[str, str]] | None = None,
        marker: str | None = None,
        failing_arns: tuple[str, ...] = (),
    ) -> None:
        self.instances = instances
        self.tags = tags or {}
        self.marker = marker
        self.failing_arns = failing_arns
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def describe_db_instances(self, **kwargs: Any) -> dict[str, Any]:
        self.calls.append(("describe_db_instances", kwargs))
        response: dict[str, Any] = {"DBInstances": list(self.instances)}
        if self.marker:
            response["Marker"] = self.marker
        return response

    def list_tags_for_resource(self, **kwargs: Any) -> dict[str, Any]:
        self.calls.append(("list_tags_for_resource", kwargs))
        arn = kwargs["ResourceName"]
        if arn in self.failing_arns:
            raise ClientError(
                {"Error": {"Code": "AccessDenied", "Message": f"not allowed on {arn}"}},
                "ListTagsForResource",
            )
        identifier = arn.rsplit(":", 1)[-1]
        return {
            "TagList": [
                {"Key": key, "Value": value}
                for key, value in self.tags.get(identifier, {}).items()
            ]
        }

    def tag_lookups(self) -> list[str]:
        return [
            kwargs["ResourceName"]
            for name, kwargs in self.calls
            if name == "list_tags_for_resource"
        ]
