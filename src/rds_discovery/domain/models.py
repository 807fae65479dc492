"""Domain objects for RDS instances and the Zabbix discovery document."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from rds_discovery.errors import DataIntegrityError

DB_MACRO = "{#DB}"
DB_ENDPOINT_MACRO = "{#DB_ENDPOINT}"
DB_PORT_MACRO = "{#DB_PORT}"


class TagFilter(BaseModel):
    """A single key/value pair an instance tag must match exactly."""

    model_config = ConfigDict(frozen=True)

    key: str = Field(min_length=1)
    value: str = Field(min_length=1)

    def as_pair(self) -> tuple[str, str]:
        return (self.key, self.value)


class DiscoveryEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    db_instance_identifier: str = Field(serialization_alias=DB_MACRO)
    address: str = Field(serialization_alias=DB_ENDPOINT_MACRO)
    port: int = Field(serialization_alias=DB_PORT_MACRO)


class DiscoveryDocument(BaseModel):
    data: list[DiscoveryEntry] = Field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        """Return the document keyed by the Zabbix LLD macro names."""
        return self.model_dump(by_alias=True, mode="json")


@dataclass(frozen=True)
class DbInstance:
    """One item of a DescribeDBInstances response.

    Fields are optional at parse time; an instance in a transitional state may
    lack an endpoint. Missing values are only fatal once they are needed.
    """

    identifier: str | None
    arn: str | None
    address: str | None
    port: int | None

    @classmethod
    def from_api(cls, item: dict[str, Any]) -> "DbInstance":
        endpoint = item.get("Endpoint") or {}
        return cls(
            identifier=item.get("DBInstanceIdentifier"),
            arn=item.get("DBInstanceArn"),
            address=endpoint.get("Address"),
            port=endpoint.get("Port"),
        )

    @property
    def label(self) -> str:
        return self.identifier or self.arn or "<unknown instance>"

    def require_arn(self) -> str:
        if not self.arn:
            raise DataIntegrityError(f"DB instance {self.label} has no DBInstanceArn")
        return self.arn

    def to_entry(self) -> DiscoveryEntry:
        missing = [
            name
            for name, value in (
                ("DBInstanceIdentifier", self.identifier),
                ("Endpoint.Address", self.address),
                ("Endpoint.Port", self.port),
            )
            if value is None or value == ""
        ]
        if missing:
            raise DataIntegrityError(
                f"DB instance {self.label} is missing {', '.join(missing)}"
            )
        return DiscoveryEntry(
            db_instance_identifier=self.identifier,
            address=self.address,
            port=self.port,
        )
