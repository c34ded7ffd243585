"""
Managed resource models.

Specs are Pydantic models whose camelCase aliases match the custom resource
schemas in the declarative store. Field defaults mirror the schema defaults,
so a partial object read back from the store still validates.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ResourceKind(StrEnum):
    """Resource kinds managed by the gateway."""

    ASSET = "asset"
    SCHEDULED_JOB = "scheduled_job"


class _SpecModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_wire(self) -> dict[str, Any]:
        """Serialize with camelCase keys, as stored."""
        return self.model_dump(by_alias=True)


class StatusError(_SpecModel):
    code: int = 0
    message: str = ""


class AssetStatus(_SpecModel):
    errors: list[StatusError] = Field(default_factory=list)
    version: int = 0


class DataPoint(_SpecModel):
    name: str = ""
    data_source: str
    capability_id: str = ""
    observability_mode: str = "none"
    data_point_configuration: str = ""


class Event(_SpecModel):
    name: str = ""
    event_notifier: str
    capability_id: str = ""
    observability_mode: str = "none"
    event_configuration: str = ""


class AssetSpec(_SpecModel):
    """Desired state of a discovered device in the device registry."""

    uuid: str = ""
    asset_type: str = ""
    enabled: bool = False
    external_asset_id: str = ""
    display_name: str = ""
    description: str = ""
    asset_endpoint_profile_uri: str
    version: int = 0
    manufacturer: str = ""
    manufacturer_uri: str = ""
    model: str = ""
    product_code: str = ""
    hardware_revision: str = ""
    software_revision: str = ""
    documentation_uri: str = ""
    serial_number: str = ""
    attributes: dict[str, str] = Field(default_factory=dict)
    default_data_points_configuration: str = ""
    default_events_configuration: str = ""
    data_points: list[DataPoint] = Field(default_factory=list)
    events: list[Event] = Field(default_factory=list)
    status: AssetStatus = Field(default_factory=AssetStatus)


class CronTabSpec(_SpecModel):
    """Desired state of a ScheduledJob (CronTab custom resource)."""

    cron_spec: str
    image: str
    capacity: int


@dataclass(slots=True)
class Resource:
    """A resource as read from the store."""

    kind: ResourceKind
    name: str
    namespace: str
    spec: dict[str, Any] = field(default_factory=dict)
    resource_version: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": str(self.kind),
            "name": self.name,
            "namespace": self.namespace,
            "resource_version": self.resource_version,
            "spec": dict(self.spec),
        }
