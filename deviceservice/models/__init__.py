"""Resource specs and gateway wire payloads."""

from deviceservice.models.resources import (
    AssetSpec,
    AssetStatus,
    CronTabSpec,
    DataPoint,
    Event,
    Resource,
    ResourceKind,
    StatusError,
)
from deviceservice.models.wire import (
    Device,
    DeviceChangeRequest,
    DeviceChangeResponse,
    DeviceSpec,
    Mount,
    QueryDeviceCredentialRequest,
    QueryDeviceCredentialResponse,
    QueryDeviceRequest,
    QueryDeviceResponse,
)

__all__ = [
    "AssetSpec",
    "AssetStatus",
    "CronTabSpec",
    "DataPoint",
    "Event",
    "Resource",
    "ResourceKind",
    "StatusError",
    "Device",
    "DeviceChangeRequest",
    "DeviceChangeResponse",
    "DeviceSpec",
    "Mount",
    "QueryDeviceCredentialRequest",
    "QueryDeviceCredentialResponse",
    "QueryDeviceRequest",
    "QueryDeviceResponse",
]
