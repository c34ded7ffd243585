"""Gateway request/response payloads exchanged with discovery handlers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _mapping(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _string_map(value: Any) -> dict[str, str]:
    return {str(k): v for k, v in _mapping(value).items() if isinstance(v, str)}


def _first(data: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return None


@dataclass(slots=True)
class Mount:
    """Host volume mounted into containers that request the device."""

    container_path: str = ""
    host_path: str = ""
    read_only: bool = False

    @classmethod
    def from_dict(cls, data: Any) -> "Mount":
        raw = _mapping(data)
        read_only = _first(raw, "readOnly", "read_only")
        return cls(
            container_path=_text(_first(raw, "containerPath", "container_path")),
            host_path=_text(_first(raw, "hostPath", "host_path")),
            read_only=read_only if isinstance(read_only, bool) else False,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "containerPath": self.container_path,
            "hostPath": self.host_path,
            "readOnly": self.read_only,
        }


@dataclass(slots=True)
class DeviceSpec:
    """Host device node exposed to containers; permissions is a subset of ``rwm``."""

    container_path: str = ""
    host_path: str = ""
    permissions: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "DeviceSpec":
        raw = _mapping(data)
        return cls(
            container_path=_text(_first(raw, "containerPath", "container_path")),
            host_path=_text(_first(raw, "hostPath", "host_path")),
            permissions=_text(raw.get("permissions")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "containerPath": self.container_path,
            "hostPath": self.host_path,
            "permissions": self.permissions,
        }


@dataclass(slots=True)
class Device:
    """Device reported by a discovery handler."""

    id: str = ""
    properties: dict[str, str] = field(default_factory=dict)
    mounts: list[Mount] = field(default_factory=list)
    device_specs: list[DeviceSpec] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "Device":
        # Each field defaults on its own; a missing or malformed mounts list
        # does not discard the id or properties.
        raw = _mapping(data)
        mounts = raw.get("mounts")
        specs = _first(raw, "deviceSpecs", "device_specs")
        return cls(
            id=_text(raw.get("id")),
            properties=_string_map(raw.get("properties")),
            mounts=[Mount.from_dict(m) for m in mounts] if isinstance(mounts, list) else [],
            device_specs=[DeviceSpec.from_dict(s) for s in specs] if isinstance(specs, list) else [],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "properties": dict(self.properties),
            "mounts": [m.to_dict() for m in self.mounts],
            "deviceSpecs": [s.to_dict() for s in self.device_specs],
        }


@dataclass(slots=True)
class QueryDeviceRequest:
    id: str = ""
    protocol: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "QueryDeviceRequest":
        raw = _mapping(data)
        return cls(id=_text(raw.get("id")), protocol=_text(raw.get("protocol")))


@dataclass(slots=True)
class QueryDeviceCredentialRequest:
    protocol: str = ""
    id: str = ""
    properties: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> "QueryDeviceCredentialRequest":
        raw = _mapping(data)
        inner = _mapping(raw.get("data"))
        return cls(
            protocol=_text(raw.get("protocol")),
            id=_text(inner.get("id")),
            properties=_string_map(inner.get("properties")),
        )


@dataclass(slots=True)
class DeviceChangeRequest:
    protocol: str = ""
    reason: str = ""
    device: Device = field(default_factory=Device)

    @classmethod
    def from_dict(cls, data: Any) -> "DeviceChangeRequest":
        raw = _mapping(data)
        inner = _mapping(raw.get("data"))
        return cls(
            protocol=_text(raw.get("protocol")),
            reason=_text(inner.get("reason")),
            device=Device.from_dict(inner.get("device")),
        )


@dataclass(slots=True)
class QueryDeviceResponse:
    result: str
    properties: dict[str, str] = field(default_factory=dict)

    @classmethod
    def accept(cls, properties: dict[str, str] | None = None) -> "QueryDeviceResponse":
        return cls("accept", dict(properties or {}))

    @classmethod
    def reject(cls) -> "QueryDeviceResponse":
        return cls("reject")

    @property
    def accepted(self) -> bool:
        return self.result == "accept"

    def to_dict(self) -> dict[str, Any]:
        return {"result": self.result, "properties": dict(self.properties)}


@dataclass(slots=True)
class QueryDeviceCredentialResponse:
    result: str
    credential_type: str = ""
    credentials: dict[str, str] = field(default_factory=dict)

    @classmethod
    def fail(cls) -> "QueryDeviceCredentialResponse":
        return cls("fail")

    def to_dict(self) -> dict[str, Any]:
        return {
            "result": self.result,
            "credentialType": self.credential_type,
            "credentials": dict(self.credentials),
        }


@dataclass(slots=True)
class DeviceChangeResponse:
    result: str
    device: Device = field(default_factory=Device)

    @classmethod
    def fail(cls) -> "DeviceChangeResponse":
        return cls("fail")

    def to_dict(self) -> dict[str, Any]:
        return {"result": self.result, "device": self.device.to_dict()}
