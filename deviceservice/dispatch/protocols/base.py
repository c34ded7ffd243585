"""Protocol handler contract used by the dispatch engine."""

from __future__ import annotations

from abc import ABC

from deviceservice.models.wire import (
    DeviceChangeRequest,
    DeviceChangeResponse,
    QueryDeviceCredentialRequest,
    QueryDeviceCredentialResponse,
    QueryDeviceRequest,
    QueryDeviceResponse,
)


class ProtocolHandler(ABC):
    """
    Decision rules for one discovery protocol.

    Every hook defaults to the negative outcome, so a handler only overrides
    the events its protocol acts on.
    """

    name: str = "base"

    async def query_device(self, request: QueryDeviceRequest) -> QueryDeviceResponse:
        """Decide whether a discovered device should be accepted."""
        return QueryDeviceResponse.reject()

    async def query_credential(self, request: QueryDeviceCredentialRequest) -> QueryDeviceCredentialResponse:
        """Return the credential for a device, or fail."""
        return QueryDeviceCredentialResponse.fail()

    async def device_change(self, request: DeviceChangeRequest) -> DeviceChangeResponse:
        """React to a device lifecycle change."""
        return DeviceChangeResponse.fail()
