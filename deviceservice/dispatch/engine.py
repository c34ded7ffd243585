"""Protocol dispatch engine: routes gateway events to registered protocol handlers."""

from __future__ import annotations

from loguru import logger

from deviceservice.dispatch.protocols.base import ProtocolHandler
from deviceservice.models.wire import (
    DeviceChangeRequest,
    DeviceChangeResponse,
    QueryDeviceCredentialRequest,
    QueryDeviceCredentialResponse,
    QueryDeviceRequest,
    QueryDeviceResponse,
)


class DispatchEngine:
    """
    Registry of protocol handlers keyed by protocol name.

    Unknown protocols get the negative outcome for every event. A handler
    that raises is logged and answered with the negative outcome as well, so
    callers always receive a well-formed response.
    """

    def __init__(self, handlers: list[ProtocolHandler] | None = None) -> None:
        self._handlers: dict[str, ProtocolHandler] = {}
        for handler in handlers or []:
            self.register(handler)

    def register(self, handler: ProtocolHandler) -> None:
        if handler.name in self._handlers:
            logger.warning(f"replacing protocol handler for {handler.name!r}")
        self._handlers[handler.name] = handler

    def handler_for(self, protocol: str) -> ProtocolHandler | None:
        return self._handlers.get(protocol)

    @property
    def protocols(self) -> list[str]:
        return sorted(self._handlers)

    async def query_device(self, request: QueryDeviceRequest) -> QueryDeviceResponse:
        handler = self.handler_for(request.protocol)
        if handler is None:
            logger.info(f"queryDevice for unknown protocol {request.protocol!r}, rejecting")
            return QueryDeviceResponse.reject()
        try:
            response = await handler.query_device(request)
        except Exception:
            logger.exception(f"{request.protocol} queryDevice failed for {request.id!r}")
            return QueryDeviceResponse.reject()
        logger.info(f"{request.protocol} queryDevice {request.id!r} -> {response.result}")
        return response

    async def query_credential(self, request: QueryDeviceCredentialRequest) -> QueryDeviceCredentialResponse:
        handler = self.handler_for(request.protocol)
        if handler is None:
            logger.info(f"queryDeviceCredential for unknown protocol {request.protocol!r}, failing")
            return QueryDeviceCredentialResponse.fail()
        try:
            response = await handler.query_credential(request)
        except Exception:
            logger.exception(f"{request.protocol} queryDeviceCredential failed for {request.id!r}")
            return QueryDeviceCredentialResponse.fail()
        logger.info(f"{request.protocol} queryDeviceCredential {request.id!r} -> {response.result}")
        return response

    async def device_change(self, request: DeviceChangeRequest) -> DeviceChangeResponse:
        handler = self.handler_for(request.protocol)
        if handler is None:
            logger.info(f"deviceChange for unknown protocol {request.protocol!r}, failing")
            return DeviceChangeResponse.fail()
        try:
            response = await handler.device_change(request)
        except Exception:
            logger.exception(f"{request.protocol} deviceChange failed for {request.device.id!r}")
            return DeviceChangeResponse.fail()
        logger.info(
            f"{request.protocol} deviceChange {request.reason!r} {request.device.id!r} -> {response.result}"
        )
        return response
