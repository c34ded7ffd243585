"""HTTP surface of the device gateway."""

from deviceservice.api.gateway_server import ROUTES, DeviceGatewayServer, resolve_route

__all__ = ["DeviceGatewayServer", "ROUTES", "resolve_route"]
