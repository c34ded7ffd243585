"""Discovery gateway HTTP API."""

from __future__ import annotations

import asyncio
import contextlib
import json
import threading
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Callable
from urllib.parse import urlparse

from loguru import logger

from deviceservice.dispatch.engine import DispatchEngine
from deviceservice.models.wire import (
    DeviceChangeRequest,
    DeviceChangeResponse,
    QueryDeviceCredentialRequest,
    QueryDeviceCredentialResponse,
    QueryDeviceRequest,
    QueryDeviceResponse,
)

HELLO_WORLD = "hello_world"
QUERY_DEVICE = "query_device"
QUERY_DEVICE_CREDENTIAL = "query_device_credential"
DEVICE_CHANGE = "device_change"

ROUTES: dict[tuple[str, str], str] = {
    ("GET", "/api/v1/helloworld"): HELLO_WORLD,
    ("POST", "/queryDevice"): QUERY_DEVICE,
    ("POST", "/queryDeviceCredential"): QUERY_DEVICE_CREDENTIAL,
    ("POST", "/deviceChange"): DEVICE_CHANGE,
}

HELLO_WORLD_BODY = "Hello World"
NOT_FOUND_BODY = "404 Not Found"


def resolve_route(method: str, path: str) -> str | None:
    """Return the route name for an exact method and path match, ignoring any query string."""
    return ROUTES.get((str(method or "").upper(), urlparse(path or "").path))


@dataclass(frozen=True, slots=True)
class _DispatchRoute:
    parse: Callable[[Any], Any]
    call: Callable[[DispatchEngine, Any], Any]
    failure: Callable[[], Any]


_DISPATCH_ROUTES: dict[str, _DispatchRoute] = {
    QUERY_DEVICE: _DispatchRoute(
        QueryDeviceRequest.from_dict,
        lambda engine, request: engine.query_device(request),
        QueryDeviceResponse.reject,
    ),
    QUERY_DEVICE_CREDENTIAL: _DispatchRoute(
        QueryDeviceCredentialRequest.from_dict,
        lambda engine, request: engine.query_credential(request),
        QueryDeviceCredentialResponse.fail,
    ),
    DEVICE_CHANGE: _DispatchRoute(
        DeviceChangeRequest.from_dict,
        lambda engine, request: engine.device_change(request),
        DeviceChangeResponse.fail,
    ),
}


class _GatewayRequestHandler(BaseHTTPRequestHandler):
    """Synchronous HTTP handler that proxies into the asyncio dispatch engine."""

    engine: DispatchEngine | None = None
    loop: asyncio.AbstractEventLoop | None = None
    max_request_body_bytes: int = 1024 * 1024
    request_timeout_seconds: float = 30.0

    server_version = "deviceservice/0.1"

    def do_GET(self) -> None:  # noqa: N802
        self._route()

    def do_POST(self) -> None:  # noqa: N802
        self._route()

    def __getattr__(self, name: str) -> Any:
        # Any other verb (PUT, TRACE, CONNECT, custom) goes through the route table.
        if name.startswith("do_"):
            return self._route
        raise AttributeError(name)

    def log_message(self, fmt: str, *args: Any) -> None:
        logger.debug("gateway-api " + fmt % args)

    def _route(self) -> None:
        route = resolve_route(self.command, self.path)
        if route is None:
            self._send_text(HTTPStatus.NOT_FOUND, NOT_FOUND_BODY)
            return
        if route == HELLO_WORLD:
            self._send_text(HTTPStatus.OK, HELLO_WORLD_BODY)
            return
        payload = self._read_json_body()
        if payload is None:
            return
        self._dispatch(_DISPATCH_ROUTES[route], payload)

    def _dispatch(self, route: _DispatchRoute, payload: dict[str, Any]) -> None:
        request = route.parse(payload)
        if not self.engine or not self.loop:
            logger.warning("gateway-api dispatch engine unavailable")
            self._send_json(HTTPStatus.OK, route.failure().to_dict())
            return
        fut = asyncio.run_coroutine_threadsafe(route.call(self.engine, request), self.loop)
        ok_wait, result, err_msg = self._resolve_future_result(fut, timeout=self.request_timeout_seconds)
        if not ok_wait:
            logger.warning(f"gateway-api {self.path} answered with failure: {err_msg}")
            result = route.failure()
        self._send_json(HTTPStatus.OK, result.to_dict())

    def _read_json_body(self) -> dict[str, Any] | None:
        """Parse the body as a JSON object; anything malformed reads as an empty request."""
        try:
            length = int(self.headers.get("Content-Length", "0"))
        except ValueError:
            length = 0
        max_body = max(1024, int(self.max_request_body_bytes))
        if length > max_body:
            self._send_json(
                HTTPStatus.REQUEST_ENTITY_TOO_LARGE,
                {"error": f"request body too large (max {max_body} bytes)"},
            )
            return None
        body = self.rfile.read(length) if length > 0 else b""
        try:
            payload = json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            logger.debug(f"gateway-api {self.path} malformed body, using defaults")
            return {}
        return payload if isinstance(payload, dict) else {}

    @staticmethod
    def _resolve_future_result(
        future: Any,
        *,
        timeout: float,
    ) -> tuple[bool, Any | None, str | None]:
        """Resolve a thread-safe asyncio future into (ok, result, error)."""
        try:
            return True, future.result(timeout=timeout), None
        except FutureTimeoutError:
            with contextlib.suppress(Exception):
                future.cancel()
            return False, None, "dispatch timeout"
        except Exception as e:
            logger.warning(f"gateway-api dispatch future failed: {e}")
            return False, None, "dispatch error"

    def _send_json(self, code: HTTPStatus, payload: dict[str, Any]) -> None:
        body = json.dumps(payload, ensure_ascii=False).encode("utf-8")
        self._send_body(code, "application/json; charset=utf-8", body)

    def _send_text(self, code: HTTPStatus, text: str) -> None:
        self._send_body(code, "text/plain; charset=utf-8", text.encode("utf-8"))

    def _send_body(self, code: HTTPStatus, content_type: str, body: bytes) -> None:
        self.send_response(code)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        if self.command != "HEAD":
            self.wfile.write(body)


class DeviceGatewayServer:
    """Threaded HTTP endpoint receiving discovery handler callbacks."""

    def __init__(
        self,
        *,
        host: str,
        port: int,
        engine: DispatchEngine,
        loop: asyncio.AbstractEventLoop,
        max_request_body_bytes: int = 1024 * 1024,
        request_timeout_seconds: float = 30.0,
    ) -> None:
        self.host = host
        self.port = port
        self.engine = engine
        self.loop = loop
        self.max_request_body_bytes = max(1024, int(max_request_body_bytes))
        self.request_timeout_seconds = max(0.1, float(request_timeout_seconds))
        self._thread: threading.Thread | None = None
        self._server: ThreadingHTTPServer | None = None

    def start(self) -> None:
        handler_cls = type("BoundGatewayRequestHandler", (_GatewayRequestHandler,), {})
        handler_cls.engine = self.engine
        handler_cls.loop = self.loop
        handler_cls.max_request_body_bytes = self.max_request_body_bytes
        handler_cls.request_timeout_seconds = self.request_timeout_seconds
        self._server = ThreadingHTTPServer((self.host, self.port), handler_cls)
        self.port = int(self._server.server_address[1])
        self._thread = threading.Thread(target=self._server.serve_forever, daemon=True)
        self._thread.start()
        logger.info(f"Device gateway API listening on http://{self.host}:{self.port}")

    def stop(self) -> None:
        if self._server:
            self._server.shutdown()
            self._server.server_close()
            self._server = None
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=2)
        self._thread = None
