import asyncio
import http.client
import json
import socket
import threading
import time
from urllib import request
from urllib.error import HTTPError

from deviceservice.api.gateway_server import DeviceGatewayServer
from deviceservice.config.schema import Config
from deviceservice.credentials import CredentialResolver
from deviceservice.dispatch import DispatchEngine, ProtocolHandler, create_dispatch_engine
from deviceservice.models.resources import ResourceKind
from deviceservice.models.wire import QueryDeviceRequest, QueryDeviceResponse
from deviceservice.reconcile.naming import asset_name
from deviceservice.reconcile.reconciler import ResourceReconciler
from deviceservice.store import InMemoryResourceStore


def _free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return int(s.getsockname()[1])


def _start_loop_thread() -> tuple[asyncio.AbstractEventLoop, threading.Thread]:
    loop = asyncio.new_event_loop()

    def _runner() -> None:
        asyncio.set_event_loop(loop)
        loop.run_forever()

    thread = threading.Thread(target=_runner, daemon=True)
    thread.start()
    return loop, thread


def _stop_loop_thread(loop: asyncio.AbstractEventLoop, thread: threading.Thread) -> None:
    loop.call_soon_threadsafe(loop.stop)
    thread.join(timeout=2)
    if not loop.is_closed():
        loop.close()


def _request(url: str, *, method: str = "GET", body: bytes | None = None) -> tuple[int, bytes, str]:
    req = request.Request(url, data=body, method=method)
    if body is not None:
        req.add_header("Content-Type", "application/json")
    try:
        with request.urlopen(req, timeout=5) as resp:
            return int(resp.status), resp.read(), resp.headers.get("Content-Type", "")
    except HTTPError as e:
        return int(e.code), e.read(), e.headers.get("Content-Type", "")


def _post_json(url: str, payload: dict) -> tuple[int, dict]:
    status, body, _ = _request(url, method="POST", body=json.dumps(payload).encode("utf-8"))
    return status, json.loads(body.decode("utf-8"))


def _post_raw(url: str, body: bytes) -> tuple[int, dict]:
    status, data, _ = _request(url, method="POST", body=body)
    return status, json.loads(data.decode("utf-8"))


class _Gateway:
    def __init__(self, engine: DispatchEngine | None = None, **kwargs) -> None:  # type: ignore[no-untyped-def]
        self.store = InMemoryResourceStore()
        self.loop, self.thread = _start_loop_thread()
        self.port = _free_port()
        if engine is None:
            engine = create_dispatch_engine(Config(), ResourceReconciler(self.store), CredentialResolver(""))
        self.server = DeviceGatewayServer(
            host="127.0.0.1",
            port=self.port,
            engine=engine,
            loop=self.loop,
            **kwargs,
        )

    def url(self, path: str) -> str:
        return f"http://127.0.0.1:{self.port}{path}"

    def __enter__(self) -> "_Gateway":
        self.server.start()
        time.sleep(0.1)
        return self

    def __exit__(self, *exc) -> None:  # type: ignore[no-untyped-def]
        self.server.stop()
        _stop_loop_thread(self.loop, self.thread)


def test_hello_world_and_not_found() -> None:
    with _Gateway() as gw:
        status, body, content_type = _request(gw.url("/api/v1/helloworld"))
        assert status == 200
        assert body == b"Hello World"
        assert content_type.startswith("text/plain")

        for method, path in [
            ("GET", "/nope"),
            ("POST", "/api/v1/helloworld"),
            ("GET", "/queryDevice"),
            ("PUT", "/deviceChange"),
            ("DELETE", "/queryDeviceCredential"),
        ]:
            status, body, _ = _request(gw.url(path), method=method)
            assert status == 404, (method, path)
            assert body == b"404 Not Found"


def test_query_device_business_outcomes_are_http_200() -> None:
    with _Gateway() as gw:
        status, data = _post_json(gw.url("/queryDevice"), {"id": "provision-good-1", "protocol": "debugEcho"})
        assert status == 200
        assert data == {
            "result": "accept",
            "properties": {
                "COMBINED_ID": "debugEcho-provision-good-1",
                "EXTRA_INFO": "extra-info-provision-good-1",
            },
        }

        status, data = _post_json(gw.url("/queryDevice"), {"id": "provision-bad-1", "protocol": "debugEcho"})
        assert status == 200
        assert data == {"result": "reject", "properties": {}}

        status, data = _post_json(gw.url("/queryDevice"), {"id": "x", "protocol": "unknownProto"})
        assert status == 200
        assert data["result"] == "reject"


def test_newcr_with_instance_over_http_increments_capacity() -> None:
    with _Gateway() as gw:
        for _ in range(2):
            status, data = _post_json(
                gw.url("/queryDevice"),
                {"id": "newcr-with-instance-7", "protocol": "debugEcho"},
            )
            assert status == 200
            assert data["result"] == "accept"
        job = gw.store.get(ResourceKind.SCHEDULED_JOB, "newcr-with-instance-7", "newcr-with-instance")
        assert job.spec["capacity"] == 2


def test_query_device_credential_over_http() -> None:
    with _Gateway() as gw:
        status, data = _post_json(
            gw.url("/queryDeviceCredential"),
            {"protocol": "debugEcho", "data": {"id": "foo0", "properties": {}}},
        )
        assert status == 200
        assert data == {
            "result": "success",
            "credentialType": "username-password",
            "credentials": {"username": "debugEchoUser1", "password": "debugEchoPassword1"},
        }

        status, data = _post_json(
            gw.url("/queryDeviceCredential"),
            {"protocol": "onvif", "data": {"id": "cam-01"}},
        )
        assert status == 200
        assert data["result"] == "fail"


def test_device_change_over_http_creates_one_asset() -> None:
    payload = {
        "protocol": "onvif",
        "data": {
            "reason": "add",
            "device": {
                "id": "Cam-01",
                "properties": {"ip": "10.0.0.9"},
                "mounts": [{"container_path": "/dev/video0", "host_path": "/dev/video0", "read_only": True}],
                "device_specs": [],
            },
        },
    }
    with _Gateway() as gw:
        status, first = _post_json(gw.url("/deviceChange"), payload)
        status2, second = _post_json(gw.url("/deviceChange"), payload)

        assert status == 200 and status2 == 200
        assert first["result"] == "success"
        assert first["device"] == {
            "id": "Cam-01",
            "properties": {"ip": "10.0.0.9"},
            "mounts": [{"containerPath": "/dev/video0", "hostPath": "/dev/video0", "readOnly": True}],
            "deviceSpecs": [],
        }
        assert second["result"] == "success"
        assert gw.store.count("create") == 1
        assert gw.store.get(ResourceKind.ASSET, asset_name("cam-01"), "azure-iot-operations") is not None


def test_malformed_bodies_are_treated_as_default_requests() -> None:
    with _Gateway() as gw:
        status, data = _post_raw(gw.url("/queryDevice"), b"{not json")
        assert status == 200
        assert data == {"result": "reject", "properties": {}}

        status, data = _post_raw(gw.url("/queryDeviceCredential"), b"\xff\xfe")
        assert status == 200
        assert data["result"] == "fail"

        status, data = _post_raw(gw.url("/deviceChange"), b"[1, 2]")
        assert status == 200
        assert data["result"] == "fail"

        status, data = _post_json(gw.url("/queryDevice"), {"id": 5, "protocol": "debugEcho"})
        assert status == 200
        assert data == {"result": "accept", "properties": {}}


def test_oversized_body_is_rejected_with_413() -> None:
    with _Gateway(max_request_body_bytes=1024) as gw:
        conn = http.client.HTTPConnection("127.0.0.1", gw.port, timeout=5)
        try:
            conn.putrequest("POST", "/queryDevice")
            conn.putheader("Content-Type", "application/json")
            conn.putheader("Content-Length", "4096")
            conn.endheaders()
            resp = conn.getresponse()
            data = json.loads(resp.read().decode("utf-8"))
        finally:
            conn.close()
        assert resp.status == 413
        assert "too large" in data["error"]


class _SlowHandler(ProtocolHandler):
    name = "slow"

    async def query_device(self, request: QueryDeviceRequest) -> QueryDeviceResponse:
        await asyncio.sleep(2)
        return QueryDeviceResponse.accept()


def test_dispatch_timeout_answers_with_failure_body() -> None:
    with _Gateway(engine=DispatchEngine([_SlowHandler()]), request_timeout_seconds=0.2) as gw:
        status, data = _post_json(gw.url("/queryDevice"), {"id": "x", "protocol": "slow"})
        assert status == 200
        assert data == {"result": "reject", "properties": {}}


def test_non_standard_verbs_get_not_found() -> None:
    with _Gateway() as gw:
        for method in ["TRACE", "CONNECT", "PROPFIND", "FOO", "PUT"]:
            conn = http.client.HTTPConnection("127.0.0.1", gw.port, timeout=5)
            try:
                conn.putrequest(method, "/queryDevice")
                conn.endheaders()
                resp = conn.getresponse()
                body = resp.read()
            finally:
                conn.close()
            assert resp.status == 404, method
            assert body == b"404 Not Found", method


def test_resolve_future_result_reports_ok_timeout_and_error() -> None:
    from concurrent.futures import Future

    from deviceservice.api.gateway_server import _GatewayRequestHandler

    done: Future = Future()
    done.set_result("value")
    pending: Future = Future()
    failed: Future = Future()
    failed.set_exception(RuntimeError("boom"))

    assert _GatewayRequestHandler._resolve_future_result(done, timeout=0.1) == (True, "value", None)
    assert _GatewayRequestHandler._resolve_future_result(pending, timeout=0.01) == (False, None, "dispatch timeout")
    assert pending.cancelled()
    assert _GatewayRequestHandler._resolve_future_result(failed, timeout=0.1) == (False, None, "dispatch error")
