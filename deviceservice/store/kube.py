"""Kubernetes custom resource store over the REST API."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import httpx
from loguru import logger

from deviceservice.config.schema import ResourceKindConfig, StoreConfig
from deviceservice.models.resources import Resource, ResourceKind
from deviceservice.store.base import ResourceStore
from deviceservice.store.errors import ResourceNotFound, StoreApiError, StoreTransportError

MERGE_PATCH_CONTENT_TYPE = "application/merge-patch+json"


class KubeResourceStore(ResourceStore):
    """Namespaced custom resources addressed as /apis/{group}/{version}/namespaces/{ns}/{plural}."""

    name = "kube"

    def __init__(
        self,
        *,
        base_url: str,
        kinds: dict[ResourceKind, ResourceKindConfig],
        token: str = "",
        verify: bool | str = True,
        timeout_seconds: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = str(base_url or "").rstrip("/")
        self.kinds = dict(kinds)
        self.timeout_seconds = max(0.2, float(timeout_seconds))
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = client or httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            verify=verify,
            timeout=self.timeout_seconds,
        )

    @classmethod
    def from_config(cls, config: StoreConfig, *, client: httpx.AsyncClient | None = None) -> "KubeResourceStore":
        """Build a store from config, falling back to the in-cluster service account."""
        base_url = str(config.base_url or "").strip()
        if not base_url:
            host = str(os.environ.get("KUBERNETES_SERVICE_HOST") or "").strip()
            port = str(os.environ.get("KUBERNETES_SERVICE_PORT") or "443").strip()
            if not host:
                raise ValueError("store.base_url is empty and KUBERNETES_SERVICE_HOST is not set")
            if ":" in host:
                host = f"[{host}]"
            base_url = f"https://{host}:{port}"

        token = str(config.token or "").strip()
        if not token and config.token_path:
            token = _read_optional_file(Path(config.token_path))

        verify: bool | str = bool(config.verify_tls)
        if verify and config.ca_path and Path(config.ca_path).is_file():
            verify = str(config.ca_path)

        return cls(
            base_url=base_url,
            kinds={
                ResourceKind.ASSET: config.asset,
                ResourceKind.SCHEDULED_JOB: config.scheduled_job,
            },
            token=token,
            verify=verify,
            timeout_seconds=config.timeout_seconds,
            client=client,
        )

    async def find(self, kind: ResourceKind, name: str, namespace: str) -> Resource:
        logger.debug(f"store find {kind} {namespace}/{name}")
        resp = await self._send("GET", self._path(kind, namespace, name))
        if resp.status_code == 404:
            raise ResourceNotFound(str(kind), name, namespace)
        _raise_for_status(resp)
        return _to_resource(kind, _json_body(resp))

    async def create(
        self,
        kind: ResourceKind,
        name: str,
        namespace: str,
        spec: dict[str, Any],
    ) -> None:
        logger.debug(f"store create {kind} {namespace}/{name}")
        resp = await self._send(
            "POST",
            self._path(kind, namespace),
            body=self._manifest(kind, name, spec),
        )
        _raise_for_status(resp)

    async def update(
        self,
        kind: ResourceKind,
        name: str,
        namespace: str,
        spec: dict[str, Any],
    ) -> None:
        logger.debug(f"store update {kind} {namespace}/{name}")
        resp = await self._send(
            "PATCH",
            self._path(kind, namespace, name),
            body=self._manifest(kind, name, spec),
            content_type=MERGE_PATCH_CONTENT_TYPE,
        )
        _raise_for_status(resp)

    async def list_resources(self, kind: ResourceKind, namespace: str | None = None) -> list[Resource]:
        coords = self._coords(kind)
        if namespace:
            path = self._path(kind, namespace)
        else:
            path = f"/apis/{coords.group}/{coords.version}/{coords.plural}"
        resp = await self._send("GET", path)
        _raise_for_status(resp)
        data = _json_body(resp)
        items = data.get("items") if isinstance(data, dict) else None
        return [_to_resource(kind, item) for item in items or [] if isinstance(item, dict)]

    async def close(self) -> None:
        await self._client.aclose()

    def _coords(self, kind: ResourceKind) -> ResourceKindConfig:
        coords = self.kinds.get(kind)
        if coords is None:
            raise ValueError(f"unsupported resource kind: {kind}")
        return coords

    def _path(self, kind: ResourceKind, namespace: str, name: str | None = None) -> str:
        coords = self._coords(kind)
        path = f"/apis/{coords.group}/{coords.version}/namespaces/{namespace}/{coords.plural}"
        if name is not None:
            path = f"{path}/{name}"
        return path

    def _manifest(self, kind: ResourceKind, name: str, spec: dict[str, Any]) -> dict[str, Any]:
        coords = self._coords(kind)
        return {
            "apiVersion": coords.api_version,
            "kind": coords.kind,
            "metadata": {"name": name},
            "spec": dict(spec),
        }

    async def _send(
        self,
        method: str,
        path: str,
        *,
        body: dict[str, Any] | None = None,
        content_type: str = "application/json",
    ) -> httpx.Response:
        headers: dict[str, str] = {}
        content: bytes | None = None
        if body is not None:
            headers["Content-Type"] = content_type
            content = json.dumps(body).encode("utf-8")
        try:
            return await self._client.request(method, path, content=content, headers=headers)
        except httpx.RequestError as e:
            raise StoreTransportError(f"{method} {path}: {e}") from e


def _json_body(resp: httpx.Response) -> Any:
    try:
        return resp.json()
    except ValueError as e:
        raise StoreApiError(resp.status_code, f"invalid response body: {e}") from e


def _raise_for_status(resp: httpx.Response) -> None:
    if resp.is_success:
        return
    reason = ""
    message = resp.text
    try:
        status = resp.json()
    except ValueError:
        status = None
    if isinstance(status, dict):
        reason = str(status.get("reason") or "")
        message = str(status.get("message") or message)
    raise StoreApiError(resp.status_code, message, reason=reason)


def _to_resource(kind: ResourceKind, obj: Any) -> Resource:
    data = obj if isinstance(obj, dict) else {}
    metadata = data.get("metadata") if isinstance(data.get("metadata"), dict) else {}
    spec = data.get("spec") if isinstance(data.get("spec"), dict) else {}
    return Resource(
        kind=kind,
        name=str(metadata.get("name") or ""),
        namespace=str(metadata.get("namespace") or ""),
        spec=dict(spec),
        resource_version=str(metadata.get("resourceVersion") or ""),
    )


def _read_optional_file(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8").strip()
    except OSError:
        return ""
