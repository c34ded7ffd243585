"""
Idempotent create-or-update of managed resources.

Each reconciliation is a lookup followed by a create or an update. The two
calls are not atomic and updates carry no resourceVersion, so concurrent
reconciliations of one identity may both create, or both update and lose a
capacity increment. Callers get at-least-once accounting.

Any lookup failure (absent resource, API rejection, unreachable store) falls
through to create. The cause is logged so outages stay visible.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from loguru import logger
from pydantic import ValidationError

from deviceservice.models.resources import AssetSpec, CronTabSpec, Resource, ResourceKind
from deviceservice.reconcile.naming import (
    DEFAULT_ASSET_PREFIX,
    DEFAULT_DIGEST_BYTES,
    asset_name,
    scheduled_job_name,
)
from deviceservice.store.base import ResourceStore
from deviceservice.store.errors import ResourceNotFound, StoreError, StoreTransportError


@dataclass(slots=True)
class ReconcileResult:
    """Outcome of one reconciliation; action is created, updated, unchanged or failed."""

    ok: bool
    action: str
    kind: ResourceKind
    name: str
    namespace: str
    error: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "action": self.action,
            "kind": str(self.kind),
            "name": self.name,
            "namespace": self.namespace,
            "error": self.error,
        }


class ResourceReconciler:
    """Brings Asset and ScheduledJob resources in line with a desired spec."""

    def __init__(
        self,
        store: ResourceStore,
        *,
        asset_prefix: str = DEFAULT_ASSET_PREFIX,
        digest_bytes: int = DEFAULT_DIGEST_BYTES,
    ) -> None:
        self.store = store
        self.asset_prefix = asset_prefix
        self.digest_bytes = int(digest_bytes)

    def asset_name_for(self, identifier: str) -> str:
        return asset_name(identifier, prefix=self.asset_prefix, size=self.digest_bytes)

    async def reconcile_scheduled_job(
        self,
        spec: CronTabSpec,
        identifier: str,
        namespace: str,
    ) -> ReconcileResult:
        """Create the job with ``spec``, or bump capacity by one when it already exists."""
        kind = ResourceKind.SCHEDULED_JOB
        name = scheduled_job_name(identifier)
        existing = await self._lookup(kind, name, namespace)
        if existing is None:
            return await self._create(kind, name, namespace, spec.to_wire())

        try:
            current = CronTabSpec.model_validate(existing.spec)
        except ValidationError as e:
            logger.warning(f"scheduled job {namespace}/{name} has an unreadable spec: {e}")
            return ReconcileResult(False, "failed", kind, name, namespace, error=str(e))

        current.capacity += 1
        try:
            await self.store.update(kind, name, namespace, current.to_wire())
        except StoreError as e:
            logger.warning(f"update of scheduled job {namespace}/{name} failed: {e}")
            return ReconcileResult(False, "failed", kind, name, namespace, error=str(e))
        logger.info(f"updated scheduled job {namespace}/{name} capacity={current.capacity}")
        return ReconcileResult(True, "updated", kind, name, namespace)

    async def reconcile_asset(
        self,
        spec: AssetSpec,
        identifier: str,
        namespace: str,
    ) -> ReconcileResult:
        """Create the asset if absent. An existing asset is left untouched."""
        kind = ResourceKind.ASSET
        name = self.asset_name_for(identifier)
        existing = await self._lookup(kind, name, namespace)
        if existing is not None:
            logger.info(f"asset {namespace}/{name} already exists, nothing to do")
            return ReconcileResult(True, "unchanged", kind, name, namespace)
        return await self._create(kind, name, namespace, spec.to_wire())

    async def _lookup(self, kind: ResourceKind, name: str, namespace: str) -> Resource | None:
        try:
            return await self.store.find(kind, name, namespace)
        except ResourceNotFound:
            logger.info(f"{kind} {namespace}/{name} not found, creating")
        except StoreTransportError as e:
            logger.warning(f"{kind} {namespace}/{name} lookup could not reach the store, creating anyway: {e}")
        except StoreError as e:
            logger.warning(f"{kind} {namespace}/{name} lookup rejected by the store, creating anyway: {e}")
        return None

    async def _create(
        self,
        kind: ResourceKind,
        name: str,
        namespace: str,
        spec: dict[str, Any],
    ) -> ReconcileResult:
        try:
            await self.store.create(kind, name, namespace, spec)
        except StoreError as e:
            logger.warning(f"create of {kind} {namespace}/{name} failed: {e}")
            return ReconcileResult(False, "failed", kind, name, namespace, error=str(e))
        logger.info(f"created {kind} {namespace}/{name}")
        return ReconcileResult(True, "created", kind, name, namespace)
