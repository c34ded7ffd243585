"""debugEcho test protocol: prefix-keyed decisions for the integration harness."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable

from loguru import logger

from deviceservice.config.schema import DebugEchoConfig, ScheduledJobTemplate
from deviceservice.credentials.resolver import USERNAME_PASSWORD
from deviceservice.dispatch.protocols.base import ProtocolHandler
from deviceservice.models.resources import CronTabSpec
from deviceservice.models.wire import (
    QueryDeviceCredentialRequest,
    QueryDeviceCredentialResponse,
    QueryDeviceRequest,
    QueryDeviceResponse,
)
from deviceservice.reconcile.reconciler import ReconcileResult, ResourceReconciler

PROTOCOL = "debugEcho"

QueryAction = Callable[[QueryDeviceRequest], Awaitable[QueryDeviceResponse]]


@dataclass(frozen=True, slots=True)
class QueryRule:
    prefix: str
    action: QueryAction


class DebugEchoHandler(ProtocolHandler):
    """First matching prefix wins; identifiers matching no rule are accepted."""

    name = PROTOCOL

    def __init__(self, reconciler: ResourceReconciler, config: DebugEchoConfig | None = None) -> None:
        self.reconciler = reconciler
        self.config = config or DebugEchoConfig()
        self.rules: tuple[QueryRule, ...] = (
            QueryRule("provision-good", self._provision_good),
            QueryRule("provision-bad", self._provision_bad),
            QueryRule("newcr-no-instance", self._newcr_no_instance),
            QueryRule("newcr-with-instance", self._newcr_with_instance),
        )

    async def query_device(self, request: QueryDeviceRequest) -> QueryDeviceResponse:
        for rule in self.rules:
            if request.id.startswith(rule.prefix):
                logger.info(f"debugEcho query {request.id!r} matched rule {rule.prefix!r}")
                return await rule.action(request)
        return QueryDeviceResponse.accept()

    async def query_credential(self, request: QueryDeviceCredentialRequest) -> QueryDeviceCredentialResponse:
        if request.id != self.config.credential_device_id:
            return QueryDeviceCredentialResponse.fail()
        return QueryDeviceCredentialResponse(
            "success",
            USERNAME_PASSWORD,
            {"username": self.config.username, "password": self.config.password},
        )

    async def _provision_good(self, request: QueryDeviceRequest) -> QueryDeviceResponse:
        return QueryDeviceResponse.accept(
            {
                "COMBINED_ID": f"{request.protocol}-{request.id}",
                "EXTRA_INFO": f"extra-info-{request.id}",
            }
        )

    async def _provision_bad(self, request: QueryDeviceRequest) -> QueryDeviceResponse:
        return QueryDeviceResponse.reject()

    async def _newcr_no_instance(self, request: QueryDeviceRequest) -> QueryDeviceResponse:
        # The job is provisioned, but the device itself never gets an instance.
        await self._reconcile_job(request.id, self.config.no_instance_job)
        return QueryDeviceResponse.reject()

    async def _newcr_with_instance(self, request: QueryDeviceRequest) -> QueryDeviceResponse:
        result = await self._reconcile_job(request.id, self.config.with_instance_job)
        return QueryDeviceResponse.accept() if result.ok else QueryDeviceResponse.reject()

    async def _reconcile_job(self, identifier: str, template: ScheduledJobTemplate) -> ReconcileResult:
        spec = CronTabSpec(
            cron_spec=template.schedule,
            image=template.image,
            capacity=template.capacity,
        )
        return await self.reconciler.reconcile_scheduled_job(spec, identifier.lower(), template.namespace)
