"""ONVIF camera protocol: credentials from the secret directory, assets on add."""

from __future__ import annotations

import asyncio

from loguru import logger

from deviceservice.config.schema import OnvifConfig
from deviceservice.credentials.resolver import CredentialResolver
from deviceservice.dispatch.protocols.base import ProtocolHandler
from deviceservice.models.resources import AssetSpec, DataPoint
from deviceservice.models.wire import (
    DeviceChangeRequest,
    DeviceChangeResponse,
    QueryDeviceCredentialRequest,
    QueryDeviceCredentialResponse,
)
from deviceservice.reconcile.reconciler import ResourceReconciler

PROTOCOL = "onvif"
REASON_ADD = "add"


class OnvifHandler(ProtocolHandler):
    """Device queries are always rejected; the inherited default covers that."""

    name = PROTOCOL

    def __init__(
        self,
        reconciler: ResourceReconciler,
        resolver: CredentialResolver,
        config: OnvifConfig | None = None,
    ) -> None:
        self.reconciler = reconciler
        self.resolver = resolver
        self.config = config or OnvifConfig()

    async def query_credential(self, request: QueryDeviceCredentialRequest) -> QueryDeviceCredentialResponse:
        credential = await asyncio.to_thread(self.resolver.resolve, request.id)
        if credential is None:
            return QueryDeviceCredentialResponse.fail()
        return QueryDeviceCredentialResponse("success", credential.credential_type, dict(credential.fields))

    async def device_change(self, request: DeviceChangeRequest) -> DeviceChangeResponse:
        if request.reason != REASON_ADD:
            logger.info(f"onvif change reason {request.reason!r} for {request.device.id!r} is not handled")
            return DeviceChangeResponse.fail()

        result = await self.reconciler.reconcile_asset(
            self.build_asset_spec(),
            request.device.id.lower(),
            self.config.asset_namespace,
        )
        if not result.ok:
            return DeviceChangeResponse.fail()
        return DeviceChangeResponse("success", request.device)

    def build_asset_spec(self) -> AssetSpec:
        point = self.config.data_point
        return AssetSpec(
            display_name=self.config.display_name,
            asset_endpoint_profile_uri=self.config.endpoint_profile_uri,
            data_points=[
                DataPoint(
                    name=point.name,
                    data_source=point.data_source,
                    capability_id=point.capability_id,
                    observability_mode=point.observability_mode,
                    data_point_configuration=point.data_point_configuration,
                )
            ],
        )
