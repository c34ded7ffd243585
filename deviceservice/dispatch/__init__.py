"""Protocol dispatch."""

from deviceservice.config.schema import Config
from deviceservice.credentials.resolver import CredentialResolver
from deviceservice.dispatch.engine import DispatchEngine
from deviceservice.dispatch.protocols import DebugEchoHandler, OnvifHandler, ProtocolHandler
from deviceservice.reconcile.reconciler import ResourceReconciler


def create_dispatch_engine(
    config: Config,
    reconciler: ResourceReconciler,
    resolver: CredentialResolver | None = None,
) -> DispatchEngine:
    """Build an engine with the built-in protocols registered."""
    if resolver is None:
        resolver = CredentialResolver(config.onvif.secret_directory)
    return DispatchEngine(
        [
            DebugEchoHandler(reconciler, config.debug_echo),
            OnvifHandler(reconciler, resolver, config.onvif),
        ]
    )


__all__ = [
    "DebugEchoHandler",
    "DispatchEngine",
    "OnvifHandler",
    "ProtocolHandler",
    "create_dispatch_engine",
]
