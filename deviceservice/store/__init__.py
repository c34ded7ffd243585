"""Store clients for the declarative cluster-state store."""

from deviceservice.config.schema import StoreConfig
from deviceservice.store.base import ResourceStore
from deviceservice.store.errors import (
    ResourceNotFound,
    StoreApiError,
    StoreError,
    StoreTransportError,
)
from deviceservice.store.kube import KubeResourceStore
from deviceservice.store.memory import InMemoryResourceStore


def create_store_from_config(config: StoreConfig) -> ResourceStore:
    """Factory helper to build the selected store backend."""
    backend = (config.backend or "kube").strip().lower()
    if backend == "memory":
        return InMemoryResourceStore()
    if backend == "kube":
        return KubeResourceStore.from_config(config)
    raise ValueError(f"unknown store backend: {config.backend}")


__all__ = [
    "ResourceStore",
    "KubeResourceStore",
    "InMemoryResourceStore",
    "StoreError",
    "StoreApiError",
    "StoreTransportError",
    "ResourceNotFound",
    "create_store_from_config",
]
