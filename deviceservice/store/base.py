"""Store client contract for the declarative cluster-state store."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from deviceservice.models.resources import Resource, ResourceKind


class ResourceStore(ABC):
    """
    Stateless gateway to the external system of record.

    Specs cross this boundary in their stored (camelCase) form.
    Failures raise subclasses of ``StoreError``.
    """

    name: str = "base"

    @abstractmethod
    async def find(self, kind: ResourceKind, name: str, namespace: str) -> Resource:
        """Return the named resource or raise ``ResourceNotFound``."""

    @abstractmethod
    async def create(
        self,
        kind: ResourceKind,
        name: str,
        namespace: str,
        spec: dict[str, Any],
    ) -> None:
        """Create a resource with the given spec."""

    @abstractmethod
    async def update(
        self,
        kind: ResourceKind,
        name: str,
        namespace: str,
        spec: dict[str, Any],
    ) -> None:
        """Overwrite the spec of an existing resource (no version precondition)."""

    @abstractmethod
    async def list_resources(self, kind: ResourceKind, namespace: str | None = None) -> list[Resource]:
        """List resources of a kind, across all namespaces when ``namespace`` is None."""

    async def close(self) -> None:
        """Release client resources."""
        return None
