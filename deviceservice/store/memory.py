"""
In memory store.

This store is used for tests and local simulation.
It behaves like the declarative store keyed by kind, namespace and name.

Features
- Records every call so tests can assert on create/update counts
- Can inject failures per operation to simulate outages or rejections
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any

from deviceservice.models.resources import Resource, ResourceKind
from deviceservice.store.base import ResourceStore
from deviceservice.store.errors import ResourceNotFound, StoreApiError, StoreError

_Key = tuple[ResourceKind, str, str]


@dataclass
class InMemoryResourceStore(ResourceStore):
    """
    Dictionary backed store.

    failures
    Optional mapping of operation name (find, create, update, list) to an
    exception raised instead of performing the operation.
    """

    name = "memory"

    resources: dict[_Key, Resource] = field(default_factory=dict)
    failures: dict[str, StoreError] = field(default_factory=dict)
    calls: list[tuple[str, ResourceKind, str, str]] = field(default_factory=list)
    _version: int = 0

    async def find(self, kind: ResourceKind, name: str, namespace: str) -> Resource:
        self._record("find", kind, name, namespace)
        item = self.resources.get((kind, namespace, name))
        if item is None:
            raise ResourceNotFound(str(kind), name, namespace)
        return copy.deepcopy(item)

    async def create(
        self,
        kind: ResourceKind,
        name: str,
        namespace: str,
        spec: dict[str, Any],
    ) -> None:
        self._record("create", kind, name, namespace)
        key = (kind, namespace, name)
        if key in self.resources:
            raise StoreApiError(409, f"{kind} {namespace}/{name} already exists", reason="AlreadyExists")
        self.resources[key] = Resource(kind, name, namespace, copy.deepcopy(spec), self._next_version())

    async def update(
        self,
        kind: ResourceKind,
        name: str,
        namespace: str,
        spec: dict[str, Any],
    ) -> None:
        self._record("update", kind, name, namespace)
        key = (kind, namespace, name)
        item = self.resources.get(key)
        if item is None:
            raise ResourceNotFound(str(kind), name, namespace)
        merged = dict(item.spec)
        merged.update(copy.deepcopy(spec))
        self.resources[key] = Resource(kind, name, namespace, merged, self._next_version())

    async def list_resources(self, kind: ResourceKind, namespace: str | None = None) -> list[Resource]:
        self._record("list", kind, "", namespace or "")
        items = [
            copy.deepcopy(item)
            for (item_kind, item_ns, _), item in sorted(self.resources.items())
            if item_kind == kind and (namespace is None or item_ns == namespace)
        ]
        return items

    def count(self, operation: str) -> int:
        """Number of recorded calls for one operation."""
        return sum(1 for call in self.calls if call[0] == operation)

    def get(self, kind: ResourceKind, name: str, namespace: str) -> Resource | None:
        """Synchronous peek for tests and debugging."""
        return self.resources.get((kind, namespace, name))

    def _record(self, operation: str, kind: ResourceKind, name: str, namespace: str) -> None:
        self.calls.append((operation, kind, name, namespace))
        failure = self.failures.get(operation)
        if failure is not None:
            raise failure

    def _next_version(self) -> str:
        self._version += 1
        return str(self._version)
