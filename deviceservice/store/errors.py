"""
Store error taxonomy.

TransportError means the store could not be reached at all.
ApiError means the store answered and rejected the request.
ResourceNotFound is the ApiError a lookup raises for an absent resource.
"""

from __future__ import annotations


class StoreError(Exception):
    """Base class for all declarative store failures."""


class StoreTransportError(StoreError):
    """Raised when the store cannot be reached (connect, TLS, timeout)."""


class StoreApiError(StoreError):
    """Raised when the store rejects a request with a structured status."""

    def __init__(self, code: int, message: str, reason: str = "") -> None:
        self.code = int(code)
        self.reason = str(reason or "")
        self.message = str(message or "")
        super().__init__(f"store api error {self.code} {self.reason}: {self.message}".strip())


class ResourceNotFound(StoreApiError):
    """Raised when a lookup targets a resource that does not exist."""

    def __init__(self, kind: str, name: str, namespace: str) -> None:
        self.kind = kind
        self.name = name
        self.namespace = namespace
        super().__init__(404, f"{kind} {namespace}/{name} not found", reason="NotFound")
