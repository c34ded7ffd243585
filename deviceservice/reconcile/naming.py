"""
Deterministic resource naming.

Asset names embed a BLAKE2b digest of the device identifier so repeated
events for one device always address the same resource. The default 4-byte
digest keeps names short but has a real birthday-bound collision risk
(about 50% near 77k distinct devices); raise ``digest_bytes`` for large fleets.
"""

from __future__ import annotations

import hashlib
import re

DEFAULT_DIGEST_BYTES = 4
DEFAULT_ASSET_PREFIX = "onvif-asset-"

_UNSAFE_NAME_CHARS_RE = re.compile(r"[:/_]")


def digest(identifier: str, size: int = DEFAULT_DIGEST_BYTES) -> str:
    """Return the lowercase hex BLAKE2b digest of ``identifier`` with ``size`` output bytes."""
    if not 1 <= int(size) <= hashlib.blake2b.MAX_DIGEST_SIZE:
        raise ValueError(f"digest size must be between 1 and {hashlib.blake2b.MAX_DIGEST_SIZE}")
    return hashlib.blake2b(identifier.encode("utf-8"), digest_size=int(size)).hexdigest()


def asset_name(
    identifier: str,
    *,
    prefix: str = DEFAULT_ASSET_PREFIX,
    size: int = DEFAULT_DIGEST_BYTES,
) -> str:
    return f"{prefix}{digest(identifier, size)}"


def scheduled_job_name(identifier: str) -> str:
    """ScheduledJob names are the lowercased identifier, made safe for resource metadata."""
    return _UNSAFE_NAME_CHARS_RE.sub("-", identifier.lower())
