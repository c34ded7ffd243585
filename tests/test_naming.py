import hashlib

import pytest

from deviceservice.reconcile.naming import asset_name, digest, scheduled_job_name


def test_digest_is_fixed_width_lowercase_hex() -> None:
    value = digest("cam-01")
    assert len(value) == 8
    assert value == value.lower()
    int(value, 16)


def test_digest_matches_blake2b_with_requested_size() -> None:
    assert digest("cam-01") == hashlib.blake2b(b"cam-01", digest_size=4).hexdigest()
    assert digest("cam-01", 16) == hashlib.blake2b(b"cam-01", digest_size=16).hexdigest()
    assert len(digest("cam-01", 16)) == 32


def test_digest_is_deterministic_and_distinguishes_samples() -> None:
    samples = ["cam-01", "cam-02", "Cam-01", "", "onvif://10.0.0.1"]
    first = [digest(s) for s in samples]
    second = [digest(s) for s in samples]
    assert first == second
    assert len(set(first)) == len(samples)


@pytest.mark.parametrize("size", [0, 65, -1])
def test_digest_rejects_out_of_range_sizes(size: int) -> None:
    with pytest.raises(ValueError):
        digest("cam-01", size)


def test_asset_name_uses_prefix_and_digest() -> None:
    assert asset_name("cam-01") == f"onvif-asset-{digest('cam-01')}"
    assert asset_name("cam-01", prefix="a-", size=2) == f"a-{digest('cam-01', 2)}"


def test_scheduled_job_name_is_lowercased_and_sanitized() -> None:
    assert scheduled_job_name("NewCR-With-Instance_01") == "newcr-with-instance-01"
    assert scheduled_job_name("newcr-no-instance:a/b_c") == "newcr-no-instance-a-b-c"
    assert scheduled_job_name("plain") == "plain"
