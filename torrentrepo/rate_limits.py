"""Request pacing shared by every client of the same store gateway."""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass

# Gateways front a public node; keep a small spacing between calls to one server.
STORE_MIN_INTERVAL_SECONDS = 0.25
STORE_WAIT_LOG_THRESHOLD_SECONDS = 1.0


@dataclass
class _GatewayBucket:
    lock: asyncio.Lock
    last_request_started: float = 0.0


_gateway_buckets: dict[str, _GatewayBucket] = {}
_gateway_buckets_lock = asyncio.Lock()


def _normalize_server_key(base_url: str) -> str:
    return base_url.rstrip("/").lower()


async def _get_or_create_bucket(base_url: str) -> _GatewayBucket:
    key = _normalize_server_key(base_url)
    bucket = _gateway_buckets.get(key)
    if bucket is not None:
        return bucket

    async with _gateway_buckets_lock:
        bucket = _gateway_buckets.get(key)
        if bucket is None:
            bucket = _GatewayBucket(lock=asyncio.Lock())
            _gateway_buckets[key] = bucket
        return bucket


async def enforce_store_min_interval(
    base_url: str,
    min_interval_seconds: float = STORE_MIN_INTERVAL_SECONDS,
) -> float:
    """
    Enforce shared per-gateway spacing.

    Returns the wait time applied (seconds).
    """
    bucket = await _get_or_create_bucket(base_url)
    async with bucket.lock:
        now = time.monotonic()
        wait = max(0.0, float(min_interval_seconds)) - (now - bucket.last_request_started)
        wait = max(wait, 0.0)
        if wait > 0:
            await asyncio.sleep(wait)
            now = time.monotonic()
        bucket.last_request_started = now
        return wait


def _reset_store_rate_limits_for_tests() -> None:
    """Test helper to clear shared limiter state."""
    _gateway_buckets.clear()
