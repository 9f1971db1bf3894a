from __future__ import annotations

import pytest

from torrentrepo import rate_limits


def _install_fake_clock(monkeypatch: pytest.MonkeyPatch, start: float) -> list[float]:
    clock = {"now": start}
    waits: list[float] = []

    monkeypatch.setattr(rate_limits.time, "monotonic", lambda: clock["now"])

    async def _fake_sleep(delay: float) -> None:
        waits.append(delay)
        clock["now"] += delay

    monkeypatch.setattr(rate_limits.asyncio, "sleep", _fake_sleep)
    return waits


@pytest.mark.asyncio
async def test_store_rate_limit_waits_for_same_gateway(monkeypatch: pytest.MonkeyPatch) -> None:
    rate_limits._reset_store_rate_limits_for_tests()
    waits = _install_fake_clock(monkeypatch, 100.0)

    first_wait = await rate_limits.enforce_store_min_interval("https://gw.example/")
    second_wait = await rate_limits.enforce_store_min_interval("https://GW.example")

    assert first_wait == 0.0
    assert second_wait == pytest.approx(rate_limits.STORE_MIN_INTERVAL_SECONDS)
    assert waits == [pytest.approx(rate_limits.STORE_MIN_INTERVAL_SECONDS)]


@pytest.mark.asyncio
async def test_store_rate_limit_does_not_cross_throttle_gateways(monkeypatch: pytest.MonkeyPatch) -> None:
    rate_limits._reset_store_rate_limits_for_tests()
    waits = _install_fake_clock(monkeypatch, 200.0)

    first = await rate_limits.enforce_store_min_interval("https://testnet.example")
    second = await rate_limits.enforce_store_min_interval("https://mainnet.example")

    assert first == 0.0
    assert second == 0.0
    assert waits == []


@pytest.mark.asyncio
async def test_store_rate_limit_zero_interval_never_waits(monkeypatch: pytest.MonkeyPatch) -> None:
    rate_limits._reset_store_rate_limits_for_tests()
    waits = _install_fake_clock(monkeypatch, 300.0)

    await rate_limits.enforce_store_min_interval("https://gw.example", min_interval_seconds=0)
    wait = await rate_limits.enforce_store_min_interval("https://gw.example", min_interval_seconds=0)

    assert wait == 0.0
    assert waits == []
