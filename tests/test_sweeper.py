import asyncio

import pytest

from app.api.ws.connection.sweeper import RoomSweeper


@pytest.mark.asyncio
async def test_sweep_once_respects_ttl(registry, clock):
    sweeper = RoomSweeper(registry, ttl=3600, interval=300, clock=clock)
    await registry.get_or_create_room("abandoned")

    clock.advance(3599)
    assert await sweeper.sweep_once() == []
    assert registry.get_room("abandoned") is not None

    clock.advance(2)
    assert await sweeper.sweep_once() == ["abandoned"]
    assert registry.room_count == 0


@pytest.mark.asyncio
async def test_background_sweeper_runs_on_interval(registry, clock):
    sweeper = RoomSweeper(registry, ttl=10, interval=0.01, clock=clock)
    await registry.get_or_create_room("stale")
    clock.advance(11)

    sweeper.start()
    assert sweeper.running
    for _ in range(100):
        if registry.get_room("stale") is None:
            break
        await asyncio.sleep(0.01)
    await sweeper.stop()

    assert registry.get_room("stale") is None
    assert not sweeper.running


@pytest.mark.asyncio
async def test_stop_without_start_is_harmless(registry):
    sweeper = RoomSweeper(registry, ttl=10, interval=1)
    await sweeper.stop()
    assert not sweeper.running
