"""Unit tests for EdgeContainer wiring and the startup sequence."""

import json
from datetime import timedelta

import pytest

from farmsync.application.services.offline_action_queue import QUEUE_KEY
from farmsync.config import Settings
from farmsync.infrastructure.container import build_container
from tests.fakes.edge_fakes import (
    ORIGIN,
    FakeFetcher,
    FixedClock,
    InMemoryCacheStore,
    InMemoryKeyValueStore,
)


def _settings(**overrides) -> Settings:
    return Settings(
        _env_file=None,
        origin_url=ORIGIN,
        precache_urls=["/", "/static/js/bundle.js"],
        **overrides,
    )


@pytest.mark.asyncio
async def test_startup_precaches_activates_and_drains():
    clock = FixedClock()
    store = InMemoryCacheStore()
    storage = InMemoryKeyValueStore({
        QUEUE_KEY: json.dumps([{
            "id": "q1",
            "action": "add_animal",
            "payload": {"id": 42, "name": "Test"},
            "enqueued_at": clock.now.isoformat(),
            "retry_count": 0,
        }]),
    })
    fetcher = FakeFetcher()
    fetcher.serve(f"{ORIGIN}/", body=b"<html>shell</html>")
    fetcher.serve(f"{ORIGIN}/static/js/bundle.js", body=b"js")
    await store.put("adonai-static-v0.9.0", f"{ORIGIN}/", fetcher.responses[f"{ORIGIN}/"])

    container = build_container(
        _settings(), cache_store=store, storage=storage, fetcher=fetcher, clock=clock
    )
    await container.startup()
    await container.shutdown()

    assert await store.partitions() == ["adonai-static-v1.0.0"]
    assert len(await store.keys("adonai-static-v1.0.0")) == 2
    assert json.loads(storage.data["adonai_animals"]) == [{"id": 42, "name": "Test"}]
    assert json.loads(storage.data[QUEUE_KEY]) == []
    assert "adonai_last_session" in storage.data


@pytest.mark.asyncio
async def test_startup_offline_keeps_queue_and_expires_old_items():
    clock = FixedClock()
    old = (clock.now - timedelta(days=10)).isoformat()
    recent = clock.now.isoformat()
    storage = InMemoryKeyValueStore({
        QUEUE_KEY: json.dumps([
            {"id": "old", "action": "add_worker", "payload": {"id": 1}, "enqueued_at": old},
            {"id": "new", "action": "add_worker", "payload": {"id": 2}, "enqueued_at": recent},
        ]),
    })
    fetcher = FakeFetcher()
    fetcher.online = False

    container = build_container(
        _settings(precache_on_startup=False),
        cache_store=InMemoryCacheStore(),
        storage=storage,
        fetcher=fetcher,
        initially_online=False,
        clock=clock,
    )
    await container.startup()

    pending = await container.offline_queue.pending()
    assert [item.id for item in pending] == ["new"]
    assert fetcher.calls == []
    assert "adonai_workers" not in storage.data
    await container.shutdown()
