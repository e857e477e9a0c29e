"""Integration tests for the edge control API and the catch-all proxy."""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from farmsync.config import Settings
from farmsync.domain.entities import CachedResponse
from farmsync.infrastructure.container import build_container
from farmsync.main import create_app
from tests.fakes.edge_fakes import (
    ORIGIN,
    FakeFetcher,
    FixedClock,
    InMemoryCacheStore,
    InMemoryKeyValueStore,
)

API = "/_edge/api/v1"


@pytest.fixture
def fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def store() -> InMemoryCacheStore:
    return InMemoryCacheStore()


@pytest.fixture
def container(fetcher, store):
    settings = Settings(_env_file=None, origin_url=ORIGIN)
    return build_container(
        settings,
        cache_store=store,
        storage=InMemoryKeyValueStore(),
        fetcher=fetcher,
        clock=FixedClock(),
    )


@pytest_asyncio.fixture
async def client(container):
    transport = ASGITransport(app=create_app(container))
    async with AsyncClient(transport=transport, base_url="http://edge.test") as client:
        yield client


# ── Health / connectivity ──


@pytest.mark.asyncio
async def test_health_check_returns_200(client):
    response = await client.get(f"{API}/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["online"] is True
    assert "version" in data


@pytest.mark.asyncio
async def test_offline_enqueue_then_reconnect_drains(client):
    response = await client.put(f"{API}/connectivity", json={"online": False})
    assert response.json()["online"] is False

    response = await client.post(
        f"{API}/offline/actions",
        json={"action": "add_animal", "payload": {"id": 42, "name": "Test"}},
    )
    assert response.status_code == 201
    assert response.json()["retry_count"] == 0

    state = (await client.get(f"{API}/connectivity")).json()
    assert state["pending_actions"] == 1

    state = (await client.put(f"{API}/connectivity", json={"online": True})).json()
    assert state == {"online": True, "draining": False, "pending_actions": 0}

    mirror = (await client.get(f"{API}/mirrors/animals")).json()
    assert mirror["records"] == [{"id": 42, "name": "Test"}]
    assert mirror["available"] is True


# ── Offline queue ──


@pytest.mark.asyncio
async def test_unknown_action_rejected(client):
    response = await client.post(f"{API}/offline/actions", json={"action": "sell_farm", "payload": {}})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_drain_refused_while_offline(client):
    await client.put(f"{API}/connectivity", json={"online": False})
    response = await client.post(f"{API}/offline/drain")
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_drain_and_list_pending(client):
    await client.post(f"{API}/offline/actions", json={"action": "add_worker", "payload": {"id": 1}})
    await client.post(f"{API}/offline/actions", json={"action": "update_worker", "payload": {"name": "no id"}})

    pending = (await client.get(f"{API}/offline/actions")).json()
    assert [p["action"] for p in pending] == ["add_worker", "update_worker"]

    result = (await client.post(f"{API}/offline/drain")).json()
    assert result["applied"] == 1
    assert result["failed"] == 1
    assert result["remaining"] == 1
    assert result["skipped"] is False


@pytest.mark.asyncio
async def test_storage_usage_report(client):
    await client.put(f"{API}/mirrors/workers", json={"records": [{"id": 1, "name": "John"}]})

    usage = (await client.get(f"{API}/offline/storage")).json()

    assert usage["total_size"] > 0
    assert usage["keys"][0]["key"] == "adonai_workers"


# ── Mirrors ──


@pytest.mark.asyncio
async def test_unknown_mirror_is_404(client):
    response = await client.get(f"{API}/mirrors/tractors")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_photos_alias_reads_gallery(client):
    await client.put(f"{API}/mirrors/gallery", json={"records": [{"id": "p1"}]})
    mirror = (await client.get(f"{API}/mirrors/photos")).json()
    assert mirror["name"] == "gallery"
    assert mirror["records"] == [{"id": "p1"}]


# ── Cache ──


@pytest.mark.asyncio
async def test_cache_urls_and_partition_inspection(client, fetcher):
    fetcher.serve(f"{ORIGIN}/api/livestock", body=b"[]")

    report = (await client.post(f"{API}/cache/urls", json={"urls": ["/api/livestock", "/missing"]})).json()
    assert report["cached"] == ["/api/livestock"]
    assert report["failed"] == ["/missing"]

    keys = (await client.get(f"{API}/cache/partitions/dynamic/keys")).json()
    assert keys == {"partition": "adonai-dynamic-v1.0.0", "keys": [f"{ORIGIN}/api/livestock"]}

    partitions = {p["name"]: p for p in (await client.get(f"{API}/cache/partitions")).json()}
    assert partitions["adonai-dynamic-v1.0.0"]["entries"] == 1

    assert (await client.delete(f"{API}/cache/partitions/dynamic")).status_code == 204
    assert (await client.delete(f"{API}/cache/partitions/dynamic")).status_code == 404


@pytest.mark.asyncio
async def test_activate_removes_old_versions(client, store):
    await store.put("adonai-api-v0.1.0", f"{ORIGIN}/api/workers", CachedResponse(status=200))

    response = await client.post(f"{API}/cache/activate")

    assert response.json() == {"deleted": ["adonai-api-v0.1.0"]}


@pytest.mark.asyncio
async def test_routed_fetch_cross_origin_offline(client, fetcher):
    fetcher.online = False
    response = await client.get(f"{API}/cache/fetch", params={"url": "https://cdn.example.com/lib.js"})
    assert response.status_code == 503
    assert response.text == "Offline"


# ── Edge proxy ──


@pytest.mark.asyncio
async def test_proxy_get_goes_through_router(client, fetcher, store):
    fetcher.serve(f"{ORIGIN}/api/livestock?type=cattle", body=b'[{"id": 1}]', content_type="application/json")

    response = await client.get("/api/livestock", params={"type": "cattle"})

    assert response.status_code == 200
    assert response.json() == [{"id": 1}]
    assert await store.keys("adonai-api-v1.0.0") == [f"{ORIGIN}/api/livestock?type=cattle"]

    fetcher.online = False
    cached = await client.get("/api/livestock", params={"type": "cattle"})
    assert cached.json() == [{"id": 1}]


@pytest.mark.asyncio
async def test_proxy_missing_image_offline_serves_placeholder(client, fetcher):
    fetcher.online = False
    response = await client.get("/images/farm-9.jpg")
    assert response.status_code == 200
    assert response.headers["content-type"] == "image/svg+xml"


@pytest.mark.asyncio
async def test_proxy_passes_mutations_through(client, fetcher):
    fetcher.serve(f"{ORIGIN}/api/workers", body=b'{"id": 9}', status=201)

    response = await client.post("/api/workers", content=b'{"name": "Jane"}')

    assert response.status_code == 201
    assert fetcher.calls[-1].method == "POST"
    assert fetcher.bodies[-1] == b'{"name": "Jane"}'


@pytest.mark.asyncio
async def test_proxy_passes_head_through(client, fetcher):
    fetcher.serve(f"{ORIGIN}/livestock", body=b"")

    response = await client.head("/livestock")

    assert response.status_code == 200
    assert fetcher.calls[-1].method == "HEAD"


@pytest.mark.asyncio
async def test_proxy_mutation_offline_is_502(client, fetcher):
    fetcher.online = False
    response = await client.delete("/api/workers/9")
    assert response.status_code == 502


@pytest.mark.asyncio
async def test_unknown_edge_path_is_not_proxied(client, fetcher):
    response = await client.get("/_edge/unknown")
    assert response.status_code == 404
    assert fetcher.calls == []


@pytest.mark.asyncio
async def test_origin_path_sharing_edge_prefix_is_proxied(client, fetcher):
    fetcher.serve(f"{ORIGIN}/_edgefoo", body=b"origin page")

    response = await client.get("/_edgefoo")

    assert response.status_code == 200
    assert response.content == b"origin page"
