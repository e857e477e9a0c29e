"""Unit tests for the CacheStrategyRouter."""

import asyncio
from datetime import timedelta

import pytest

from farmsync.application.services import CacheStrategyRouter
from farmsync.domain.entities import (
    CACHED_DATE_HEADER,
    CachedResponse,
    CachePartitions,
    CacheStrategy,
    InterceptedRequest,
    PartitionKind,
)
from tests.fakes.edge_fakes import (
    ORIGIN,
    BrokenCacheStore,
    FakeFetcher,
    FixedClock,
    InMemoryCacheStore,
)

PARTITIONS = CachePartitions()
STATIC = PARTITIONS.name(PartitionKind.STATIC)
DYNAMIC = PARTITIONS.name(PartitionKind.DYNAMIC)
IMAGES = PARTITIONS.name(PartitionKind.IMAGES)
API = PARTITIONS.name(PartitionKind.API)

HTML = {"accept": "text/html,application/xhtml+xml"}


@pytest.fixture
def store() -> InMemoryCacheStore:
    return InMemoryCacheStore()


@pytest.fixture
def fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def router(store, fetcher, clock) -> CacheStrategyRouter:
    return CacheStrategyRouter(store, fetcher, origin=ORIGIN, partitions=PARTITIONS, clock=clock)


def _request(path: str, **headers: str) -> InterceptedRequest:
    return InterceptedRequest(url=f"{ORIGIN}{path}", headers=headers)


# ── Dispatch ──


@pytest.mark.parametrize(
    "path,headers,strategy,partition",
    [
        ("/dashboard", HTML, CacheStrategy.NETWORK_FIRST, PartitionKind.DYNAMIC),
        ("/images/farm-2.jpg", {}, CacheStrategy.IMAGE_FIRST, PartitionKind.IMAGES),
        ("/static/js/bundle.js", {}, CacheStrategy.CACHE_FIRST, PartitionKind.STATIC),
        ("/fonts/farm.woff2", {}, CacheStrategy.CACHE_FIRST, PartitionKind.STATIC),
        ("/api/livestock", {}, CacheStrategy.NETWORK_FIRST, PartitionKind.API),
        ("/manifest.json", {}, CacheStrategy.NETWORK_FIRST, PartitionKind.DYNAMIC),
    ],
)
def test_route_dispatch(router, path, headers, strategy, partition):
    decision = router.route(_request(path, **headers))
    assert decision.strategy is strategy
    assert decision.partition is partition


def test_html_wins_over_other_rules(router):
    decision = router.route(_request("/api/livestock", accept="text/html"))
    assert decision.strategy is CacheStrategy.NETWORK_FIRST
    assert decision.partition is PartitionKind.DYNAMIC


def test_image_outside_images_folder_is_not_image_first(router):
    decision = router.route(_request("/static/logo.png"))
    assert decision.strategy is CacheStrategy.CACHE_FIRST


def test_cross_origin_detected(router):
    request = InterceptedRequest(url="https://fonts.example.com/css?family=Roboto")
    assert router.route(request).strategy is CacheStrategy.CROSS_ORIGIN


# ── Cache-first ──


@pytest.mark.asyncio
async def test_warm_static_entry_served_without_network(router, store, fetcher):
    url = f"{ORIGIN}/static/js/bundle.js"
    await store.put(STATIC, url, CachedResponse(status=200, body=b"cached js", url=url))

    response = await router.handle(_request("/static/js/bundle.js"))

    assert response.body == b"cached js"
    assert fetcher.calls == []


@pytest.mark.asyncio
async def test_static_miss_fetches_and_stores(router, store, fetcher):
    url = f"{ORIGIN}/static/css/main.css"
    fetcher.serve(url, body=b"body{}")

    response = await router.handle(_request("/static/css/main.css"))

    assert response.body == b"body{}"
    assert (await store.match(url, STATIC)).body == b"body{}"


@pytest.mark.asyncio
async def test_static_error_status_not_stored(router, store, fetcher):
    response = await router.handle(_request("/static/js/missing.js"))

    assert response.status == 404
    assert await store.keys(STATIC) == []


@pytest.mark.asyncio
async def test_static_miss_offline_returns_503(router, fetcher):
    fetcher.online = False
    response = await router.handle(_request("/static/js/bundle.js"))
    assert response.status == 503
    assert response.body == b"Offline"


# ── Network-first ──


@pytest.mark.asyncio
async def test_html_navigation_returns_live_content_when_online(router, store, fetcher):
    url = f"{ORIGIN}/dashboard"
    await store.put(DYNAMIC, url, CachedResponse(status=200, body=b"stale", url=url))
    fetcher.serve(url, body=b"live")

    response = await router.handle(_request("/dashboard", **HTML))

    assert response.body == b"live"
    assert (await store.match(url, DYNAMIC)).body == b"live"


@pytest.mark.asyncio
async def test_api_response_stored_in_api_partition(router, store, fetcher):
    url = f"{ORIGIN}/api/livestock"
    fetcher.serve(url, body=b"[]", content_type="application/json")

    await router.handle(_request("/api/livestock"))

    assert await store.keys(API) == [url]
    assert await store.keys(DYNAMIC) == []


@pytest.mark.asyncio
async def test_api_offline_serves_cached_copy(router, store, fetcher):
    url = f"{ORIGIN}/api/workers"
    await store.put(API, url, CachedResponse(status=200, body=b"[cached]", url=url))
    fetcher.online = False

    response = await router.handle(_request("/api/workers"))

    assert response.body == b"[cached]"


@pytest.mark.asyncio
async def test_html_offline_serves_app_shell(router, store, fetcher):
    shell = f"{ORIGIN}/"
    await store.put(STATIC, shell, CachedResponse(status=200, body=b"<html>shell</html>", url=shell))
    fetcher.online = False

    response = await router.handle(_request("/animals/12", **HTML))

    assert response.body == b"<html>shell</html>"


@pytest.mark.asyncio
async def test_html_offline_without_shell_serves_offline_page(router, fetcher):
    fetcher.online = False

    response = await router.handle(_request("/animals/12", **HTML))

    assert response.status == 200
    assert response.content_type.startswith("text/html")
    assert b"You're Offline" in response.body


@pytest.mark.asyncio
async def test_slow_network_times_out_to_cache(store, fetcher, clock):
    router = CacheStrategyRouter(
        store, fetcher, origin=ORIGIN, partitions=PARTITIONS, fetch_timeout=0.05, clock=clock
    )
    url = f"{ORIGIN}/api/gallery"
    await store.put(API, url, CachedResponse(status=200, body=b"[photos]", url=url))
    fetcher.serve(url, body=b"[late]")
    fetcher.delay = 1.0

    response = await asyncio.wait_for(router.handle(_request("/api/gallery")), timeout=2)

    assert response.body == b"[photos]"


# ── Image-first ──


@pytest.mark.asyncio
async def test_fresh_image_served_without_network(router, store, fetcher, clock):
    url = f"{ORIGIN}/images/farm-2.jpg"
    recorded = (clock.now - timedelta(hours=23)).isoformat()
    await store.put(
        IMAGES,
        url,
        CachedResponse(status=200, body=b"jpeg", headers={CACHED_DATE_HEADER: recorded}, url=url),
    )

    response = await router.handle(_request("/images/farm-2.jpg"))

    assert response.body == b"jpeg"
    assert fetcher.calls == []


@pytest.mark.asyncio
async def test_stale_image_triggers_fetch_and_restamp(router, store, fetcher, clock):
    url = f"{ORIGIN}/images/farm-2.jpg"
    recorded = (clock.now - timedelta(hours=25)).isoformat()
    await store.put(
        IMAGES,
        url,
        CachedResponse(status=200, body=b"old", headers={CACHED_DATE_HEADER: recorded}, url=url),
    )
    fetcher.serve(url, body=b"new", content_type="image/jpeg")

    response = await router.handle(_request("/images/farm-2.jpg"))

    assert response.body == b"new"
    assert fetcher.urls() == [url]
    stored = await store.match(url, IMAGES)
    assert stored.body == b"new"
    assert stored.header("cache-control") == "public, max-age=86400"
    assert stored.recorded_at == clock.now


@pytest.mark.asyncio
async def test_image_freshness_falls_back_to_date_header(router, store, fetcher):
    url = f"{ORIGIN}/images/hero-farm.jpg"
    await store.put(
        IMAGES,
        url,
        CachedResponse(status=200, body=b"hero", headers={"date": "Sat, 01 Jun 2024 06:00:00 GMT"}, url=url),
    )

    response = await router.handle(_request("/images/hero-farm.jpg"))

    assert response.body == b"hero"
    assert fetcher.calls == []


@pytest.mark.asyncio
async def test_future_dated_image_is_treated_as_stale(router, store, fetcher, clock):
    url = f"{ORIGIN}/images/farm-2.jpg"
    recorded = (clock.now + timedelta(hours=2)).isoformat()
    await store.put(
        IMAGES,
        url,
        CachedResponse(status=200, body=b"skewed", headers={CACHED_DATE_HEADER: recorded}, url=url),
    )
    fetcher.serve(url, body=b"live", content_type="image/jpeg")

    response = await router.handle(_request("/images/farm-2.jpg"))

    assert response.body == b"live"
    assert fetcher.urls() == [url]


@pytest.mark.asyncio
async def test_stale_image_served_when_network_fails(router, store, fetcher, clock):
    url = f"{ORIGIN}/images/farm-3.jpg"
    recorded = (clock.now - timedelta(days=3)).isoformat()
    await store.put(
        IMAGES,
        url,
        CachedResponse(status=200, body=b"stale", headers={CACHED_DATE_HEADER: recorded}, url=url),
    )
    fetcher.online = False

    response = await router.handle(_request("/images/farm-3.jpg"))

    assert response.body == b"stale"


@pytest.mark.asyncio
async def test_missing_image_substitutes_similar_cached_image(router, store, fetcher):
    similar = f"{ORIGIN}/images/farm-4.jpg"
    await store.put(IMAGES, similar, CachedResponse(status=200, body=b"farm-4", url=similar))
    fetcher.online = False

    response = await router.handle(_request("/images/farm-9.jpg"))

    assert response.body == b"farm-4"


@pytest.mark.asyncio
async def test_missing_image_falls_back_to_hero_image(router, store, fetcher):
    hero = f"{ORIGIN}/images/hero-farm.jpg"
    await store.put(STATIC, hero, CachedResponse(status=200, body=b"hero", url=hero))
    fetcher.online = False

    response = await router.handle(_request("/images/cow.png"))

    assert response.body == b"hero"


@pytest.mark.asyncio
async def test_missing_image_without_cache_yields_svg_placeholder(router, fetcher):
    fetcher.online = False

    response = await router.handle(_request("/images/farm-9.jpg"))

    assert response.status == 200
    assert response.content_type == "image/svg+xml"
    assert b"Image Not Available" in response.body


# ── Cross-origin ──


@pytest.mark.asyncio
async def test_cross_origin_success_stored_in_dynamic(router, store, fetcher):
    url = "https://fonts.example.com/css?family=Roboto"
    fetcher.serve(url, body=b"@font-face{}")

    response = await router.handle(InterceptedRequest(url=url))

    assert response.body == b"@font-face{}"
    assert await store.keys(DYNAMIC) == [url]


@pytest.mark.asyncio
async def test_cross_origin_offline_without_cache_is_503(router, fetcher):
    fetcher.online = False

    response = await router.handle(InterceptedRequest(url="https://cdn.example.com/lib.js"))

    assert response.status == 503
    assert response.body == b"Offline"


# ── Hardening ──


@pytest.mark.asyncio
async def test_broken_cache_store_never_raises(fetcher, clock):
    router = CacheStrategyRouter(
        BrokenCacheStore(), fetcher, origin=ORIGIN, partitions=PARTITIONS, clock=clock
    )
    fetcher.serve(f"{ORIGIN}/static/js/bundle.js", body=b"js")

    live = await router.handle(_request("/static/js/bundle.js"))
    assert live.body == b"js"

    fetcher.online = False
    offline = await router.handle(_request("/images/farm-9.jpg"))
    assert offline.content_type == "image/svg+xml"
