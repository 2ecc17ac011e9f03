"""Tests that the registry stays consistent under concurrent access.

Creates, redirects, statistics reads and sweeps are run from many threads
at once against a single registry, and from many simultaneous requests
against the ASGI app.
"""

import asyncio
import random
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
from httpx import ASGITransport, AsyncClient

from shortlinks.core.exceptions import (
    ShortCodeNotFoundError,
    ShortcodeExpiredError,
    ShortcodeTakenError,
)
from shortlinks.core.registry_manager import get_registry
from shortlinks.main import app
from shortlinks.models import RequestContext
from shortlinks.services.registry import URLRegistry

WORKERS = 16


def assert_consistent(registry: URLRegistry) -> None:
    with registry._lock:
        assert set(registry._records) == set(registry._clicks)


class TestThreadedAccess:

    def test_concurrent_creates_are_unique(self, registry):
        def create(i):
            return registry.create(f"https://example.com/page_{i}", 10).shortcode

        with ThreadPoolExecutor(max_workers=WORKERS) as pool:
            codes = list(pool.map(create, range(500)))

        assert len(set(codes)) == 500
        assert len(registry) == 500
        assert_consistent(registry)

    def test_concurrent_requests_for_same_shortcode(self, registry):
        barrier = threading.Barrier(WORKERS)

        def claim(i):
            barrier.wait()
            try:
                registry.create(f"https://example.com/{i}", 10, "contested")
                return True
            except ShortcodeTakenError:
                return False

        with ThreadPoolExecutor(max_workers=WORKERS) as pool:
            results = list(pool.map(claim, range(WORKERS)))

        assert results.count(True) == 1
        assert len(registry) == 1

    def test_concurrent_resolves_count_every_click(self, registry):
        registry.create("https://example.com", 10, "hot")
        context = RequestContext(source_address="93.184.216.34")

        def hit(_):
            return registry.resolve("hot", context)

        with ThreadPoolExecutor(max_workers=WORKERS) as pool:
            urls = list(pool.map(hit, range(1000)))

        assert urls == ["https://example.com"] * 1000
        assert registry.get_statistics("hot").total_clicks == 1000

    def test_no_click_recorded_after_expiry(self, clock):
        registry = URLRegistry(clock=clock, rng=random.Random(7))
        registry.create("https://example.com", 1, "race")
        context = RequestContext(source_address="10.0.0.1")
        deadline = registry.get_statistics("race").expires_at
        lock = threading.Lock()

        def hit(i):
            # One worker pushes the clock past the deadline mid-run
            if i == 50:
                with lock:
                    clock.advance(minutes=5)
            try:
                registry.resolve("race", context)
            except ShortcodeExpiredError:
                pass

        with ThreadPoolExecutor(max_workers=WORKERS) as pool:
            list(pool.map(hit, range(200)))

        clicks = registry.get_statistics("race").click_data
        assert all(click.timestamp <= deadline for click in clicks)

    def test_sweep_during_traffic_never_tears_state(self, registry, clock):
        stop = threading.Event()
        errors = []

        def churn(worker):
            i = 0
            while not stop.is_set():
                code = f"w{worker}n{i}"
                registry.create("https://example.com", 1, code)
                try:
                    registry.resolve(code, RequestContext(source_address="127.0.0.1"))
                    stats = registry.get_statistics(code)
                    assert stats.total_clicks == len(stats.click_data)
                except (ShortCodeNotFoundError, ShortcodeExpiredError):
                    pass
                except AssertionError as e:
                    errors.append(e)
                i += 1

        def sweep():
            for _ in range(200):
                clock.advance(seconds=30)
                registry.sweep_expired()
                assert_consistent(registry)

        threads = [threading.Thread(target=churn, args=(n,)) for n in range(4)]
        for thread in threads:
            thread.start()
        try:
            sweep()
        finally:
            stop.set()
            for thread in threads:
                thread.join()

        assert errors == []
        assert_consistent(registry)


@pytest.mark.asyncio
class TestConcurrentRequests:
    """Many simultaneous requests against the ASGI app."""

    @pytest.fixture
    async def async_client(self, registry):
        app.dependency_overrides[get_registry] = lambda: registry
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
            yield ac
        app.dependency_overrides.clear()

    async def test_concurrent_shorten_requests(self, async_client):
        tasks = [
            async_client.post("/shorturls", json={"url": f"https://example.com/page_{i}"})
            for i in range(30)
        ]
        responses = await asyncio.gather(*tasks)

        assert all(r.status_code == 201 for r in responses)
        codes = {r.json()["shortcode"] for r in responses}
        assert len(codes) == 30

    async def test_concurrent_redirects(self, async_client, registry):
        registry.create("https://example.com", 10, "busy")
        tasks = [async_client.get("/busy") for _ in range(50)]
        responses = await asyncio.gather(*tasks)

        assert all(r.status_code == 302 for r in responses)
        stats = await async_client.get("/shorturls/busy")
        assert stats.json()["totalClicks"] == 50
