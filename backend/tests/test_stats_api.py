"""
Tests for the stats HTTP endpoints.
"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from player_tracker.dependencies import get_stats_service
from player_tracker.routers import stats
from player_tracker.samples import Sample
from player_tracker.stats import StatsService

NOW = 1_700_000_000_000
TICK_MS = 60_000


@pytest.fixture
def service(memory_store, fake_registry, server_factory):
    fake_registry.servers = [server_factory(1, name="Survival", color="#123456")]
    memory_store.samples = [
        Sample(NOW - 2 * TICK_MS, {1: 4}),
        Sample(NOW - TICK_MS, {1: 6}),
    ]
    return StatsService(
        memory_store, fake_registry, tick_interval_ms=TICK_MS, clock=lambda: NOW
    )


@pytest.fixture
def client(service):
    app = FastAPI()
    app.include_router(stats.router)
    app.dependency_overrides[get_stats_service] = lambda: service
    return TestClient(app)


class TestStatsApi:
    def test_all_without_range(self, client):
        response = client.get("/stats/all")

        assert response.status_code == 200
        body = response.json()
        assert set(body) == {"from", "to", "bucket_width_ms", "servers"}
        assert body["from"] == NOW - 2 * TICK_MS
        assert body["to"] == NOW - TICK_MS
        assert body["bucket_width_ms"] == 15_000
        assert body["servers"][0]["name"] == "Survival"
        assert body["servers"][0]["color"] == "#123456"
        assert all(point["x"] % 15_000 == 0 for point in body["servers"][0]["points"])

    def test_all_with_range(self, client):
        response = client.get(
            "/stats/all", params={"from": NOW - TICK_MS, "to": NOW}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["from"] == NOW - TICK_MS
        assert body["to"] == NOW
        assert [p["y"] for p in body["servers"][0]["points"]] == [6]

    def test_all_with_inverted_range(self, client):
        response = client.get("/stats/all", params={"from": 2000, "to": 1000})

        assert response.status_code == 400
        assert "must not be after" in response.json()["detail"]

    def test_all_with_bad_parameter(self, client):
        response = client.get("/stats/all", params={"from": "yesterday"})

        assert response.status_code == 422

    def test_latest(self, client):
        response = client.get("/stats/latest")

        assert response.status_code == 200
        (row,) = response.json()
        assert row == {
            "server_id": 1,
            "name": "Survival",
            "color": "#123456",
            "latest_count": 6,
            "latest_timestamp": NOW - TICK_MS,
            "daily_peak": 6,
            "daily_peak_timestamp": NOW - TICK_MS,
            "record": 6,
            "record_timestamp": NOW - TICK_MS,
            "stale": False,
            "never_probed": False,
        }
