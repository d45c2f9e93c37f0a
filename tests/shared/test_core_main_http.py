"""End-to-end HTTP tests for the assembled Canteen runtime on the memory backend."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest
from fastapi.testclient import TestClient
from pydantic import BaseModel

from packages.canteen_core import build_components, create_core_app
from packages.canteen_core import import_component_modules
from packages.canteen_shared.config import CanteenSettings
from resources.substrates.postgres import SharedPostgresSubstrate
from resources.substrates.postgres.config import resolve_postgres_settings
from services.action.realtime_fanout.service import build_realtime_fanout_service
from services.state.lock_controller.service import build_lock_controller_service
from services.state.registration_store.service import (
    build_registration_store_service,
)
from services.state.retention_purge.service import build_retention_purge_service

MANAGER = {"X-Role": "Manager", "X-Department": "Sales", "X-User-Name": "Ana"}
ADMIN = {"X-Role": "admin", "X-Department": "Board", "X-User-Name": "Boss"}
KITCHEN = {"X-Role": "kitchen", "X-User-Name": "Chef"}


class _OfflineRedisHealth(BaseModel):
    ready: bool = False
    detail: str = "redis not configured"


class _OfflineRedis:
    def health(self) -> _OfflineRedisHealth:
        return _OfflineRedisHealth()


class _MutableClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture()
def runtime() -> tuple[TestClient, _MutableClock]:
    settings = CanteenSettings(persistence={"backend": "memory"})
    import_component_modules()
    clock = _MutableClock(datetime(2024, 6, 3, 8, 0, tzinfo=UTC))

    postgres = SharedPostgresSubstrate.in_memory(
        settings=resolve_postgres_settings(settings)
    )
    fanout = build_realtime_fanout_service(settings=settings)
    retention = build_retention_purge_service(
        settings=settings, postgres=postgres, clock=clock
    )
    locks = build_lock_controller_service(
        settings=settings,
        postgres=postgres,
        fanout=fanout,
        retention=retention,
        clock=clock,
    )
    store = build_registration_store_service(
        settings=settings,
        postgres=postgres,
        locks=locks,
        fanout=fanout,
        retention=retention,
        clock=clock,
    )
    components = build_components(
        settings,
        prebuilt={
            "substrate_postgres": postgres,
            "substrate_redis": _OfflineRedis(),
            "service_realtime_fanout": fanout,
            "service_retention_purge": retention,
            "service_lock_controller": locks,
            "service_registration_store": store,
        },
    )
    return TestClient(create_core_app(components=components)), clock


def test_health_is_ready_without_optional_redis(runtime) -> None:
    """Redis is unused by every service, so it must not block readiness."""
    client, _clock = runtime

    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["ready"] is True
    assert body["resources"]["substrate_redis"]["required"] is False
    assert body["resources"]["substrate_postgres"]["ready"] is True
    assert all(item["ready"] for item in body["services"].values())
    assert set(body["services"]) == {
        "service_realtime_fanout",
        "service_retention_purge",
        "service_lock_controller",
        "service_registration_store",
    }


def test_requests_without_role_header_are_unauthenticated(runtime) -> None:
    client, _clock = runtime

    response = client.get("/lunch/summary", params={"date": "2024-06-03"})

    assert response.status_code == 401
    assert response.json()["errors"][0]["code"] == "UNAUTHENTICATED"


def test_manual_lock_blocks_department_write(runtime) -> None:
    """Sales registers, the admin locks, and the next edit is refused."""
    client, clock = runtime

    created = client.post(
        "/lunch/department",
        headers=MANAGER,
        json={"date": "2024-06-03", "regularCount": 10, "vegCount": 2},
    )
    clock.now = datetime(2024, 6, 3, 8, 5, tzinfo=UTC)
    locked = client.post(
        "/lunch/lock", headers=ADMIN, json={"date": "2024-06-03", "locked": True}
    )
    clock.now = datetime(2024, 6, 3, 8, 6, tzinfo=UTC)
    refused = client.post(
        "/lunch/department",
        headers=MANAGER,
        json={"date": "2024-06-03", "regularCount": 11, "vegCount": 2},
    )
    current = client.get(
        "/lunch/department", headers=MANAGER, params={"date": "2024-06-03"}
    )
    history = client.get("/lunch/department/history", headers=MANAGER)

    assert created.status_code == 200
    assert created.json()["totalCount"] == 12
    assert locked.status_code == 200
    assert locked.json()["lockedBy"] == "Boss"
    assert refused.status_code == 423
    assert refused.json()["errors"][0]["code"] == "REGISTRATION_LOCKED"
    assert refused.json()["errors"][0]["metadata"]["reason"] == "manual"
    assert current.json()["regularCount"] == 10
    assert current.json()["updatedBy"] == "Ana"
    assert [entry["totalCount"] for entry in history.json()] == [12]


def test_kitchen_reads_summary_and_time_lock(runtime) -> None:
    client, clock = runtime
    for unit, regular in (("Sales", 10), ("Ops", 4)):
        client.post(
            "/lunch/department",
            headers={**ADMIN, "X-Department": "Board"},
            json={"date": "2024-06-03", "unitId": unit, "regularCount": regular},
        )
    clock.now = datetime(2024, 6, 3, 10, 30, tzinfo=UTC)

    summary = client.get(
        "/lunch/summary", headers=KITCHEN, params={"date": "2024-06-03"}
    )
    lock = client.get("/lunch/lock", headers=KITCHEN, params={"date": "2024-06-03"})

    assert summary.status_code == 200
    assert summary.json()["totalCount"] == 14
    assert [row["unitId"] for row in summary.json()["perUnit"]] == ["Ops", "Sales"]
    assert lock.json()["locked"] is True
    assert lock.json()["lockedBy"] == "system"


def test_afternoon_write_targets_tomorrow_and_purges_yesterday(runtime) -> None:
    client, clock = runtime
    client.post(
        "/lunch/department",
        headers=MANAGER,
        json={"date": "2024-06-03", "regularCount": 3},
    )
    clock.now = datetime(2024, 6, 4, 12, 30, tzinfo=UTC)

    written = client.post(
        "/lunch/department",
        headers=MANAGER,
        json={"date": "2024-06-05", "regularCount": 6},
    )
    old = client.get(
        "/lunch/department", headers=MANAGER, params={"date": "2024-06-03"}
    )

    assert written.status_code == 200
    assert old.json()["totalCount"] == 0
    assert old.json()["updatedAt"] is None


def test_realtime_subscriber_sees_department_update(runtime) -> None:
    client, _clock = runtime

    with client.websocket_connect("/realtime", headers=KITCHEN) as ws:
        ws.send_json({"date": "2024-06-03"})
        joined = ws.receive_json()
        client.post(
            "/lunch/department",
            headers=MANAGER,
            json={"date": "2024-06-03", "regularCount": 5, "vegCount": 1},
        )
        event = ws.receive_json()

    assert joined["channel"] == "room:lunch:2024-06-03"
    assert event["type"] == "department"
    assert event["department"]["unitId"] == "Sales"
    assert event["department"]["totalCount"] == 6
