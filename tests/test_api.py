"""Tests for the HTTP endpoints."""

from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from calorize.api.app import create_app
from calorize.errors import StorageError
from tests.conftest import Services

BANANA = {
    "name": "Banana",
    "calories": 89,
    "protein": 1.1,
    "carbs": 22.8,
    "fat": 0.3,
    "measurement_unit": "g",
    "measurement_amount": 100,
    "nutrients": [{"name": "Potassium", "amount": 358, "unit": "mg"}],
}


@pytest.fixture
def client(container) -> TestClient:
    return TestClient(create_app(container))


@pytest.fixture
def headers(services: Services) -> dict[str, str]:
    user = services.user_service.create_user("alice", "alice@example.com")
    return {"X-User-Id": str(user.id)}


def test_health(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.parametrize("value", [None, "not-a-uuid", str(uuid4())])
def test_requests_without_active_user_are_unauthorized(
    client: TestClient, value
) -> None:
    headers = {"X-User-Id": value} if value else {}

    response = client.get("/foods", headers=headers)

    assert response.status_code == 401


def test_disabled_user_is_unauthorized(
    client: TestClient, services: Services, headers
) -> None:
    services.user_service.disable_user(services.user_service.get_by_name("alice").id)

    assert client.get("/me", headers=headers).status_code == 401


def test_profile_roundtrip(client: TestClient, headers) -> None:
    response = client.patch("/me", json={"email": "new@example.com"}, headers=headers)

    assert response.status_code == 200
    assert response.json()["user"]["email"] == "new@example.com"
    assert client.get("/me", headers=headers).json()["user"]["name"] == "alice"


def test_food_lifecycle(client: TestClient, headers) -> None:
    created = client.post("/foods", json=BANANA, headers=headers)
    assert created.status_code == 201
    first = created.json()["food"]
    assert first["version"] == 1
    assert first["is_current"] is True
    assert first["nutrients"] == [{"name": "Potassium", "amount": 358, "unit": "mg"}]

    updated = client.put(
        f"/foods/{first['id']}", json={**BANANA, "calories": 95}, headers=headers
    )
    assert updated.status_code == 200
    second = updated.json()["food"]
    assert second["version"] == 2
    assert second["family_id"] == first["family_id"]

    current = client.get(f"/foods/{first['id']}/current", headers=headers).json()
    assert current["food"]["id"] == second["id"]
    old = client.get(f"/foods/{first['id']}", headers=headers).json()
    assert old["food"]["is_current"] is False
    versions = client.get(f"/foods/{second['id']}/versions", headers=headers).json()
    assert [item["version"] for item in versions["versions"]] == [2, 1]
    listed = client.get("/foods", headers=headers).json()
    assert [item["id"] for item in listed["foods"]] == [second["id"]]

    deleted = client.delete(f"/foods/{first['id']}", headers=headers)
    assert deleted.json() == {"status": "ok"}
    assert client.get("/foods", headers=headers).json() == {"foods": []}
    versions = client.get(f"/foods/{second['id']}/versions", headers=headers).json()
    assert versions == {"versions": []}


def test_create_food_validation(client: TestClient, headers) -> None:
    missing_unit = {
        key: value for key, value in BANANA.items() if key != "measurement_unit"
    }

    assert client.post("/foods", json=missing_unit, headers=headers).status_code == 422
    assert (
        client.post(
            "/foods", json={**BANANA, "ingredients": {str(uuid4()): 1}}, headers=headers
        ).status_code
        == 422
    )
    assert client.get("/foods?kind=drink", headers=headers).status_code == 422


def test_unknown_food_is_not_found(client: TestClient, headers) -> None:
    assert client.get(f"/foods/{uuid4()}", headers=headers).status_code == 404
    assert (
        client.put(f"/foods/{uuid4()}", json=BANANA, headers=headers).status_code
        == 404
    )


def test_recipe_endpoints(client: TestClient, headers) -> None:
    banana = client.post("/foods", json=BANANA, headers=headers).json()["food"]
    recipe = client.post(
        "/foods",
        json={
            "name": "Smoothie",
            "kind": "recipe",
            "measurement_unit": "glass",
            "measurement_amount": 1,
        },
        headers=headers,
    ).json()["food"]

    response = client.put(
        f"/foods/{recipe['id']}/ingredients",
        json={"ingredients": {banana["id"]: 200}},
        headers=headers,
    )
    assert response.status_code == 200
    assert response.json()["ingredients"][0]["name"] == "Banana"

    listed = client.get(f"/foods/{recipe['id']}/ingredients", headers=headers).json()
    assert listed["ingredients"][0]["amount"] == 200
    totals = client.get(f"/foods/{recipe['id']}/totals", headers=headers).json()
    assert totals["totals"]["calories"] == 178.0

    bad = client.put(
        f"/foods/{recipe['id']}/ingredients",
        json={"ingredients": {"nope": 1}},
        headers=headers,
    )
    assert bad.status_code == 422


def test_logs_and_stats(client: TestClient, headers) -> None:
    banana = client.post("/foods", json=BANANA, headers=headers).json()["food"]

    created = client.post(
        "/logs",
        json={
            "food_id": banana["id"],
            "amount": 200,
            "meal_tag": "snack",
            "logged_at": "2026-01-27T12:00:00Z",
        },
        headers=headers,
    )
    assert created.status_code == 201
    log = created.json()["log"]
    assert log["food_id"] == banana["id"]

    logs = client.get("/logs?date=2026-01-27", headers=headers).json()
    assert [item["id"] for item in logs["logs"]] == [log["id"]]

    stats = client.get(
        "/stats", params={"period": "day", "date": "2026-01-27"}, headers=headers
    ).json()["stats"]
    assert stats["total_calories"] == 178.0
    assert stats["nutrients"] == [{"name": "Potassium", "amount": 716.0, "unit": "mg"}]
    assert stats["macro_percentages"] == {"protein": 4, "carbs": 94, "fat": 1}

    month = client.get(
        "/stats", params={"period": "month", "date": "2026-01-27"}, headers=headers
    ).json()["stats"]
    assert month["start"].startswith("2026-01-01T00:00:00")

    assert client.delete(f"/logs/{log['id']}", headers=headers).json() == {
        "status": "ok"
    }
    assert client.get("/logs?date=2026-01-27", headers=headers).json() == {"logs": []}


def test_logs_and_stats_validation(client: TestClient, headers) -> None:
    assert client.get("/logs?date=2026-02-30", headers=headers).status_code == 422
    assert client.get("/stats?period=year", headers=headers).status_code == 422
    assert (
        client.post(
            "/logs", json={"food_id": str(uuid4()), "amount": 1}, headers=headers
        ).status_code
        == 404
    )
    assert (
        client.post(
            "/logs", json={"food_id": str(uuid4()), "amount": -1}, headers=headers
        ).status_code
        == 422
    )


def test_deleting_another_users_log_is_forbidden(
    client: TestClient, services: Services, headers
) -> None:
    banana = client.post("/foods", json=BANANA, headers=headers).json()["food"]
    log = client.post(
        "/logs", json={"food_id": banana["id"], "amount": 100}, headers=headers
    ).json()["log"]
    bob = services.user_service.create_user("bob", "")

    response = client.delete(f"/logs/{log['id']}", headers={"X-User-Id": str(bob.id)})

    assert response.status_code == 403
    assert client.delete(f"/logs/{uuid4()}", headers=headers).status_code == 404


def test_storage_failure_is_internal_error(
    client: TestClient, container, headers, monkeypatch
) -> None:
    def fail(*_args, **_kwargs):  # type: ignore[no-untyped-def]
        raise StorageError("list foods: connection reset")

    monkeypatch.setattr(container.catalog_service, "list_records", fail)

    response = client.get("/foods", headers=headers)

    assert response.status_code == 500
    assert response.json() == {"detail": "internal error"}
