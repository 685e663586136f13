# tests/test_routes.py
import pytest
from fastapi.testclient import TestClient
from pymongo.errors import ServerSelectionTimeoutError

from learnpath.deps import get_db, get_redis
from learnpath.main import app
from learnpath.services import unlock_service
from learnpath.services.cache_keys import blacklisted_jti_key

from .conftest import auth_header, make_token


@pytest.fixture
def client(store, db_mock, redis_mock):
    store.add_course(1, order_index=1, lessons=3, title="Fundamentos")
    store.add_course(2, order_index=2, lessons=2, title="Intermedio")
    store.add_course(3, order_index=3, lessons=0, title="Avanzado")
    app.dependency_overrides[get_db] = lambda: db_mock
    app.dependency_overrides[get_redis] = lambda: redis_mock
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_list_courses_anonymous(client):
    response = client.get("/courses")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert [(c["title"], c["is_unlocked"], c["unlock_reason"]) for c in body["data"]] == [
        ("Fundamentos", True, "FIRST_COURSE"),
        ("Intermedio", False, "PREDECESSOR_INCOMPLETE"),
        ("Avanzado", False, "PREDECESSOR_INCOMPLETE"),
    ]


def test_list_courses_authenticated(client, store):
    store.complete(5, course_id=1, count=3)

    response = client.get("/courses", headers=auth_header(5))

    data = response.json()["data"]
    assert [c["is_unlocked"] for c in data] == [True, True, False]
    assert data[0]["progress"] == 100.0
    assert data[0]["completed_lessons"] == 3


def test_list_courses_with_bad_token_falls_back_to_anonymous(client, store):
    store.complete(5, course_id=1, count=3)

    response = client.get("/courses", headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 200
    assert [(c["is_unlocked"], c["unlock_reason"]) for c in response.json()["data"]] == [
        (True, "FIRST_COURSE"),
        (False, "PREDECESSOR_INCOMPLETE"),
        (False, "PREDECESSOR_INCOMPLETE"),
    ]


def test_get_course_with_revoked_token_is_anonymous(client, store, redis_mock):
    store.complete(5, course_id=2, count=1)
    token = make_token(5, jti="gone")

    async def lookup(key):
        return "1" if key == blacklisted_jti_key("gone") else None

    redis_mock.get.side_effect = lookup
    response = client.get("/courses/2", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 200
    assert response.json()["data"]["unlock_reason"] == "PREDECESSOR_INCOMPLETE"


def test_revoked_token(client, redis_mock):
    token = make_token(5, jti="abc")

    async def lookup(key):
        return "1" if key == blacklisted_jti_key("abc") else None

    redis_mock.get.side_effect = lookup
    response = client.get("/progress/unlock-status", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
    assert response.json()["detail"] == "Token revoked"


def test_non_numeric_subject(client):
    response = client.get("/progress/courses", headers=auth_header("abc"))

    assert response.status_code == 401


def test_get_course(client, store):
    store.complete(5, course_id=2, count=1)

    response = client.get("/courses/2", headers=auth_header(5))

    assert response.status_code == 200
    course = response.json()["data"]
    assert course["is_unlocked"] is True
    assert course["unlock_reason"] == "ALREADY_IN_PROGRESS"


def test_get_course_not_found(client):
    response = client.get("/courses/99")

    assert response.status_code == 404


def test_progress_requires_auth(client):
    assert client.get("/progress/courses").status_code == 401
    assert client.get("/progress/unlock-status").status_code == 401


def test_progress_courses(client, store):
    store.complete(5, course_id=2, count=1)

    response = client.get("/progress/courses", headers=auth_header(5))

    assert response.status_code == 200
    body = response.json()
    assert body["user_id"] == 5
    assert [(i["course_id"], i["completed_lessons"], i["total_lessons"]) for i in body["items"]] == [
        (1, 0, 3), (2, 1, 2), (3, 0, 0)
    ]
    assert body["items"][1]["percent"] == 50.0


def test_unlock_status(client, store):
    store.complete(5, course_id=2, count=2)

    response = client.get("/progress/unlock-status", headers=auth_header(5))

    body = response.json()
    assert body["unlocked_count"] == 3
    assert [(i["course_id"], i["reason"]) for i in body["items"]] == [
        (1, "FIRST_COURSE"), (2, "ALREADY_IN_PROGRESS"), (3, "PREDECESSOR_COMPLETE")
    ]


def test_diagnostics_requires_admin(client):
    assert client.get("/diagnostics/catalog", headers=auth_header(5)).status_code == 403


def test_diagnostics_catalog(client):
    response = client.get("/diagnostics/catalog", headers=auth_header(1, role="admin"))

    assert response.status_code == 200
    assert [c["order_index"] for c in response.json()["courses"]] == [1, 2, 3]
    assert response.json()["irregularities"] == []


def test_diagnostics_stats(client, redis_mock):
    async def hgetall(key):
        return {"catalog": "3"} if key == "cache_stats:hits" else {}

    redis_mock.hgetall.side_effect = hgetall
    redis_mock.scard.return_value = 2
    response = client.get("/diagnostics/stats", headers=auth_header(1, role="admin"))

    assert response.status_code == 200
    assert response.json()["hits"] == {"catalog": 3}
    assert response.json()["hit_ratio"] == 100.0
    assert response.json()["orphaned_records"] == 2


def test_store_outage_maps_to_503(client, monkeypatch):
    async def broken(*args, **kwargs):
        raise ServerSelectionTimeoutError("no servers")

    monkeypatch.setattr(unlock_service, "course_overview", broken)
    response = client.get("/courses")

    assert response.status_code == 503
    assert response.json()["error"] == "SERVICE_UNAVAILABLE"


def test_health(client, db_mock):
    db_mock.command.return_value = {"ok": 1}

    response = client.get("/api/v1/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_health_degraded(client, db_mock):
    db_mock.command.side_effect = ServerSelectionTimeoutError("down")

    response = client.get("/api/v1/health")

    assert response.json()["status"] == "degraded"
    assert response.json()["services"]["mongodb"]["status"] == "disconnected"
