"""
HTTP surface: authentication, status codes and payload shapes.

Run with: pytest tests/test_workout_api.py -v
"""
import pytest
from fastapi.testclient import TestClient

from core.security import create_access_token
from main import app

BASE = "/v1/workout-plans"


def _auth(user_id, role=None):
    claims = {"sub": str(user_id)}
    if role:
        claims["role"] = role
    return {"Authorization": f"Bearer {create_access_token(claims)}"}


@pytest.fixture
def client(container):
    previous = app.state.container
    app.state.container = container
    yield TestClient(app)
    app.state.container = previous


@pytest.fixture
def headers(user_id):
    return _auth(user_id)


@pytest.fixture
def admin_headers(user_id):
    return _auth(user_id, role="admin")


def _set_url(tree, set_id):
    return f"{BASE}/{tree.plan}/cycles/{tree.cycle}/workouts/{tree.workout}/exercises/{tree.we}/sets/{set_id}"


class TestAuthentication:
    @pytest.mark.parametrize(
        "method,path",
        [
            ("get", BASE),
            ("post", BASE),
            ("get", "/v1/individual-exercises"),
            ("get", "/v1/exercises"),
            ("get", f"{BASE}/previous-sets/1?qt=3"),
        ],
    )
    def test_missing_token_is_401(self, client, method, path):
        response = getattr(client, method)(path)
        assert response.status_code == 401, f"Expected 401, got {response.status_code}"

    def test_garbage_token_is_401(self, client):
        response = client.get(BASE, headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    def test_non_numeric_subject_is_401(self, client):
        token = create_access_token({"sub": "alice"})
        response = client.get(BASE, headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_catalog_writes_need_admin(self, client, headers, admin_headers):
        assert client.post("/v1/muscle-groups", json={"name": "Back"}, headers=headers).status_code == 403
        assert client.post("/v1/muscle-groups", json={"name": "Back"}, headers=admin_headers).status_code == 201


class TestPlanEndpoints:
    def test_create_and_read_plan(self, client, headers):
        response = client.post(BASE, json={"name": "Strength", "active": True}, headers=headers)
        assert response.status_code == 201
        plan = response.json()
        assert plan["active"] is True
        assert plan["current_cycle_id"] is not None

        assert client.get(f"{BASE}/{plan['id']}", headers=headers).json()["name"] == "Strength"
        assert client.get(f"{BASE}/active", headers=headers).json()["id"] == plan["id"]

        current = client.get(f"{BASE}/active/current-cycle", headers=headers).json()
        assert current["id"] == plan["current_cycle_id"]
        assert current["name"] == "Week #1"
        assert current["workouts"] == []

    def test_blank_name_is_400(self, client, headers):
        response = client.post(BASE, json={"name": " "}, headers=headers)
        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR_NAME"

    def test_other_users_plan_is_404(self, client, tree, other_user_id):
        response = client.get(f"{BASE}/{tree.plan}", headers=_auth(other_user_id))
        assert response.status_code == 404
        assert response.json()["error_code"] == "NOT_FOUND"

    def test_delete_plan_is_204(self, client, headers, tree):
        assert client.delete(f"{BASE}/{tree.plan}", headers=headers).status_code == 204
        assert client.get(f"{BASE}/{tree.plan}", headers=headers).status_code == 404

    def test_first_cycle_delete_is_409(self, client, headers, tree):
        response = client.delete(f"{BASE}/{tree.plan}/cycles/{tree.cycle}", headers=headers)
        assert response.status_code == 409
        assert response.json()["error_code"] == "PRECONDITION_FAILED"

    def test_complete_cycle_advances_plan(self, client, headers, tree):
        response = client.put(f"{BASE}/{tree.plan}/cycles/{tree.cycle}/status", json={"completed": True}, headers=headers)
        assert response.status_code == 200
        assert response.json()["completed"] is True

        plan = client.get(f"{BASE}/{tree.plan}", headers=headers).json()
        assert plan["current_cycle_id"] == response.json()["next_cycle_id"]

    def test_current_cycle_after_empty_week(self, client, headers):
        plan = client.post(BASE, json={"name": "Empty start", "active": True}, headers=headers).json()
        first_cycle = plan["current_cycle_id"]

        completed = client.put(
            f"{BASE}/{plan['id']}/cycles/{first_cycle}/status", json={"completed": True}, headers=headers
        )
        assert completed.status_code == 200

        response = client.get(f"{BASE}/active/current-cycle", headers=headers)
        assert response.status_code == 200
        body = response.json()
        assert body["id"] == completed.json()["next_cycle_id"]
        assert body["name"] == "Week #2"
        assert body["workouts"] == []


class TestWorkoutEndpoints:
    def test_set_lifecycle(self, client, headers, tree):
        url = _set_url(tree, tree.sets[0])

        patched = client.patch(url, json={"weight": 60, "reps": 8}, headers=headers)
        assert patched.status_code == 200
        assert (patched.json()["weight"], patched.json()["reps"]) == (60.0, 8)

        completed = client.put(f"{url}/status", json={"completed": True}, headers=headers)
        assert completed.status_code == 200
        assert completed.json()["completed"] is True

    def test_negative_weight_is_422(self, client, headers, tree):
        response = client.patch(_set_url(tree, tree.sets[0]), json={"weight": -5}, headers=headers)
        assert response.status_code == 422

    def test_complete_workout_returns_calories(self, client, headers, tree):
        for set_id in tree.sets:
            client.patch(_set_url(tree, set_id), json={"weight": 60, "reps": 8}, headers=headers)

        response = client.put(
            f"{BASE}/{tree.plan}/cycles/{tree.cycle}/workouts/{tree.workout}/status",
            json={"completed": True},
            headers=headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["calories"] == pytest.approx(26.9)
        assert body["workout"]["completed"] is True
        assert body["workout"]["estimated_calories"] == pytest.approx(26.9)

    def test_create_exercise_and_list_sets(self, client, headers, tree):
        base = f"{BASE}/{tree.plan}/cycles/{tree.cycle}/workouts/{tree.workout}/exercises"

        created = client.post(base, json={"individual_exercise_id": tree.ie, "sets_qt": 2}, headers=headers)
        assert created.status_code == 201
        body = created.json()
        assert body["index"] == 2
        assert body["individual_exercise"]["name"] == "Bench Press"

        sets = client.get(f"{base}/{body['id']}/sets", headers=headers)
        assert [s["index"] for s in sets.json()] == [1, 2]

    def test_zero_sets_is_400(self, client, headers, tree):
        base = f"{BASE}/{tree.plan}/cycles/{tree.cycle}/workouts/{tree.workout}/exercises"
        response = client.post(base, json={"individual_exercise_id": tree.ie, "sets_qt": 0}, headers=headers)
        assert response.status_code == 400

    def test_move_past_end_is_404(self, client, headers, tree):
        response = client.post(f"{_set_url(tree, tree.sets[2])}/move", json={"direction": "down"}, headers=headers)
        assert response.status_code == 404

    def test_bad_direction_is_422(self, client, headers, tree):
        response = client.post(f"{_set_url(tree, tree.sets[0])}/move", json={"direction": "left"}, headers=headers)
        assert response.status_code == 422

    def test_batch_create(self, client, headers, tree):
        response = client.post(
            f"{BASE}/{tree.plan}/cycles/{tree.cycle}/workouts/batch",
            json={"workouts": [{"name": "Legs", "exercises": [{"individual_exercise_id": tree.ie, "sets_qt": 3}]}]},
            headers=headers,
        )
        assert response.status_code == 201
        assert [w["index"] for w in response.json()] == [2]

    def test_delete_set_is_204(self, client, headers, tree):
        assert client.delete(_set_url(tree, tree.sets[1]), headers=headers).status_code == 204
        assert client.get(_set_url(tree, tree.sets[1]), headers=headers).status_code == 404

    def test_previous_sets(self, client, headers, tree):
        for set_id in tree.sets:
            client.patch(_set_url(tree, set_id), json={"weight": 50, "reps": 5}, headers=headers)
            client.put(f"{_set_url(tree, set_id)}/status", json={"completed": True}, headers=headers)

        response = client.get(f"{BASE}/previous-sets/{tree.ie}?qt=2", headers=headers)

        assert response.status_code == 200
        assert response.json() == [{"weight": 50.0, "reps": 5}, {"weight": 50.0, "reps": 5}]


class TestExerciseEndpoints:
    def test_get_or_create_individual_exercise(self, client, headers, bench_press, individual_exercise):
        response = client.post("/v1/individual-exercises", json={"exercise_id": bench_press.id}, headers=headers)
        assert response.status_code == 200
        assert response.json()["id"] == individual_exercise.id

    def test_unknown_individual_exercise(self, client, headers):
        response = client.get("/v1/individual-exercises/9999", headers=headers)
        assert response.status_code == 404
        assert response.json()["error_code"] == "INDIVIDUAL_EXERCISE_NOT_FOUND"

    def test_stats_and_history(self, client, headers, tree):
        for set_id in tree.sets:
            client.patch(_set_url(tree, set_id), json={"weight": 80, "reps": 5}, headers=headers)
            client.put(f"{_set_url(tree, set_id)}/status", json={"completed": True}, headers=headers)

        stats = client.get(f"/v1/individual-exercises/stats?ids={tree.ie}", headers=headers).json()
        assert [(s["individual_exercise_id"], s["weight"], s["reps"], s["volume"]) for s in stats] == [
            (tree.ie, 80.0, 5, 400.0)
        ]

        history = client.get(f"/v1/individual-exercises/{tree.ie}/history", headers=headers).json()
        assert [(h["workout_id"], h["weight"]) for h in history] == [(tree.workout, 80.0)]

    def test_catalog_reads(self, client, headers, bench_press):
        exercises = client.get("/v1/exercises", headers=headers).json()
        assert [e["slug"] for e in exercises] == ["bench-press"]

    def test_duplicate_muscle_group_is_409(self, client, admin_headers, muscle_group):
        response = client.post("/v1/muscle-groups", json={"name": "Chest"}, headers=admin_headers)
        assert response.status_code == 409
        assert response.json()["error_code"] == "CONFLICT"


class TestHealth:
    def test_ping(self, client):
        assert client.get("/ping").json() == {"pong": True}

    def test_request_id_is_echoed(self, client):
        response = client.get("/ping", headers={"X-Request-ID": "abc123"})
        assert response.headers["X-Request-ID"] == "abc123"

    def test_request_id_is_generated(self, client):
        assert len(client.get("/ping").headers["X-Request-ID"]) == 32
