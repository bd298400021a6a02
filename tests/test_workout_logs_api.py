"""Workout log endpoints: logging sessions and reading them back."""

import json
from datetime import datetime, timezone

import pytest


@pytest.fixture
def workout(alice, exercise_ids, make_workout):
    return make_workout(alice, exercise_ids[:2], name="Upper Body")


def _log_payload(workout_id, exercise_id, **overrides):
    payload = {
        "workout_id": workout_id,
        "date": "2024-06-01",
        "duration": 50,
        "notes": "good session",
        "items": [{"exercise_id": exercise_id, "sets": 3, "reps": 8, "weight": 60}],
    }
    payload.update(overrides)
    return payload


@pytest.mark.integration
class TestLogWorkout:
    def test_create(self, client, alice, workout, exercise_ids):
        response = client.post("/v1/workout-logs", json=_log_payload(workout["id"], exercise_ids[0]), headers=alice)

        assert response.status_code == 201
        log = response.json()["workout_log"]
        assert response.headers["Location"] == f"/v1/workout-logs/{log['id']}"
        assert log["workout_name"] == "Upper Body"
        assert log["date"] == "2024-06-01"
        assert log["items"][0]["exercise"]["name"] == "Bench Press"

    def test_date_defaults_to_today(self, client, alice, workout, exercise_ids):
        payload = _log_payload(workout["id"], exercise_ids[0])
        del payload["date"]

        response = client.post("/v1/workout-logs", json=payload, headers=alice)

        assert response.status_code == 201
        assert response.json()["workout_log"]["date"] == datetime.now(timezone.utc).date().isoformat()

    def test_validation(self, client, alice, workout):
        response = client.post(
            "/v1/workout-logs",
            json={"workout_id": workout["id"], "duration": 0, "items": []},
            headers=alice,
        )
        assert response.status_code == 422
        assert response.json() == {
            "error": {
                "duration": "must be greater than zero",
                "items": "must contain at least one item",
            }
        }

    def test_item_validation(self, client, alice, workout, exercise_ids):
        items = [{"exercise_id": exercise_ids[0], "sets": 3, "reps": 0, "weight": 60}]
        response = client.post(
            "/v1/workout-logs", json=_log_payload(workout["id"], exercise_ids[0], items=items), headers=alice
        )
        assert response.status_code == 422
        assert response.json() == {"error": {"items.0.reps": "must be greater than zero"}}

    def test_numbers_beyond_column_range(self, client, alice, workout, exercise_ids):
        items = [{"exercise_id": exercise_ids[0], "sets": 2**31, "reps": 8, "weight": 60}]
        payload = _log_payload(99999999999999999999, exercise_ids[0], duration=2**31, items=items)
        response = client.post("/v1/workout-logs", json=payload, headers=alice)
        assert response.status_code == 422
        assert response.json() == {
            "error": {
                "workout_id": "workout not found",
                "duration": "must not be more than 2147483647",
                "items.0.sets": "must not be more than 2147483647",
            }
        }

    @pytest.mark.parametrize("weight", [float("inf"), float("nan"), 1_000_000])
    def test_weight_must_be_finite_and_fit_the_column(self, client, alice, workout, exercise_ids, weight):
        items = [{"exercise_id": exercise_ids[0], "sets": 3, "reps": 8, "weight": weight}]
        response = client.post(
            "/v1/workout-logs",
            content=json.dumps(_log_payload(workout["id"], exercise_ids[0], items=items)),
            headers={**alice, "Content-Type": "application/json"},
        )
        assert response.status_code == 422
        assert response.json() == {"error": {"items.0.weight": "must be a finite value below 1000000"}}

    def test_unknown_exercise(self, client, alice, workout):
        response = client.post("/v1/workout-logs", json=_log_payload(workout["id"], 9999), headers=alice)
        assert response.status_code == 422
        assert response.json() == {"error": {"items.0.exercise_id": "exercise not found"}}

    def test_cannot_log_another_users_workout(self, client, bob, workout, exercise_ids):
        response = client.post("/v1/workout-logs", json=_log_payload(workout["id"], exercise_ids[0]), headers=bob)
        assert response.status_code == 422
        assert response.json() == {"error": {"workout_id": "workout not found"}}

    def test_bad_date_is_a_bad_request(self, client, alice, workout, exercise_ids):
        payload = _log_payload(workout["id"], exercise_ids[0], date="June 1st")
        response = client.post("/v1/workout-logs", json=payload, headers=alice)
        assert response.status_code == 400


@pytest.mark.integration
class TestReadWorkoutLogs:
    @pytest.fixture
    def logs(self, client, alice, workout, exercise_ids):
        ids = []
        for day in ["2024-06-01", "2024-06-03", "2024-06-02"]:
            response = client.post(
                "/v1/workout-logs", json=_log_payload(workout["id"], exercise_ids[0], date=day), headers=alice
            )
            ids.append(response.json()["workout_log"]["id"])
        return ids

    def test_list_defaults_to_newest_first(self, client, alice, logs):
        body = client.get("/v1/workout-logs", headers=alice).json()
        assert [log["date"] for log in body["workout_logs"]] == ["2024-06-03", "2024-06-02", "2024-06-01"]
        assert body["metadata"]["total_records"] == 3

    def test_list_rejects_unknown_sort(self, client, alice, logs):
        response = client.get("/v1/workout-logs?sort=notes", headers=alice)
        assert response.status_code == 422
        assert response.json() == {"error": {"sort": "invalid sort value"}}

    def test_get_one(self, client, alice, logs):
        response = client.get(f"/v1/workout-logs/{logs[0]}", headers=alice)
        assert response.status_code == 200
        assert response.json()["workout_log"]["date"] == "2024-06-01"

    def test_other_user_sees_nothing(self, client, bob, logs):
        assert client.get(f"/v1/workout-logs/{logs[0]}", headers=bob).status_code == 404
        body = client.get("/v1/workout-logs", headers=bob).json()
        assert body["workout_logs"] == []
        assert body["metadata"]["total_records"] == 0

    def test_logs_are_insert_only(self, client, alice, logs):
        assert client.delete(f"/v1/workout-logs/{logs[0]}", headers=alice).status_code == 405
        assert client.patch(f"/v1/workout-logs/{logs[0]}", json={}, headers=alice).status_code == 405

    @pytest.mark.parametrize("raw", ["2147483648", "9" * 20, "1_0"])
    def test_out_of_range_id_is_not_found(self, client, alice, raw):
        response = client.get(f"/v1/workout-logs/{raw}", headers=alice)
        assert response.status_code == 404
