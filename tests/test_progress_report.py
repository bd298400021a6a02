"""Progress report: date handling, in-memory reduction, and the HTTP endpoint."""

from datetime import date, datetime, timedelta, timezone
from typing import List

import pytest

from trackrecord.core.validator import Validator
from trackrecord.schemas.exercise import ExerciseCreate, ExerciseSummary
from trackrecord.schemas.workout import WorkoutItemInput
from trackrecord.schemas.workout_log import WorkoutLogItemInput, WorkoutLogItemRead, WorkoutLogRead
from trackrecord.services import progress_report
from trackrecord.services.progress_report import build_report, resolve_date_range

TODAY = date(2024, 6, 30)


def _exercise(exercise_id: int, name: str) -> ExerciseSummary:
    return ExerciseSummary(id=exercise_id, name=name, description="", category="Strength", muscle_group="Chest")


def _log(log_id: int, duration: int, items: List[tuple]) -> WorkoutLogRead:
    return WorkoutLogRead(
        id=log_id,
        workout_id=1,
        user_id=1,
        date=TODAY,
        duration=duration,
        notes="",
        workout_name="Push Day",
        created_at=datetime(2024, 6, 30, tzinfo=timezone.utc),
        items=[
            WorkoutLogItemRead(
                id=log_id * 10 + i,
                log_id=log_id,
                exercise_id=exercise_id,
                sets=sets,
                reps=reps,
                weight=weight,
                exercise=_exercise(exercise_id, f"Exercise {exercise_id}"),
            )
            for i, (exercise_id, sets, reps, weight) in enumerate(items)
        ],
    )


@pytest.fixture
def logs() -> List[WorkoutLogRead]:
    return [
        _log(1, 30, [(1, 3, 10, 50)]),
        _log(2, 45, [(1, 4, 8, 55), (2, 5, 5, 100)]),
    ]


# ---------------------------------------------------------------------------
# Date range
# ---------------------------------------------------------------------------


@pytest.mark.unit
class TestResolveDateRange:
    def test_defaults_to_trailing_thirty_days(self):
        v = Validator()
        assert resolve_date_range(v, None, None, TODAY) == (date(2024, 5, 31), TODAY)
        assert v.valid

    def test_each_bound_defaults_independently(self):
        v = Validator()
        start, end = resolve_date_range(v, "2024-01-01", None, TODAY)
        assert (start, end) == (date(2024, 1, 1), TODAY)
        start, end = resolve_date_range(v, None, "2024-06-15", TODAY)
        assert (start, end) == (date(2024, 5, 31), date(2024, 6, 15))

    @pytest.mark.parametrize("raw", ["2024-13-01", "30/06/2024", "yesterday"])
    def test_malformed_date_is_a_field_error(self, raw):
        v = Validator()
        resolve_date_range(v, raw, None, TODAY)
        assert v.errors == {"start_date": "must be in format YYYY-MM-DD"}

    def test_end_before_start_is_rejected(self):
        v = Validator()
        resolve_date_range(v, "2024-06-10", "2024-06-01", TODAY)
        assert v.errors == {"end_date": "must not be before start_date"}


# ---------------------------------------------------------------------------
# Reduction
# ---------------------------------------------------------------------------


@pytest.mark.unit
class TestBuildReport:
    def test_totals_and_per_exercise_stats(self, logs):
        report = build_report(logs, TODAY - timedelta(days=30), TODAY)

        assert report.workout_count == 2
        assert report.total_duration == 75
        bench = report.exercise_stats[1]
        assert bench.total_sets == 7
        assert bench.total_reps == 3 * 10 + 4 * 8
        assert bench.max_weight == 55
        assert bench.workouts == 2
        assert bench.exercise_name == "Exercise 1"
        assert report.exercise_stats[2].total_reps == 25

    def test_exercise_filter_limits_stats_not_session_totals(self, logs):
        report = build_report(logs, TODAY - timedelta(days=30), TODAY, exercise_id=2)

        assert set(report.exercise_stats) == {2}
        assert report.workout_count == 2
        assert report.total_duration == 75

    def test_empty_range(self):
        report = build_report([], TODAY, TODAY)
        assert report.workout_count == 0
        assert report.total_duration == 0
        assert report.exercise_stats == {}


# ---------------------------------------------------------------------------
# Endpoint
# ---------------------------------------------------------------------------


@pytest.mark.integration
class TestProgressReportEndpoint:
    @pytest.fixture
    def logged(self, client, alice, exercise_ids, make_workout):
        bench, squat, _ = exercise_ids
        workout = make_workout(alice, [bench, squat])
        today = datetime.now(timezone.utc).date()
        sessions = [
            {"date": (today - timedelta(days=1)).isoformat(), "duration": 30,
             "items": [{"exercise_id": bench, "sets": 3, "reps": 10, "weight": 50}]},
            {"date": today.isoformat(), "duration": 45,
             "items": [{"exercise_id": bench, "sets": 4, "reps": 8, "weight": 55}]},
            {"date": today.isoformat(), "duration": 20,
             "items": [{"exercise_id": squat, "sets": 5, "reps": 5, "weight": 100}]},
            {"date": (today - timedelta(days=90)).isoformat(), "duration": 60,
             "items": [{"exercise_id": bench, "sets": 1, "reps": 1, "weight": 120}]},
        ]
        for body in sessions:
            response = client.post("/v1/workout-logs", json={"workout_id": workout["id"], **body}, headers=alice)
            assert response.status_code == 201, response.text
        return exercise_ids

    def test_default_range_covers_last_thirty_days(self, client, alice, logged):
        response = client.get("/v1/reports/progress", headers=alice)
        assert response.status_code == 200
        report = response.json()["report"]
        assert report["workout_count"] == 3
        assert report["total_duration"] == 95
        assert len(report["workouts"]) == 3

    def test_exercise_filter(self, client, alice, logged):
        bench = logged[0]
        response = client.get(f"/v1/reports/progress?exercise_id={bench}", headers=alice)
        assert response.status_code == 200
        report = response.json()["report"]
        assert report["total_duration"] == 75
        assert list(report["exercise_stats"]) == [str(bench)]
        stats = report["exercise_stats"][str(bench)]
        assert stats["total_sets"] == 7
        assert stats["total_reps"] == 62
        assert stats["max_weight"] == 55
        assert stats["workouts"] == 2

    def test_other_users_logs_are_excluded(self, client, bob, logged):
        response = client.get("/v1/reports/progress", headers=bob)
        assert response.status_code == 200
        assert response.json()["report"]["workout_count"] == 0

    def test_malformed_dates_are_validation_failures(self, client, alice):
        response = client.get("/v1/reports/progress?start_date=2024-02-30&exercise_id=abc", headers=alice)
        assert response.status_code == 422
        assert response.json() == {
            "error": {
                "start_date": "must be in format YYYY-MM-DD",
                "exercise_id": "must be an integer value",
            }
        }

    def test_requires_authentication(self, client):
        assert client.get("/v1/reports/progress").status_code == 401

    @pytest.mark.parametrize(
        "raw, message",
        [
            ("2147483648", "must not be more than 2147483647"),
            ("9" * 20, "must not be more than 2147483647"),
            ("1_0", "must be an integer value"),
            ("%205", "must be an integer value"),
        ],
    )
    def test_exercise_id_must_fit_an_id_column(self, client, alice, raw, message):
        response = client.get(f"/v1/reports/progress?exercise_id={raw}", headers=alice)
        assert response.status_code == 422
        assert response.json() == {"error": {"exercise_id": message}}


# ---------------------------------------------------------------------------
# Batched reads
# ---------------------------------------------------------------------------


async def _insert_log(models, seeded, day: date):
    user_id, workout_id, exercise_id = seeded
    return await models.workout_logs.insert(
        user_id, workout_id, day, 30, "",
        [WorkoutLogItemInput(exercise_id=exercise_id, sets=3, reps=5, weight=60)],
    )


@pytest.mark.integration
class TestGenerateProgressReport:
    """Logs are read newest first in keyset batches; a log is never counted twice."""

    @pytest.fixture
    async def seeded(self, models):
        user = await models.users.insert("Alice", "alice@example.com", "not-a-real-hash")
        exercise = await models.exercises.insert(
            ExerciseCreate(name="Bench Press", description="", category="Strength", muscle_group="Chest")
        )
        workout = await models.workouts.insert(
            user.id, "Push Day", "desc", None,
            [WorkoutItemInput(exercise_id=exercise.id, sets=3, reps=10, weight=40)],
        )
        return user.id, workout.id, exercise.id

    async def test_reads_every_log_across_batches(self, models, seeded, monkeypatch):
        monkeypatch.setattr(progress_report, "REPORT_PAGE_SIZE", 2)
        # Shared dates force the id tiebreaker to carry the cursor
        for offset in (0, 0, 1, 2, 2):
            await _insert_log(models, seeded, TODAY - timedelta(days=offset))

        report = await progress_report.generate_progress_report(
            models.workout_logs, seeded[0], TODAY - timedelta(days=30), TODAY
        )

        ids = [log.id for log in report.workouts]
        assert report.workout_count == 5
        assert len(set(ids)) == 5
        assert [log.date for log in report.workouts] == sorted((log.date for log in report.workouts), reverse=True)

    async def test_log_inserted_between_batches_is_not_repeated(self, models, seeded, monkeypatch):
        monkeypatch.setattr(progress_report, "REPORT_PAGE_SIZE", 2)
        for offset in (1, 2, 3, 4):
            await _insert_log(models, seeded, TODAY - timedelta(days=offset))

        repo = models.workout_logs
        fetch = repo.get_all_between_dates
        batches = []

        async def fetch_then_insert_newer_log(*args, **kwargs):
            result = await fetch(*args, **kwargs)
            batches.append(result[0])
            if len(batches) == 1:
                await _insert_log(models, seeded, TODAY)
            return result

        monkeypatch.setattr(repo, "get_all_between_dates", fetch_then_insert_newer_log)
        report = await progress_report.generate_progress_report(
            repo, seeded[0], TODAY - timedelta(days=30), TODAY
        )

        ids = [log.id for log in report.workouts]
        assert len(ids) == len(set(ids))
        assert report.workout_count == 4
        assert report.total_duration == 120
        assert len(batches) == 3
