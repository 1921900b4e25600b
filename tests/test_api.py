"""Tests for the scoring HTTP API."""

from datetime import UTC, date, datetime, timedelta
from uuid import uuid4

from fastapi.testclient import TestClient

from nutrisync.api.app import create_app
from nutrisync.domain.records import FoodLogRow, MealPlanRow
from tests.conftest import InMemoryScoreRepository, make_score_record

REST_DAY = {
    "load": "rest",
    "nutrition": {
        "target": {"calories": 2000, "protein": 120, "carbs": 250, "fat": 60},
        "actual": {"calories": 2000, "protein": 120, "carbs": 250, "fat": 60},
        "meals_present": ["breakfast", "lunch", "dinner"],
    },
}


def test_health(container) -> None:
    client = TestClient(create_app(container))

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_calculate_score_returns_breakdown(container) -> None:
    client = TestClient(create_app(container))

    response = client.post("/scores/calculate", json=REST_DAY)

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 96
    assert data["weights"] == {"nutrition": 1.0, "training": 0.0}
    assert data["nutrition"]["structure"] == 75
    assert data["data_completeness"]["reliable"] is True


def test_calculate_score_applies_capped_bonus(container) -> None:
    client = TestClient(create_app(container))
    payload = {
        **REST_DAY,
        "flags": {"window_sync_all": True, "streak_days": 12, "hydration_ok": True},
    }

    response = client.post("/scores/calculate", json=payload)

    assert response.json()["bonuses"] == 10
    assert response.json()["total"] == 100


def test_calculate_score_rejects_unknown_load(container) -> None:
    client = TestClient(create_app(container))

    response = client.post("/scores/calculate", json={**REST_DAY, "load": "tempo"})

    assert response.status_code == 422


def test_daily_score_endpoint_persists(
    container, score_repository: InMemoryScoreRepository
) -> None:
    client = TestClient(create_app(container))
    repo = score_repository
    user_id = uuid4()
    day = date(2026, 10, 14)
    repo.plans[(user_id, day)] = [
        MealPlanRow("breakfast", calories=700, protein_g=40, carbs_g=90, fat_g=20),
    ]
    repo.logs[user_id] = [
        FoodLogRow(
            "breakfast",
            datetime(2026, 10, 14, 8, tzinfo=UTC),
            calories=700,
            protein_g=40,
            carbs_g=90,
            fat_g=20,
        )
    ]

    response = client.get(f"/users/{user_id}/scores/2026-10-14")

    assert response.status_code == 200
    data = response.json()
    assert data["date"] == "2026-10-14"
    assert data["load"] == "rest"
    assert data["score"] == repo.scores[(user_id, day)].daily_score


def test_daily_score_rejects_unknown_timezone(container) -> None:
    client = TestClient(create_app(container))

    response = client.get(f"/users/{uuid4()}/scores/2026-10-14?timezone=Mars/Base")

    assert response.status_code == 422


def test_meal_scores_endpoint(
    container, score_repository: InMemoryScoreRepository
) -> None:
    client = TestClient(create_app(container))
    repo = score_repository
    user_id = uuid4()
    repo.plans[(user_id, date(2026, 10, 14))] = [
        MealPlanRow("dinner", calories=800, protein_g=45, carbs_g=90, fat_g=25),
    ]

    response = client.get(f"/users/{user_id}/meal-scores/2026-10-14")

    assert response.status_code == 200
    data = response.json()
    assert data["average"] == 0
    assert data["scores"][0]["meal_type"] == "dinner"


def test_weekly_score_endpoint(
    container, score_repository: InMemoryScoreRepository
) -> None:
    client = TestClient(create_app(container))
    repo = score_repository
    user_id = uuid4()
    monday = date(2026, 10, 12)
    for offset, score in enumerate([70, 90]):
        day = monday + timedelta(days=offset)
        repo.scores[(user_id, day)] = make_score_record(user_id, day, score)

    response = client.get(f"/users/{user_id}/weekly-score?week_start=2026-10-14")

    assert response.status_code == 200
    data = response.json()
    assert data["week_start"] == "2026-10-12"
    assert data["average"] == 80
    assert data["total"] == 160
    assert len(data["daily_scores"]) == 2


def test_leaderboard_endpoint(
    container, score_repository: InMemoryScoreRepository
) -> None:
    client = TestClient(create_app(container))
    repo = score_repository
    user_id = uuid4()
    monday = date(2026, 10, 12)
    repo.scores[(user_id, monday)] = make_score_record(user_id, monday, 77)

    response = client.get("/leaderboard/weekly?week_start=2026-10-12")

    assert response.status_code == 200
    scores = response.json()["scores"]
    assert scores[0]["user_id"] == str(user_id)
    assert scores[0]["weekly_score"] == 77


def test_daily_score_accepts_named_timezone_and_rejects_paths(
    container, score_repository: InMemoryScoreRepository
) -> None:
    client = TestClient(create_app(container))
    user_id = uuid4()

    accepted = client.get(
        f"/users/{user_id}/scores/2026-10-14?timezone=America/New_York"
    )
    rejected = client.get(f"/users/{user_id}/scores/2026-10-14?timezone=../UTC")

    assert accepted.status_code == 200
    assert accepted.json()["score"] == 0
    assert score_repository.log_queries[0][0].hour == 4
    assert rejected.status_code == 422
