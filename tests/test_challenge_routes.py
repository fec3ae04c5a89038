import random
from datetime import timedelta

from fastapi import Depends

from app.challenges.engine import ChallengeEngine
from app.challenges.store import SqlChallengeProgressStore
from app.core.deps import get_challenge_engine
from app.db.session import get_db
from app.main import app
from app.problems.catalog import DbProblemCatalog
from app.problems.models import Problem



def _complete_day(client, headers, day):
    body = None
    for label in ("easy", "medium", "hard"):
        for pid in day["problems"][label]:
            resp = client.post(
                "/challenge/complete",
                data={"problem_id": pid, "difficulty": label.capitalize(), "score": 8},
                headers=headers,
            )
            assert resp.status_code == 200
            body = resp.json()
    return body


def test_challenge_requires_login(client):
    assert client.get("/challenge/progress").status_code == 401
    assert client.post("/challenge/start").status_code == 401


def test_progress_before_start_is_default(client, login, problems):
    headers = login("ada")
    body = client.get("/challenge/progress", headers=headers).json()

    assert body["progress"]["isActive"] is False
    assert body["progress"]["currentDay"] == 0
    assert body["progress"]["dailyChallenges"] == []
    assert body["stats"]["days_remaining"] == 20
    assert body["stats"]["total_problems_required"] == 100


def test_start_complete_and_advance(client, login, problems, clock):
    headers = login("ada")

    started = client.post("/challenge/start", headers=headers).json()["progress"]
    assert started["isActive"] is True
    assert started["currentDay"] == 1
    day = started["dailyChallenges"][0]
    assert len(day["problems"]["easy"]) == 3

    body = _complete_day(client, headers, day)
    assert body["progress"]["completedDays"] == 1
    assert body["progress"]["dailyChallenges"][0]["completed"] is True
    assert body["stats"]["progress_percentage"] == 5.0

    clock.today = clock.today + timedelta(days=1)
    progress = client.get("/challenge/progress", headers=headers).json()["progress"]
    assert progress["currentDay"] == 2
    assert len(progress["dailyChallenges"]) == 2

    day_one_ids = set(sum(day["problems"].values(), []))
    day_two_ids = set(sum(progress["dailyChallenges"][1]["problems"].values(), []))
    assert not day_one_ids & day_two_ids


def test_missing_a_day_fails_the_run(client, login, problems, clock):
    headers = login("ada")
    client.post("/challenge/start", headers=headers)

    clock.today = clock.today + timedelta(days=2)
    progress = client.get("/challenge/progress", headers=headers).json()["progress"]

    assert progress["failed"] is True
    assert progress["isActive"] is False
    assert "missed 1 day" in progress["failedReason"]


def test_complete_validates_input(client, login, problems):
    headers = login("ada")
    client.post("/challenge/start", headers=headers)

    bad_diff = client.post(
        "/challenge/complete",
        data={"problem_id": 1, "difficulty": "Extreme", "score": 8},
        headers=headers,
    )
    assert bad_diff.status_code == 400

    bad_score = client.post(
        "/challenge/complete",
        data={"problem_id": 1, "difficulty": "Easy", "score": 11},
        headers=headers,
    )
    assert bad_score.status_code == 400


def test_low_score_is_not_recorded(client, login, problems):
    headers = login("ada")
    day = client.post("/challenge/start", headers=headers).json()["progress"]["dailyChallenges"][0]

    resp = client.post(
        "/challenge/complete",
        data={"problem_id": day["problems"]["easy"][0], "difficulty": "Easy", "score": 5},
        headers=headers,
    )
    assert resp.json()["progress"]["dailyChallenges"][0]["completedProblems"]["easy"] == []


def test_reset_requires_the_secret(client, login, problems):
    headers = login("ada")
    client.post("/challenge/start", headers=headers)

    wrong = client.post("/challenge/reset", data={"secret": "guess"}, headers=headers)
    assert wrong.status_code == 403

    ok = client.post("/challenge/reset", data={"secret": "reset-me"}, headers=headers)
    assert ok.status_code == 200
    assert ok.json()["progress"]["isActive"] is False
    assert ok.json()["progress"]["currentDay"] == 0


def test_activity_log_and_suspicious_flags(client, login, problems):
    headers = login("ada")
    client.post("/challenge/start", headers=headers)

    for data in (
        {"problem_id": 3, "action": "start"},
        {"problem_id": 3, "action": "paste", "paste_length": 400},
        {"problem_id": 3, "action": "typing", "typing_speed": 900},
        {"problem_id": 3, "action": "submit", "code_length": 500},
    ):
        resp = client.post("/challenge/activity", data=data, headers=headers)
        assert resp.status_code == 200
    assert resp.json()["logged"] == 4

    flags = client.get("/challenge/suspicious/3", headers=headers).json()["suspicious"]
    severities = sorted(f["severity"] for f in flags)
    assert severities == ["high", "medium"]
    assert all(f["problemId"] == 3 for f in flags)

    clean = client.get("/challenge/suspicious/4", headers=headers).json()["suspicious"]
    assert clean == []


def test_activity_rejects_unknown_action(client, login, problems):
    headers = login("ada")
    client.post("/challenge/start", headers=headers)
    resp = client.post("/challenge/activity", data={"problem_id": 1, "action": "hack"}, headers=headers)
    assert resp.status_code == 400


def test_stats_endpoint(client, login, problems):
    headers = login("ada")
    stats = client.get("/challenge/stats", headers=headers).json()
    assert stats["is_complete"] is False
    assert stats["reward"] == 500_000


def test_leaderboard_orders_active_runs_by_score(client, login, problems):
    alice = login("alice", name="Alice", student_id="S-1")
    bob = login("bob", name="Bob", student_id="S-2")
    carol = login("carol")

    client.post("/challenge/start", headers=bob)
    day = client.post("/challenge/start", headers=alice).json()["progress"]["dailyChallenges"][0]
    client.post("/challenge/start", headers=carol)
    client.post("/challenge/reset", data={"secret": "reset-me"}, headers=carol)

    resp = client.post(
        "/submission",
        data={"problem_id": day["problems"]["easy"][0], "code": "print(1)", "challenge": "true"},
        headers=alice,
    )
    assert resp.status_code == 200

    entries = client.get("/challenge/leaderboard").json()["entries"]
    assert [e["name"] for e in entries] == ["Alice", "Bob", "carol"]
    assert entries[0]["total_score"] == 8
    assert entries[0]["problems_completed"] == 1
    assert entries[0]["student_id"] == "S-1"
    assert entries[2]["is_active"] is False


def test_catalog_exhaustion_under_error_policy_returns_503(client, login, db, clock):
    for title, diff in (("e1", "easy"), ("e2", "easy"), ("e3", "easy"), ("m1", "medium"), ("h1", "hard")):
        db.add(Problem(title=title, description="x", difficulty=diff))
    db.commit()

    def _strict_engine(session=Depends(get_db)):
        return ChallengeEngine(
            SqlChallengeProgressStore(session),
            DbProblemCatalog(session),
            today_provider=clock,
            policy="error",
            rng=random.Random(1),
        )

    app.dependency_overrides[get_challenge_engine] = _strict_engine

    headers = login("ada")
    day = client.post("/challenge/start", headers=headers).json()["progress"]["dailyChallenges"][0]
    _complete_day(client, headers, day)

    clock.today = clock.today + timedelta(days=1)
    resp = client.get("/challenge/progress", headers=headers)
    assert resp.status_code == 503
