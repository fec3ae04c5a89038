import os
import random
from datetime import date

# Configure the app before anything imports it.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["GRADER_API_KEY"] = ""
os.environ["CHALLENGE_RESET_SECRET"] = "reset-me"
os.environ["CATALOG_EXHAUSTION_POLICY"] = "reuse"
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest  # noqa: E402
from fastapi import Depends  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from app.ai.grader import GradeResult  # noqa: E402
from app.challenges.engine import ChallengeEngine  # noqa: E402
from app.challenges.schemas import Difficulty  # noqa: E402
from app.challenges.store import SqlChallengeProgressStore  # noqa: E402
from app.core.deps import get_challenge_engine, get_scoring_oracle  # noqa: E402
from app.db.base import Base, SessionLocal, engine  # noqa: E402
from app.db.session import get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.problems.catalog import DbProblemCatalog  # noqa: E402
from app.problems.models import Problem  # noqa: E402


class FakeClock:
    """Settable 'today' for the challenge engine."""

    def __init__(self, today: date):
        self.today = today

    def __call__(self) -> date:
        return self.today


class FakeOracle:
    """Returns a fixed score. score=None simulates an unavailable grader."""

    def __init__(self, score: int | None = 8, feedback: str = "Solid solution."):
        self.score = score
        self.feedback = feedback
        self.calls = []

    def grade(self, problem, code, **kwargs):
        self.calls.append({"problem": problem, "code": code, **kwargs})
        if self.score is None:
            return None
        return GradeResult(score=self.score, feedback=self.feedback)


@pytest.fixture
def db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock():
    return FakeClock(date(2026, 3, 2))


@pytest.fixture
def oracle():
    return FakeOracle()


@pytest.fixture
def client(db, clock, oracle):
    def _engine(session: Session = Depends(get_db)) -> ChallengeEngine:
        return ChallengeEngine(
            SqlChallengeProgressStore(session),
            DbProblemCatalog(session),
            today_provider=clock,
            rng=random.Random(7),
        )

    app.dependency_overrides[get_challenge_engine] = _engine
    app.dependency_overrides[get_scoring_oracle] = lambda: oracle
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def problems(db):
    """A catalog large enough for a full 20-day run without repeats."""
    counts = {Difficulty.EASY: 70, Difficulty.MEDIUM: 25, Difficulty.HARD: 25}
    ids = {}
    for diff, count in counts.items():
        rows = [
            Problem(title=f"{diff.label} #{i}", description="Solve it.", difficulty=diff.value)
            for i in range(count)
        ]
        db.add_all(rows)
        db.commit()
        ids[diff] = [r.id for r in rows]
    return ids


def _signup_and_login(client, username: str, name: str = "", student_id: str = "") -> dict:
    """Create a user and return auth headers for it."""
    resp = client.post(
        "/auth/signup",
        data={
            "email": f"{username}@example.com",
            "username": username,
            "password": "password123",
            "name": name,
            "student_id": student_id,
        },
    )
    assert resp.status_code == 200
    resp = client.post("/auth/login", data={"email_or_username": username, "password": "password123"})
    assert resp.status_code == 200
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


@pytest.fixture
def login(client):
    """login("ada") -> auth headers for a freshly signed-up user."""
    def _login(username: str, name: str = "", student_id: str = "") -> dict:
        return _signup_and_login(client, username, name, student_id)
    return _login
