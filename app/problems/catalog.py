"""
Problem catalog: the set of problem ids available per difficulty.
"""
import json
from typing import Iterable, Mapping, Protocol

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.challenges.schemas import Difficulty
from app.problems.models import Problem


class ProblemCatalog(Protocol):
    def list_by_difficulty(self, difficulty: Difficulty) -> set[int]:
        ...


class DbProblemCatalog:
    """Catalog backed by the problems table."""

    def __init__(self, db: Session):
        self.db = db

    def list_by_difficulty(self, difficulty: Difficulty) -> set[int]:
        act = or_(Problem.is_active.is_(True), Problem.is_active.is_(None))
        rows = (
            self.db.query(Problem.id)
            .filter(Problem.difficulty == difficulty.value, act)
            .all()
        )
        return {r[0] for r in rows}


class StaticProblemCatalog:
    """Catalog over a fixed mapping, e.g. {Difficulty.EASY: [1, 2, 3]}."""

    def __init__(self, problems: Mapping[Difficulty, Iterable[int]]):
        self._problems = {d: set(problems.get(d, ())) for d in Difficulty}

    def list_by_difficulty(self, difficulty: Difficulty) -> set[int]:
        return set(self._problems[difficulty])


def problem_to_dict(problem: Problem) -> dict:
    return {
        "id": problem.id,
        "title": problem.title,
        "story": problem.story or "",
        "description": problem.description,
        "skill": problem.skill or "",
        "difficulty": Difficulty(problem.difficulty).label,
        "level": problem.level,
        "examples": _load_list(problem.examples),
        "hints": _load_list(problem.hints),
        "interview_questions": _load_list(problem.interview_questions),
    }


def _load_list(raw: str | None) -> list:
    if not raw:
        return []
    try:
        value = json.loads(raw)
    except ValueError:
        return []
    return value if isinstance(value, list) else []
