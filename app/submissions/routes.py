import json
import logging

from fastapi import APIRouter, Depends, Form, HTTPException
from sqlalchemy.orm import Session

from app.ai.grader import ScoringOracle
from app.auth.achievements import ACHIEVEMENTS, check_new_badges
from app.auth.models import User
from app.auth.ranks import award_xp
from app.challenges.engine import CatalogExhaustedError, ChallengeEngine
from app.challenges.models import ChallengeResult
from app.challenges.schemas import Difficulty
from app.core.config import MIN_SCORE_TO_PASS
from app.core.deps import get_challenge_engine, get_current_user, get_scoring_oracle
from app.db.session import get_db
from app.problems.catalog import problem_to_dict
from app.problems.models import Problem
from app.submissions.models import Submission

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/submission", tags=["submission"])

MODES = ("practice", "interview")


# ======================================================
# SUBMIT A SOLUTION (grade -> XP -> badges -> challenge)
# ======================================================
@router.post("")
def submit_solution(
    problem_id: int = Form(...),
    code: str = Form(...),
    thinking: str = Form(""),
    language: str = Form("python"),
    mode: str = Form("practice"),
    interview_answers: str = Form("[]"),  # JSON list of strings
    challenge: bool = Form(False),        # submitted from the 20-day challenge
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    engine: ChallengeEngine = Depends(get_challenge_engine),
    oracle: ScoringOracle = Depends(get_scoring_oracle),
):
    if mode not in MODES:
        raise HTTPException(status_code=400, detail="mode must be practice or interview")
    if not code.strip():
        raise HTTPException(status_code=400, detail="Code is empty")

    try:
        answers = json.loads(interview_answers)
    except ValueError:
        answers = None
    if not isinstance(answers, list):
        raise HTTPException(status_code=400, detail="interview_answers must be a JSON list")

    problem = db.query(Problem).filter(Problem.id == problem_id).first()
    if not problem:
        raise HTTPException(status_code=404, detail="Problem not found")

    grade = oracle.grade(
        problem_to_dict(problem),
        code,
        thinking=thinking,
        language=language,
        mode=mode,
        interview_answers=[str(a) for a in answers],
    )
    if grade is None:
        raise HTTPException(status_code=502, detail="Grading is unavailable, check the grader API key and try again")

    # Earlier scores decide badges, so read them before inserting this one
    prior_scores = [
        row[0] for row in
        db.query(Submission.score).filter(Submission.user_id == user.id).all()
    ]

    xp_gained = award_xp(db, user, grade.score, mode)
    new_badges = check_new_badges(db, user.id, grade.score, mode, prior_scores)

    submission = Submission(
        user_id=user.id,
        problem_id=problem.id,
        mode=mode,
        language=language,
        thinking=thinking,
        code=code,
        score=grade.score,
        feedback=grade.feedback,
        xp_gained=xp_gained,
    )
    db.add(submission)
    db.commit()
    db.refresh(submission)

    challenge_info = None
    if challenge:
        challenge_info = _record_challenge_submission(db, engine, user, problem, grade.score)

    return {
        "submission_id": submission.id,
        "score": grade.score,
        "feedback": grade.feedback,
        "passed": grade.score >= MIN_SCORE_TO_PASS,
        "xp_gained": xp_gained,
        "xp": user.xp,
        "level": user.level,
        "rank": user.rank,
        "new_badges": [ACHIEVEMENTS[key]["label"] for key in new_badges],
        "challenge": challenge_info,
    }


def _record_challenge_submission(
    db: Session,
    engine: ChallengeEngine,
    user: User,
    problem: Problem,
    score: int,
) -> dict | None:
    """Feed a graded submission into the user's run and the leaderboard."""
    diff = Difficulty(problem.difficulty)
    try:
        progress = engine.load(user.id)
        if not progress.is_active or progress.failed:
            return None
        current = progress.current_challenge()
        if current is None or problem.id not in current.problems.of(diff):
            return {"day": progress.current_day, "assigned": False}
        progress = engine.record_completion(user.id, problem.id, diff, score)
    except CatalogExhaustedError as exc:
        logger.error("[CHALLENGE] %s", exc)
        return {"error": "Not enough problems in the catalog for a new day"}

    db.add(ChallengeResult(
        user_id=user.id,
        problem_id=problem.id,
        problem_title=problem.title,
        difficulty=diff.value,
        score=score,
        day_number=progress.current_day,
    ))
    db.commit()

    current = progress.current_challenge()
    return {
        "day": progress.current_day,
        "assigned": True,
        "difficulty": diff.label,
        "completed": len(current.completed_problems.of(diff)) if current else 0,
        "required": diff.required,
        "day_completed": bool(current and current.completed),
        "completed_days": progress.completed_days,
    }


# ======================================================
# HISTORY
# ======================================================
@router.get("/history")
def get_history(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    rows = (
        db.query(Submission, Problem)
        .join(Problem, Problem.id == Submission.problem_id)
        .filter(Submission.user_id == user.id)
        .order_by(Submission.created_at.desc(), Submission.id.desc())
        .all()
    )
    scores = [sub.score for sub, _ in rows]
    return {
        "average_score": round(sum(scores) / len(scores), 1) if scores else 0,
        "history": [
            {
                "id": sub.id,
                "problem_id": problem.id,
                "problem_title": problem.title,
                "difficulty": Difficulty(problem.difficulty).label,
                "mode": sub.mode,
                "score": sub.score,
                "feedback": sub.feedback,
                "xp_gained": sub.xp_gained,
                "created_at": sub.created_at,
            }
            for sub, problem in rows
        ],
    }
