import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Form, HTTPException
from sqlalchemy.orm import Session

from app.auth.models import User
from app.challenges.anticheat import challenge_stats, detect_suspicious_activity
from app.challenges.engine import ChallengeEngine
from app.challenges.leaderboard import build_leaderboard
from app.challenges.schemas import ActivityDetails, ActivityLog, ChallengeProgress, Difficulty
from app.core.config import CHALLENGE_RESET_SECRET, KEEP_LOGS_ON_RESET
from app.core.deps import get_challenge_engine, get_current_user
from app.core.security import secrets_match
from app.db.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/challenge", tags=["challenge"])

ACTIONS = ("start", "typing", "paste", "submit")


def _payload(progress: ChallengeProgress) -> dict:
    return {
        "progress": progress.model_dump(mode="json", by_alias=True),
        "stats": challenge_stats(progress),
    }


# ======================================================
# LOAD / START
# ======================================================
@router.get("/progress")
def get_progress(
    user: User = Depends(get_current_user),
    engine: ChallengeEngine = Depends(get_challenge_engine),
):
    """Current run, after applying today's day-boundary rules."""
    return _payload(engine.load(user.id))


@router.post("/start")
def start_challenge(
    user: User = Depends(get_current_user),
    engine: ChallengeEngine = Depends(get_challenge_engine),
):
    """Start a new run. Any previous run is discarded."""
    return _payload(engine.start(user.id))


# ======================================================
# RECORD A PASSED PROBLEM
# ======================================================
@router.post("/complete")
def complete_problem(
    problem_id: int = Form(...),
    difficulty: str = Form(...),
    score: int = Form(...),
    user: User = Depends(get_current_user),
    engine: ChallengeEngine = Depends(get_challenge_engine),
):
    diff = Difficulty.parse(difficulty)
    if diff is None:
        raise HTTPException(status_code=400, detail="difficulty must be Easy, Medium or Hard")
    if not 0 <= score <= 10:
        raise HTTPException(status_code=400, detail="score must be between 0 and 10")

    progress = engine.record_completion(user.id, problem_id, diff, score)
    return _payload(progress)


# ======================================================
# RESET (shared-secret gate)
# ======================================================
@router.post("/reset")
def reset_challenge(
    secret: str = Form(...),
    user: User = Depends(get_current_user),
    engine: ChallengeEngine = Depends(get_challenge_engine),
):
    if not secrets_match(secret, CHALLENGE_RESET_SECRET):
        logger.info("[CHALLENGE] rejected reset for user=%s", user.id)
        raise HTTPException(status_code=403, detail="Wrong reset password")
    return _payload(engine.reset(user.id, keep_logs=KEEP_LOGS_ON_RESET))


# ======================================================
# ANTI-CHEAT
# ======================================================
@router.post("/activity")
def log_activity(
    problem_id: int = Form(...),
    action: str = Form(...),
    paste_length: int | None = Form(None),
    typing_speed: float | None = Form(None),
    total_paste_events: int | None = Form(None),
    code_length: int | None = Form(None),
    time_taken: float | None = Form(None),
    user: User = Depends(get_current_user),
    engine: ChallengeEngine = Depends(get_challenge_engine),
):
    if action not in ACTIONS:
        raise HTTPException(status_code=400, detail=f"action must be one of {', '.join(ACTIONS)}")

    details = ActivityDetails(
        paste_length=paste_length,
        typing_speed=typing_speed,
        total_paste_events=total_paste_events,
        code_length=code_length,
        time_taken=time_taken,
    )
    log = ActivityLog(
        timestamp=datetime.now(timezone.utc),
        problem_id=problem_id,
        action=action,
        details=details,
    )
    progress = engine.log_activity(user.id, log)
    return {"logged": len(progress.activity_logs)}


@router.get("/suspicious/{problem_id}")
def get_suspicious_activity(
    problem_id: int,
    user: User = Depends(get_current_user),
    engine: ChallengeEngine = Depends(get_challenge_engine),
):
    progress = engine.load(user.id)
    flagged = detect_suspicious_activity(progress.activity_logs, problem_id)
    return {"suspicious": [f.model_dump(mode="json", by_alias=True) for f in flagged]}


# ======================================================
# STATS / LEADERBOARD
# ======================================================
@router.get("/stats")
def get_stats(
    user: User = Depends(get_current_user),
    engine: ChallengeEngine = Depends(get_challenge_engine),
):
    return challenge_stats(engine.load(user.id))


@router.get("/leaderboard")
def get_leaderboard(db: Session = Depends(get_db)):
    return {"entries": build_leaderboard(db)}
