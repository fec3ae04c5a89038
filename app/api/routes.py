"""
API routes for user profile and progress.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.auth.achievements import get_user_achievements
from app.auth.models import User
from app.auth.ranks import RANKS
from app.challenges.anticheat import challenge_stats
from app.challenges.engine import ChallengeEngine
from app.core.deps import get_challenge_engine, get_current_user
from app.db.session import get_db

router = APIRouter(prefix="/api", tags=["api"])


def _next_rank(xp: int) -> dict | None:
    for name, min_xp in RANKS:
        if xp < min_xp:
            return {"name": name, "xp_needed": min_xp - xp}
    return None


@router.get("/me/progress")
def get_me_progress(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    engine: ChallengeEngine = Depends(get_challenge_engine),
):
    """
    Return user profile, XP/rank, badges and a summary of the 20-day challenge.
    """
    progress = engine.load(user.id)
    return {
        "username": user.username,
        "name": user.name or user.username,
        "xp": user.xp,
        "level": user.level,
        "rank": user.rank,
        "next_rank": _next_rank(user.xp or 0),
        "achievements": get_user_achievements(db, user.id),
        "challenge": {
            "is_active": progress.is_active,
            "failed": progress.failed,
            "failed_reason": progress.failed_reason,
            "current_day": progress.current_day,
            "consecutive_days": progress.consecutive_days,
            **challenge_stats(progress),
        },
    }
