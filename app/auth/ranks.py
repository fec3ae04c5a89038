"""
XP, level and rank rules.
"""
import logging

from sqlalchemy.orm import Session

from app.auth.models import User

logger = logging.getLogger(__name__)

XP_PER_LEVEL = 50
INTERVIEW_MULTIPLIER = 1.5

RANKS = [
    ("Intern", 0),
    ("Junior", 100),
    ("Fresher", 300),
    ("Mid-Level", 600),
    ("Senior", 1000),
    ("Interview Ready", 1500),
    ("Tech Lead", 2500),
]


def xp_for_score(score: int, mode: str) -> int:
    multiplier = INTERVIEW_MULTIPLIER if mode == "interview" else 1
    if score >= 9:
        return round(80 * multiplier)
    if score >= 7:
        return round(50 * multiplier)
    if score >= 5:
        return round(30 * multiplier)
    return round(score * 5 * multiplier)


def level_for_xp(xp: int) -> int:
    return xp // XP_PER_LEVEL + 1


def rank_for_xp(xp: int) -> str:
    current = RANKS[0][0]
    for name, min_xp in RANKS:
        if xp >= min_xp:
            current = name
    return current


def award_xp(db: Session, user: User, score: int, mode: str) -> int:
    """Add XP for a graded submission and refresh level/rank. Returns XP gained."""
    gained = xp_for_score(score, mode)
    old_rank = user.rank
    user.xp = (user.xp or 0) + gained
    user.level = level_for_xp(user.xp)
    user.rank = rank_for_xp(user.xp)
    db.commit()
    if user.rank != old_rank:
        logger.info("[XP] user=%s rank %s -> %s", user.id, old_rank, user.rank)
    return gained
