"""
Badge system.
Awards: first_blood, interview_ready, logic_thinker, quick_thinker, streak_master
Each awarded at most once (UNIQUE user_id+key).
"""
import logging

from sqlalchemy.orm import Session

from app.submissions.models import UserAchievement

logger = logging.getLogger(__name__)

# Badge definitions for display
ACHIEVEMENTS = {
    "first_blood":     {"icon": "🩸", "label": "First Blood",     "desc": "Completed your first problem"},
    "interview_ready": {"icon": "🎤", "label": "Interview Ready", "desc": "Scored 9+ in Interview Mode"},
    "logic_thinker":   {"icon": "🧠", "label": "Logic Thinker",   "desc": "Scored 8+ three times"},
    "quick_thinker":   {"icon": "⏱️", "label": "Quick Thinker",   "desc": "Scored 7+ in Interview Mode"},
    "streak_master":   {"icon": "🔥", "label": "Streak Master",   "desc": "5 problems in a row"},
}


def _award(db: Session, user_id: int, key: str) -> bool:
    """Try to award a badge. Returns True if newly awarded, False if already had."""
    existing = db.query(UserAchievement).filter_by(user_id=user_id, key=key).first()
    if existing:
        return False
    db.add(UserAchievement(user_id=user_id, key=key))
    db.commit()
    logger.info("[ACHIEVEMENT] user=%s earned '%s'", user_id, key)
    return True


def check_new_badges(
    db: Session,
    user_id: int,
    score: int,
    mode: str,
    prior_scores: list[int],
) -> list[str]:
    """
    Evaluate badges for a graded submission.

    *prior_scores* are the user's earlier submission scores, not including
    this one. Returns the keys awarded by this call.
    """
    candidates = []
    if not prior_scores:
        candidates.append("first_blood")
    if mode == "interview" and score >= 9:
        candidates.append("interview_ready")
    if score >= 8 and sum(1 for s in prior_scores if s >= 8) >= 2:
        candidates.append("logic_thinker")
    if mode == "interview" and score >= 7:
        candidates.append("quick_thinker")
    if len(prior_scores) >= 4:
        candidates.append("streak_master")

    return [key for key in candidates if _award(db, user_id, key)]


def get_user_achievements(db: Session, user_id: int) -> list[dict]:
    """Return list of all badges with earned flag and metadata."""
    rows = db.query(UserAchievement).filter_by(user_id=user_id).all()
    earned_keys = {r.key: r.earned_at for r in rows}
    result = []
    for key, meta in ACHIEVEMENTS.items():
        entry = {
            "key": key,
            "icon": meta["icon"],
            "label": meta["label"],
            "desc": meta["desc"],
            "earned": key in earned_keys,
        }
        if key in earned_keys:
            entry["earned_at"] = str(earned_keys[key]) if earned_keys[key] else None
        result.append(entry)
    return result
