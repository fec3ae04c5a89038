"""
Challenge leaderboard: one row per user who has a progress record.
Order: active runs first, then total score (desc), then earliest join.
"""
from sqlalchemy.orm import Session

from app.auth.models import User
from app.challenges.models import ChallengeProgressRecord, ChallengeResult


def build_leaderboard(db: Session) -> list[dict]:
    rows = (
        db.query(ChallengeProgressRecord, User)
        .join(User, User.id == ChallengeProgressRecord.user_id)
        .all()
    )

    # Aggregate results by user
    results: dict[int, dict] = {}
    for user_id, score, day_number in db.query(
        ChallengeResult.user_id, ChallengeResult.score, ChallengeResult.day_number
    ).all():
        agg = results.setdefault(user_id, {"scores": [], "max_day": 0})
        agg["scores"].append(score)
        agg["max_day"] = max(agg["max_day"], day_number)

    entries = []
    for record, user in rows:
        agg = results.get(user.id, {"scores": [], "max_day": 0})
        total = sum(agg["scores"])
        count = len(agg["scores"])
        entries.append({
            "user_id": user.id,
            "name": user.name or user.username,
            "student_id": user.student_id or "",
            "total_score": total,
            "problems_completed": count,
            "avg_score": round(total / count) if count else 0,
            "current_day": record.current_day or agg["max_day"],
            "is_active": bool(record.is_active),
            "joined_at": record.created_at,
        })

    entries.sort(key=lambda e: (
        not e["is_active"],
        -e["total_score"],
        e["joined_at"].timestamp() if e["joined_at"] else 0,
    ))
    return entries
