from sqlalchemy import (
    Column, Integer, String, Text, Date, Boolean, DateTime, ForeignKey, JSON, false,
)
from sqlalchemy.sql import func

from app.db.base import Base


class ChallengeProgressRecord(Base):
    """
    Persisted 20-day challenge run, one row per user.

    Scalar fields are real columns (the leaderboard queries them); the
    day list and the activity log are stored as JSON documents.
    """
    __tablename__ = "challenge_progress"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, unique=True, index=True)

    # 1 = legacy rows written before failure tracking, 2 = current
    schema_version = Column(Integer, nullable=False, default=2)

    is_active = Column(Boolean, nullable=False, default=False)
    start_date = Column(Date, nullable=True)
    current_day = Column(Integer, nullable=False, default=0)
    consecutive_days = Column(Integer, nullable=False, default=0)
    completed_days = Column(Integer, nullable=False, default=0)

    daily_challenges = Column(JSON, nullable=False, default=list)
    activity_logs = Column(JSON, nullable=False, default=list)

    last_activity_date = Column(Date, nullable=True)
    failed = Column(Boolean, nullable=False, default=False, server_default=false())
    failed_reason = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class ChallengeResult(Base):
    """One graded submission made inside a challenge run (feeds the leaderboard)."""
    __tablename__ = "challenge_results"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    problem_id = Column(Integer, nullable=False)
    problem_title = Column(String(255), nullable=False, default="")
    difficulty = Column(String(16), nullable=False)
    score = Column(Integer, nullable=False)
    day_number = Column(Integer, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
