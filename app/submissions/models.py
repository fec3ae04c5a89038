from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func

from app.db.base import Base


class Submission(Base):
    """One graded attempt. Doubles as the user's practice history."""
    __tablename__ = "submissions"

    id = Column(Integer, primary_key=True, index=True)

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    problem_id = Column(Integer, ForeignKey("problems.id"), nullable=False)

    # "practice" | "interview"
    mode = Column(String(16), nullable=False, default="practice")
    language = Column(String(32), nullable=False, default="python")

    thinking = Column(Text, nullable=False, default="")
    code = Column(Text, nullable=False)

    # Oracle output: 0..10 plus free-form feedback
    score = Column(Integer, nullable=False, default=0)
    feedback = Column(Text, nullable=False, default="")

    xp_gained = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now())


class UserAchievement(Base):
    __tablename__ = "user_achievements"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    key = Column(String(64), nullable=False)  # e.g. "first_blood", "streak_master"
    earned_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint("user_id", "key", name="uq_user_achievement"),
    )
