from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func

from app.db.base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)

    email = Column(String, unique=True, index=True, nullable=False)
    username = Column(String, unique=True, index=True, nullable=False)

    # Shown on the leaderboard
    name = Column(String, nullable=True, default="")
    student_id = Column(String, nullable=True, default="")

    password_hash = Column(String, nullable=False)

    # Gamification: level and rank are derived from xp, stored for display
    xp = Column(Integer, nullable=False, default=0)
    level = Column(Integer, nullable=False, default=1)
    rank = Column(String, nullable=False, default="Intern")

    # User role: "user" (default), "coadmin"
    role = Column(String, default="user", nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Track when user was last active (updated on every authenticated request)
    last_active = Column(DateTime(timezone=True), nullable=True)
