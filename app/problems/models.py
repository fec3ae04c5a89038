from sqlalchemy import Column, Integer, String, Text, Boolean, true
from app.db.base import Base


class Problem(Base):
    __tablename__ = "problems"

    id = Column(Integer, primary_key=True, index=True)

    # Only active problems are handed out. Never disable one because a user solved it.
    is_active = Column(Boolean, nullable=False, default=True, server_default=true())

    # Canonical lowercase key: "easy" | "medium" | "hard"
    difficulty = Column(String(16), nullable=False, index=True)
    level = Column(Integer, nullable=False, default=1)

    title = Column(String(255), nullable=False)
    story = Column(Text, nullable=False, default="")
    description = Column(Text, nullable=False)
    skill = Column(String(255), nullable=True, default="")

    # JSON-encoded lists, shown to the grader and the solver
    examples = Column(Text, nullable=False, default="[]")
    hints = Column(Text, nullable=False, default="[]")
    interview_questions = Column(Text, nullable=False, default="[]")
