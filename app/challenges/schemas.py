"""
Typed challenge entities.

The whole ChallengeProgress document is persisted per user. Field aliases are
camelCase so documents written by the old browser client still validate.
"""
import datetime as dt
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.core.config import DAILY_REQUIREMENTS


class Difficulty(str, Enum):
    """Problem difficulty. The value is the canonical storage key."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @property
    def required(self) -> int:
        return DAILY_REQUIREMENTS[self.value]

    @classmethod
    def parse(cls, value) -> Optional["Difficulty"]:
        """Accept 'Easy', 'easy', 'EASY' or a Difficulty. None if unrecognised."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProblemSet(_CamelModel):
    """Problem ids grouped by difficulty. Order is assignment order; no duplicates."""

    easy: list[int] = Field(default_factory=list)
    medium: list[int] = Field(default_factory=list)
    hard: list[int] = Field(default_factory=list)

    def of(self, difficulty: Difficulty) -> list[int]:
        return getattr(self, difficulty.value)

    def all_ids(self) -> set[int]:
        return set(self.easy) | set(self.medium) | set(self.hard)

    def meets_quota(self) -> bool:
        return all(len(self.of(d)) >= d.required for d in Difficulty)

    def total(self) -> int:
        return len(self.easy) + len(self.medium) + len(self.hard)


class DailyChallenge(_CamelModel):
    day: int = Field(ge=1)
    date: dt.date
    completed: bool = False
    problems: ProblemSet = Field(default_factory=ProblemSet)
    completed_problems: ProblemSet = Field(default_factory=ProblemSet)


class ActivityDetails(_CamelModel):
    paste_length: Optional[int] = None
    typing_speed: Optional[float] = None  # chars per minute
    total_paste_events: Optional[int] = None
    code_length: Optional[int] = None
    time_taken: Optional[float] = None  # seconds


class ActivityLog(_CamelModel):
    timestamp: dt.datetime
    problem_id: int
    action: Literal["start", "typing", "paste", "submit"]
    details: Optional[ActivityDetails] = None


class SuspiciousActivity(_CamelModel):
    problem_id: int
    date: dt.datetime
    reason: str
    severity: Literal["low", "medium", "high"]


class ChallengeProgress(_CamelModel):
    """One user's 20-day challenge run. The default instance is 'no run started'."""

    is_active: bool = False
    start_date: Optional[dt.date] = None
    current_day: int = Field(default=0, ge=0)
    consecutive_days: int = Field(default=0, ge=0)
    completed_days: int = Field(default=0, ge=0)
    daily_challenges: list[DailyChallenge] = Field(default_factory=list)
    activity_logs: list[ActivityLog] = Field(default_factory=list)
    last_activity_date: Optional[dt.date] = None
    failed: bool = False
    failed_reason: Optional[str] = None

    def current_challenge(self) -> Optional[DailyChallenge]:
        """Today's entry, or None when no day has been generated."""
        if self.current_day < 1 or self.current_day > len(self.daily_challenges):
            return None
        return self.daily_challenges[self.current_day - 1]

    def used_problem_ids(self) -> set[int]:
        used: set[int] = set()
        for day in self.daily_challenges:
            used |= day.problems.all_ids()
        return used
