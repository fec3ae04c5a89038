"""
20-day challenge state machine.

Core rules:
  - A run lasts TOTAL_DAYS days. Each day needs 3 easy, 1 medium and 1 hard
    problem passed with a score >= MIN_SCORE_TO_PASS.
  - Crossing into a new calendar day advances the run only if the previous
    day's quota was met. Otherwise the run fails.
  - Missing a whole calendar day fails the run.
  - A failed run is frozen until reset.

The module-level functions are pure: they never mutate their input and
return either the same object (no change) or a new ChallengeProgress.
ChallengeEngine wires them to a progress store and a problem catalog.
"""
import logging
import random
from datetime import date, datetime
from typing import Callable, Iterable, Optional
from zoneinfo import ZoneInfo

from app.challenges.schemas import (
    ActivityLog,
    ChallengeProgress,
    DailyChallenge,
    Difficulty,
    ProblemSet,
)
from app.challenges.store import ChallengeProgressStore, ProgressStoreError
from app.core.config import (
    CATALOG_EXHAUSTION_POLICY,
    CHALLENGE_DAY_TIMEZONE,
    EXHAUSTION_POLICIES,
    MIN_SCORE_TO_PASS,
    TOTAL_DAYS,
)
from app.problems.catalog import ProblemCatalog

logger = logging.getLogger(__name__)


class CatalogExhaustedError(ValueError):
    """The catalog cannot fill a day's quota and the policy forbids a short day."""


def today_in_zone(tz_name: str = CHALLENGE_DAY_TIMEZONE) -> date:
    """Current calendar date in the configured anchor zone."""
    return datetime.now(ZoneInfo(tz_name)).date()


# ---------------------------------------------------------------------------
# DAY GENERATION
# ---------------------------------------------------------------------------

def generate_day(
    catalog: ProblemCatalog,
    day_number: int,
    day_date: date,
    exclude_ids: Iterable[int] = (),
    policy: str = CATALOG_EXHAUSTION_POLICY,
    rng: Optional[random.Random] = None,
) -> DailyChallenge:
    """Pick the day's problems at random, avoiding *exclude_ids*."""
    if policy not in EXHAUSTION_POLICIES:
        raise ValueError(f"Unknown catalog exhaustion policy: {policy!r}")

    rng = rng or random.Random()
    exclude = set(exclude_ids)
    taken: set[int] = set()
    picked: dict[str, list[int]] = {}

    for difficulty in Difficulty:
        required = difficulty.required
        # Sorted so a seeded rng gives a reproducible day
        pool = sorted(catalog.list_by_difficulty(difficulty) - taken)
        fresh = [pid for pid in pool if pid not in exclude]
        rng.shuffle(fresh)
        chosen = fresh[:required]

        short = required - len(chosen)
        if short > 0:
            if policy == "error":
                raise CatalogExhaustedError(
                    f"day {day_number}: only {len(chosen)} unused {difficulty.value} "
                    f"problems, {required} required"
                )
            if policy == "reuse":
                reused = [pid for pid in pool if pid in exclude]
                rng.shuffle(reused)
                chosen += reused[:short]
            logger.warning(
                "[CHALLENGE] catalog short on %s for day %d: assigned=%d required=%d policy=%s",
                difficulty.value, day_number, len(chosen), required, policy,
            )

        taken.update(chosen)
        picked[difficulty.value] = chosen

    return DailyChallenge(day=day_number, date=day_date, problems=ProblemSet(**picked))


# ---------------------------------------------------------------------------
# TRANSITIONS
# ---------------------------------------------------------------------------

def start_progress(
    catalog: ProblemCatalog,
    today: date,
    policy: str = CATALOG_EXHAUSTION_POLICY,
    rng: Optional[random.Random] = None,
) -> ChallengeProgress:
    """A brand-new run on day 1. Discards whatever came before."""
    return ChallengeProgress(
        is_active=True,
        start_date=today,
        current_day=1,
        consecutive_days=0,
        completed_days=0,
        daily_challenges=[generate_day(catalog, 1, today, (), policy, rng)],
        activity_logs=[],
        last_activity_date=today,
        failed=False,
        failed_reason=None,
    )


def reset_progress(progress: Optional[ChallengeProgress] = None, keep_logs: bool = False) -> ChallengeProgress:
    """Fresh inactive entity, optionally carrying the old activity logs for review."""
    fresh = ChallengeProgress()
    if keep_logs and progress is not None:
        fresh.activity_logs = [log.model_copy(deep=True) for log in progress.activity_logs]
    return fresh


def _fail(progress: ChallengeProgress, reason: str) -> ChallengeProgress:
    failed = progress.model_copy(deep=True)
    failed.is_active = False
    failed.failed = True
    failed.failed_reason = reason
    logger.info("[CHALLENGE] run failed on day %d: %s", progress.current_day, reason)
    return failed


def validate_and_advance(
    progress: ChallengeProgress,
    today: date,
    catalog: ProblemCatalog,
    policy: str = CATALOG_EXHAUSTION_POLICY,
    rng: Optional[random.Random] = None,
) -> ChallengeProgress:
    """
    Apply the day-boundary rules for *today*.

    Returns *progress* itself when nothing changes, so callers can persist
    only when the result is a different object.
    """
    if not progress.is_active or progress.failed:
        return progress
    if progress.last_activity_date is None:
        return progress
    days_diff = (today - progress.last_activity_date).days
    if days_diff <= 0:
        # Same day, or a clock that went backwards
        return progress

    if days_diff > 1:
        return _fail(progress, f"missed {days_diff - 1} day(s); challenge ended")

    current = progress.current_challenge()
    if current is None:
        return progress

    if not current.completed:
        return _fail(
            progress,
            f"did not complete required problems on day {progress.current_day}; challenge ended",
        )

    # Day 20 done and no gap: the run is finished, nothing to generate
    if progress.current_day >= TOTAL_DAYS:
        return progress

    next_day = generate_day(
        catalog,
        progress.current_day + 1,
        today,
        progress.used_problem_ids(),
        policy,
        rng,
    )
    advanced = progress.model_copy(deep=True)
    advanced.daily_challenges.append(next_day)
    advanced.current_day += 1
    advanced.last_activity_date = today
    logger.info("[CHALLENGE] advanced to day %d", advanced.current_day)
    return advanced


def record_completion(
    progress: ChallengeProgress,
    problem_id: int,
    difficulty,
    score: float,
    today: date,
) -> ChallengeProgress:
    """Record a passed problem on the current day. Every rejection is a silent no-op."""
    diff = Difficulty.parse(difficulty)
    if diff is None:
        return progress
    if score < MIN_SCORE_TO_PASS:
        return progress
    if progress.failed:
        return progress

    current = progress.current_challenge()
    if current is None:
        return progress
    if problem_id not in current.problems.of(diff):
        # Only the day's assigned problems count toward its quota
        return progress
    if problem_id in current.completed_problems.of(diff):
        return progress

    updated = progress.model_copy(deep=True)
    day = updated.daily_challenges[updated.current_day - 1]

    was_complete = day.completed_problems.meets_quota()
    day.completed_problems.of(diff).append(problem_id)
    is_complete = day.completed_problems.meets_quota()

    if is_complete:
        day.completed = True
    if is_complete and not was_complete:
        updated.completed_days += 1
        updated.consecutive_days += 1
        logger.info("[CHALLENGE] day %d complete (%d/%d)", day.day, updated.completed_days, TOTAL_DAYS)

    updated.last_activity_date = today
    return updated


def log_activity(progress: ChallengeProgress, log: ActivityLog) -> ChallengeProgress:
    """Append an anti-cheat signal. Only live runs accept new logs."""
    if not progress.is_active or progress.failed:
        return progress
    updated = progress.model_copy(deep=True)
    updated.activity_logs.append(log)
    return updated


# ---------------------------------------------------------------------------
# ENGINE (store + catalog + clock)
# ---------------------------------------------------------------------------

class ChallengeEngine:
    """Challenge operations for one user session."""

    def __init__(
        self,
        store: ChallengeProgressStore,
        catalog: ProblemCatalog,
        today_provider: Optional[Callable[[], date]] = None,
        policy: str = CATALOG_EXHAUSTION_POLICY,
        rng: Optional[random.Random] = None,
    ):
        if policy not in EXHAUSTION_POLICIES:
            raise ValueError(f"Unknown catalog exhaustion policy: {policy!r}")
        self.store = store
        self.catalog = catalog
        self.today_provider = today_provider or today_in_zone
        self.policy = policy
        self.rng = rng

    def today(self) -> date:
        return self.today_provider()

    def load(self, user_id: int) -> ChallengeProgress:
        """Read, apply the day-boundary rules, and persist only if something changed."""
        progress = self._read(user_id)
        validated = validate_and_advance(progress, self.today(), self.catalog, self.policy, self.rng)
        if validated is not progress:
            self._write(user_id, validated)
        return validated

    def start(self, user_id: int) -> ChallengeProgress:
        progress = start_progress(self.catalog, self.today(), self.policy, self.rng)
        self._write(user_id, progress)
        logger.info("[CHALLENGE] user=%s started a new run", user_id)
        return progress

    def record_completion(self, user_id: int, problem_id: int, difficulty, score: float) -> ChallengeProgress:
        # Load first so a submission after midnight lands on the right day
        progress = self.load(user_id)
        updated = record_completion(progress, problem_id, difficulty, score, self.today())
        if updated is not progress:
            self._write(user_id, updated)
        return updated

    def log_activity(self, user_id: int, log: ActivityLog) -> ChallengeProgress:
        progress = self.load(user_id)
        updated = log_activity(progress, log)
        if updated is not progress:
            self._write(user_id, updated)
        return updated

    def reset(self, user_id: int, keep_logs: bool = False) -> ChallengeProgress:
        previous = self._read(user_id) if keep_logs else None
        fresh = reset_progress(previous, keep_logs=keep_logs)
        self._write(user_id, fresh)
        logger.info("[CHALLENGE] user=%s reset (keep_logs=%s)", user_id, keep_logs)
        return fresh

    def _read(self, user_id: int) -> ChallengeProgress:
        try:
            progress = self.store.read(user_id)
        except ProgressStoreError:
            logger.exception("[CHALLENGE] could not read progress for user=%s, using default", user_id)
            return ChallengeProgress()
        return progress if progress is not None else ChallengeProgress()

    def _write(self, user_id: int, progress: ChallengeProgress) -> None:
        if not self.store.write(user_id, progress):
            # The in-memory state stays authoritative for this request
            logger.warning("[CHALLENGE] progress for user=%s not persisted", user_id)
