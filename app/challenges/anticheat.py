"""
Anti-cheat signals and challenge statistics.
Flags are advisory only: nothing here changes a run's state.
"""
from datetime import datetime, timezone

from app.challenges.schemas import ActivityLog, ChallengeProgress, SuspiciousActivity
from app.core.config import (
    CHALLENGE_REWARD,
    DAILY_REQUIREMENTS,
    MAX_PASTE_PERCENTAGE,
    MAX_TYPING_SPEED,
    TOTAL_DAYS,
)


def detect_suspicious_activity(logs: list[ActivityLog], problem_id: int) -> list[SuspiciousActivity]:
    """Check one problem's logs for heavy pasting and implausible typing speed."""
    flagged: list[SuspiciousActivity] = []
    problem_logs = [log for log in logs if log.problem_id == problem_id]
    now = datetime.now(timezone.utc)

    pasted = sum(
        (log.details.paste_length or 0) if log.details else 0
        for log in problem_logs
        if log.action == "paste"
    )
    submit = next((log for log in problem_logs if log.action == "submit"), None)
    code_length = (submit.details.code_length if submit and submit.details else None) or 1

    paste_ratio = pasted / code_length
    if paste_ratio > MAX_PASTE_PERCENTAGE / 100:
        flagged.append(SuspiciousActivity(
            problem_id=problem_id,
            date=now,
            reason=f"excessive copy/paste ({round(paste_ratio * 100)}% of code)",
            severity="high",
        ))

    speeds = [
        log.details.typing_speed
        for log in problem_logs
        if log.action == "typing" and log.details and log.details.typing_speed
    ]
    avg_speed = sum(speeds) / (len(speeds) or 1)
    if avg_speed > MAX_TYPING_SPEED:
        flagged.append(SuspiciousActivity(
            problem_id=problem_id,
            date=now,
            reason="abnormal typing speed",
            severity="medium",
        ))

    return flagged


def challenge_stats(progress: ChallengeProgress) -> dict:
    per_day = sum(DAILY_REQUIREMENTS.values())
    completed_problems = sum(day.completed_problems.total() for day in progress.daily_challenges)
    return {
        "days_remaining": max(TOTAL_DAYS - progress.completed_days, 0),
        "progress_percentage": progress.completed_days / TOTAL_DAYS * 100,
        "total_problems_required": TOTAL_DAYS * per_day,
        "completed_problems": completed_problems,
        "is_complete": progress.completed_days >= TOTAL_DAYS,
        "reward": CHALLENGE_REWARD,
    }
