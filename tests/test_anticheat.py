from datetime import date, datetime, timezone

from app.challenges.anticheat import challenge_stats, detect_suspicious_activity
from app.challenges.schemas import (
    ActivityDetails,
    ActivityLog,
    ChallengeProgress,
    DailyChallenge,
    ProblemSet,
)


def _log(problem_id, action, **details):
    return ActivityLog(
        timestamp=datetime(2026, 3, 2, tzinfo=timezone.utc),
        problem_id=problem_id,
        action=action,
        details=ActivityDetails(**details) if details else None,
    )


def test_heavy_paste_is_high_severity():
    logs = [
        _log(1, "paste", paste_length=50),
        _log(1, "paste", paste_length=60),
        _log(1, "submit", code_length=200),
    ]
    flags = detect_suspicious_activity(logs, 1)
    assert len(flags) == 1
    assert flags[0].severity == "high"
    assert "55%" in flags[0].reason


def test_paste_at_threshold_is_not_flagged():
    logs = [_log(1, "paste", paste_length=30), _log(1, "submit", code_length=100)]
    assert detect_suspicious_activity(logs, 1) == []


def test_paste_without_submit_uses_unit_length():
    flags = detect_suspicious_activity([_log(1, "paste", paste_length=5)], 1)
    assert [f.severity for f in flags] == ["high"]


def test_fast_typing_is_medium_severity():
    logs = [_log(2, "typing", typing_speed=450), _log(2, "typing", typing_speed=700)]
    flags = detect_suspicious_activity(logs, 2)
    assert [f.severity for f in flags] == ["medium"]
    assert flags[0].reason == "abnormal typing speed"


def test_other_problems_are_ignored():
    logs = [_log(1, "paste", paste_length=500), _log(1, "typing", typing_speed=900)]
    assert detect_suspicious_activity(logs, 2) == []


def test_stats_for_partial_run():
    day = DailyChallenge(
        day=1,
        date=date(2026, 3, 2),
        completed=True,
        problems=ProblemSet(easy=[1, 2, 3], medium=[4], hard=[5]),
        completed_problems=ProblemSet(easy=[1, 2, 3], medium=[4], hard=[5]),
    )
    progress = ChallengeProgress(is_active=True, current_day=1, completed_days=1, daily_challenges=[day])

    stats = challenge_stats(progress)
    assert stats["days_remaining"] == 19
    assert stats["progress_percentage"] == 5.0
    assert stats["completed_problems"] == 5
    assert stats["is_complete"] is False


def test_stats_for_finished_run():
    stats = challenge_stats(ChallengeProgress(completed_days=20))
    assert stats["days_remaining"] == 0
    assert stats["is_complete"] is True
