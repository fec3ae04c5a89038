from app.auth.achievements import check_new_badges, get_user_achievements
from app.auth.models import User
from app.auth.ranks import award_xp, level_for_xp, rank_for_xp, xp_for_score


def _user(db, username="ada"):
    user = User(email=f"{username}@example.com", username=username, password_hash="x")
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def test_xp_for_score_bands():
    assert xp_for_score(10, "practice") == 80
    assert xp_for_score(9, "interview") == 120
    assert xp_for_score(7, "practice") == 50
    assert xp_for_score(5, "practice") == 30
    assert xp_for_score(2, "practice") == 10
    assert xp_for_score(0, "interview") == 0


def test_level_and_rank_from_xp():
    assert level_for_xp(0) == 1
    assert level_for_xp(49) == 1
    assert level_for_xp(50) == 2
    assert rank_for_xp(0) == "Intern"
    assert rank_for_xp(100) == "Junior"
    assert rank_for_xp(1499) == "Senior"
    assert rank_for_xp(10_000) == "Tech Lead"


def test_award_xp_updates_user(db):
    user = _user(db)
    gained = award_xp(db, user, 9, "practice")
    award_xp(db, user, 9, "practice")

    db.refresh(user)
    assert gained == 80
    assert user.xp == 160
    assert user.level == 4
    assert user.rank == "Junior"


def test_badges_are_awarded_once(db):
    user = _user(db)

    assert check_new_badges(db, user.id, 9, "interview", []) == ["first_blood", "interview_ready", "quick_thinker"]
    assert check_new_badges(db, user.id, 9, "interview", [9]) == []


def test_logic_thinker_needs_three_high_scores(db):
    user = _user(db)
    assert "logic_thinker" not in check_new_badges(db, user.id, 8, "practice", [8])
    assert "logic_thinker" in check_new_badges(db, user.id, 8, "practice", [8, 3, 9])


def test_streak_master_on_fifth_submission(db):
    user = _user(db)
    assert check_new_badges(db, user.id, 2, "practice", [1, 1, 1, 1]) == ["streak_master"]


def test_achievement_listing_marks_earned(db):
    user = _user(db)
    check_new_badges(db, user.id, 5, "practice", [])

    listing = get_user_achievements(db, user.id)
    assert len(listing) == 5
    earned = {a["key"]: a["earned"] for a in listing}
    assert earned["first_blood"] is True
    assert earned["streak_master"] is False
