"""
Seed the problem bank from a JSON file.

Purpose:
- Load problems exported from the old client's problem list
- SAFE to run multiple times (matches on title + difficulty, won't duplicate)

Input: a JSON list of objects with
    title, description, difficulty ("Easy" | "Medium" | "Hard"),
    and optionally level, story, skill, examples, hints, interviewQuestions.

Usage:
    python -m scripts.seed_problems problems.json
"""
import json
import sys
from pathlib import Path

from sqlalchemy.orm import Session

from app.challenges.schemas import Difficulty
from app.db.base import Base, SessionLocal, engine
from app.problems.models import Problem


def seed_problems(path: Path) -> tuple[int, int]:
    Base.metadata.create_all(bind=engine)
    items = json.loads(path.read_text(encoding="utf-8"))
    db: Session = SessionLocal()

    try:
        created = 0
        skipped = 0

        for item in items:
            diff = Difficulty.parse(item.get("difficulty"))
            title = (item.get("title") or "").strip()
            if diff is None or not title:
                print(f"⚠️  Skipping invalid entry: {title or '(no title)'}")
                skipped += 1
                continue

            existing = (
                db.query(Problem)
                .filter(Problem.title == title, Problem.difficulty == diff.value)
                .first()
            )
            if existing:
                skipped += 1
                continue

            db.add(Problem(
                title=title,
                description=item.get("description", ""),
                difficulty=diff.value,
                level=int(item.get("level", 1)),
                story=item.get("story", ""),
                skill=item.get("skill", ""),
                examples=json.dumps(item.get("examples", [])),
                hints=json.dumps(item.get("hints", [])),
                interview_questions=json.dumps(item.get("interviewQuestions", [])),
            ))
            created += 1

        db.commit()

        print("✅ Problem seeding complete")
        print(f"   Created: {created}")
        print(f"   Skipped (invalid or already existed): {skipped}")
        return created, skipped

    except Exception as e:
        db.rollback()
        print("❌ Error while seeding problems")
        print(str(e))
        raise
    finally:
        db.close()


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print("usage: python -m scripts.seed_problems <problems.json>")
        sys.exit(2)
    seed_problems(Path(sys.argv[1]))
