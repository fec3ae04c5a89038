import json

from fastapi import APIRouter, Depends, Form, HTTPException
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.auth.models import User
from app.challenges.schemas import Difficulty
from app.core.deps import get_admin
from app.db.session import get_db
from app.problems.catalog import problem_to_dict
from app.problems.models import Problem

router = APIRouter(prefix="/problems", tags=["problems"])


# ======================================================
# LIST / GET
# ======================================================
@router.get("")
def list_problems(
    difficulty: str | None = None,
    db: Session = Depends(get_db),
):
    """Active problems, optionally filtered by difficulty (any casing)."""
    query = db.query(Problem).filter(or_(Problem.is_active.is_(True), Problem.is_active.is_(None)))
    if difficulty:
        diff = Difficulty.parse(difficulty)
        if diff is None:
            raise HTTPException(status_code=400, detail="Unknown difficulty")
        query = query.filter(Problem.difficulty == diff.value)

    problems = query.order_by(Problem.level.asc(), Problem.id.asc()).all()
    return {"problems": [problem_to_dict(p) for p in problems]}


@router.get("/{problem_id}")
def get_problem(problem_id: int, db: Session = Depends(get_db)):
    problem = db.query(Problem).filter(Problem.id == problem_id).first()
    if not problem:
        raise HTTPException(status_code=404, detail="Problem not found")
    return problem_to_dict(problem)


# ======================================================
# ADMIN – CREATE PROBLEM
# ======================================================
@router.post("/admin/create")
def admin_create_problem(
    title: str = Form(...),
    description: str = Form(...),
    difficulty: str = Form(...),
    level: int = Form(1),
    story: str = Form(""),
    skill: str = Form(""),
    examples: str = Form("[]"),             # JSON list of {input, output, explanation}
    hints: str = Form("[]"),                # JSON list of strings
    interview_questions: str = Form("[]"),  # JSON list of strings
    db: Session = Depends(get_db),
    user: User = Depends(get_admin),
):
    diff = Difficulty.parse(difficulty)
    if diff is None:
        raise HTTPException(status_code=400, detail="Unknown difficulty")

    for field, raw in (("examples", examples), ("hints", hints), ("interview_questions", interview_questions)):
        try:
            if not isinstance(json.loads(raw), list):
                raise ValueError
        except ValueError:
            raise HTTPException(status_code=400, detail=f"{field} must be a JSON list")

    try:
        problem = Problem(
            title=title.strip(),
            description=description,
            difficulty=diff.value,
            level=level,
            story=story,
            skill=skill.strip(),
            examples=examples,
            hints=hints,
            interview_questions=interview_questions,
        )
        db.add(problem)
        db.commit()
        db.refresh(problem)
        return {"status": "problem created", "problem_id": problem.id}
    except SQLAlchemyError as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=f"Failed to create problem: {str(e)}")
