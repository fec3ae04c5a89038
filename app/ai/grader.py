"""
Scoring oracle: grades a submission 0-10 with a chat model.

Only the numeric score drives game state; feedback is passed through to
the user untouched.
"""
import json
import logging
import re
from typing import Optional, Protocol

import openai
from pydantic import BaseModel, Field

from app.ai.openai_client import get_client, set_last_error
from app.core.config import GRADER_MODEL

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are a senior software engineer reviewing a candidate's solution.
Grade fairly and in detail.

Return ONLY a JSON object with this exact shape:
{
  "scores": {
    "understanding": <0-2>,
    "approach": <0-2>,
    "codeLogic": <0-2>,
    "codeStyle": <0-1>,
    "edgeCases": <0-1>,
    "complexity": <0-1>,
    "creativity": <0-1>
  },
  "totalScore": <0-10>,
  "feedback": "<2-3 sentence overall review>",
  "strengths": ["<strength>"],
  "improvements": ["<improvement>"]
}

totalScore is the sum of the individual scores."""

_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)


class GradeResult(BaseModel):
    score: int = Field(ge=0, le=10)
    feedback: str = ""


class ScoringOracle(Protocol):
    def grade(
        self,
        problem: dict,
        code: str,
        thinking: str = "",
        language: str = "python",
        mode: str = "practice",
        interview_answers: Optional[list[str]] = None,
    ) -> Optional[GradeResult]:
        ...


def build_user_prompt(
    problem: dict,
    code: str,
    thinking: str,
    language: str,
    mode: str,
    interview_answers: list[str],
) -> str:
    examples = "\n".join(
        f"- Input: {e.get('input', '')} -> Output: {e.get('output', '')}"
        for e in problem.get("examples", [])
        if isinstance(e, dict)
    )
    parts = [
        "## Problem",
        f"**{problem.get('title', '')}**",
        problem.get("story", ""),
        "",
        problem.get("description", ""),
        "",
        "Examples:",
        examples or "(none)",
        "",
        "## Candidate's approach",
        thinking.strip() or "(not provided)",
        "",
        f"## Candidate's code ({language})",
        f"```{language}\n{code}\n```",
    ]
    if mode == "interview":
        questions = problem.get("interview_questions", [])
        parts += ["", "## Interview answers"]
        for i, question in enumerate(questions):
            answer = interview_answers[i] if i < len(interview_answers) else ""
            parts.append(f"Q{i + 1}: {question}\nA: {answer or '(no answer)'}")
    return "\n".join(parts)


def parse_grade(content: str | None) -> Optional[GradeResult]:
    """Pull totalScore/feedback out of a model reply. Score is clamped to 0..10."""
    if not content:
        return None
    match = _JSON_OBJECT.search(content)
    if not match:
        return None
    try:
        data = json.loads(match.group(0))
        score = round(float(data.get("totalScore")))
    except (ValueError, TypeError, OverflowError):
        return None
    feedback = data.get("feedback") or ""
    return GradeResult(score=min(max(score, 0), 10), feedback=str(feedback))


class OpenAIScoringOracle:
    """Grades through the shared OpenAI-compatible client."""

    def __init__(self, model: str = GRADER_MODEL):
        self.model = model

    def grade(
        self,
        problem: dict,
        code: str,
        thinking: str = "",
        language: str = "python",
        mode: str = "practice",
        interview_answers: Optional[list[str]] = None,
    ) -> Optional[GradeResult]:
        client = get_client()
        if client is None:
            logger.warning("[GRADER] API key not set")
            set_last_error("api key not set")
            return None

        prompt = build_user_prompt(problem, code, thinking, language, mode, interview_answers or [])
        try:
            response = client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                temperature=0.3,
                max_tokens=1500,
            )
        except openai.OpenAIError as exc:
            logger.warning("[GRADER] request failed: %s", type(exc).__name__)
            set_last_error(f"{type(exc).__name__}: {exc}")
            return None

        result = parse_grade(response.choices[0].message.content)
        if result is None:
            logger.warning("[GRADER] could not parse grading response")
            set_last_error("unparseable response")
        return result
