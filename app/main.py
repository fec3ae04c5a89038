import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.db.base import Base, engine
from app.auth.models import User  # noqa: F401  (imported so create_all picks it up)
from app.problems.models import Problem  # noqa: F401
from app.submissions.models import Submission, UserAchievement  # noqa: F401
from app.challenges.models import ChallengeProgressRecord, ChallengeResult  # noqa: F401
from app.challenges.engine import CatalogExhaustedError

from app.auth.routes import router as auth_router
from app.problems.routes import router as problem_router
from app.challenges.routes import router as challenge_router
from app.submissions.routes import router as submission_router
from app.api.routes import router as api_router
from app.ai.openai_client import get_last_error, key_present, log_startup as _ai_log_startup

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(name)s %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(title="CodeMind", version="0.2.0")

# Create database tables (still useful in dev; in production prefer Alembic)
Base.metadata.create_all(bind=engine)

# Log grader status once at startup
_ai_log_startup()


@app.exception_handler(CatalogExhaustedError)
def catalog_exhausted_handler(request: Request, exc: CatalogExhaustedError):
    logger.error("[CHALLENGE] %s (path=%s)", exc, request.url.path)
    return JSONResponse(
        status_code=503,
        content={"detail": "Not enough problems in the catalog for a new day"},
    )


# Include routers
app.include_router(auth_router)
app.include_router(problem_router)
app.include_router(challenge_router)
app.include_router(submission_router)
app.include_router(api_router)


@app.get("/", include_in_schema=False)
def root():
    return {
        "name": "CodeMind",
        "status": "ok",
        "grader": {"key_present": key_present(), "last_error": get_last_error()},
    }
