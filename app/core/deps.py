import logging
from datetime import datetime, timezone

from fastapi import Request, Depends, HTTPException
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.auth.models import User
from app.core.security import decode_access_token
from app.core.config import MAIN_ADMIN_USER_ID
from app.challenges.engine import ChallengeEngine
from app.challenges.store import SqlChallengeProgressStore
from app.problems.catalog import DbProblemCatalog
from app.ai.grader import OpenAIScoringOracle, ScoringOracle

logger = logging.getLogger(__name__)


def _extract_token(request: Request) -> str | None:
    # An explicit Authorization header wins over the login cookie
    token = request.headers.get("authorization") or request.cookies.get("access_token")
    if not token:
        return None
    # Support both "Bearer <token>" and raw token values.
    if token.lower().startswith("bearer "):
        token = token[7:].strip()
    return token or None


def get_current_user(
    request: Request,
    db: Session = Depends(get_db)
) -> User:
    token = _extract_token(request)
    if not token:
        logger.info("[AUTH] reject reason=missing_token path=%s", request.url.path)
        raise HTTPException(status_code=401, detail="Not authenticated")

    payload = decode_access_token(token)
    if not payload:
        logger.info("[AUTH] reject reason=invalid_token path=%s", request.url.path)
        raise HTTPException(status_code=401, detail="Invalid token")

    username = payload.get("sub")
    if not username:
        raise HTTPException(status_code=401, detail="Invalid token payload")

    user = db.query(User).filter(User.username == username).first()
    if not user:
        logger.info("[AUTH] reject reason=user_not_found username=%s", username)
        raise HTTPException(status_code=401, detail="User not found")

    # Update last_active timestamp so admins can see who is online
    try:
        user.last_active = datetime.now(timezone.utc)
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("[AUTH] could not update last_active for user=%s", user.id)

    return user


def get_admin(
    user: User = Depends(get_current_user)
) -> User:
    """Dependency to ensure the user is either main admin or co-admin."""
    is_main_admin = user.id == MAIN_ADMIN_USER_ID
    is_co_admin = user.role == "coadmin"

    if not (is_main_admin or is_co_admin):
        raise HTTPException(status_code=403, detail="Admin access required")

    return user


def get_challenge_engine(db: Session = Depends(get_db)) -> ChallengeEngine:
    """Challenge engine bound to this request's session."""
    return ChallengeEngine(SqlChallengeProgressStore(db), DbProblemCatalog(db))


def get_scoring_oracle() -> ScoringOracle:
    return OpenAIScoringOracle()
