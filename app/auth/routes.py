import logging

from fastapi import APIRouter, Depends, HTTPException, Form
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.auth.models import User
from app.core.security import hash_password, verify_password, create_access_token

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


# =========================
# SIGNUP
# =========================
@router.post("/signup")
def signup(
    email: str = Form(...),
    username: str = Form(...),
    password: str = Form(...),
    name: str = Form(""),
    student_id: str = Form(""),
    db: Session = Depends(get_db),
):
    if db.query(User).filter(User.email == email).first():
        raise HTTPException(status_code=400, detail="Email already registered")

    if db.query(User).filter(User.username == username).first():
        raise HTTPException(status_code=400, detail="Username already taken")

    user = User(
        email=email,
        username=username,
        name=name.strip() or username,
        student_id=student_id.strip(),
        password_hash=hash_password(password),
        role="user",  # All signups are normal users by default
    )

    db.add(user)
    db.commit()
    db.refresh(user)

    return {"message": "Signup successful", "user_id": user.id}


# =========================
# LOGIN
# =========================
@router.post("/login")
def login(
    email_or_username: str = Form(...),
    password: str = Form(...),
    db: Session = Depends(get_db),
):
    # Try to find user by email first, then by username
    user = db.query(User).filter(User.email == email_or_username).first()

    if not user:
        user = db.query(User).filter(User.username == email_or_username).first()

    if not user or not verify_password(password, user.password_hash):
        logger.info("[AUTH] Invalid credentials for: %s", email_or_username)
        raise HTTPException(status_code=401, detail="Invalid credentials")

    token = create_access_token({"sub": user.username})
    logger.info("[AUTH] Login successful for: %s", user.username)

    response = JSONResponse({"access_token": token})
    response.set_cookie("access_token", token, httponly=True, samesite="lax")
    return response


@router.post("/logout")
def logout():
    response = JSONResponse({"message": "Logged out"})
    response.delete_cookie("access_token")
    return response
