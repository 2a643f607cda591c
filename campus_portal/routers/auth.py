from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from campus_portal.database import get_db
from campus_portal.utils.hashing import hash_password, verify_password
from campus_portal.utils.auth import create_access_token, get_current_user
from campus_portal.schemas.user import RegisterIn, ResetPasswordIn, UserOut
from campus_portal.models.user import User
from campus_portal.models.enums import UserRole

import logging
logger = logging.getLogger("campus_portal.auth")


router = APIRouter(prefix="/auth", tags=["Auth"])


# sign-up is open to students only; staff accounts come from /admin/users
@router.post("/register", response_model=UserOut, status_code=201)
def register(body: RegisterIn, db: Session = Depends(get_db)):
    email = body.email.strip().lower()

    exists = db.query(User.id).filter(User.email == email).first()
    if exists:
        raise HTTPException(status_code=400, detail="A user already exists with this email")

    new_user = User(
        name=body.name.strip(),
        email=email,
        password_hash=hash_password(body.password),
        role=UserRole.STUDENT,
    )
    db.add(new_user)
    db.commit()
    db.refresh(new_user)
    logger.info("registered student %s", email)
    return new_user


# username field carries the email
@router.post("/login")
def login(form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
    email = form_data.username.strip().lower()
    user = db.query(User).filter(User.email == email).first()
    if not user or not verify_password(form_data.password, user.password_hash):
        logger.warning("failed login for %s", email)
        raise HTTPException(status_code=403, detail="Invalid credentials")
    if not user.is_active:
        raise HTTPException(status_code=403, detail="Account disabled")

    token = create_access_token({"sub": user.email, "role": user.role.value})
    return {"access_token": token, "token_type": "bearer", "role": user.role.value}


@router.get("/me", response_model=UserOut)
def get_me(current_user: User = Depends(get_current_user)):
    return current_user


@router.post("/reset-password")
def reset_password(
    body: ResetPasswordIn,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    target_id = body.user_id or current_user.id
    if target_id != current_user.id and current_user.role != UserRole.ADMIN:
        raise HTTPException(status_code=403, detail="Only admins can reset another user's password")

    user = db.query(User).filter(User.id == target_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    user.password_hash = hash_password(body.password)
    user.last_password_reset_at = datetime.now(timezone.utc)
    db.commit()
    logger.info("password reset for user %s by %s", user.id, current_user.id)
    return {"success": True}
