# mudancas/routers/auth.py

import logging
from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .. import models, schemas
from ..auth import get_current_user
from ..database import get_db, transaction
from ..errors import EmailAlreadyRegistered, Unauthenticated
from ..utils import hash_password, issue_access_token, verify_password

router = APIRouter(prefix="/auth", tags=["Auth"])


# ────────────────────────────── HELPERS ──────────────────────────────

def _find_by_email(db: Session, email: str):
    return db.execute(
        select(models.User).where(models.User.email == email.lower())
    ).scalars().first()


# ────────────────────────────── ENDPOINTS ──────────────────────────────

@router.post("/register", response_model=schemas.AuthOut, status_code=status.HTTP_201_CREATED)
def register(req: schemas.RegisterIn, db: Session = Depends(get_db)):
    if _find_by_email(db, req.email):
        raise EmailAlreadyRegistered()

    with transaction(db, "register"):
        user = models.User(
            name=req.name,
            email=req.email.lower(),
            password_hash=hash_password(req.password),
            role=req.role,
            phone=req.phone,
        )
        db.add(user)
        try:
            db.flush()
        except IntegrityError:
            raise EmailAlreadyRegistered()

    db.refresh(user)
    logging.info("User %s registered as %s", user.id, user.role.value)
    return {
        "message": "User registered successfully",
        "user": user,
        "access_token": issue_access_token(user),
    }


@router.post("/login", response_model=schemas.AuthOut)
def login(req: schemas.LoginIn, db: Session = Depends(get_db)):
    user = _find_by_email(db, req.email)
    if user is None or not verify_password(req.password, user.password_hash):
        logging.warning("Failed login attempt")
        raise Unauthenticated("Invalid credentials")

    return {
        "message": "Logged in successfully",
        "user": user,
        "access_token": issue_access_token(user),
    }


@router.get("/me", response_model=schemas.UserOut)
def me(user: models.User = Depends(get_current_user)):
    return user
