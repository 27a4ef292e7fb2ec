import logging

from fastapi import APIRouter, HTTPException, Depends, status
from sqlalchemy.orm import Session

from taskhub.database import get_db
from taskhub.models.user import User
from taskhub.schemas.user import RegisterRequest, LoginRequest, RefreshRequest, UserOut
from taskhub.schemas.tokens import Token
from taskhub.utils.auth import get_current_user
from taskhub.utils.security import (
    hash_password,
    verify_password,
    create_access_token,
    create_refresh_token,
    verify_token,
    REFRESH_TOKEN,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _token_pair(user: User) -> dict:
    claims = {"sub": user.id, "emp_id": user.emp_id, "role": user.role}
    return {
        "access_token": create_access_token(data=claims),
        "refresh_token": create_refresh_token(data=claims),
        "token_type": "bearer",
        "user": user,
    }


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    if db.query(User).filter(User.emp_id == payload.emp_id).first():
        raise HTTPException(status_code=409, detail="Employee ID already registered")
    if db.query(User).filter(User.email == payload.email).first():
        raise HTTPException(status_code=400, detail="Email already registered")

    user = User(
        emp_id=payload.emp_id,
        name=payload.name,
        email=payload.email,
        hashed_password=hash_password(payload.password),
        department=payload.department,
        role=payload.role.lower(),
    )
    db.add(user)
    db.commit()

    logger.info(f"Registered user {user.emp_id} ({user.role})")
    return {"ok": True, "requiresEmailConfirm": False}


@router.post("/login", response_model=Token)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    if not payload.email or not payload.password:
        raise HTTPException(status_code=400, detail="Email and password are required")

    user = db.query(User).filter(User.email == payload.email).first()
    if not user or not verify_password(payload.password, user.hashed_password):
        raise HTTPException(status_code=401, detail="Invalid credentials")

    return _token_pair(user)


@router.post("/refresh", response_model=Token)
def refresh(payload: RefreshRequest, db: Session = Depends(get_db)):
    claims = verify_token(payload.refresh_token, token_type=REFRESH_TOKEN)
    if not claims:
        raise HTTPException(status_code=401, detail="Invalid refresh token")

    user = db.query(User).filter(User.id == claims.get("sub")).first()
    if not user:
        raise HTTPException(status_code=401, detail="Invalid refresh token")

    return _token_pair(user)


@router.get("/me", response_model=UserOut)
def me(current_user: User = Depends(get_current_user)):
    return current_user
