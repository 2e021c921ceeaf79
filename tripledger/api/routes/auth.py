"""
Authentication routes for signup and login.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from tripledger.core.exceptions import ConflictError, UnauthorizedError
from tripledger.core.security import verify_password, get_password_hash, create_access_token
from tripledger.core.utils import normalize_email
from tripledger.db.session import get_db
from tripledger.models.user import User
from tripledger.schemas.user import UserCreate, UserLogin, Token, UserResponse
from tripledger.services.membership_service import notify_pending_invitations

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/signup", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def signup(user_data: UserCreate, db: Session = Depends(get_db)):
    """Register a new user and surface invitations already waiting for the email."""
    email = normalize_email(user_data.email)
    if db.query(User).filter(User.email == email).first():
        raise ConflictError("Email already exists")

    new_user = User(
        email=email,
        full_name=user_data.full_name,
        hashed_password=get_password_hash(user_data.password)
    )
    db.add(new_user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Email already exists")
    db.refresh(new_user)

    notify_pending_invitations(db, new_user)
    return new_user


@router.post("/login", response_model=Token)
async def login(credentials: UserLogin, db: Session = Depends(get_db)):
    """Login and get JWT token."""
    user = db.query(User).filter(User.email == normalize_email(credentials.email)).first()

    if not user or not verify_password(credentials.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password"
        )

    if not user.is_active:
        raise UnauthorizedError("User account is inactive")

    access_token = create_access_token(user.id)
    return {"access_token": access_token, "token_type": "bearer"}
