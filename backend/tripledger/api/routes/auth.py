"""
Authentication routes for signup and login.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from tripledger.core.exceptions import Forbidden, Unauthorized, ValidationError
from tripledger.db.session import get_db
from tripledger.schemas.user import UserCreate, UserLogin, Token, UserResponse
from tripledger.models.user import User
from tripledger.core.security import verify_password, get_password_hash, create_access_token

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/signup", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def signup(user_data: UserCreate, db: Session = Depends(get_db)):
    """Register a new user."""
    if db.query(User).filter(User.username == user_data.username).first():
        raise ValidationError("Username already exists")
    
    if db.query(User).filter(User.email == user_data.email).first():
        raise ValidationError("Email already exists")
    
    new_user = User(
        username=user_data.username,
        email=user_data.email,
        hashed_password=get_password_hash(user_data.password)
    )
    db.add(new_user)
    db.commit()
    db.refresh(new_user)
    
    return new_user


@router.post("/login", response_model=Token)
async def login(credentials: UserLogin, db: Session = Depends(get_db)):
    """Login and get JWT token."""
    user = db.query(User).filter(User.username == credentials.username).first()
    
    if not user or not verify_password(credentials.password, user.hashed_password):
        raise Unauthorized("Incorrect username or password")
    
    if not user.is_active:
        raise Forbidden("User account is inactive")
    
    return {"access_token": create_access_token(user.id, user.username), "token_type": "bearer"}
