# ========================================
# app/routes/auth.py - REGISTER / LOGIN
# ========================================

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pymongo.errors import DuplicateKeyError

from app.database import get_db
from app.schemas.user import UserCreate, UserLogin, TokenResponse
from app.services.profiles import new_user_document
from app.utils.auth import create_access_token
from app.utils.errors import Conflict
from app.utils.security import get_password_hash, verify_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


# ✅ 1. REGISTER
@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register_user(user: UserCreate, db=Depends(get_db)):
    """Create an alumni account and return a bearer token."""

    # Check if email already exists
    existing_user = await db.users.find_one({"email": user.email})
    if existing_user:
        raise Conflict("Email already registered")

    user_doc = new_user_document(
        email=user.email,
        password_hash=get_password_hash(user.password),
        profile=user.model_dump(exclude={"email", "password"})
    )

    try:
        await db.users.insert_one(user_doc)
    except DuplicateKeyError:
        # Lost a race with a concurrent registration of the same email
        raise Conflict("Email already registered")

    logger.info("Registered user %s", user.email)
    access_token = create_access_token(data={"sub": user.email})
    return {"access_token": access_token, "token_type": "bearer"}


# ✅ 2. LOGIN
@router.post("/login", response_model=TokenResponse)
async def login(user_credentials: UserLogin, db=Depends(get_db)):
    """Login and get JWT access token."""

    user = await db.users.find_one({"email": user_credentials.email})
    if not user or not verify_password(user_credentials.password, user["password"]):
        raise HTTPException(status_code=401, detail="Invalid credentials")

    access_token = create_access_token(data={"sub": user["email"]})
    return {"access_token": access_token, "token_type": "bearer"}
