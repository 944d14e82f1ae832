# backend/app/routers/auth.py
import logging
import math

import asyncpg
from fastapi import APIRouter, Depends, Response, status
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel

from app import config
from app.database import DuplicateEmailError, UserStore, get_user_store
from app.errors import AuthError, ConflictError, InternalError, ValidationError
from app.utils.jwt_handler import create_access_token, token_ttl
from app.utils.password_handler import burn_verification, hash_password, verify_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1", tags=["Authentication"])

# Store failures that surface as a generic 500
STORE_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError)

# Pydantic Models
class RegisterRequest(BaseModel):
    username: str | None = None
    email: str | None = None
    password: str | None = None

class LoginRequest(BaseModel):
    email: str | None = None
    password: str | None = None


def set_token_cookie(response: Response, token: str, max_age: int):
    """Deliver the session token as an HTTP-only, same-site-strict cookie"""
    response.set_cookie(
        key=config.TOKEN_COOKIE_NAME,
        value=token,
        max_age=max_age,
        httponly=True,
        secure=config.is_production(),
        samesite="strict",
    )

# ==================== REGISTRATION ====================
@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(data: RegisterRequest, store: UserStore = Depends(get_user_store)):
    """Register a new user with the default role"""
    if not data.username or not data.email or not data.password:
        raise ValidationError("All fields are required!")

    try:
        existing = await store.find_by_email(data.email)
        if existing:
            raise ConflictError("User already exists!")

        hashed = await run_in_threadpool(hash_password, data.password)

        await store.insert_user(data.username, data.email, hashed, role="user")
    except DuplicateEmailError:
        # Lost a race with a concurrent registration for the same email
        raise ConflictError("User already exists!")
    except STORE_ERRORS:
        logger.exception("Registration failed for %s", data.email)
        raise InternalError()

    logger.info("Registered user %s", data.email)
    return {"success": True, "message": "User registered successfully!"}

# ==================== LOGIN ====================
@router.post("/login")
async def login(data: LoginRequest, response: Response,
                store: UserStore = Depends(get_user_store)):
    """Verify credentials and issue a session token (cookie and body)"""
    if not data.email or not data.password:
        raise ValidationError("Email and password are required!")

    try:
        user = await store.find_by_email(data.email)
    except STORE_ERRORS:
        logger.exception("User lookup failed during login")
        raise InternalError()

    if user is None:
        await run_in_threadpool(burn_verification, data.password)
        logger.info("Failed login attempt")
        raise AuthError()

    if not await run_in_threadpool(verify_password, data.password, user["password_hash"]):
        logger.info("Failed login attempt")
        raise AuthError()

    try:
        ttl = token_ttl()
        token = create_access_token({"email": user["email"], "role": user["role"]}, ttl)
    except InternalError:
        logger.error("JWT_SECRET is not configured; cannot issue tokens")
        raise
    except Exception:
        logger.exception("Token signing failed")
        raise InternalError()

    set_token_cookie(response, token, math.ceil(ttl.total_seconds()))
    return {"success": True, "message": "Login successful", "accessToken": token}
