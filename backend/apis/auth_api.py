# backend/apis/auth_api.py
import secrets
from typing import Callable, Optional

from loguru import logger
from passlib.context import CryptContext
from sqlalchemy import delete, select, func
from sqlalchemy.orm import Session

from models import ApiToken, User
from pipeline.errors import InvalidInput, Unauthenticated
from schemas import SignUpIn, LoginIn

from .responses import success

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=12, bcrypt__ident="2b")

def hash_password(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(password: str, stored: str) -> bool:
    return pwd_context.verify(password, stored)

class SignUpAPI:
    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self.SessionLocal = session_factory

    def __call__(self, payload: SignUpIn):
        email_norm = (payload.user_email or "").strip().lower()

        with self.SessionLocal() as db:
            # Case-insensitive uniqueness check
            exists = db.execute(
                select(User).where(func.lower(User.user_email) == email_norm)
            ).scalar_one_or_none()
            if exists:
                raise InvalidInput("Email already exists")

            user = User(
                user_email=email_norm,
                password_hash=hash_password(payload.user_password),
                user_firstname=(payload.user_firstname or "").strip() or None,
                user_lastname=(payload.user_lastname or "").strip() or None,
            )
            db.add(user)
            db.commit()
            logger.info(f"Registered user id={user.user_id}")
            return success({"user_id": user.user_id}, "User registered successfully")

class LoginAPI:
    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self.SessionLocal = session_factory

    def __call__(self, payload: LoginIn):
        email_norm = (payload.user_email or "").strip().lower()

        with self.SessionLocal() as db:
            user = db.execute(
                select(User).where(func.lower(User.user_email) == email_norm)
            ).scalar_one_or_none()
            if not user or not verify_password(payload.user_password, user.password_hash):
                raise Unauthenticated("Invalid email or password")

            # one live token per user; logging in again revokes the previous one
            db.execute(delete(ApiToken).where(ApiToken.user_id == user.user_id))
            token = secrets.token_urlsafe(32)
            db.add(ApiToken(token=token, user_id=user.user_id))
            db.commit()
            return success({"user_id": user.user_id, "token": token}, "Login successful")

class BearerAuth:
    """Resolves 'Authorization: Bearer <token>' to a user id."""

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self.SessionLocal = session_factory

    def resolve(self, authorization: Optional[str]) -> int:
        if not authorization or not authorization.startswith("Bearer "):
            raise Unauthenticated("Unauthorized: missing or invalid authentication token")
        token = authorization[len("Bearer "):].strip()
        if not token:
            raise Unauthenticated("Unauthorized: missing or invalid authentication token")

        with self.SessionLocal() as db:
            user_id = db.execute(
                select(ApiToken.user_id).where(ApiToken.token == token)
            ).scalar_one_or_none()
        if user_id is None:
            raise Unauthenticated("Unauthorized: user not authenticated")
        return user_id
