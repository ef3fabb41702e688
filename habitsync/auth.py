from datetime import datetime, timedelta, timezone

from fastapi import Depends, Request
from jose import jwt, JWTError
from sqlalchemy.orm import Session
import uuid

from habitsync.config import JWT_SECRET, JWT_ALGORITHM, JWT_EXPIRY_HOURS
from habitsync.database import get_db
from habitsync.errors import UnauthenticatedError
from habitsync.models.user import User


def create_token(data: dict) -> str:
    """Create a JWT token with an expiry claim and a unique JTI."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(hours=JWT_EXPIRY_HOURS)
    jti = str(uuid.uuid4())
    to_encode.update({"exp": expire, "jti": jti})
    return jwt.encode(to_encode, JWT_SECRET, algorithm=JWT_ALGORITHM)


def verify_token(token: str) -> dict | None:
    """Decode and verify a JWT token. Returns the payload or None on failure."""
    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
        return payload
    except JWTError:
        return None


def _bearer_token(request: Request) -> str | None:
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        return None
    if not auth_header.startswith("Bearer "):
        raise UnauthenticatedError("Missing or invalid Authorization header")
    return auth_header.split(" ", 1)[1]


def _resolve_uid(db: Session, token: str) -> str:
    payload = verify_token(token)
    if payload is None:
        raise UnauthenticatedError("Invalid or expired token")

    uid = payload.get("uid")
    if not uid:
        raise UnauthenticatedError("Token payload missing required claims")

    if db.query(User.id).filter(User.uid == uid).first() is None:
        raise UnauthenticatedError("User not found")
    return uid


def get_current_user(request: Request, db: Session = Depends(get_db)) -> str:
    """
    FastAPI dependency — extracts the Bearer token from the Authorization
    header, verifies it, and returns the caller's uid.
    Raises UnauthenticatedError if the token is missing or invalid.
    """
    token = _bearer_token(request)
    if token is None:
        raise UnauthenticatedError("Missing or invalid Authorization header")
    return _resolve_uid(db, token)


def get_optional_user(request: Request, db: Session = Depends(get_db)) -> str | None:
    """Same as get_current_user, but an absent header yields None instead of failing."""
    token = _bearer_token(request)
    if token is None:
        return None
    return _resolve_uid(db, token)
