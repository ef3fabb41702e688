"""
user_service.py — Profile reads, leaderboard opt-out, identity upsert
Users are owned by the identity subsystem; this service only refreshes their
display fields and the showOnLeaderboard flag.
"""

import logging
import uuid

from sqlalchemy.orm import Session

from habitsync.database import transaction
from habitsync.errors import NotFoundError, ValidationError
from habitsync.models.user import User

logger = logging.getLogger(__name__)


def format_user(user: User) -> dict:
    return {
        "uid": user.uid,
        "email": user.email,
        "displayName": user.display_name,
        "photoURL": user.photo_url,
        "provider": user.provider,
        "showOnLeaderboard": user.show_on_leaderboard,
    }


def _clean_str(value, max_length: int) -> str | None:
    if not isinstance(value, str):
        return None
    value = value.strip()
    if not value:
        return None
    return value[:max_length]


def _clean_photo(value) -> str | None:
    url = _clean_str(value, 500)
    if url and url.startswith(("http://", "https://")):
        return url
    return None


class UserService:
    @staticmethod
    def get(db: Session, uid: str) -> User:
        user = db.query(User).filter(User.uid == uid).first()
        if user is None:
            raise NotFoundError("User not found")
        return user

    @staticmethod
    def set_leaderboard_visibility(db: Session, uid: str, show: bool) -> User:
        user = UserService.get(db, uid)
        with transaction(db):
            user.show_on_leaderboard = show
        logger.info(f"leaderboard visibility uid={uid} show={show}")
        return user

    @staticmethod
    def upsert_identity(db: Session, profile: dict, provider: str = "google") -> User:
        """
        Create or refresh a user from a Google-style profile (email, name, picture).
        Called by the identity subsystem after it has verified the sign-in; no
        route of this service exposes it.
        Only a missing email fails; a malformed name or picture falls back to
        the stored value, then to a best-effort default.
        """
        email = _clean_str(profile.get("email"), 255)
        if not email or "@" not in email:
            raise ValidationError("Identity profile has no usable email")
        email = email.lower()

        name = _clean_str(profile.get("name"), 120)
        photo = _clean_photo(profile.get("picture"))

        with transaction(db, conflict_message="A user with this email already exists"):
            user = db.query(User).filter(User.email == email).first()
            if user is None:
                user = User(
                    uid=_clean_str(profile.get("uid"), 64) or str(uuid.uuid4()),
                    email=email,
                    display_name=name or email.split("@")[0],
                    photo_url=photo,
                    provider=provider,
                    show_on_leaderboard=True,
                )
                db.add(user)
            else:
                user.display_name = name or user.display_name
                user.photo_url = photo or user.photo_url
        return user
