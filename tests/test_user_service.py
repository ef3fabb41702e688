from __future__ import annotations

import pytest

from conftest import make_user
from habitsync.errors import NotFoundError, ValidationError
from habitsync.services.user_service import UserService, format_user


def test_identity_upsert_creates_user(db) -> None:
    user = UserService.upsert_identity(db, {
        "email": "Sara@Example.com",
        "name": "Sara",
        "picture": "https://img.example.com/sara.png",
    })
    assert user.email == "sara@example.com"
    assert user.display_name == "Sara"
    assert user.photo_url == "https://img.example.com/sara.png"
    assert user.provider == "google"
    assert user.show_on_leaderboard is True
    assert user.uid


def test_malformed_profile_fields_degrade_to_defaults(db) -> None:
    user = UserService.upsert_identity(db, {"email": "omar@example.com", "name": {"first": "x"}, "picture": 42})
    assert user.display_name == "omar"
    assert user.photo_url is None


def test_refresh_keeps_previous_values_for_bad_fields(db) -> None:
    UserService.upsert_identity(db, {"email": "a@example.com", "name": "Amal", "picture": "https://x/a.png"})
    user = UserService.upsert_identity(db, {"email": "a@example.com", "name": "   ", "picture": "not-a-url"})
    assert user.display_name == "Amal"
    assert user.photo_url == "https://x/a.png"


def test_missing_email_is_rejected(db) -> None:
    with pytest.raises(ValidationError):
        UserService.upsert_identity(db, {"name": "No Email"})


def test_leaderboard_visibility_toggle(db) -> None:
    make_user(db, "u1")
    user = UserService.set_leaderboard_visibility(db, "u1", False)
    assert format_user(user)["showOnLeaderboard"] is False
    with pytest.raises(NotFoundError):
        UserService.set_leaderboard_visibility(db, "ghost", True)
