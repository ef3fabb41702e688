from __future__ import annotations

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from habitsync.auth import create_token
from habitsync.database import build_engine, get_db, init_db
from habitsync.main import app
from habitsync.models.user import User
from habitsync.schemas import CategoryIn, EntryIn


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'test.db'}")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_user(db, uid: str, name: str | None = None, show: bool = True) -> User:
    user = User(
        uid=uid,
        email=f"{uid}@example.com",
        display_name=name or uid.title(),
        provider="local",
        show_on_leaderboard=show,
    )
    db.add(user)
    db.commit()
    return user


def auth(uid: str) -> dict:
    return {"Authorization": f"Bearer {create_token({'uid': uid})}"}


def ts(day: int, hour: int = 12) -> datetime:
    return datetime(2026, 3, day, hour, 0, tzinfo=timezone.utc)


def entry(day_index: int, habit_id: str, value, updated_at: datetime | None = None) -> EntryIn:
    return EntryIn(day_index=day_index, habit_id=habit_id, value=value, updated_at=updated_at or ts(1))


def category(category_id: str, items: list[tuple[str, str]] | None = None, sort_order: int = 0,
             updated_at: datetime | None = None, name: str | None = None) -> CategoryIn:
    return CategoryIn(
        category_id=category_id,
        name=name or category_id.title(),
        icon="🕌",
        items=[{"id": i, "label": i.title(), "type": t} for i, t in (items or [])],
        sort_order=sort_order,
        updated_at=updated_at or ts(1),
    )
