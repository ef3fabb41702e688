from sqlalchemy import Column, Integer, String, DateTime, Boolean

from habitsync.database import Base
from habitsync.time_utils import utc_now


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    uid = Column(String(64), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False)
    display_name = Column(String(120), nullable=False)
    photo_url = Column(String(500), nullable=True)
    provider = Column(String(20), default="local")  # google/local
    show_on_leaderboard = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utc_now)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)
