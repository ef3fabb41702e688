from sqlalchemy import Column, Integer, String, DateTime

from habitsync.database import Base


class SyncState(Base):
    """One row per user. Bumping `version` is how a sync takes the per-user write lock."""
    __tablename__ = "sync_states"

    uid = Column(String(64), primary_key=True)
    version = Column(Integer, nullable=False, default=0)
    current_day = Column(Integer, nullable=False, default=0)
    theme = Column(String(20), nullable=False, default="dark")
    last_synced = Column(DateTime, nullable=True)
