from sqlalchemy import Column, Integer, String, DateTime, JSON, UniqueConstraint

from habitsync.database import Base


class HabitCategory(Base):
    __tablename__ = "habit_categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    uid = Column(String(64), nullable=False, index=True)
    category_id = Column(String(100), nullable=False)  # client-side id, e.g. "fajr"
    name = Column(String(200), nullable=False)
    icon = Column(String(50), nullable=False)
    items = Column(JSON, nullable=False, default=list)  # [{id, label, type}]
    sort_order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    __table_args__ = (
        UniqueConstraint("uid", "category_id", name="uq_category_user_category"),
    )
