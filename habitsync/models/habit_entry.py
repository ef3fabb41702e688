from sqlalchemy import Column, Integer, String, DateTime, JSON, UniqueConstraint, Index

from habitsync.database import Base


def value_type_of(value) -> str:
    """Tag for a habit value: bool is checked first since it subclasses int."""
    return "boolean" if isinstance(value, bool) else "number"


class HabitEntry(Base):
    __tablename__ = "habit_entries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    uid = Column(String(64), nullable=False, index=True)
    day_index = Column(Integer, nullable=False)
    habit_id = Column(String(100), nullable=False)
    value_type = Column(String(10), nullable=False)  # boolean/number
    value = Column(JSON, nullable=False)  # true/false or a non-negative number
    created_at = Column(DateTime, nullable=False)  # fixed at first insert
    updated_at = Column(DateTime, nullable=False)

    __table_args__ = (
        UniqueConstraint("uid", "day_index", "habit_id", name="uq_entry_user_day_habit"),
        Index("ix_entry_user_day", "uid", "day_index"),
    )

    @property
    def key(self) -> tuple[int, str]:
        return (self.day_index, self.habit_id)
