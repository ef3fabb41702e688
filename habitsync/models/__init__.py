# Import all models so they register with SQLAlchemy Base.metadata
# This ensures Base.metadata.create_all() creates all tables

from habitsync.models.user import User
from habitsync.models.habit_entry import HabitEntry
from habitsync.models.habit_category import HabitCategory
from habitsync.models.group import Group, GroupMember
from habitsync.models.sync_state import SyncState

__all__ = [
    "User",
    "HabitEntry",
    "HabitCategory",
    "Group",
    "GroupMember",
    "SyncState",
]
