"""
entry_store.py — Keyed collection of per-day, per-habit completion records
Key: (uid, day_index, habit_id). Point lookups, filtered scans, bulk upsert
and bulk delete; conflict resolution lives in SyncService.
"""

from collections import defaultdict
from datetime import datetime

from sqlalchemy.orm import Session

from habitsync.models.habit_entry import HabitEntry, value_type_of

# Stay under SQLite's bound-parameter limit for IN (...) scans
SCAN_CHUNK = 500


def _chunks(values: list, size: int = SCAN_CHUNK):
    for i in range(0, len(values), size):
        yield values[i:i + size]


class EntryStore:
    @staticmethod
    def lookup(db: Session, uid: str) -> dict[tuple[int, str], HabitEntry]:
        """All entries of a user keyed by (day_index, habit_id)."""
        rows = db.query(HabitEntry).filter(HabitEntry.uid == uid).all()
        return {row.key: row for row in rows}

    @staticmethod
    def find_by_user(db: Session, uid: str, habit_ids: set[str] | None = None) -> list[HabitEntry]:
        if habit_ids is not None and not habit_ids:
            return []
        q = db.query(HabitEntry).filter(HabitEntry.uid == uid)
        if habit_ids is not None:
            q = q.filter(HabitEntry.habit_id.in_(sorted(habit_ids)))
        return q.order_by(HabitEntry.day_index.asc(), HabitEntry.habit_id.asc()).all()

    @staticmethod
    def find_by_users(db: Session, uids: list[str], habit_ids: set[str] | None = None) -> dict[str, list[HabitEntry]]:
        """Entries for a population, grouped per uid. habit_ids restricts the scan to a habit subset."""
        grouped: dict[str, list[HabitEntry]] = defaultdict(list)
        if not uids or (habit_ids is not None and not habit_ids):
            return grouped
        for chunk in _chunks(list(uids)):
            q = db.query(HabitEntry).filter(HabitEntry.uid.in_(chunk))
            if habit_ids is not None:
                q = q.filter(HabitEntry.habit_id.in_(sorted(habit_ids)))
            for row in q.all():
                grouped[row.uid].append(row)
        return grouped

    @staticmethod
    def upsert(
        db: Session,
        uid: str,
        existing: dict[tuple[int, str], HabitEntry],
        day_index: int,
        habit_id: str,
        value,
        updated_at: datetime,
        now: datetime,
    ) -> HabitEntry:
        """Overwrite value/updated_at in place, or insert with created_at fixed to now."""
        key = (day_index, habit_id)
        row = existing.get(key)
        if row is None:
            row = HabitEntry(uid=uid, day_index=day_index, habit_id=habit_id, created_at=now)
            db.add(row)
            existing[key] = row
        row.value = value
        row.value_type = value_type_of(value)
        row.updated_at = updated_at
        return row

    @staticmethod
    def delete_all(db: Session, uid: str) -> int:
        return db.query(HabitEntry).filter(HabitEntry.uid == uid).delete(synchronize_session=False)
