"""
category_store.py — Keyed collection of a user's habit-category definitions
Key: (uid, category_id).
"""

from datetime import datetime

from sqlalchemy.orm import Session

from habitsync.models.habit_category import HabitCategory


class CategoryStore:
    @staticmethod
    def lookup(db: Session, uid: str) -> dict[str, HabitCategory]:
        rows = db.query(HabitCategory).filter(HabitCategory.uid == uid).all()
        return {row.category_id: row for row in rows}

    @staticmethod
    def find_by_user(db: Session, uid: str) -> list[HabitCategory]:
        """Ordered by sort_order ascending; category_id breaks ties so output is deterministic."""
        return (
            db.query(HabitCategory)
            .filter(HabitCategory.uid == uid)
            .order_by(HabitCategory.sort_order.asc(), HabitCategory.category_id.asc())
            .all()
        )

    @staticmethod
    def upsert(
        db: Session,
        uid: str,
        existing: dict[str, HabitCategory],
        data: dict,
        updated_at: datetime,
        now: datetime,
    ) -> HabitCategory:
        row = existing.get(data["category_id"])
        if row is None:
            row = HabitCategory(uid=uid, category_id=data["category_id"], created_at=now)
            db.add(row)
            existing[row.category_id] = row
        row.name = data["name"]
        row.icon = data["icon"]
        row.items = [dict(item) for item in data["items"]]
        row.sort_order = data["sort_order"]
        row.updated_at = updated_at
        return row

    @staticmethod
    def delete_ids(db: Session, uid: str, category_ids: list[str]) -> int:
        if not category_ids:
            return 0
        return (
            db.query(HabitCategory)
            .filter(HabitCategory.uid == uid, HabitCategory.category_id.in_(category_ids))
            .delete(synchronize_session=False)
        )

    @staticmethod
    def delete_all(db: Session, uid: str) -> int:
        return db.query(HabitCategory).filter(HabitCategory.uid == uid).delete(synchronize_session=False)
