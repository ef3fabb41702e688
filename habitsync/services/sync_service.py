"""
sync_service.py — Offline-first merge of habit entries and categories
Reconciles a device's upload against the stored copy with last-writer-wins
on updatedAt and returns the full post-merge state. Every mutating call runs
as one transaction that first takes the user's sync_states row lock, so two
devices uploading for the same uid are applied one after the other.
"""

import logging
from datetime import datetime

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from habitsync.config import DEFAULT_THEME
from habitsync.database import transaction
from habitsync.models.habit_category import HabitCategory
from habitsync.models.habit_entry import HabitEntry
from habitsync.models.sync_state import SyncState
from habitsync.schemas import CategoryIn, EntryIn
from habitsync.services.category_store import CategoryStore
from habitsync.services.entry_store import EntryStore
from habitsync.time_utils import isoformat_z, to_utc_naive, utc_now

logger = logging.getLogger(__name__)

_INSERT_IGNORE = {"postgresql": pg_insert, "sqlite": sqlite_insert}


def serialize_entry(e: HabitEntry) -> dict:
    return {
        "dayIndex": e.day_index,
        "habitId": e.habit_id,
        "value": e.value,
        "createdAt": isoformat_z(e.created_at),
        "updatedAt": isoformat_z(e.updated_at),
    }


def serialize_category(c: HabitCategory) -> dict:
    return {
        "categoryId": c.category_id,
        "name": c.name,
        "icon": c.icon,
        "items": [dict(item) for item in (c.items or [])],
        "sortOrder": c.sort_order,
        "updatedAt": isoformat_z(c.updated_at),
    }


class SyncService:

    # ------------------------------------------------------------------
    @staticmethod
    def _bump(db: Session, uid: str, now: datetime) -> int:
        return (
            db.query(SyncState)
            .filter(SyncState.uid == uid)
            .update(
                {SyncState.version: SyncState.version + 1, SyncState.last_synced: now},
                synchronize_session=False,
            )
        )

    @staticmethod
    def _lock_user(db: Session, uid: str, now: datetime) -> SyncState:
        """Bump the user's sync_states row; the write lock is held until commit."""
        if not SyncService._bump(db, uid, now):
            # First sync: a concurrent first sync waits on the insert instead of failing.
            insert = _INSERT_IGNORE.get(db.get_bind().dialect.name)
            values = dict(uid=uid, version=0, current_day=0, theme=DEFAULT_THEME, last_synced=now)
            if insert is not None:
                db.execute(insert(SyncState).values(**values).on_conflict_do_nothing(index_elements=["uid"]))
            else:
                db.add(SyncState(**values))
                db.flush()
            SyncService._bump(db, uid, now)
        return db.get(SyncState, uid, populate_existing=True)

    # ------------------------------------------------------------------
    @staticmethod
    def _merge_entries(db: Session, uid: str, entries: list[EntryIn], now: datetime) -> tuple[int, int]:
        existing = EntryStore.lookup(db, uid)
        accepted = discarded = 0
        for entry in entries:
            incoming_ts = to_utc_naive(entry.updated_at)
            stored = existing.get((entry.day_index, entry.habit_id))
            if stored is not None and incoming_ts < stored.updated_at:
                discarded += 1  # server copy is newer
                continue
            EntryStore.upsert(db, uid, existing, entry.day_index, entry.habit_id, entry.value, incoming_ts, now)
            accepted += 1
        return accepted, discarded

    # ------------------------------------------------------------------
    @staticmethod
    def _merge_categories(db: Session, uid: str, categories: list[CategoryIn], now: datetime) -> tuple[int, int, int]:
        existing = CategoryStore.lookup(db, uid)
        incoming_ids = {c.category_id for c in categories}

        # The upload is the client's complete category set: anything it omits goes.
        removed = [cid for cid in existing if cid not in incoming_ids]
        CategoryStore.delete_ids(db, uid, removed)
        for cid in removed:
            existing.pop(cid)

        accepted = discarded = 0
        for category in categories:
            incoming_ts = to_utc_naive(category.updated_at)
            stored = existing.get(category.category_id)
            if stored is not None and incoming_ts < stored.updated_at:
                discarded += 1
                continue
            CategoryStore.upsert(db, uid, existing, category.model_dump(), incoming_ts, now)
            accepted += 1
        return accepted, discarded, len(removed)

    # ------------------------------------------------------------------
    @staticmethod
    def _snapshot(db: Session, uid: str, state: SyncState | None) -> dict:
        return {
            "entries": [serialize_entry(e) for e in EntryStore.find_by_user(db, uid)],
            "categories": [serialize_category(c) for c in CategoryStore.find_by_user(db, uid)],
            "currentDay": state.current_day if state else 0,
            "theme": state.theme if state else DEFAULT_THEME,
            "lastSynced": isoformat_z(state.last_synced) if state else None,
        }

    # ------------------------------------------------------------------
    @staticmethod
    def merge(
        db: Session,
        uid: str,
        entries: list[EntryIn],
        categories: list[CategoryIn] | None = None,
        current_day: int | None = None,
        theme: str | None = None,
    ) -> dict:
        """
        Apply an upload and return the user's full authoritative state.

        categories=None leaves the stored categories alone; a list (even an
        empty one) replaces the category set, deleting ids it does not name.
        Nothing is visible to other sessions unless the whole batch commits.
        """
        now = utc_now()
        with transaction(db):
            state = SyncService._lock_user(db, uid, now)
            e_accepted, e_discarded = SyncService._merge_entries(db, uid, entries, now)
            c_accepted = c_discarded = c_removed = 0
            if categories is not None:
                c_accepted, c_discarded, c_removed = SyncService._merge_categories(db, uid, categories, now)
            if current_day is not None:
                state.current_day = current_day
            if theme is not None:
                state.theme = theme
            db.flush()
            result = SyncService._snapshot(db, uid, state)

        logger.info(
            f"sync uid={uid} entries accepted={e_accepted} discarded={e_discarded} "
            f"categories accepted={c_accepted} discarded={c_discarded} deleted={c_removed}"
        )
        if c_removed:
            logger.warning(f"sync uid={uid} deleted {c_removed} categories missing from the upload")
        return result

    @staticmethod
    def download(db: Session, uid: str) -> dict:
        return SyncService._snapshot(db, uid, db.get(SyncState, uid))

    @staticmethod
    def reset(db: Session, uid: str) -> dict:
        """Drop every entry and category of the user. A second reset is a no-op."""
        now = utc_now()
        with transaction(db):
            state = SyncService._lock_user(db, uid, now)
            deleted_entries = EntryStore.delete_all(db, uid)
            deleted_categories = CategoryStore.delete_all(db, uid)
            state.current_day = 0
            state.theme = DEFAULT_THEME

        logger.info(f"reset uid={uid} entries={deleted_entries} categories={deleted_categories}")
        return {
            "status": "success",
            "message": "Sync data reset",
            "deletedEntries": deleted_entries,
            "deletedCategories": deleted_categories,
        }
