"""
leaderboard_service.py — Ranked, paginated leaderboards
Applies StatsService across a population (all opted-in users, or one group's
members on the group's habit ids), sorts by XP then streak, assigns
successive 1-based ranks and slices one page. Read-only: never takes the
per-user sync lock.
"""

import math
from dataclasses import dataclass

from sqlalchemy.orm import Session

from habitsync.config import LEADERBOARD_DEFAULT_PAGE_SIZE, LEADERBOARD_MAX_PAGE_SIZE
from habitsync.models.user import User
from habitsync.services.entry_store import EntryStore, SCAN_CHUNK
from habitsync.services.group_service import GroupService
from habitsync.services.stats_service import StatsService, UserStats


@dataclass
class RankedUser:
    uid: str
    display_name: str
    photo_url: str | None
    stats: UserStats
    rank: int = 0

    def to_dict(self) -> dict:
        return {
            "rank": self.rank,
            "uid": self.uid,
            "displayName": self.display_name,
            "photoURL": self.photo_url,
            **self.stats.to_dict(),
        }


def clamp_paging(page: int | None, page_size: int | None) -> tuple[int, int]:
    """page >= 1; page_size in [1, LEADERBOARD_MAX_PAGE_SIZE], default LEADERBOARD_DEFAULT_PAGE_SIZE."""
    if page_size is None:
        page_size = LEADERBOARD_DEFAULT_PAGE_SIZE
    page_size = max(1, min(page_size, LEADERBOARD_MAX_PAGE_SIZE))
    page = max(1, page or 1)
    return page, page_size


def _profiles(db: Session, uids: list[str]) -> dict[str, User]:
    found: dict[str, User] = {}
    for i in range(0, len(uids), SCAN_CHUNK):
        for user in db.query(User).filter(User.uid.in_(uids[i:i + SCAN_CHUNK])).all():
            found[user.uid] = user
    return found


class LeaderboardService:

    @staticmethod
    def rank(
        db: Session,
        population_uids: list[str],
        habit_ids: set[str] | None = None,
        requesting_uid: str | None = None,
        page: int | None = 1,
        page_size: int | None = LEADERBOARD_DEFAULT_PAGE_SIZE,
    ) -> dict:
        """
        Rank a population. habit_ids=None scores every entry; a set (possibly
        empty) scores only those habit ids, so an empty set ranks everyone at 0.
        Residual ties keep population order.
        """
        page, page_size = clamp_paging(page, page_size)
        population = list(dict.fromkeys(population_uids))

        profiles = _profiles(db, population)
        entries_by_uid = EntryStore.find_by_users(db, population, habit_ids)

        ranked = []
        for uid in population:
            user = profiles.get(uid)
            ranked.append(RankedUser(
                uid=uid,
                display_name=user.display_name if user else "Unknown User",
                photo_url=user.photo_url if user else None,
                stats=StatsService.aggregate(entries_by_uid.get(uid, [])),
            ))

        # list.sort is stable
        ranked.sort(key=lambda r: (-r.stats.total_xp, -r.stats.streak))
        for index, row in enumerate(ranked):
            row.rank = index + 1

        current_user_rank = None
        if requesting_uid is not None:
            current_user_rank = next((r.rank for r in ranked if r.uid == requesting_uid), None)

        total_count = len(ranked)
        start = (page - 1) * page_size
        return {
            "entries": [r.to_dict() for r in ranked[start:start + page_size]],
            "page": page,
            "pageSize": page_size,
            "totalCount": total_count,
            "totalPages": math.ceil(total_count / page_size),
            "currentUserRank": current_user_rank,
        }

    @staticmethod
    def global_leaderboard(db: Session, requesting_uid: str | None, page: int | None, page_size: int | None) -> dict:
        """Every user who has not opted out, in sign-up order before ranking."""
        uids = [
            row.uid
            for row in db.query(User.uid)
            .filter(User.show_on_leaderboard.is_(True))
            .order_by(User.id.asc())
            .all()
        ]
        return LeaderboardService.rank(db, uids, None, requesting_uid, page, page_size)

    @staticmethod
    def group_leaderboard(db: Session, group_id: int, requesting_uid: str, page: int | None, page_size: int | None) -> dict:
        """Whole membership regardless of the opt-out flag, scored on the group's habits only."""
        group = GroupService.get_for_member(db, group_id, requesting_uid)
        scope = GroupService.scope(group)
        result = LeaderboardService.rank(db, scope.population_uids, scope.habit_ids, requesting_uid, page, page_size)
        result["groupName"] = group.name
        result["groupEmoji"] = group.emoji
        return result
