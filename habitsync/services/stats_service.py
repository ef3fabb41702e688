"""
stats_service.py — XP, streak and completion-rate aggregation
Works on the complete entry set of one user (optionally already restricted to
a group's habit ids). Pure computation, no store access.
"""

import math
from collections import defaultdict
from dataclasses import dataclass
from typing import Iterable

# XP awarded per completed habit observation
XP_PER_HABIT = 10


def is_completed(value) -> bool:
    """true, or a number > 0. bool is tested first since it subclasses int."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value > 0
    return False


def _round_half_up(x: float) -> int:
    return math.floor(x + 0.5)


@dataclass(frozen=True)
class DayTally:
    day_index: int
    completed: int
    total: int


@dataclass(frozen=True)
class UserStats:
    total_xp: int = 0
    streak: int = 0
    completion_rate: float = 0
    completed_count: int = 0
    total_count: int = 0

    def to_dict(self) -> dict:
        return {
            "totalXp": self.total_xp,
            "streak": self.streak,
            "completionRate": self.completion_rate,
        }


class StatsService:
    @staticmethod
    def tally_days(entries: Iterable) -> list[DayTally]:
        """(completed, total) per day_index, most recent day first."""
        completed: dict[int, int] = defaultdict(int)
        total: dict[int, int] = defaultdict(int)
        for entry in entries:
            total[entry.day_index] += 1
            if is_completed(entry.value):
                completed[entry.day_index] += 1
        return [
            DayTally(day_index=day, completed=completed[day], total=total[day])
            for day in sorted(total, reverse=True)
        ]

    @staticmethod
    def streak(days: list[DayTally]) -> int:
        """
        Consecutive most-recent days with at least one completion.
        Days without any entry never appear in the tally, so they are skipped
        rather than treated as breaks.
        """
        count = 0
        for day in days:
            if day.completed == 0:
                break
            count += 1
        return count

    @staticmethod
    def completion_rate(completed: int, total: int) -> float:
        """Fraction with two decimals, rounded half up."""
        if total == 0:
            return 0
        return _round_half_up(completed / total * 100) / 100

    @staticmethod
    def aggregate(entries: Iterable) -> UserStats:
        days = StatsService.tally_days(entries)
        if not days:
            return UserStats()

        completed = sum(d.completed for d in days)
        total = sum(d.total for d in days)
        return UserStats(
            total_xp=completed * XP_PER_HABIT,
            streak=StatsService.streak(days),
            completion_rate=StatsService.completion_rate(completed, total),
            completed_count=completed,
            total_count=total,
        )
