from __future__ import annotations

from conftest import entry, make_user, ts
from habitsync.schemas import GroupCategoryIn
from habitsync.services.group_service import GroupService
from habitsync.services.leaderboard_service import LeaderboardService, clamp_paging
from habitsync.services.sync_service import SyncService


def _complete(db, uid: str, days: int, habits: tuple[str, ...] = ("a",), value=True) -> None:
    SyncService.merge(db, uid, [entry(d, h, value, ts(1)) for d in range(days) for h in habits])


def test_clamp_paging() -> None:
    assert clamp_paging(1, 1000) == (1, 50)
    assert clamp_paging(0, 20) == (1, 20)
    assert clamp_paging(-3, 0) == (1, 1)
    assert clamp_paging(None, None) == (1, 20)


def test_sorted_by_xp_then_streak(db) -> None:
    for uid in ("low", "high", "tie_short", "tie_long"):
        make_user(db, uid)
    _complete(db, "low", 1)
    _complete(db, "high", 5)
    # both 3 completions; tie_long's completions are the most recent days
    SyncService.merge(db, "tie_short", [
        entry(0, "a", True, ts(1)), entry(1, "a", True, ts(1)), entry(2, "a", True, ts(1)), entry(3, "a", False, ts(1)),
    ])
    SyncService.merge(db, "tie_long", [
        entry(0, "a", False, ts(1)), entry(1, "a", True, ts(1)), entry(2, "a", True, ts(1)), entry(3, "a", True, ts(1)),
    ])

    result = LeaderboardService.global_leaderboard(db, "low", 1, 20)
    assert [e["uid"] for e in result["entries"]] == ["high", "tie_long", "tie_short", "low"]
    assert [e["rank"] for e in result["entries"]] == [1, 2, 3, 4]
    assert result["entries"][0] == {
        "rank": 1,
        "uid": "high",
        "displayName": "High",
        "photoURL": None,
        "totalXp": 50,
        "streak": 5,
        "completionRate": 1.0,
    }
    assert result["currentUserRank"] == 4


def test_full_ties_keep_population_order(db) -> None:
    for uid in ("c", "a", "b"):
        make_user(db, uid)
        _complete(db, uid, 2)
    result = LeaderboardService.global_leaderboard(db, None, 1, 20)
    assert [e["uid"] for e in result["entries"]] == ["c", "a", "b"]
    assert [e["rank"] for e in result["entries"]] == [1, 2, 3]


def test_opted_out_users_are_hidden(db) -> None:
    make_user(db, "visible")
    make_user(db, "hidden", show=False)
    _complete(db, "hidden", 9)
    result = LeaderboardService.global_leaderboard(db, "hidden", 1, 20)
    assert [e["uid"] for e in result["entries"]] == ["visible"]
    assert result["currentUserRank"] is None


def test_pagination_of_45_users(db) -> None:
    uids = [f"user{i:02d}" for i in range(45)]
    for uid in uids:
        make_user(db, uid)
    result = LeaderboardService.rank(db, uids, page=3, page_size=20)
    assert result["totalCount"] == 45
    assert result["totalPages"] == 3
    assert len(result["entries"]) == 5
    assert result["entries"][0]["rank"] == 41
    assert (result["page"], result["pageSize"]) == (3, 20)


def test_page_past_the_end_is_empty(db) -> None:
    make_user(db, "only")
    result = LeaderboardService.rank(db, ["only"], page=4, page_size=20)
    assert result["entries"] == []
    assert result["totalPages"] == 1


def test_current_user_rank_comes_from_full_list(db) -> None:
    uids = ["u1", "u2", "u3"]
    for i, uid in enumerate(uids):
        make_user(db, uid)
        _complete(db, uid, i + 1)
    result = LeaderboardService.rank(db, uids, requesting_uid="u1", page=1, page_size=1)
    assert [e["uid"] for e in result["entries"]] == ["u3"]
    assert result["currentUserRank"] == 3


def test_empty_population(db) -> None:
    result = LeaderboardService.rank(db, [], requesting_uid="x")
    assert result == {
        "entries": [],
        "page": 1,
        "pageSize": 20,
        "totalCount": 0,
        "totalPages": 0,
        "currentUserRank": None,
    }


def test_unknown_uid_gets_placeholder_profile(db) -> None:
    result = LeaderboardService.rank(db, ["ghost"])
    assert result["entries"][0]["displayName"] == "Unknown User"


def test_habit_filter_restricts_scoring(db) -> None:
    make_user(db, "u1")
    SyncService.merge(db, "u1", [entry(0, "group_habit", True, ts(1)), entry(0, "private", True, ts(1))])
    result = LeaderboardService.rank(db, ["u1"], habit_ids={"group_habit"})
    assert result["entries"][0]["totalXp"] == 10


def test_group_without_habits_ranks_everyone_at_zero(db) -> None:
    make_user(db, "admin")
    make_user(db, "member", show=False)
    group = GroupService.create(db, "admin", "Team")
    GroupService.join(db, "member", group.invite_code)
    _complete(db, "member", 10, habits=("a", "b"))

    result = LeaderboardService.group_leaderboard(db, group.id, "member", 1, 20)
    assert [e["uid"] for e in result["entries"]] == ["admin", "member"]
    assert all(e["totalXp"] == 0 and e["completionRate"] == 0 for e in result["entries"])
    assert result["groupName"] == "Team"
    assert result["currentUserRank"] == 2


def test_group_leaderboard_includes_opted_out_members(db) -> None:
    make_user(db, "admin")
    make_user(db, "shy", show=False)
    group = GroupService.create(db, "admin", "Team")
    GroupService.join(db, "shy", group.invite_code)
    GroupService.update_habits(db, group.id, "admin", [GroupCategoryIn(
        category_id="prayers", name="Prayers", icon="🕌",
        items=[{"id": "fajr", "label": "Fajr", "type": "boolean"}],
    )])
    SyncService.merge(db, "shy", [entry(0, "fajr", True, ts(1)), entry(0, "other", True, ts(1))])

    result = LeaderboardService.group_leaderboard(db, group.id, "admin", 1, 20)
    assert [(e["uid"], e["totalXp"]) for e in result["entries"]] == [("shy", 10), ("admin", 0)]
