from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from habitsync.auth import get_current_user
from habitsync.config import LEADERBOARD_DEFAULT_PAGE_SIZE
from habitsync.database import get_db
from habitsync.schemas import GroupCreate, GroupHabitsUpdate, GroupUpdate, JoinGroup
from habitsync.services.group_service import GroupService, format_group
from habitsync.services.leaderboard_service import LeaderboardService

router = APIRouter(prefix="/api/v1/groups", tags=["Groups"])


# ── Group CRUD ────────────────────────────────────────────────────
@router.post("", status_code=status.HTTP_201_CREATED)
def create_group(body: GroupCreate, db: Session = Depends(get_db), uid: str = Depends(get_current_user)):
    group = GroupService.create(db, uid, body.name, body.emoji)
    return format_group(group, uid)


@router.get("")
def my_groups(db: Session = Depends(get_db), uid: str = Depends(get_current_user)):
    return [format_group(g, uid) for g in GroupService.list_for_member(db, uid)]


@router.post("/join")
def join_group(body: JoinGroup, db: Session = Depends(get_db), uid: str = Depends(get_current_user)):
    group = GroupService.join(db, uid, body.invite_code)
    return format_group(group, uid)


# ── Single group ──────────────────────────────────────────────────
@router.get("/{group_id}")
def get_group(group_id: int, db: Session = Depends(get_db), uid: str = Depends(get_current_user)):
    return format_group(GroupService.get_for_member(db, group_id, uid), uid)


@router.patch("/{group_id}")
def update_group(group_id: int, body: GroupUpdate, db: Session = Depends(get_db), uid: str = Depends(get_current_user)):
    group = GroupService.update_info(db, group_id, uid, body.name, body.emoji)
    return format_group(group, uid)


@router.delete("/{group_id}")
def delete_group(group_id: int, db: Session = Depends(get_db), uid: str = Depends(get_current_user)):
    return GroupService.delete(db, group_id, uid)


@router.post("/{group_id}/leave")
def leave_group(group_id: int, db: Session = Depends(get_db), uid: str = Depends(get_current_user)):
    return GroupService.leave(db, group_id, uid)


# ── Group habits (admin only) ─────────────────────────────────────
@router.put("/{group_id}/habits")
def update_group_habits(
    group_id: int,
    body: GroupHabitsUpdate,
    db: Session = Depends(get_db),
    uid: str = Depends(get_current_user),
):
    group = GroupService.update_habits(db, group_id, uid, body.categories)
    return format_group(group, uid)


# ── Leaderboard & member detail ───────────────────────────────────
@router.get("/{group_id}/leaderboard")
def group_leaderboard(
    group_id: int,
    page: int = 1,
    page_size: int = Query(LEADERBOARD_DEFAULT_PAGE_SIZE, alias="pageSize"),
    db: Session = Depends(get_db),
    uid: str = Depends(get_current_user),
):
    return LeaderboardService.group_leaderboard(db, group_id, uid, page, page_size)


@router.get("/{group_id}/members/{member_uid}/progress")
def member_progress(
    group_id: int,
    member_uid: str,
    db: Session = Depends(get_db),
    uid: str = Depends(get_current_user),
):
    return GroupService.member_progress(db, group_id, uid, member_uid)
