"""
group_service.py — Groups, membership and the group habit scope
A group tracks its own subset of habit items; its leaderboard ranks every
member on those habit ids only. Admin-only operations: rename/re-emoji,
replace tracked habits, view a member's per-day detail, delete.
"""

import logging
import secrets
from dataclasses import dataclass

from sqlalchemy.orm import Session

from habitsync.database import transaction
from habitsync.errors import ConflictError, ForbiddenError, NotFoundError
from habitsync.models.group import Group, GroupMember
from habitsync.models.user import User
from habitsync.schemas import GroupCategoryIn
from habitsync.services.entry_store import EntryStore
from habitsync.time_utils import isoformat_z

logger = logging.getLogger(__name__)

# No 0/O or 1/I/L, they are easy to mistype
INVITE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
INVITE_CODE_LENGTH = 6
INVITE_CODE_ATTEMPTS = 10
DEFAULT_EMOJI = "👥"


@dataclass(frozen=True)
class GroupScope:
    population_uids: list[str]
    habit_ids: set[str]


def generate_invite_code() -> str:
    return "".join(secrets.choice(INVITE_ALPHABET) for _ in range(INVITE_CODE_LENGTH))


def group_habit_ids(categories: list[dict]) -> set[str]:
    """Flatten group categories into the set of habit ids they track."""
    return {item["id"] for cat in categories or [] for item in cat.get("items", [])}


def format_group(group: Group, current_uid: str) -> dict:
    return {
        "id": group.id,
        "name": group.name,
        "emoji": group.emoji,
        "adminUid": group.admin_uid,
        "isAdmin": group.admin_uid == current_uid,
        "memberCount": len(group.members),
        "inviteCode": group.invite_code,
        "categories": group.categories or [],
        "createdAt": isoformat_z(group.created_at),
    }


def _category_payload(categories: list[GroupCategoryIn]) -> list[dict]:
    return [
        {
            "categoryId": c.category_id,
            "name": c.name,
            "icon": c.icon,
            "items": [item.model_dump() for item in c.items],
            "sortOrder": c.sort_order,
        }
        for c in sorted(categories, key=lambda c: c.sort_order)
    ]


class GroupService:

    @staticmethod
    def scope(group: Group) -> GroupScope:
        return GroupScope(population_uids=group.member_uids, habit_ids=group_habit_ids(group.categories))

    # ------------------------------------------------------------------
    @staticmethod
    def get(db: Session, group_id: int) -> Group:
        group = db.get(Group, group_id)
        if group is None:
            raise NotFoundError("Group not found")
        return group

    @staticmethod
    def get_for_member(db: Session, group_id: int, uid: str) -> Group:
        group = GroupService.get(db, group_id)
        if uid not in group.member_uids:
            raise ForbiddenError("You are not a member of this group")
        return group

    @staticmethod
    def get_for_admin(db: Session, group_id: int, uid: str, action: str) -> Group:
        group = GroupService.get(db, group_id)
        if group.admin_uid != uid:
            raise ForbiddenError(f"Only the group admin can {action}")
        return group

    @staticmethod
    def list_for_member(db: Session, uid: str) -> list[Group]:
        return (
            db.query(Group)
            .join(GroupMember, GroupMember.group_id == Group.id)
            .filter(GroupMember.uid == uid)
            .order_by(Group.id.asc())
            .all()
        )

    # ------------------------------------------------------------------
    @staticmethod
    def _unique_invite_code(db: Session) -> str:
        code = generate_invite_code()
        for _ in range(INVITE_CODE_ATTEMPTS):
            if db.query(Group.id).filter(Group.invite_code == code).first() is None:
                break
            code = generate_invite_code()
        return code

    @staticmethod
    def create(db: Session, uid: str, name: str, emoji: str | None = None) -> Group:
        with transaction(db, conflict_message="Invite code collision, please try again"):
            group = Group(
                name=name.strip(),
                emoji=emoji or DEFAULT_EMOJI,
                admin_uid=uid,
                invite_code=GroupService._unique_invite_code(db),
                categories=[],
            )
            # admin is also a member
            group.members.append(GroupMember(uid=uid))
            db.add(group)
        logger.info(f"group created id={group.id} admin={uid}")
        return group

    @staticmethod
    def join(db: Session, uid: str, invite_code: str) -> Group:
        code = invite_code.strip().upper()
        group = db.query(Group).filter(Group.invite_code == code).first()
        if group is None:
            raise NotFoundError("Invalid invite code")
        if uid in group.member_uids:
            raise ConflictError("You are already a member of this group")

        with transaction(db, conflict_message="You are already a member of this group"):
            db.add(GroupMember(group_id=group.id, uid=uid))
        db.refresh(group)
        logger.info(f"group joined id={group.id} uid={uid}")
        return group

    @staticmethod
    def leave(db: Session, group_id: int, uid: str) -> dict:
        group = GroupService.get_for_member(db, group_id, uid)
        if group.admin_uid == uid:
            raise ForbiddenError("The admin cannot leave the group, delete it instead")

        with transaction(db):
            db.query(GroupMember).filter(
                GroupMember.group_id == group.id, GroupMember.uid == uid
            ).delete(synchronize_session=False)
        logger.info(f"group left id={group_id} uid={uid}")
        return {"status": "success", "message": "Left the group"}

    @staticmethod
    def delete(db: Session, group_id: int, uid: str) -> dict:
        group = GroupService.get_for_admin(db, group_id, uid, "delete the group")
        with transaction(db):
            db.delete(group)
        logger.info(f"group deleted id={group_id} admin={uid}")
        return {"status": "success", "message": "Group deleted"}

    @staticmethod
    def update_info(db: Session, group_id: int, uid: str, name: str | None = None, emoji: str | None = None) -> Group:
        group = GroupService.get_for_admin(db, group_id, uid, "edit the group")
        with transaction(db):
            if name and name.strip():
                group.name = name.strip()
            if emoji:
                group.emoji = emoji
        return group

    @staticmethod
    def update_habits(db: Session, group_id: int, uid: str, categories: list[GroupCategoryIn]) -> Group:
        group = GroupService.get_for_admin(db, group_id, uid, "edit the group habits")
        with transaction(db):
            group.categories = _category_payload(categories)
        logger.info(f"group habits updated id={group_id} habits={len(group_habit_ids(group.categories))}")
        return group

    # ------------------------------------------------------------------
    @staticmethod
    def member_progress(db: Session, group_id: int, uid: str, member_uid: str) -> dict:
        """Per-day detail of one member on the group's habits (admin only)."""
        group = GroupService.get_for_admin(db, group_id, uid, "view member details")
        if member_uid not in group.member_uids:
            raise NotFoundError("Member not found in this group")

        entries = EntryStore.find_by_user(db, member_uid, group_habit_ids(group.categories))
        day_map: dict[int, dict] = {}
        for entry in entries:
            day_map.setdefault(entry.day_index, {})[entry.habit_id] = entry.value

        member = db.query(User).filter(User.uid == member_uid).first()
        return {
            "member": {
                "uid": member_uid,
                "displayName": member.display_name if member else "Unknown User",
                "photoURL": member.photo_url if member else None,
            },
            "categories": group.categories or [],
            "dayMap": day_map,
        }
