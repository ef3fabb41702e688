from sqlalchemy import Column, Integer, String, DateTime, JSON, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from habitsync.database import Base
from habitsync.time_utils import utc_now


class Group(Base):
    __tablename__ = "groups"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(50), nullable=False)
    emoji = Column(String(16), default="👥")
    admin_uid = Column(String(64), nullable=False, index=True)
    invite_code = Column(String(6), unique=True, nullable=False, index=True)
    categories = Column(JSON, nullable=False, default=list)  # tracked group habits
    created_at = Column(DateTime, default=utc_now)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)

    members = relationship(
        "GroupMember",
        order_by="GroupMember.id",
        cascade="all, delete-orphan",
    )

    @property
    def member_uids(self) -> list[str]:
        """Member uids in join order, admin first."""
        return [m.uid for m in self.members]


class GroupMember(Base):
    __tablename__ = "group_members"

    id = Column(Integer, primary_key=True, autoincrement=True)
    group_id = Column(Integer, ForeignKey("groups.id", ondelete="CASCADE"), nullable=False, index=True)
    uid = Column(String(64), nullable=False, index=True)
    joined_at = Column(DateTime, default=utc_now)

    __table_args__ = (
        UniqueConstraint("group_id", "uid", name="uq_group_member"),
    )
