"""
Request schemas for the sync, group and user endpoints.

Wire names are camelCase (dayIndex, habitId, updatedAt ...); the Python side
uses snake_case through the alias generator.
"""
from datetime import datetime
from typing import Annotated, List, Literal, Optional, Union

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, StrictBool, StrictFloat, StrictInt, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Upper bound of every integer column (signed 32-bit).
MAX_INT = 2_147_483_647

# true/false, or a non-negative finite count. Strings are rejected.
HabitValue = Union[
    StrictBool,
    Annotated[StrictInt, Field(ge=0, le=MAX_INT)],
    Annotated[StrictFloat, Field(ge=0, le=MAX_INT, allow_inf_nan=False)],
]


class HabitItemIn(CamelModel):
    id: str = Field(min_length=1, max_length=100)
    label: str = Field(min_length=1, max_length=200)
    type: Literal["boolean", "number"]


def _unique_item_ids(items: List[HabitItemIn]) -> List[HabitItemIn]:
    seen = set()
    for item in items:
        if item.id in seen:
            raise ValueError(f"duplicate habit item id '{item.id}'")
        seen.add(item.id)
    return items


HabitItems = Annotated[List[HabitItemIn], AfterValidator(_unique_item_ids)]


class EntryIn(CamelModel):
    day_index: StrictInt = Field(ge=0, le=MAX_INT)
    habit_id: str = Field(min_length=1, max_length=100)
    value: HabitValue
    updated_at: datetime


class CategoryIn(CamelModel):
    category_id: str = Field(min_length=1, max_length=100)
    name: str = Field(min_length=1, max_length=200)
    icon: str = Field(min_length=1, max_length=50)
    items: HabitItems = Field(default_factory=list)
    sort_order: StrictInt = Field(default=0, ge=-MAX_INT, le=MAX_INT)
    updated_at: datetime


class SyncUpload(CamelModel):
    entries: List[EntryIn] = Field(default_factory=list)
    # None leaves stored categories untouched; a list is the complete category set.
    categories: Optional[List[CategoryIn]] = None
    current_day: Optional[StrictInt] = Field(default=None, ge=0, le=MAX_INT)
    theme: Optional[str] = Field(default=None, min_length=1, max_length=20)


class GroupCategoryIn(CamelModel):
    category_id: str = Field(min_length=1, max_length=100)
    name: str = Field(min_length=1, max_length=200)
    icon: str = Field(min_length=1, max_length=50)
    items: HabitItems = Field(default_factory=list)
    sort_order: StrictInt = Field(default=0, ge=-MAX_INT, le=MAX_INT)


class GroupCreate(CamelModel):
    name: str = Field(min_length=1, max_length=50)
    emoji: Optional[str] = Field(default=None, max_length=16)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("group name is required")
        return v


class GroupUpdate(CamelModel):
    name: Optional[str] = Field(default=None, max_length=50)
    emoji: Optional[str] = Field(default=None, max_length=16)


class GroupHabitsUpdate(CamelModel):
    categories: List[GroupCategoryIn]


class JoinGroup(CamelModel):
    invite_code: str = Field(min_length=1, max_length=32)


class LeaderboardVisibility(CamelModel):
    show_on_leaderboard: StrictBool
