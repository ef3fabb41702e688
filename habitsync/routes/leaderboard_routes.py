from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from habitsync.auth import get_optional_user
from habitsync.config import LEADERBOARD_DEFAULT_PAGE_SIZE
from habitsync.database import get_db
from habitsync.services.leaderboard_service import LeaderboardService

router = APIRouter(prefix="/api/v1/leaderboard", tags=["Leaderboard"])


@router.get("")
def get_leaderboard(
    page: int = 1,
    page_size: int = Query(LEADERBOARD_DEFAULT_PAGE_SIZE, alias="pageSize"),
    db: Session = Depends(get_db),
    uid: Optional[str] = Depends(get_optional_user),
):
    """Global leaderboard over users who have not opted out. Out-of-range paging is clamped."""
    return LeaderboardService.global_leaderboard(db, uid, page, page_size)
