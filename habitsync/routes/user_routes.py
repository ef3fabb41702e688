from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from habitsync.auth import get_current_user
from habitsync.database import get_db
from habitsync.schemas import LeaderboardVisibility
from habitsync.services.user_service import UserService, format_user

router = APIRouter(prefix="/api/v1/users", tags=["Users"])


@router.get("/me")
def me(db: Session = Depends(get_db), uid: str = Depends(get_current_user)):
    return format_user(UserService.get(db, uid))


@router.patch("/me/leaderboard-visibility")
def set_leaderboard_visibility(
    body: LeaderboardVisibility,
    db: Session = Depends(get_db),
    uid: str = Depends(get_current_user),
):
    user = UserService.set_leaderboard_visibility(db, uid, body.show_on_leaderboard)
    return format_user(user)
