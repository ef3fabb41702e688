from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from habitsync.auth import get_current_user
from habitsync.database import get_db
from habitsync.schemas import SyncUpload
from habitsync.services.sync_service import SyncService

router = APIRouter(prefix="/api/v1/sync", tags=["Sync"])


@router.post("/upload")
def upload(body: SyncUpload, db: Session = Depends(get_db), uid: str = Depends(get_current_user)):
    """Merge this device's entries/categories and return the full merged state."""
    return SyncService.merge(
        db,
        uid,
        entries=body.entries,
        categories=body.categories,
        current_day=body.current_day,
        theme=body.theme,
    )


@router.get("/download")
def download(db: Session = Depends(get_db), uid: str = Depends(get_current_user)):
    return SyncService.download(db, uid)


@router.post("/reset")
def reset(db: Session = Depends(get_db), uid: str = Depends(get_current_user)):
    """Delete every entry and category of the caller."""
    return SyncService.reset(db, uid)
