from typing import List

from fastapi import APIRouter, Depends, status

from edubridge.database.connection import mongo_db_dependency
from edubridge.schemas.announcement import (
    AnnouncementCommentCreate,
    AnnouncementCommentOut,
    AnnouncementCreate,
    AnnouncementDetail,
    AnnouncementOut,
)
from edubridge.services.announcement_service import AnnouncementService
from edubridge.utils.dependencies import get_current_user, require_staff


router = APIRouter(prefix="/announcements", tags=["announcements"])


def get_announcement_service(db=Depends(mongo_db_dependency)) -> AnnouncementService:
    return AnnouncementService(db)


@router.post("", response_model=AnnouncementOut, status_code=status.HTTP_201_CREATED)
async def create_announcement(payload: AnnouncementCreate, current_user: dict = Depends(require_staff), service: AnnouncementService = Depends(get_announcement_service)):
    return await service.create(payload, current_user["_id"])


@router.get("/me", response_model=List[AnnouncementOut])
async def my_announcements(current_user: dict = Depends(get_current_user), service: AnnouncementService = Depends(get_announcement_service)):
    return await service.list_for_student(current_user["_id"])


@router.get("/program/{program_id}", response_model=List[AnnouncementOut])
async def program_announcements(program_id: str, current_user: dict = Depends(get_current_user), service: AnnouncementService = Depends(get_announcement_service)):
    return await service.list_by_program(program_id)


@router.get("/{announcement_id}", response_model=AnnouncementDetail)
async def get_announcement(announcement_id: str, current_user: dict = Depends(get_current_user), service: AnnouncementService = Depends(get_announcement_service)):
    return await service.get(announcement_id)


@router.post("/{announcement_id}/comments", response_model=AnnouncementCommentOut, status_code=status.HTTP_201_CREATED)
async def add_comment(announcement_id: str, payload: AnnouncementCommentCreate, current_user: dict = Depends(get_current_user), service: AnnouncementService = Depends(get_announcement_service)):
    return await service.add_comment(announcement_id, payload, current_user["_id"])
