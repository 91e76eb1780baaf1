from typing import List, Optional

from fastapi import APIRouter, Depends

from edubridge.database.connection import mongo_db_dependency
from edubridge.schemas.common import StatusMessage
from edubridge.schemas.user import StudentRow, UserDetail, UserPublic, UserUpdate, UserWithEnrollmentCount
from edubridge.services.user_service import UserService
from edubridge.utils.dependencies import get_current_user, require_admin, require_staff
from edubridge.utils.errors import ForbiddenError


router = APIRouter(tags=["users"])


def get_user_service(db=Depends(mongo_db_dependency)) -> UserService:
    return UserService(db)


@router.get("/users", response_model=List[UserWithEnrollmentCount])
async def list_users(current_user: dict = Depends(require_admin), service: UserService = Depends(get_user_service)):
    return await service.list_users()


@router.get("/users/{user_id}", response_model=UserDetail)
async def get_user(user_id: str, current_user: dict = Depends(get_current_user), service: UserService = Depends(get_user_service)):
    if current_user["_id"] != user_id and current_user.get("role") not in ("ADMIN", "STAFF"):
        raise ForbiddenError("You can only view your own profile")
    return await service.get_user(user_id)


@router.put("/users/{user_id}", response_model=UserPublic)
async def update_user(user_id: str, payload: UserUpdate, current_user: dict = Depends(require_admin), service: UserService = Depends(get_user_service)):
    return await service.update_user(user_id, payload)


@router.delete("/users/{user_id}", response_model=StatusMessage)
async def delete_user(user_id: str, current_user: dict = Depends(require_admin), service: UserService = Depends(get_user_service)):
    await service.delete_user(user_id)
    return StatusMessage()


@router.get("/students", response_model=List[StudentRow])
async def list_students(search: Optional[str] = None, current_user: dict = Depends(require_staff), service: UserService = Depends(get_user_service)):
    return await service.list_students(search)


@router.delete("/students/{student_id}")
async def delete_student(student_id: str, current_user: dict = Depends(require_admin), service: UserService = Depends(get_user_service)):
    removed = await service.delete_student(student_id)
    return {"success": True, "removed": removed}
