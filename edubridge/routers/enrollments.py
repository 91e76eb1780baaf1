from typing import List

from fastapi import APIRouter, Depends, status

from edubridge.database.connection import mongo_db_dependency
from edubridge.repositories.enrollment_repository import EnrollmentRepository
from edubridge.repositories.program_repository import ProgramRepository
from edubridge.repositories.user_repository import UserRepository
from edubridge.schemas.common import StatusMessage
from edubridge.schemas.enrollment import EnrollmentCreate, EnrollmentOut, EnrollmentStatusUpdate
from edubridge.services.enrollment_service import EnrollmentService
from edubridge.utils.dependencies import get_current_user, require_staff
from edubridge.utils.errors import ForbiddenError


router = APIRouter(prefix="/enrollments", tags=["enrollments"])


def get_enrollment_service(db=Depends(mongo_db_dependency)) -> EnrollmentService:
    return EnrollmentService(EnrollmentRepository(db), ProgramRepository(db), UserRepository(db))


@router.post("", response_model=EnrollmentOut, status_code=status.HTTP_201_CREATED)
async def enroll(payload: EnrollmentCreate, current_user: dict = Depends(get_current_user), service: EnrollmentService = Depends(get_enrollment_service)):
    return await service.create_enrollment(payload, current_user["_id"])


@router.get("", response_model=List[EnrollmentOut])
async def list_enrollments(current_user: dict = Depends(require_staff), service: EnrollmentService = Depends(get_enrollment_service)):
    return await service.list_all()


@router.get("/me", response_model=List[EnrollmentOut])
async def my_enrollments(current_user: dict = Depends(get_current_user), service: EnrollmentService = Depends(get_enrollment_service)):
    return await service.list_by_user(current_user["_id"])


@router.get("/user/{user_id}", response_model=List[EnrollmentOut])
async def user_enrollments(user_id: str, current_user: dict = Depends(require_staff), service: EnrollmentService = Depends(get_enrollment_service)):
    return await service.list_by_user(user_id)


@router.get("/program/{program_id}", response_model=List[EnrollmentOut])
async def program_enrollments(program_id: str, current_user: dict = Depends(require_staff), service: EnrollmentService = Depends(get_enrollment_service)):
    return await service.list_by_program(program_id)


@router.get("/{enrollment_id}", response_model=EnrollmentOut)
async def get_enrollment(enrollment_id: str, current_user: dict = Depends(get_current_user), service: EnrollmentService = Depends(get_enrollment_service)):
    enrollment = await service.get_enrollment(enrollment_id)
    if enrollment.user_id != current_user["_id"] and current_user.get("role") not in ("ADMIN", "STAFF"):
        raise ForbiddenError("You can only view your own enrollments")
    return enrollment


@router.patch("/{enrollment_id}/status", response_model=EnrollmentOut)
async def update_status(enrollment_id: str, payload: EnrollmentStatusUpdate, current_user: dict = Depends(require_staff), service: EnrollmentService = Depends(get_enrollment_service)):
    return await service.update_status(enrollment_id, payload.status)


@router.delete("/{enrollment_id}", response_model=StatusMessage)
async def delete_enrollment(enrollment_id: str, current_user: dict = Depends(require_staff), service: EnrollmentService = Depends(get_enrollment_service)):
    await service.delete_enrollment(enrollment_id)
    return StatusMessage()
