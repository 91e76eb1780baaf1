from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends

from edubridge.database.connection import mongo_db_dependency
from edubridge.schemas.attendance import AttendanceMark, AttendanceOut, AttendanceStats, RosterEntry
from edubridge.services.attendance_service import AttendanceService
from edubridge.utils.dependencies import get_current_user, require_staff


router = APIRouter(prefix="/attendance", tags=["attendance"])


def get_attendance_service(db=Depends(mongo_db_dependency)) -> AttendanceService:
    return AttendanceService(db)


@router.post("", response_model=AttendanceOut)
async def mark_attendance(payload: AttendanceMark, current_user: dict = Depends(require_staff), service: AttendanceService = Depends(get_attendance_service)):
    return await service.mark(payload)


@router.get("/me", response_model=List[AttendanceOut])
async def my_attendance(program_id: Optional[str] = None, current_user: dict = Depends(get_current_user), service: AttendanceService = Depends(get_attendance_service)):
    return await service.records_for_student(current_user["_id"], program_id)


@router.get("/user/{user_id}", response_model=List[AttendanceOut])
async def user_attendance(user_id: str, program_id: Optional[str] = None, current_user: dict = Depends(require_staff), service: AttendanceService = Depends(get_attendance_service)):
    return await service.records_for_student(user_id, program_id)


@router.get("/program/{program_id}", response_model=List[RosterEntry])
async def program_roster(program_id: str, day: Optional[date] = None, current_user: dict = Depends(require_staff), service: AttendanceService = Depends(get_attendance_service)):
    return await service.roster(program_id, day)


@router.get("/program/{program_id}/stats", response_model=AttendanceStats)
async def program_stats(program_id: str, current_user: dict = Depends(require_staff), service: AttendanceService = Depends(get_attendance_service)):
    return await service.stats(program_id)
