from datetime import date
from typing import List, Optional

from edubridge.repositories.attendance_repository import AttendanceRepository
from edubridge.repositories.enrollment_repository import ACTIVE_STATUSES, EnrollmentRepository
from edubridge.repositories.program_repository import ProgramRepository
from edubridge.repositories.user_repository import UserRepository
from edubridge.schemas.attendance import AttendanceMark, AttendanceOut, AttendanceStats, RosterEntry
from edubridge.schemas.common import ProgramSummary
from edubridge.utils.dates import start_of_day, utcnow
from edubridge.utils.errors import NotFoundError


class AttendanceService:

    def __init__(self, db) -> None:
        self._attendance_repo = AttendanceRepository(db)
        self._enrollment_repo = EnrollmentRepository(db)
        self._program_repo = ProgramRepository(db)
        self._user_repo = UserRepository(db)

    async def mark(self, data: AttendanceMark) -> AttendanceOut:
        """One record per (student, program, day); marking again overwrites it."""
        if not await self._program_repo.get_by_id(data.program_id):
            raise NotFoundError("Program not found")
        if not await self._user_repo.get_by_id(data.user_id):
            raise NotFoundError("User not found")
        record = await self._attendance_repo.upsert(
            user_id=data.user_id,
            program_id=data.program_id,
            day=start_of_day(data.date),
            status=data.status,
            notes=data.notes,
        )
        return AttendanceOut.from_doc(record)

    async def roster(self, program_id: str, day: Optional[date] = None) -> List[RosterEntry]:
        day_start = start_of_day(day or utcnow())
        enrollments = await self._enrollment_repo.list_by_program(program_id, statuses=list(ACTIVE_STATUSES))
        records = await self._attendance_repo.list_for_day(program_id, day_start)
        by_user = {r["user_id"]: r for r in records}
        profiles = await self._user_repo.get_profiles([e["user_id"] for e in enrollments])
        roster = []
        for enrollment in enrollments:
            record = by_user.get(enrollment["user_id"])
            profile = profiles.get(enrollment["user_id"], {})
            roster.append(RosterEntry(
                enrollment_id=enrollment["_id"],
                user_id=enrollment["user_id"],
                student_name=profile.get("name"),
                student_email=profile.get("email"),
                status=record["status"] if record else "ABSENT",
                notes=record.get("notes", "") if record else "",
                attendance_id=record["_id"] if record else None,
            ))
        return roster

    async def records_for_student(self, user_id: str, program_id: Optional[str] = None) -> List[AttendanceOut]:
        records = await self._attendance_repo.list_for_user(user_id, program_id)
        programs = await self._program_repo.list_by_ids([r["program_id"] for r in records])
        result = []
        for r in records:
            program = programs.get(r["program_id"])
            result.append(AttendanceOut.from_doc(
                r, program=ProgramSummary(id=program["_id"], name=program["name"]) if program else None
            ))
        return result

    async def stats(self, program_id: str) -> AttendanceStats:
        statuses = await self._attendance_repo.statuses_for_program(program_id)
        total = len(statuses)
        present = statuses.count("PRESENT")
        return AttendanceStats(
            total=total,
            present=present,
            absent=statuses.count("ABSENT"),
            late=statuses.count("LATE"),
            excused=statuses.count("EXCUSED"),
            attendance_rate=round(present / total * 100) if total else 0,
        )
