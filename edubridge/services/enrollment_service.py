import logging
from typing import Dict, List, Optional

from pymongo.errors import DuplicateKeyError

from edubridge.repositories.enrollment_repository import SEAT_HOLDING_STATUSES, EnrollmentRepository
from edubridge.repositories.program_repository import ProgramRepository
from edubridge.repositories.user_repository import UserRepository
from edubridge.schemas.common import ProgramSummary, UserSummary
from edubridge.schemas.enrollment import EnrollmentCreate, EnrollmentOut
from edubridge.utils.errors import ConflictError, NotFoundError, ValidationError


logger = logging.getLogger(__name__)


ALLOWED_TRANSITIONS: Dict[str, tuple] = {
    "PENDING": ("APPROVED", "REJECTED", "WITHDRAWN"),
    "APPROVED": ("COMPLETED", "WITHDRAWN"),
    "REJECTED": (),
    "COMPLETED": (),
    "WITHDRAWN": (),
}


class EnrollmentService:

    def __init__(
        self,
        enrollment_repo: EnrollmentRepository,
        program_repo: ProgramRepository,
        user_repo: UserRepository,
    ) -> None:
        self._enrollment_repo = enrollment_repo
        self._program_repo = program_repo
        self._user_repo = user_repo

    async def create_enrollment(self, data: EnrollmentCreate, user_id: str) -> EnrollmentOut:
        existing = await self._enrollment_repo.get_for_user_and_program(user_id, data.program_id)
        if existing:
            raise ConflictError("You are already enrolled in this program")

        program = await self._program_repo.get_by_id(data.program_id)
        if not program:
            raise NotFoundError("Program not found")

        # seat claim and insert are each atomic; a lost duplicate race gives the seat back
        if not await self._program_repo.claim_seat(program["_id"], program["capacity"]):
            raise ConflictError("Program has reached its capacity")
        try:
            enrollment = await self._enrollment_repo.create_enrollment(
                user_id=user_id,
                program_id=program["_id"],
                message=data.message or "",
            )
        except DuplicateKeyError:
            await self._program_repo.release_seat(program["_id"])
            raise ConflictError("You are already enrolled in this program")

        logger.info("User %s enrolled in program %s", user_id, program["_id"])
        return EnrollmentOut.from_doc(enrollment)

    async def list_all(self) -> List[EnrollmentOut]:
        enrollments = await self._enrollment_repo.list_all()
        return await self._with_relations(enrollments, include_user=True, include_program=True)

    async def list_by_user(self, user_id: str) -> List[EnrollmentOut]:
        enrollments = await self._enrollment_repo.list_by_user(user_id)
        return await self._with_relations(enrollments, include_program=True)

    async def list_by_program(self, program_id: str) -> List[EnrollmentOut]:
        enrollments = await self._enrollment_repo.list_by_program(program_id)
        return await self._with_relations(enrollments, include_user=True)

    async def get_enrollment(self, enrollment_id: str) -> EnrollmentOut:
        enrollment = await self._enrollment_repo.get_by_id(enrollment_id)
        if not enrollment:
            raise NotFoundError("Enrollment not found")
        return EnrollmentOut.from_doc(enrollment)

    async def update_status(self, enrollment_id: str, status: str) -> EnrollmentOut:
        enrollment = await self._enrollment_repo.get_by_id(enrollment_id)
        if not enrollment:
            raise NotFoundError("Enrollment not found")
        current = enrollment["status"]
        if status == current:
            return EnrollmentOut.from_doc(enrollment)
        if status not in ALLOWED_TRANSITIONS.get(current, ()):
            raise ValidationError(f"Cannot change enrollment status from {current} to {status}")

        updated = await self._enrollment_repo.set_status(enrollment_id, current, status)
        if not updated:
            raise ConflictError("Enrollment was modified concurrently, please retry")
        if current in SEAT_HOLDING_STATUSES and status not in SEAT_HOLDING_STATUSES:
            await self._program_repo.release_seat(enrollment["program_id"])
        logger.info("Enrollment %s moved from %s to %s", enrollment_id, current, status)
        return EnrollmentOut.from_doc(updated)

    async def delete_enrollment(self, enrollment_id: str) -> None:
        enrollment = await self._enrollment_repo.get_by_id(enrollment_id)
        if not enrollment:
            raise NotFoundError("Enrollment not found")
        if not await self._enrollment_repo.delete_by_id(enrollment_id):
            raise NotFoundError("Enrollment not found")
        if enrollment["status"] in SEAT_HOLDING_STATUSES:
            await self._program_repo.release_seat(enrollment["program_id"])

    async def _with_relations(self, enrollments, include_user: bool = False, include_program: bool = False) -> List[EnrollmentOut]:
        users = {}
        programs = {}
        if include_user:
            users = await self._user_repo.get_profiles([e["user_id"] for e in enrollments])
        if include_program:
            programs = await self._program_repo.list_by_ids([e["program_id"] for e in enrollments])
        result = []
        for e in enrollments:
            user: Optional[UserSummary] = None
            program: Optional[ProgramSummary] = None
            if e["user_id"] in users:
                user = UserSummary(**users[e["user_id"]])
            if e["program_id"] in programs:
                p = programs[e["program_id"]]
                program = ProgramSummary(id=p["_id"], name=p["name"])
            result.append(EnrollmentOut.from_doc(e, user=user, program=program))
        return result
