import logging
from typing import Any, Dict, List, Optional

from pymongo.errors import DuplicateKeyError

from edubridge.repositories.announcement_repository import AnnouncementRepository
from edubridge.repositories.assignment_repository import AssignmentRepository
from edubridge.repositories.attendance_repository import AttendanceRepository
from edubridge.repositories.chat_repository import ChatRepository
from edubridge.repositories.document_repository import DocumentRepository
from edubridge.repositories.enrollment_repository import SEAT_HOLDING_STATUSES, EnrollmentRepository
from edubridge.repositories.message_repository import MessageGroupRepository, MessageRepository
from edubridge.repositories.program_repository import ProgramRepository
from edubridge.repositories.user_repository import UserRepository
from edubridge.schemas.document import DocumentOut
from edubridge.schemas.enrollment import EnrollmentOut
from edubridge.schemas.user import StudentRow, UserCreate, UserDetail, UserPublic, UserUpdate, UserWithEnrollmentCount
from edubridge.utils.errors import ConflictError, NotFoundError
from edubridge.utils.security import hash_password


logger = logging.getLogger(__name__)


class UserService:
    """Registration, user administration and the student roster."""

    def __init__(self, db) -> None:
        self.user_repository = UserRepository(db)
        self.enrollment_repository = EnrollmentRepository(db)
        self.program_repository = ProgramRepository(db)
        self.document_repository = DocumentRepository(db)
        self._db = db

    async def register_user(self, data: UserCreate, role: str = "STUDENT") -> UserPublic:
        """
        Register a new account.
        - reject an email that is already taken
        - hash the password
        - store the user with the given role (students by default)
        """
        existing = await self.user_repository.get_user_by_email(data.email)
        if existing:
            raise ConflictError("User with this email already exists")

        try:
            user = await self.user_repository.create_user(
                email=data.email,
                hashed_password=hash_password(data.password),
                name=data.name,
                phone=data.phone,
                role=role,
            )
        except DuplicateKeyError:
            raise ConflictError("User with this email already exists")

        logger.info("Registered user %s with role %s", user["_id"], role)
        return UserPublic.from_doc(user)

    async def get_or_create_user(self, email: str, password: str, name: str, phone: str, role: str) -> UserPublic:
        """Return the existing account for `email` or create it (used for seeding)."""
        existing = await self.user_repository.get_user_by_email(email)
        if existing:
            return UserPublic.from_doc(existing)
        user = await self.user_repository.create_user(
            email=email,
            hashed_password=hash_password(password),
            name=name,
            phone=phone,
            role=role,
        )
        return UserPublic.from_doc(user)

    async def list_users(self) -> List[UserWithEnrollmentCount]:
        users = await self.user_repository.list_users()
        counts = await self.enrollment_repository.count_by_user([u["_id"] for u in users])
        return [UserWithEnrollmentCount.from_doc(u, enrollment_count=counts.get(u["_id"], 0)) for u in users]

    async def get_user(self, user_id: str) -> UserDetail:
        user = await self.user_repository.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        enrollments = await self.enrollment_repository.list_by_user(user_id)
        programs = await self.program_repository.list_by_ids([e["program_id"] for e in enrollments])
        documents = await self.document_repository.list_by_user(user_id)
        return UserDetail.from_doc(
            user,
            enrollments=[
                EnrollmentOut.from_doc(e, program=_program_summary(programs.get(e["program_id"])))
                for e in enrollments
            ],
            documents=[DocumentOut.from_doc(d) for d in documents],
        )

    async def update_user(self, user_id: str, data: UserUpdate) -> UserPublic:
        if not await self.user_repository.get_by_id(user_id):
            raise NotFoundError("User not found")
        fields = data.model_dump(exclude_none=True)
        try:
            user = await self.user_repository.update_user(user_id, fields)
        except DuplicateKeyError:
            raise ConflictError("User with this email already exists")
        return UserPublic.from_doc(user)

    async def delete_user(self, user_id: str) -> None:
        if not await self.user_repository.delete_by_id(user_id):
            raise NotFoundError("User not found")
        logger.info("Deleted user %s", user_id)

    async def list_students(self, search: Optional[str] = None) -> List[StudentRow]:
        students = await self.user_repository.list_users(role="STUDENT", search=search)
        rows = []
        for student in students:
            enrollments = await self.enrollment_repository.list_by_user(student["_id"])
            # the roster shows the earliest enrollment
            first = enrollments[-1] if enrollments else None
            program = await self.program_repository.get_by_id(first["program_id"]) if first else None
            rows.append(StudentRow(
                id=student["_id"],
                name=student.get("name"),
                email=student["email"],
                program=program["name"] if program else "Not Enrolled",
                registration_date=student.get("created_at"),
                status=first["status"] if first else "Not Enrolled",
            ))
        return rows

    async def delete_student(self, student_id: str) -> Dict[str, int]:
        """Remove a student together with everything that references them."""
        student = await self.user_repository.get_by_id(student_id)
        if not student:
            raise NotFoundError("Student not found")

        removed: Dict[str, int] = {}
        enrollments = await self.enrollment_repository.delete_for_user(student_id)
        for enrollment in enrollments:
            if enrollment["status"] in SEAT_HOLDING_STATUSES:
                await self.program_repository.release_seat(enrollment["program_id"])
        removed["enrollments"] = len(enrollments)
        removed["documents"] = await self.document_repository.delete_for_user(student_id)
        removed["attendance"] = await AttendanceRepository(self._db).delete_for_user(student_id)
        assignments = AssignmentRepository(self._db)
        removed["submissions"] = await assignments.delete_submissions_for_user(student_id)
        removed["comments"] = await assignments.delete_comments_for_user(student_id)
        removed["announcement_comments"] = await AnnouncementRepository(self._db).delete_comments_for_user(student_id)
        removed["messages"] = await MessageRepository(self._db).delete_for_user(student_id)
        removed["group_memberships"] = await MessageGroupRepository(self._db).remove_member_everywhere(student_id)
        removed["chat_sessions"] = await ChatRepository(self._db).delete_for_user(student_id)
        await self.user_repository.delete_by_id(student_id)
        logger.info("Deleted student %s and related records: %s", student_id, removed)
        return removed


def _program_summary(program: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not program:
        return None
    return {"id": program["_id"], "name": program["name"]}
