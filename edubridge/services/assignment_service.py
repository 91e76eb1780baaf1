import logging
from typing import List, Optional

from edubridge.repositories.assignment_repository import AssignmentRepository
from edubridge.repositories.enrollment_repository import ACTIVE_STATUSES, EnrollmentRepository
from edubridge.repositories.program_repository import ProgramRepository
from edubridge.repositories.user_repository import UserRepository
from edubridge.schemas.assignment import (
    AssignmentCreate,
    AssignmentDetail,
    AssignmentOut,
    CommentCreate,
    CommentOut,
    GradeRequest,
    StudentAssignment,
    SubmissionCreate,
    SubmissionOut,
)
from edubridge.schemas.common import ProgramSummary, UserSummary
from edubridge.utils.dates import to_naive_utc, utcnow
from edubridge.utils.errors import NotFoundError


logger = logging.getLogger(__name__)


class AssignmentService:

    def __init__(self, db) -> None:
        self._assignment_repo = AssignmentRepository(db)
        self._program_repo = ProgramRepository(db)
        self._enrollment_repo = EnrollmentRepository(db)
        self._user_repo = UserRepository(db)

    async def create_assignment(self, data: AssignmentCreate, created_by_id: str) -> AssignmentOut:
        if not await self._program_repo.get_by_id(data.program_id):
            raise NotFoundError("Program not found")
        assignment = await self._assignment_repo.create_assignment(
            title=data.title,
            description=data.description,
            due_date=to_naive_utc(data.due_date),
            program_id=data.program_id,
            created_by_id=created_by_id,
        )
        logger.info("Assignment %s created for program %s", assignment["_id"], data.program_id)
        return AssignmentOut.from_doc(assignment)

    async def list_by_program(self, program_id: str) -> List[AssignmentOut]:
        assignments = await self._assignment_repo.list_by_programs([program_id])
        ids = [a["_id"] for a in assignments]
        counts = await self._assignment_repo.count_submissions(ids)
        creators = await self._user_repo.get_profiles([a["created_by_id"] for a in assignments])
        return [
            AssignmentOut.from_doc(
                a,
                submission_count=counts.get(a["_id"], 0),
                created_by=_summary(creators.get(a["created_by_id"])),
            )
            for a in assignments
        ]

    async def get_assignment(self, assignment_id: str) -> AssignmentDetail:
        assignment = await self._assignment_repo.get_by_id(assignment_id)
        if not assignment:
            raise NotFoundError("Assignment not found")
        submissions = await self._assignment_repo.list_submissions(assignment_id)
        comments = await self._assignment_repo.list_comments(assignment_id)
        profiles = await self._user_repo.get_profiles(
            [assignment["created_by_id"]] + [s["user_id"] for s in submissions] + [c["user_id"] for c in comments]
        )
        program = await self._program_repo.get_by_id(assignment["program_id"])
        return AssignmentDetail.from_doc(
            assignment,
            created_by=_summary(profiles.get(assignment["created_by_id"])),
            program=ProgramSummary(id=program["_id"], name=program["name"]) if program else None,
            submissions=[SubmissionOut.from_doc(s, user=_summary(profiles.get(s["user_id"]))) for s in submissions],
            comments=[CommentOut.from_doc(c, user=_summary(profiles.get(c["user_id"]))) for c in comments],
        )

    async def submit(self, assignment_id: str, data: SubmissionCreate, user_id: str) -> SubmissionOut:
        """Create the user's submission, or replace its content if one exists."""
        if not await self._assignment_repo.get_by_id(assignment_id):
            raise NotFoundError("Assignment not found")
        submission = await self._assignment_repo.upsert_submission(assignment_id, user_id, data.content, data.file_url)
        return SubmissionOut.from_doc(submission)

    async def grade(self, submission_id: str, data: GradeRequest) -> SubmissionOut:
        submission = await self._assignment_repo.grade_submission(submission_id, data.grade, data.feedback)
        if not submission:
            raise NotFoundError("Submission not found")
        logger.info("Submission %s graded %s", submission_id, data.grade)
        return SubmissionOut.from_doc(submission)

    async def add_comment(self, data: CommentCreate, user_id: str) -> CommentOut:
        if data.assignment_id and not await self._assignment_repo.get_by_id(data.assignment_id):
            raise NotFoundError("Assignment not found")
        if data.submission_id and not await self._assignment_repo.get_submission(data.submission_id):
            raise NotFoundError("Submission not found")
        comment = await self._assignment_repo.add_comment(data.content, user_id, data.assignment_id, data.submission_id)
        return CommentOut.from_doc(comment)

    async def list_for_student(self, user_id: str) -> List[StudentAssignment]:
        enrollments = await self._enrollment_repo.list_by_user(user_id, statuses=list(ACTIVE_STATUSES))
        program_ids = [e["program_id"] for e in enrollments]
        if not program_ids:
            return []
        assignments = await self._assignment_repo.list_by_programs(program_ids)
        programs = await self._program_repo.list_by_ids(program_ids)
        submissions = await self._assignment_repo.submissions_for_user(user_id, [a["_id"] for a in assignments])
        now = utcnow()
        result = []
        for a in assignments:
            submission = submissions.get(a["_id"])
            if submission:
                status = submission["status"]
            elif a["due_date"] < now:
                status = "OVERDUE"
            else:
                status = "PENDING"
            program = programs.get(a["program_id"])
            result.append(StudentAssignment.from_doc(
                a,
                program=ProgramSummary(id=program["_id"], name=program["name"]) if program else None,
                submission=SubmissionOut.from_doc(submission) if submission else None,
                status=status,
            ))
        return result


def _summary(profile: Optional[dict]) -> Optional[UserSummary]:
    return UserSummary(**profile) if profile else None
