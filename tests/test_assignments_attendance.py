from datetime import date, timedelta

import pytest

from edubridge.repositories.enrollment_repository import EnrollmentRepository
from edubridge.repositories.program_repository import ProgramRepository
from edubridge.schemas.assignment import AssignmentCreate, CommentCreate, GradeRequest, SubmissionCreate
from edubridge.schemas.attendance import AttendanceMark
from edubridge.services.assignment_service import AssignmentService
from edubridge.services.attendance_service import AttendanceService
from edubridge.utils.dates import utcnow
from edubridge.utils.errors import NotFoundError


@pytest.fixture
async def classroom(db, make_user):
    instructor = await make_user("Ms Staff", role="STAFF")
    student = await make_user("Sam")
    program = await ProgramRepository(db).create_program(
        {"name": "Algebra", "description": "Equations and functions", "duration": 6, "capacity": 10},
        created_by_id=instructor["_id"],
    )
    await EnrollmentRepository(db).create_enrollment(student["_id"], program["_id"], status="APPROVED")
    return instructor, student, program


def new_assignment(program_id, days):
    return AssignmentCreate(
        title=f"Homework {days}",
        description="Solve the exercises on page 12",
        due_date=utcnow() + timedelta(days=days),
        program_id=program_id,
    )


async def test_submission_is_upserted_and_graded(db, classroom):
    instructor, student, program = classroom
    service = AssignmentService(db)
    assignment = await service.create_assignment(new_assignment(program["_id"], 3), instructor["_id"])

    first = await service.submit(assignment.id, SubmissionCreate(content="draft"), student["_id"])
    second = await service.submit(assignment.id, SubmissionCreate(content="final"), student["_id"])
    assert first.id == second.id
    assert second.content == "final"
    assert second.status == "SUBMITTED"

    graded = await service.grade(second.id, GradeRequest(grade=88, feedback="Nice work"))
    assert graded.status == "GRADED"
    assert graded.grade == 88

    listed = await service.list_by_program(program["_id"])
    assert listed[0].submission_count == 1
    assert listed[0].created_by.name == "Ms Staff"


async def test_student_assignment_statuses(db, classroom):
    instructor, student, program = classroom
    service = AssignmentService(db)
    overdue = await service.create_assignment(new_assignment(program["_id"], -2), instructor["_id"])
    pending = await service.create_assignment(new_assignment(program["_id"], 5), instructor["_id"])
    handed_in = await service.create_assignment(new_assignment(program["_id"], 7), instructor["_id"])
    await service.submit(handed_in.id, SubmissionCreate(content="done"), student["_id"])

    statuses = {a.id: a.status for a in await service.list_for_student(student["_id"])}

    assert statuses == {overdue.id: "OVERDUE", pending.id: "PENDING", handed_in.id: "SUBMITTED"}


async def test_pending_enrollment_sees_no_assignments(db, make_user, classroom):
    instructor, _, program = classroom
    newcomer = await make_user("New")
    await EnrollmentRepository(db).create_enrollment(newcomer["_id"], program["_id"])
    service = AssignmentService(db)
    await service.create_assignment(new_assignment(program["_id"], 3), instructor["_id"])

    assert await service.list_for_student(newcomer["_id"]) == []


async def test_assignment_detail_with_comments(db, classroom):
    instructor, student, program = classroom
    service = AssignmentService(db)
    assignment = await service.create_assignment(new_assignment(program["_id"], 3), instructor["_id"])
    await service.add_comment(CommentCreate(content="Is question 4 optional?", assignment_id=assignment.id), student["_id"])

    detail = await service.get_assignment(assignment.id)

    assert detail.program.name == "Algebra"
    assert [c.user.name for c in detail.comments] == ["Sam"]


async def test_assignment_needs_existing_program(db, classroom):
    instructor, _, _ = classroom
    with pytest.raises(NotFoundError):
        await AssignmentService(db).create_assignment(new_assignment("65a000000000000000000000", 3), instructor["_id"])


async def test_attendance_needs_existing_student(db, classroom):
    _, _, program = classroom
    with pytest.raises(NotFoundError, match="User not found"):
        await AttendanceService(db).mark(
            AttendanceMark(user_id="65a000000000000000000000", program_id=program["_id"], date=date(2024, 3, 4), status="PRESENT")
        )
    assert await db.attendance.count_documents({}) == 0


async def test_attendance_mark_overwrites_same_day(db, classroom):
    _, student, program = classroom
    service = AttendanceService(db)
    day = date(2024, 3, 4)

    await service.mark(AttendanceMark(user_id=student["_id"], program_id=program["_id"], date=day, status="LATE"))
    await service.mark(AttendanceMark(user_id=student["_id"], program_id=program["_id"], date=day, status="PRESENT"))

    records = await service.records_for_student(student["_id"])
    assert len(records) == 1
    assert records[0].status == "PRESENT"
    assert records[0].program.name == "Algebra"


async def test_roster_defaults_to_absent(db, make_user, classroom):
    _, student, program = classroom
    other = await make_user("Olive")
    await EnrollmentRepository(db).create_enrollment(other["_id"], program["_id"], status="APPROVED")
    service = AttendanceService(db)
    day = date(2024, 3, 4)
    await service.mark(AttendanceMark(user_id=student["_id"], program_id=program["_id"], date=day, status="PRESENT"))

    roster = {r.student_name: r.status for r in await service.roster(program["_id"], day)}

    assert roster == {"Sam": "PRESENT", "Olive": "ABSENT"}


async def test_attendance_stats(db, classroom):
    _, student, program = classroom
    service = AttendanceService(db)
    for offset, status in enumerate(["PRESENT", "PRESENT", "ABSENT"]):
        await service.mark(AttendanceMark(
            user_id=student["_id"], program_id=program["_id"], date=date(2024, 3, 1 + offset), status=status,
        ))

    stats = await service.stats(program["_id"])

    assert (stats.total, stats.present, stats.absent) == (3, 2, 1)
    assert stats.attendance_rate == 67
