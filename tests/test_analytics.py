from datetime import datetime, timedelta

import pytest

from edubridge.repositories.enrollment_repository import EnrollmentRepository
from edubridge.repositories.program_repository import ProgramRepository
from edubridge.services.analytics_service import AnalyticsService, percentage
from edubridge.utils.dates import month_windows, sub_months, utcnow


@pytest.fixture
async def school(db, make_user):
    programs = ProgramRepository(db)
    enrollments = EnrollmentRepository(db)
    await make_user("Admin", role="ADMIN")
    students = [await make_user(f"Student {i}") for i in range(3)]

    physics = await programs.create_program(
        {"name": "Physics", "description": "Mechanics and waves", "duration": 8, "capacity": 20,
         "status": "ACTIVE", "start_date": utcnow() + timedelta(days=2)},
        created_by_id="admin",
    )
    art = await programs.create_program(
        {"name": "Art", "description": "Drawing and painting", "duration": 4, "capacity": 20, "status": "COMPLETED"},
        created_by_id="admin",
    )
    await enrollments.create_enrollment(students[0]["_id"], physics["_id"], status="COMPLETED")
    await enrollments.create_enrollment(students[1]["_id"], physics["_id"], status="APPROVED")
    await enrollments.create_enrollment(students[2]["_id"], physics["_id"])
    await enrollments.create_enrollment(students[0]["_id"], art["_id"], status="COMPLETED")
    return physics, art


def as_dict(values):
    return {v.name: v.value for v in values}


async def test_dashboard_summary(db, school):
    summary = await AnalyticsService(db).dashboard_summary()

    assert summary.total_students == 3
    assert summary.total_programs == 2
    assert summary.total_enrollments == 4
    assert summary.active_programs == 1
    assert summary.pending_enrollments == 1
    assert summary.completion_rate == 50


async def test_distributions(db, school):
    service = AnalyticsService(db)

    enrollment_status = as_dict(await service.enrollment_status_distribution())
    assert enrollment_status == {"PENDING": 1, "APPROVED": 1, "REJECTED": 0, "COMPLETED": 2, "WITHDRAWN": 0}
    assert as_dict(await service.user_role_distribution()) == {"ADMIN": 1, "STAFF": 0, "STUDENT": 3}
    assert as_dict(await service.program_status_distribution())["ACTIVE"] == 1


async def test_popularity_and_completion(db, school):
    service = AnalyticsService(db)

    popularity = await service.program_popularity()
    assert [(p.name, p.value) for p in popularity] == [("Physics", 3), ("Art", 1)]

    completion = as_dict(await service.completion_rate_by_program())
    assert completion == {"Physics": 33, "Art": 100}


async def test_recent_activity_and_trends(db, school):
    service = AnalyticsService(db)

    activity = await service.recent_activity()
    assert activity.new_users == 4
    assert activity.new_enrollments == 4
    assert activity.approved_enrollments == 1

    trends = await service.enrollment_trends()
    assert len(trends) == 6
    assert trends[-1].value == 4


async def test_upcoming_sessions(db, school):
    physics, _ = school
    sessions = await AnalyticsService(db).upcoming_sessions()

    assert [(s.id, s.enrollments) for s in sessions] == [(physics["_id"], 3)]


def test_month_windows_cross_year():
    windows = month_windows(datetime(2024, 2, 10, 9, 30), count=3)

    assert [label for label, _, _ in windows] == ["Dec 2023", "Jan 2024", "Feb 2024"]
    assert windows[0][1] == datetime(2023, 12, 1)
    assert windows[0][2] == datetime(2024, 1, 1)
    assert windows[-1][2] == datetime(2024, 2, 10, 9, 30)


def test_percentage():
    assert percentage(0, 0) == 0
    assert percentage(1, 3) == 33
    assert percentage(2, 3) == 67


def test_sub_months_from_month_end():
    # March 31st minus one month lands in February, not March 3rd
    assert sub_months(datetime(2024, 3, 31, 18, 0), 1) == datetime(2024, 2, 1)
    assert sub_months(datetime(2024, 1, 15), 13) == datetime(2022, 12, 1)
    assert sub_months(datetime(2024, 5, 20), 0) == datetime(2024, 5, 1)
