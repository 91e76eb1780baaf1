from datetime import datetime, timedelta
from typing import List, Optional

from edubridge.repositories.enrollment_repository import EnrollmentRepository
from edubridge.repositories.program_repository import ProgramRepository
from edubridge.repositories.user_repository import UserRepository
from edubridge.schemas.analytics import DashboardSummary, RecentActivity, UpcomingSession
from edubridge.schemas.common import NamedValue
from edubridge.utils.dates import days_ago, month_windows, utcnow


ENROLLMENT_STATUSES = ["PENDING", "APPROVED", "REJECTED", "COMPLETED", "WITHDRAWN"]
PROGRAM_STATUSES = ["UPCOMING", "ACTIVE", "COMPLETED", "CANCELLED"]
USER_ROLES = ["ADMIN", "STAFF", "STUDENT"]


def percentage(part: int, total: int) -> int:
    return round(part / total * 100) if total else 0


class AnalyticsService:
    """Dashboard counters. Every figure is computed from the live collections."""

    def __init__(self, db, now: Optional[datetime] = None) -> None:
        self._enrollment_repo = EnrollmentRepository(db)
        self._program_repo = ProgramRepository(db)
        self._user_repo = UserRepository(db)
        self._now = now

    @property
    def now(self) -> datetime:
        return self._now or utcnow()

    async def enrollment_trends(self, months: int = 6) -> List[NamedValue]:
        data = []
        for label, start, end in month_windows(self.now, months):
            count = await self._enrollment_repo.count({"registered_at": {"$gte": start, "$lt": end}})
            data.append(NamedValue(name=label, value=count))
        return data

    async def program_popularity(self, limit: int = 5) -> List[NamedValue]:
        programs = await self._program_repo.list_programs()
        counts = await self._enrollment_repo.count_by_program([p["_id"] for p in programs])
        ranked = sorted(programs, key=lambda p: counts.get(p["_id"], 0), reverse=True)[:limit]
        return [NamedValue(name=p["name"], value=counts.get(p["_id"], 0)) for p in ranked]

    async def enrollment_status_distribution(self) -> List[NamedValue]:
        return [
            NamedValue(name=status, value=await self._enrollment_repo.count({"status": status}))
            for status in ENROLLMENT_STATUSES
        ]

    async def program_status_distribution(self) -> List[NamedValue]:
        return [
            NamedValue(name=status, value=await self._program_repo.count({"status": status}))
            for status in PROGRAM_STATUSES
        ]

    async def user_role_distribution(self) -> List[NamedValue]:
        return [NamedValue(name=role, value=await self._user_repo.count({"role": role})) for role in USER_ROLES]

    async def recent_activity(self, days: int = 7) -> RecentActivity:
        since = days_ago(self.now, days)
        return RecentActivity(
            new_users=await self._user_repo.count({"created_at": {"$gte": since}}),
            new_enrollments=await self._enrollment_repo.count({"registered_at": {"$gte": since}}),
            updated_programs=await self._program_repo.count({"updated_at": {"$gte": since}}),
            approved_enrollments=await self._enrollment_repo.count({"status": "APPROVED", "updated_at": {"$gte": since}}),
            rejected_enrollments=await self._enrollment_repo.count({"status": "REJECTED", "updated_at": {"$gte": since}}),
        )

    async def completion_rate_by_program(self, limit: int = 5) -> List[NamedValue]:
        programs = await self._program_repo.list_by_status(["ACTIVE", "COMPLETED"], limit=limit)
        statuses = await self._enrollment_repo.statuses_by_program([p["_id"] for p in programs])
        data = []
        for program in programs:
            program_statuses = statuses.get(program["_id"], [])
            data.append(NamedValue(
                name=program["name"],
                value=percentage(program_statuses.count("COMPLETED"), len(program_statuses)),
            ))
        return data

    async def dashboard_summary(self) -> DashboardSummary:
        total_enrollments = await self._enrollment_repo.count()
        completed = await self._enrollment_repo.count({"status": "COMPLETED"})
        return DashboardSummary(
            total_students=await self._user_repo.count({"role": "STUDENT"}),
            total_programs=await self._program_repo.count(),
            total_enrollments=total_enrollments,
            active_programs=await self._program_repo.count({"status": "ACTIVE"}),
            pending_enrollments=await self._enrollment_repo.count({"status": "PENDING"}),
            completion_rate=percentage(completed, total_enrollments),
        )

    async def upcoming_sessions(self, days: int = 7, limit: int = 3) -> List[UpcomingSession]:
        # active programs stand in for sessions until sessions are modelled
        programs = await self._program_repo.upcoming_active(self.now + timedelta(days=days), limit=limit)
        counts = await self._enrollment_repo.count_by_program([p["_id"] for p in programs])
        return [
            UpcomingSession(id=p["_id"], name=p["name"], date=p.get("start_date"), enrollments=counts.get(p["_id"], 0))
            for p in programs
        ]
