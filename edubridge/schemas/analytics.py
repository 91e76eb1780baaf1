from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class RecentActivity(BaseModel):

    new_users: int
    new_enrollments: int
    updated_programs: int
    approved_enrollments: int
    rejected_enrollments: int


class DashboardSummary(BaseModel):

    total_students: int
    total_programs: int
    total_enrollments: int
    active_programs: int
    pending_enrollments: int
    completion_rate: int


class UpcomingSession(BaseModel):

    id: str
    name: str
    date: Optional[datetime] = None
    enrollments: int
