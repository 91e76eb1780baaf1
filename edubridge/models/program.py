from datetime import datetime
from typing import Literal, Optional, TypedDict


ProgramStatus = Literal["UPCOMING", "ACTIVE", "COMPLETED", "CANCELLED"]


class ProgramDocument(TypedDict, total=False):
    _id: str
    name: str
    description: str
    duration: int
    capacity: int
    # number of seat-holding enrollments, kept in step with the enrollments collection
    seats_taken: int
    start_date: Optional[datetime]
    end_date: Optional[datetime]
    status: ProgramStatus
    created_by_id: str
    created_at: datetime
    updated_at: datetime
