from datetime import datetime
from typing import Literal, TypedDict


AttendanceStatus = Literal["PRESENT", "ABSENT", "LATE", "EXCUSED"]


class AttendanceDocument(TypedDict, total=False):
    _id: str
    user_id: str
    program_id: str
    # midnight UTC of the session day
    date: datetime
    status: AttendanceStatus
    notes: str
    created_at: datetime
    updated_at: datetime
