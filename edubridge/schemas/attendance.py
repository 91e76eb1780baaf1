from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

from edubridge.schemas.common import DocumentModel, ProgramSummary


AttendanceStatus = Literal["PRESENT", "ABSENT", "LATE", "EXCUSED"]


class AttendanceMark(BaseModel):

    user_id: str = Field(min_length=1)
    program_id: str = Field(min_length=1)
    date: date
    status: AttendanceStatus
    notes: str = ""


class AttendanceOut(DocumentModel):

    user_id: str
    program_id: str
    date: datetime
    status: AttendanceStatus
    notes: str = ""
    program: Optional[ProgramSummary] = None


class RosterEntry(BaseModel):

    enrollment_id: str
    user_id: str
    student_name: Optional[str] = None
    student_email: Optional[str] = None
    status: AttendanceStatus
    notes: str = ""
    attendance_id: Optional[str] = None


class AttendanceStats(BaseModel):

    total: int
    present: int
    absent: int
    late: int
    excused: int
    attendance_rate: int
