from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, field_validator

from edubridge.schemas.common import DocumentModel, ProgramSummary, UserSummary


EnrollmentStatus = Literal["PENDING", "APPROVED", "REJECTED", "COMPLETED", "WITHDRAWN"]


class EnrollmentCreate(BaseModel):

    program_id: str
    message: Optional[str] = None

    @field_validator("program_id")
    @classmethod
    def program_required(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Program is required")
        return v.strip()


class EnrollmentStatusUpdate(BaseModel):

    status: EnrollmentStatus


class EnrollmentOut(DocumentModel):

    user_id: str
    program_id: str
    status: EnrollmentStatus
    message: str = ""
    registered_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    user: Optional[UserSummary] = None
    program: Optional[ProgramSummary] = None
