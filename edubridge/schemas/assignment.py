from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from edubridge.schemas.common import DocumentModel, ProgramSummary, UserSummary


class AssignmentCreate(BaseModel):

    title: str
    description: str
    due_date: datetime
    program_id: str

    @field_validator("title")
    @classmethod
    def title_length(cls, v: str) -> str:
        if len(v.strip()) < 2:
            raise ValueError("Title must be at least 2 characters")
        return v.strip()

    @field_validator("description")
    @classmethod
    def description_length(cls, v: str) -> str:
        if len(v.strip()) < 10:
            raise ValueError("Description must be at least 10 characters")
        return v.strip()

    @field_validator("program_id")
    @classmethod
    def program_required(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Program ID is required")
        return v.strip()


class SubmissionCreate(BaseModel):

    content: str = Field(min_length=1)
    file_url: Optional[str] = None


class GradeRequest(BaseModel):

    grade: int
    feedback: Optional[str] = None

    @field_validator("grade")
    @classmethod
    def grade_range(cls, v: int) -> int:
        if v < 0 or v > 100:
            raise ValueError("Grade must be between 0 and 100")
        return v


class CommentCreate(BaseModel):

    content: str = Field(min_length=1)
    assignment_id: Optional[str] = None
    submission_id: Optional[str] = None

    @model_validator(mode="after")
    def target_required(self):
        if not self.assignment_id and not self.submission_id:
            raise ValueError("Content and either assignment ID or submission ID are required")
        return self


class CommentOut(DocumentModel):

    content: str
    user_id: str
    assignment_id: Optional[str] = None
    submission_id: Optional[str] = None
    created_at: Optional[datetime] = None
    user: Optional[UserSummary] = None


class SubmissionOut(DocumentModel):

    assignment_id: str
    user_id: str
    content: str
    file_url: Optional[str] = None
    status: Literal["SUBMITTED", "GRADED"]
    grade: Optional[int] = None
    feedback: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    user: Optional[UserSummary] = None


class AssignmentOut(DocumentModel):

    title: str
    description: str
    due_date: datetime
    program_id: str
    created_by_id: str
    created_at: Optional[datetime] = None
    submission_count: Optional[int] = None
    created_by: Optional[UserSummary] = None
    program: Optional[ProgramSummary] = None


class AssignmentDetail(AssignmentOut):

    submissions: List[SubmissionOut] = []
    comments: List[CommentOut] = []


class StudentAssignment(AssignmentOut):

    submission: Optional[SubmissionOut] = None
    # submission status, or OVERDUE / PENDING when nothing was handed in
    status: str
