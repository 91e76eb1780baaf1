from datetime import datetime
from typing import Literal, Optional, TypedDict


SubmissionStatus = Literal["SUBMITTED", "GRADED"]


class AssignmentDocument(TypedDict, total=False):
    _id: str
    title: str
    description: str
    due_date: datetime
    program_id: str
    created_by_id: str
    created_at: datetime
    updated_at: datetime


class SubmissionDocument(TypedDict, total=False):
    _id: str
    assignment_id: str
    user_id: str
    content: str
    file_url: Optional[str]
    status: SubmissionStatus
    grade: Optional[int]
    feedback: Optional[str]
    created_at: datetime
    updated_at: datetime


class CommentDocument(TypedDict, total=False):
    _id: str
    content: str
    user_id: str
    assignment_id: Optional[str]
    submission_id: Optional[str]
    created_at: datetime
