from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from edubridge.schemas.common import DocumentModel, ProgramSummary, UserSummary


class AnnouncementCreate(BaseModel):

    title: str
    content: str
    program_id: str

    @field_validator("title")
    @classmethod
    def title_length(cls, v: str) -> str:
        if len(v.strip()) < 2:
            raise ValueError("Title must be at least 2 characters")
        return v.strip()

    @field_validator("content")
    @classmethod
    def content_length(cls, v: str) -> str:
        if len(v.strip()) < 10:
            raise ValueError("Content must be at least 10 characters")
        return v.strip()


class AnnouncementCommentCreate(BaseModel):

    content: str = Field(min_length=1)


class AnnouncementCommentOut(DocumentModel):

    content: str
    user_id: str
    announcement_id: str
    created_at: Optional[datetime] = None
    user: Optional[UserSummary] = None


class AnnouncementOut(DocumentModel):

    title: str
    content: str
    program_id: str
    created_by_id: str
    created_at: Optional[datetime] = None
    comment_count: Optional[int] = None
    created_by: Optional[UserSummary] = None
    program: Optional[ProgramSummary] = None


class AnnouncementDetail(AnnouncementOut):

    comments: List[AnnouncementCommentOut] = []
