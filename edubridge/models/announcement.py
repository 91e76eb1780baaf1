from datetime import datetime
from typing import TypedDict


class AnnouncementDocument(TypedDict, total=False):
    _id: str
    title: str
    content: str
    program_id: str
    created_by_id: str
    created_at: datetime
    updated_at: datetime


class AnnouncementCommentDocument(TypedDict, total=False):
    _id: str
    content: str
    user_id: str
    announcement_id: str
    created_at: datetime
