from datetime import datetime
from typing import TypedDict


class ChatSessionDocument(TypedDict, total=False):
    _id: str
    user_id: str
    title: str
    created_at: datetime
    updated_at: datetime


class ChatMessageDocument(TypedDict, total=False):
    _id: str
    session_id: str
    content: str
    is_user_message: bool
    created_at: datetime
