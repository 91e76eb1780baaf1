from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from edubridge.schemas.common import DocumentModel


class ChatMessageCreate(BaseModel):

    content: str = Field(min_length=1)
    session_id: Optional[str] = None


class ChatMessageOut(DocumentModel):

    session_id: str
    content: str
    is_user_message: bool
    created_at: datetime


class ChatSessionOut(DocumentModel):

    user_id: str
    title: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ChatReply(BaseModel):

    session_id: str
    messages: List[ChatMessageOut]
