from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, model_validator

from edubridge.schemas.common import DocumentModel, UserSummary


class MessageCreate(BaseModel):

    content: str
    receiver_id: Optional[str] = None
    group_id: Optional[str] = None

    @model_validator(mode="after")
    def one_target(self):
        if not self.content or not self.content.strip() or not (self.receiver_id or self.group_id):
            raise ValueError("Content and either receiver ID or group ID are required")
        if self.receiver_id and self.group_id:
            raise ValueError("A message goes to either a receiver or a group, not both")
        return self


class MessageOut(DocumentModel):

    content: str
    sender_id: str
    receiver_id: Optional[str] = None
    group_id: Optional[str] = None
    is_read: bool = False
    created_at: datetime
    sender: Optional[UserSummary] = None


class GroupCreate(BaseModel):

    name: str = Field(min_length=1)
    member_ids: List[str] = Field(min_length=1)
    program_id: Optional[str] = None


class GroupOut(DocumentModel):

    name: str
    program_id: Optional[str] = None
    created_by_id: str
    member_ids: List[str] = []
    member_count: int = 0
    last_message: Optional[MessageOut] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ConversationOut(BaseModel):

    partner_id: str
    partner: UserSummary
    last_message: MessageOut
    unread_count: int = 0


class InboxEntry(BaseModel):

    kind: Literal["direct", "group"]
    id: str
    name: Optional[str] = None
    last_message: Optional[MessageOut] = None
    last_activity: datetime
    unread_count: int = 0
    member_count: Optional[int] = None


class MarkReadResult(BaseModel):

    updated: int


class UnreadCount(BaseModel):

    unread: int
