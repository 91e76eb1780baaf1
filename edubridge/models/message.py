from datetime import datetime
from typing import List, Optional, TypedDict


class MessageDocument(TypedDict, total=False):
    _id: str
    content: str
    sender_id: str
    # exactly one of receiver_id / group_id is set
    receiver_id: Optional[str]
    group_id: Optional[str]
    is_read: bool
    created_at: datetime


class MessageGroupDocument(TypedDict, total=False):
    _id: str
    name: str
    program_id: Optional[str]
    created_by_id: str
    member_ids: List[str]
    created_at: datetime
    updated_at: datetime
