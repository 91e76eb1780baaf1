from datetime import datetime
from typing import Optional, TypedDict


class DocumentDocument(TypedDict, total=False):
    _id: str
    name: str
    url: str
    type: Optional[str]
    size: int
    user_id: str
    enrollment_id: Optional[str]
    uploaded_at: datetime
