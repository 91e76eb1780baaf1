from datetime import datetime
from typing import Optional

from edubridge.schemas.common import DocumentModel


class DocumentOut(DocumentModel):

    name: str
    url: str
    type: Optional[str] = None
    size: int = 0
    user_id: str
    enrollment_id: Optional[str] = None
    uploaded_at: datetime
