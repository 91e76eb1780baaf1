from datetime import datetime
from typing import Literal, Optional, TypedDict


UserRole = Literal["ADMIN", "STAFF", "STUDENT"]


class UserDocument(TypedDict, total=False):

    _id: str
    email: str
    hashed_password: str
    name: str
    phone: Optional[str]
    role: UserRole
    image: Optional[str]
    created_at: datetime
    updated_at: datetime
