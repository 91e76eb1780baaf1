from datetime import datetime
from typing import Literal, TypedDict


EnrollmentStatus = Literal["PENDING", "APPROVED", "REJECTED", "COMPLETED", "WITHDRAWN"]


class EnrollmentDocument(TypedDict, total=False):
    _id: str
    user_id: str
    program_id: str
    status: EnrollmentStatus
    message: str
    registered_at: datetime
    updated_at: datetime
