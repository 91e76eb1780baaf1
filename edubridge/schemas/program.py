from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, field_validator, model_validator

from edubridge.schemas.common import DocumentModel


ProgramStatus = Literal["UPCOMING", "ACTIVE", "COMPLETED", "CANCELLED"]


class ProgramCreate(BaseModel):

    name: str
    description: str
    duration: int
    capacity: int
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    status: ProgramStatus = "UPCOMING"

    @field_validator("name")
    @classmethod
    def name_length(cls, v: str) -> str:
        if len(v.strip()) < 2:
            raise ValueError("Name must be at least 2 characters")
        return v.strip()

    @field_validator("description")
    @classmethod
    def description_length(cls, v: str) -> str:
        if len(v.strip()) < 10:
            raise ValueError("Description must be at least 10 characters")
        return v.strip()

    @field_validator("duration")
    @classmethod
    def duration_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("Duration must be a positive number")
        return v

    @field_validator("capacity")
    @classmethod
    def capacity_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("Capacity must be a positive number")
        return v

    @model_validator(mode="after")
    def dates_in_order(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("End date must be after start date")
        return self


class ProgramUpdate(BaseModel):

    name: Optional[str] = None
    description: Optional[str] = None
    duration: Optional[int] = None
    capacity: Optional[int] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    status: Optional[ProgramStatus] = None

    @field_validator("duration", "capacity")
    @classmethod
    def positive(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v <= 0:
            raise ValueError("Value must be a positive number")
        return v


class ProgramOut(DocumentModel):

    name: str
    description: str
    duration: int
    capacity: int
    seats_taken: int = 0
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    status: ProgramStatus
    created_by_id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
