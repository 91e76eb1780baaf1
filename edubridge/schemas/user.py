from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from edubridge.schemas.common import DocumentModel
from edubridge.schemas.document import DocumentOut
from edubridge.schemas.enrollment import EnrollmentOut


UserRole = Literal["ADMIN", "STAFF", "STUDENT"]


class UserBase(BaseModel):

    email: EmailStr


class UserCreate(UserBase):

    name: str
    password: str
    phone: str

    @field_validator("name")
    @classmethod
    def name_length(cls, v: str) -> str:
        if len(v.strip()) < 2:
            raise ValueError("Name must be at least 2 characters")
        return v.strip()

    @field_validator("password")
    @classmethod
    def password_length(cls, v: str) -> str:
        if len(v) < 6:
            raise ValueError("Password must be at least 6 characters")
        return v

    @field_validator("phone")
    @classmethod
    def phone_length(cls, v: str) -> str:
        if len(v.strip()) < 10:
            raise ValueError("Please enter a valid phone number")
        return v.strip()


class UserUpdate(BaseModel):

    name: str = Field(min_length=1)
    email: EmailStr
    phone: Optional[str] = None
    role: Optional[UserRole] = None


class UserPublic(DocumentModel):

    email: str
    name: Optional[str] = None
    phone: Optional[str] = None
    role: UserRole = "STUDENT"
    image: Optional[str] = None
    created_at: Optional[datetime] = None


class UserWithEnrollmentCount(UserPublic):

    enrollment_count: int = 0


class StudentRow(BaseModel):

    id: str
    name: Optional[str] = None
    email: str
    program: str
    registration_date: Optional[datetime] = None
    status: str


class LoginRequest(BaseModel):

    email: str
    password: str


class Token(BaseModel):

    access_token: str
    token_type: str = "bearer"
    user: UserPublic


class UserDetail(UserPublic):

    enrollments: List[EnrollmentOut] = []
    documents: List[DocumentOut] = []
