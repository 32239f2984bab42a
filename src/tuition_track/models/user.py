'''
Pydantic models for users, registration and email verification.
'''
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import EmailStr, Field

from ..database.db_enums import UserRole
from .base import ApiResponse, CamelModel, NonBlankStr


# --- User API Read Models ---

class UserRead(CamelModel):
    """
    Base Pydantic model for reading user data.
    Corresponds to the db_models.Users ORM model.
    """
    id: UUID
    email: str
    role: UserRole
    name: str
    email_verified: bool
    linked_tuitions: list[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None


class StudentSummary(CamelModel):
    """The short student view returned when a student is attached to a tuition."""
    id: UUID
    name: str
    email: str


# --- User API Write Models ---

class UserRegister(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    name: NonBlankStr
    role: UserRole


class VerifyOTPRequest(CamelModel):
    email: EmailStr
    otp: str = Field(..., min_length=4, max_length=12)


class ResendVerificationRequest(CamelModel):
    email: EmailStr


class StudentCreate(CamelModel):
    """Body of POST /students: a teacher creating a student account."""
    email: EmailStr
    name: NonBlankStr


# --- Responses ---

class RegisterResponse(ApiResponse):
    uid: UUID


class StudentCreatedResponse(ApiResponse):
    uid: UUID
    temp_password: str
