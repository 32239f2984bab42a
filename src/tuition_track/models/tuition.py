'''
Pydantic models for tuitions.
'''
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import EmailStr, Field, model_validator

from .base import ApiResponse, CamelModel, NonBlankStr
from .class_event import ClassEventRead
from .user import StudentSummary

# "HH:mm", 24h clock
TIME_PATTERN = r'^([01]\d|2[0-3]):[0-5]\d$'


# --- API Read Models (Output) ---

class TuitionRead(CamelModel):
    """
    The API model for a tuition. Teachers and linked students see the same
    fields; `progress` is derived from the counter and the monthly quota.
    """
    id: UUID
    teacher_id: UUID
    teacher_name: str
    student_id: Optional[UUID] = None
    student_name: Optional[str] = None
    student_email: Optional[str] = None
    subject: str
    start_time: str
    end_time: str
    days_per_week: int
    planned_classes_per_month: int
    current_month_year: str
    taken_classes: int
    progress: int
    created_at: datetime
    updated_at: datetime


# --- API Write Models (Input) ---

class TuitionCreate(CamelModel):
    student_email: Optional[EmailStr] = None
    subject: NonBlankStr
    start_time: str = Field(..., pattern=TIME_PATTERN)
    end_time: str = Field(..., pattern=TIME_PATTERN)
    days_per_week: int = Field(..., ge=1, le=7)
    planned_classes_per_month: int = Field(..., ge=1, le=31)

    @model_validator(mode='after')
    def validate_schedule(self) -> 'TuitionCreate':
        """An end before the start is a class that runs past midnight."""
        if self.end_time == self.start_time:
            raise ValueError('endTime must differ from startTime')
        return self


class TuitionRename(CamelModel):
    """Body of PATCH /tuitions/{id}: only the student display name is editable."""
    student_name: NonBlankStr


class StudentAssignment(CamelModel):
    """Body of PATCH /tuitions/{id}/student."""
    student_email: EmailStr


# --- Responses ---

class TuitionCreatedResponse(ApiResponse):
    tuition_id: UUID


class TuitionListResponse(ApiResponse):
    tuitions: list[TuitionRead]


class TuitionDetailResponse(ApiResponse):
    tuition: TuitionRead
    logs: list[ClassEventRead]
    class_dates: list[ClassEventRead]


class TuitionUpdatedResponse(ApiResponse):
    tuition: TuitionRead


class StudentAssignedResponse(ApiResponse):
    student: StudentSummary
