'''
Pydantic models for the class event log and the class count endpoint.
'''
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import field_validator

from ..database.db_enums import ClassActionTypeEnum, ClassCountAction
from ..database.utils import ensure_utc
from .base import ApiResponse, CamelModel


class ClassEventRead(CamelModel):
    id: UUID
    tuition_id: UUID
    action_type: ClassActionTypeEnum
    added_by: UUID
    added_by_name: str
    date: datetime
    created_at: datetime
    class_date: Optional[datetime] = None
    description: Optional[str] = None


class ClassCountUpdate(CamelModel):
    """Body of PATCH /tuitions/{id}/classes."""
    action: ClassCountAction
    class_date: Optional[datetime] = None

    @field_validator('class_date')
    @classmethod
    def normalise_class_date(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(value) if value is not None else None


class ClassCountResponse(ApiResponse):
    new_count: int


class ClassLogList(ApiResponse):
    logs: list[ClassEventRead]
