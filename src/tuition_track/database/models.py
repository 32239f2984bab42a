from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, Enum, Index, Integer, JSON, PrimaryKeyConstraint, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
import datetime
import uuid

from .utils import UTCDateTime, utc_now

class Base(DeclarativeBase):
    pass



class Users(Base):
    __tablename__ = 'users'
    __table_args__ = (
        PrimaryKeyConstraint('id', name='users_pkey'),
        UniqueConstraint('email', name='users_email_key')
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(255))
    password: Mapped[str] = mapped_column(String(255))
    role: Mapped[str] = mapped_column(Enum('teacher', 'student', name='user_role'))
    name: Mapped[str] = mapped_column(Text)
    email_verified: Mapped[bool] = mapped_column(Boolean, default=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    verification_otp: Mapped[Optional[str]] = mapped_column(String(12))
    verification_otp_expiry: Mapped[Optional[datetime.datetime]] = mapped_column(UTCDateTime)
    # Tuition ids (as strings) the user owns or attends. Always reassigned, never mutated in place.
    linked_tuitions: Mapped[list] = mapped_column(JSON, default=list)
    created_at: Mapped[datetime.datetime] = mapped_column(UTCDateTime, default=utc_now)


class Tuitions(Base):
    __tablename__ = 'tuitions'
    __table_args__ = (
        CheckConstraint('taken_classes >= 0', name='tuitions_taken_classes_non_negative'),
        CheckConstraint('days_per_week BETWEEN 1 AND 7', name='tuitions_days_per_week_range'),
        CheckConstraint('planned_classes_per_month BETWEEN 1 AND 31', name='tuitions_planned_classes_range'),
        PrimaryKeyConstraint('id', name='tuitions_pkey'),
        Index('idx_tuitions_teacher_id', 'teacher_id'),
        Index('idx_tuitions_student_id', 'student_id')
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    teacher_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    teacher_name: Mapped[str] = mapped_column(Text)
    subject: Mapped[str] = mapped_column(Text)
    start_time: Mapped[str] = mapped_column(String(5))
    end_time: Mapped[str] = mapped_column(String(5))
    days_per_week: Mapped[int] = mapped_column(Integer)
    planned_classes_per_month: Mapped[int] = mapped_column(Integer)
    current_month_year: Mapped[str] = mapped_column(String(7))
    taken_classes: Mapped[int] = mapped_column(Integer, default=0)
    student_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid)
    student_name: Mapped[Optional[str]] = mapped_column(Text)
    student_email: Mapped[Optional[str]] = mapped_column(String(255))
    created_at: Mapped[datetime.datetime] = mapped_column(UTCDateTime, default=utc_now)
    updated_at: Mapped[datetime.datetime] = mapped_column(UTCDateTime, default=utc_now)


class ClassEvents(Base):
    __tablename__ = 'class_events'
    __table_args__ = (
        PrimaryKeyConstraint('id', name='class_events_pkey'),
        Index('idx_class_events_tuition_created', 'tuition_id', 'created_at')
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # Plain reference: events outlive their tuition when it is deleted.
    tuition_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    action_type: Mapped[str] = mapped_column(Enum('increment', 'decrement', 'manual', name='class_action_type_enum'))
    added_by: Mapped[uuid.UUID] = mapped_column(Uuid)
    added_by_name: Mapped[str] = mapped_column(Text)
    date: Mapped[datetime.datetime] = mapped_column(UTCDateTime, default=utc_now)
    created_at: Mapped[datetime.datetime] = mapped_column(UTCDateTime, default=utc_now)
    class_date: Mapped[Optional[datetime.datetime]] = mapped_column(UTCDateTime)
    description: Mapped[Optional[str]] = mapped_column(Text)
