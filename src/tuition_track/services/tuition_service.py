'''
Tuition-record accessor: creation, role-filtered reads, student assignment,
renaming and deletion, with the ownership checks every route relies on.
'''
from typing import Annotated
from uuid import UUID
from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..database.engine import get_db_session
from ..database import models as db_models
from ..database.db_enums import UserRole
from ..database.utils import month_year_label, utc_now
from ..models import tuition as tuition_models
from ..models import user as user_models
from ..common.logger import log
from ..common.exceptions import (
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from ..core.report import calculate_progress
from .user_service import UserService
from .class_log_service import ClassLogService


class TuitionService:
    """
    Service for managing tuitions, including authorization,
    read operations and student assignment.
    """
    def __init__(
        self,
        db: Annotated[AsyncSession, Depends(get_db_session)],
        user_service: Annotated[UserService, Depends(UserService)],
        class_log_service: Annotated[ClassLogService, Depends(ClassLogService)]
    ):
        self.db = db
        self.user_service = user_service
        self.class_log_service = class_log_service

    # --- 1. Authorization Helpers ---

    def _require_teacher(self, current_user: db_models.Users):
        """Teacher-only endpoints answer 401 for any other role."""
        if current_user.role != UserRole.TEACHER.value:
            log.warning(f"SECURITY: User {current_user.id} (Role: {current_user.role}) called a teacher-only operation.")
            raise AuthenticationError()

    def _authorize_write_access(self, tuition: db_models.Tuitions, current_user: db_models.Users):
        """
        Checks if a user has write/delete permission (Teacher owner only).
        """
        self._require_teacher(current_user)
        if tuition.teacher_id != current_user.id:
            log.warning(f"SECURITY: User {current_user.id} tried to write to tuition {tuition.id} owned by {tuition.teacher_id}.")
            raise AuthorizationError("Unauthorized - not your tuition")

    def _authorize_read_access(self, tuition: db_models.Tuitions, current_user: db_models.Users):
        """
        Checks if a user is the owning teacher or the linked student.
        """
        if current_user.role == UserRole.TEACHER.value and tuition.teacher_id == current_user.id:
            return
        if current_user.role == UserRole.STUDENT.value and tuition.student_id == current_user.id:
            return

        log.warning(f"SECURITY: User <{current_user.id}-{current_user.name}> tried to read tuition {tuition.id} without permission.")
        raise AuthorizationError("Access denied")

    # --- 2. Internal Fetchers (No Auth) ---

    async def get_tuition_by_id(self, tuition_id: UUID) -> db_models.Tuitions | None:
        log.info(f"Internal fetch for tuition by ID: {tuition_id}")
        return await self.db.get(db_models.Tuitions, tuition_id)

    async def _get_tuition_by_id_internal(self, tuition_id: UUID) -> db_models.Tuitions:
        tuition = await self.get_tuition_by_id(tuition_id)
        if tuition is None:
            raise NotFoundError("Tuition not found")
        return tuition

    async def get_tuition_for_read(self, tuition_id: UUID, current_user: db_models.Users) -> db_models.Tuitions:
        """Fetches a tuition the user may read, or raises 404/403."""
        tuition = await self._get_tuition_by_id_internal(tuition_id)
        self._authorize_read_access(tuition, current_user)
        return tuition

    async def get_tuition_for_write(self, tuition_id: UUID, current_user: db_models.Users) -> db_models.Tuitions:
        """Fetches a tuition the user owns, or raises 401/404/403."""
        self._require_teacher(current_user)
        tuition = await self._get_tuition_by_id_internal(tuition_id)
        self._authorize_write_access(tuition, current_user)
        return tuition

    async def list_by_teacher(self, teacher_id: UUID) -> list[db_models.Tuitions]:
        """Owned tuitions, newest first."""
        stmt = select(db_models.Tuitions).filter(
            db_models.Tuitions.teacher_id == teacher_id
        ).order_by(db_models.Tuitions.created_at.desc())
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def list_by_student(self, student_id: UUID) -> list[db_models.Tuitions]:
        """Tuitions the student is linked to, newest first."""
        stmt = select(db_models.Tuitions).filter(
            db_models.Tuitions.student_id == student_id
        ).order_by(db_models.Tuitions.created_at.desc())
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def _resolve_student(self, student_email: str) -> db_models.Users | None:
        return await self.user_service.get_user_by_email(student_email)

    # --- 3. Public API Methods ---

    async def create_tuition(
        self,
        tuition_data: tuition_models.TuitionCreate,
        current_user: db_models.Users
    ) -> UUID:
        """
        Creates a tuition owned by the current teacher and links it onto the
        teacher and, when given, onto the student.
        """
        log.info(f"User {current_user.id} creating tuition '{tuition_data.subject}'.")
        self._require_teacher(current_user)

        student = None
        if tuition_data.student_email:
            student = await self._resolve_student(tuition_data.student_email)
            if student is None:
                raise ValidationError("Student not found")
            if student.role != UserRole.STUDENT.value:
                raise ValidationError("User is not a student")

        try:
            now = utc_now()
            tuition = db_models.Tuitions(
                teacher_id=current_user.id,
                teacher_name=current_user.name,
                subject=tuition_data.subject.strip(),
                start_time=tuition_data.start_time,
                end_time=tuition_data.end_time,
                days_per_week=tuition_data.days_per_week,
                planned_classes_per_month=tuition_data.planned_classes_per_month,
                current_month_year=month_year_label(now),
                taken_classes=0,
                student_id=student.id if student else None,
                student_name=student.name if student else None,
                student_email=student.email if student else None,
                created_at=now,
                updated_at=now
            )
            self.db.add(tuition)
            await self.db.flush()

            await self.user_service.add_linked_tuition(current_user.id, tuition.id)
            if student:
                await self.user_service.add_linked_tuition(student.id, tuition.id)

            log.info(f"Created tuition {tuition.id} for teacher {current_user.id}.")
            return tuition.id
        except SQLAlchemyError as e:
            log.error(f"Database error creating tuition for teacher {current_user.id}: {e}", exc_info=True)
            raise PersistenceError("Failed to create tuition") from e

    async def get_all_tuitions_for_api(self, current_user: db_models.Users) -> list[tuition_models.TuitionRead]:
        """Teachers see what they own, students what they are linked to."""
        log.info(f"Fetching tuitions for user {current_user.id} (Role: {current_user.role}).")
        if current_user.role == UserRole.TEACHER.value:
            tuitions = await self.list_by_teacher(current_user.id)
        elif current_user.role == UserRole.STUDENT.value:
            tuitions = await self.list_by_student(current_user.id)
        else:
            tuitions = []
        return [self.format_tuition_for_api(t) for t in tuitions]

    async def get_tuition_detail_for_api(
        self,
        tuition_id: UUID,
        current_user: db_models.Users
    ) -> tuition_models.TuitionDetailResponse:
        tuition = await self.get_tuition_for_read(tuition_id, current_user)
        logs = await self.class_log_service.list_by_tuition(tuition.id)
        class_dates = await self.class_log_service.list_class_dates_by_tuition(tuition.id)
        return tuition_models.TuitionDetailResponse(
            tuition=self.format_tuition_for_api(tuition),
            logs=self.class_log_service.format_events_for_api(logs),
            class_dates=self.class_log_service.format_events_for_api(class_dates)
        )

    async def update_student_assignment(
        self,
        tuition_id: UUID,
        student_email: str,
        current_user: db_models.Users
    ) -> user_models.StudentSummary:
        """
        Attaches the student with the given email. A different student who was
        attached before is unlinked from the tuition.
        """
        log.info(f"User {current_user.id} assigning {student_email} to tuition {tuition_id}.")
        tuition = await self.get_tuition_for_write(tuition_id, current_user)

        student = await self._resolve_student(student_email)
        if student is None:
            raise NotFoundError("Student not found with this email")
        if student.role != UserRole.STUDENT.value:
            raise ValidationError("User is not a student")

        previous_student_id = tuition.student_id
        tuition.student_id = student.id
        tuition.student_name = student.name
        tuition.student_email = student.email
        tuition.updated_at = utc_now()
        await self.db.flush()

        if previous_student_id and previous_student_id != student.id:
            await self.user_service.remove_linked_tuition(previous_student_id, tuition.id)
        await self.user_service.add_linked_tuition(student.id, tuition.id)

        return user_models.StudentSummary(id=student.id, name=student.name, email=student.email)

    async def rename_student(
        self,
        tuition_id: UUID,
        student_name: str,
        current_user: db_models.Users
    ) -> tuition_models.TuitionRead:
        """Only the display name changes; the linked student stays the same."""
        log.info(f"User {current_user.id} renaming student on tuition {tuition_id}.")
        tuition = await self.get_tuition_for_write(tuition_id, current_user)
        if tuition.student_id is None:
            raise ValidationError("Tuition has no student to rename")

        student_name = student_name.strip()
        if not student_name:
            raise ValidationError("Student name cannot be empty")

        tuition.student_name = student_name
        tuition.updated_at = utc_now()
        await self.db.flush()
        return self.format_tuition_for_api(tuition)

    async def delete_tuition(self, tuition_id: UUID, current_user: db_models.Users):
        """
        Unlinks the tuition from its teacher and student and removes it.
        Its class events are left in place.
        """
        log.info(f"User {current_user.id} attempting to delete tuition {tuition_id}.")
        tuition = await self.get_tuition_for_write(tuition_id, current_user)
        try:
            await self.user_service.remove_linked_tuition(tuition.teacher_id, tuition.id)
            if tuition.student_id:
                await self.user_service.remove_linked_tuition(tuition.student_id, tuition.id)
            await self.db.delete(tuition)
            await self.db.flush()
            log.info(f"Deleted tuition {tuition_id}.")
        except SQLAlchemyError as e:
            log.error(f"Database error deleting tuition {tuition_id}: {e}", exc_info=True)
            raise PersistenceError("Failed to delete tuition") from e

    # --- 4. Formatting ---

    def format_tuition_for_api(self, tuition: db_models.Tuitions) -> tuition_models.TuitionRead:
        return tuition_models.TuitionRead(
            id=tuition.id,
            teacher_id=tuition.teacher_id,
            teacher_name=tuition.teacher_name,
            student_id=tuition.student_id,
            student_name=tuition.student_name,
            student_email=tuition.student_email,
            subject=tuition.subject,
            start_time=tuition.start_time,
            end_time=tuition.end_time,
            days_per_week=tuition.days_per_week,
            planned_classes_per_month=tuition.planned_classes_per_month,
            current_month_year=tuition.current_month_year,
            taken_classes=tuition.taken_classes,
            progress=calculate_progress(tuition.taken_classes, tuition.planned_classes_per_month),
            created_at=tuition.created_at,
            updated_at=tuition.updated_at
        )
