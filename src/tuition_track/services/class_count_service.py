'''
Class count bookkeeping: moves a tuition's `taken_classes` counter and keeps
the class event log in step with it.

The counter is never written as "read, add one, write back". Every change is
a single UPDATE that applies a delta on the server (decrements are guarded by
`taken_classes > 0` in the same statement), so concurrent requests cannot lose
updates. The counter change and its log entry share the request transaction.
'''
from typing import Annotated, Optional
from datetime import datetime
from uuid import UUID
from fastapi import Depends
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from ..database.engine import get_db_session
from ..database import models as db_models
from ..database.db_enums import ClassActionTypeEnum, ClassCountAction
from ..database.utils import month_year_label, utc_now
from ..models import class_event as class_event_models
from ..common.logger import log
from ..common.exceptions import (
    AuthorizationError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from .tuition_service import TuitionService
from .class_log_service import ClassLogService


class ClassCountService:
    def __init__(
        self,
        db: Annotated[AsyncSession, Depends(get_db_session)],
        tuition_service: Annotated[TuitionService, Depends(TuitionService)],
        class_log_service: Annotated[ClassLogService, Depends(ClassLogService)]
    ):
        self.db = db
        self.tuition_service = tuition_service
        self.class_log_service = class_log_service

    # --- Counter primitives ---

    async def _apply_delta(self, tuition: db_models.Tuitions, delta: int, floor_at_zero: bool = False) -> int:
        """
        Atomically adds `delta` to the counter and returns the stored value.

        A negative delta only applies while the counter can absorb it. When it
        cannot, InvalidStateError is raised, unless `floor_at_zero` is set, in
        which case the counter is simply left where it is.
        """
        stmt = update(db_models.Tuitions).where(
            db_models.Tuitions.id == tuition.id
        ).values(
            taken_classes=db_models.Tuitions.taken_classes + delta,
            updated_at=utc_now()
        ).execution_options(synchronize_session=False)
        if delta < 0:
            stmt = stmt.where(db_models.Tuitions.taken_classes >= -delta)

        result = await self.db.execute(stmt)
        if result.rowcount == 0 and not floor_at_zero:
            log.warning(f"Counter of tuition {tuition.id} cannot go below 0.")
            raise InvalidStateError("Cannot decrement below 0")

        # The UPDATE bypassed the identity map; pull the stored values back in.
        await self.db.refresh(tuition)
        return tuition.taken_classes

    async def _reset_counter(self, tuition: db_models.Tuitions) -> int:
        stmt = update(db_models.Tuitions).where(
            db_models.Tuitions.id == tuition.id
        ).values(
            taken_classes=0,
            current_month_year=month_year_label(),
            updated_at=utc_now()
        ).execution_options(synchronize_session=False)
        await self.db.execute(stmt)
        await self.db.refresh(tuition)
        return tuition.taken_classes

    # --- Operations ---

    async def increment(
        self,
        tuition_id: UUID,
        current_user: db_models.Users,
        class_date: Optional[datetime] = None
    ) -> int:
        """
        Records one attended class. `class_date` is when the class actually
        happened (defaults to now) and may lie in the past.
        """
        log.info(f"User {current_user.id} incrementing class count of tuition {tuition_id}.")
        tuition = await self.tuition_service.get_tuition_for_read(tuition_id, current_user)

        new_count = await self._apply_delta(tuition, 1)
        await self.class_log_service.append(
            tuition_id=tuition.id,
            action_type=ClassActionTypeEnum.INCREMENT,
            actor=current_user,
            class_date=class_date or utc_now()
        )
        return new_count

    async def decrement(self, tuition_id: UUID, current_user: db_models.Users) -> int:
        log.info(f"User {current_user.id} decrementing class count of tuition {tuition_id}.")
        tuition = await self.tuition_service.get_tuition_for_read(tuition_id, current_user)

        new_count = await self._apply_delta(tuition, -1)
        await self.class_log_service.append(
            tuition_id=tuition.id,
            action_type=ClassActionTypeEnum.DECREMENT,
            actor=current_user
        )
        return new_count

    async def reset(self, tuition_id: UUID, current_user: db_models.Users) -> int:
        """
        Deletes the whole event history of the tuition, zeroes the counter and
        moves it to the current month. Nothing is archived.
        """
        log.info(f"User {current_user.id} resetting class count of tuition {tuition_id}.")
        tuition = await self.tuition_service.get_tuition_for_read(tuition_id, current_user)

        deleted = await self.class_log_service.delete_all_for_tuition(tuition.id)
        new_count = await self._reset_counter(tuition)
        log.info(f"Reset tuition {tuition_id}: {deleted} events removed.")
        return new_count

    async def update_class_count(
        self,
        tuition_id: UUID,
        update_data: class_event_models.ClassCountUpdate,
        current_user: db_models.Users
    ) -> class_event_models.ClassCountResponse:
        """Dispatches PATCH /tuitions/{id}/classes to the matching operation."""
        if update_data.action == ClassCountAction.INCREMENT:
            new_count = await self.increment(tuition_id, current_user, update_data.class_date)
        elif update_data.action == ClassCountAction.DECREMENT:
            new_count = await self.decrement(tuition_id, current_user)
        elif update_data.action == ClassCountAction.RESET:
            new_count = await self.reset(tuition_id, current_user)
            return class_event_models.ClassCountResponse(
                message="Class count reset successfully", new_count=new_count
            )
        else:
            raise ValidationError("Invalid action")

        return class_event_models.ClassCountResponse(
            message=f"Class count {update_data.action.value}ed successfully",
            new_count=new_count
        )

    async def delete_class_log(
        self,
        tuition_id: UUID,
        log_id: UUID,
        current_user: db_models.Users
    ) -> int:
        """
        Removes one attendance (increment) event and takes one class off the
        counter, never going below 0.
        """
        log.info(f"User {current_user.id} deleting class log {log_id} of tuition {tuition_id}.")
        tuition = await self.tuition_service.get_tuition_for_write(tuition_id, current_user)

        event = await self.class_log_service.get_by_id(log_id)
        if event is None:
            raise NotFoundError("Class log not found")
        if event.tuition_id != tuition.id:
            log.warning(f"SECURITY: Class log {log_id} does not belong to tuition {tuition_id}.")
            raise AuthorizationError("Class log does not belong to this tuition")
        if event.action_type != ClassActionTypeEnum.INCREMENT.value:
            raise ValidationError("Only class attendance logs can be deleted")

        await self.class_log_service.delete_one(event.id)
        return await self._apply_delta(tuition, -1, floor_at_zero=True)

    async def list_logs_for_api(
        self,
        tuition_id: UUID,
        current_user: db_models.Users
    ) -> list[class_event_models.ClassEventRead]:
        tuition = await self.tuition_service.get_tuition_for_read(tuition_id, current_user)
        events = await self.class_log_service.list_by_tuition(tuition.id)
        return self.class_log_service.format_events_for_api(events)
