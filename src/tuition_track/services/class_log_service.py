'''
Class-event log accessor. Events are append-only; rows are only ever
removed one at a time (attendance deletion) or all at once (reset).
'''
from typing import Annotated, Optional
from datetime import datetime
from uuid import UUID
from fastapi import Depends
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from ..database.engine import get_db_session
from ..database import models as db_models
from ..database.db_enums import ClassActionTypeEnum
from ..database.utils import utc_now
from ..models import class_event as class_event_models
from ..common.logger import log


class ClassLogService:
    def __init__(self, db: Annotated[AsyncSession, Depends(get_db_session)]):
        self.db = db

    async def append(
        self,
        tuition_id: UUID,
        action_type: ClassActionTypeEnum,
        actor: db_models.Users,
        class_date: Optional[datetime] = None,
        description: Optional[str] = None
    ) -> db_models.ClassEvents:
        """
        Writes a new event. The actor's id and name are copied onto the row,
        so later renames do not touch old events.
        """
        now = utc_now()
        event = db_models.ClassEvents(
            tuition_id=tuition_id,
            action_type=action_type.value,
            added_by=actor.id,
            added_by_name=actor.name,
            date=now,
            created_at=now,
            class_date=class_date,
            description=description
        )
        self.db.add(event)
        await self.db.flush()
        log.info(f"Appended {action_type.value} event {event.id} to tuition {tuition_id}.")
        return event

    async def get_by_id(self, event_id: UUID) -> db_models.ClassEvents | None:
        return await self.db.get(db_models.ClassEvents, event_id)

    async def list_by_tuition(self, tuition_id: UUID) -> list[db_models.ClassEvents]:
        """All events of a tuition, newest first."""
        log.info(f"Fetching class events for tuition {tuition_id}.")
        stmt = select(db_models.ClassEvents).filter(
            db_models.ClassEvents.tuition_id == tuition_id
        ).order_by(db_models.ClassEvents.created_at.desc())
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def list_class_dates_by_tuition(self, tuition_id: UUID) -> list[db_models.ClassEvents]:
        """Increment events only, latest class date first."""
        stmt = select(db_models.ClassEvents).filter(
            db_models.ClassEvents.tuition_id == tuition_id,
            db_models.ClassEvents.action_type == ClassActionTypeEnum.INCREMENT.value
        ).order_by(
            db_models.ClassEvents.class_date.desc(),
            db_models.ClassEvents.created_at.desc()
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def delete_one(self, event_id: UUID):
        event = await self.get_by_id(event_id)
        if event is None:
            return
        await self.db.delete(event)
        await self.db.flush()
        log.info(f"Deleted class event {event_id}.")

    async def delete_all_for_tuition(self, tuition_id: UUID) -> int:
        """Bulk delete. Returns how many rows were removed."""
        stmt = delete(db_models.ClassEvents).where(
            db_models.ClassEvents.tuition_id == tuition_id
        ).execution_options(synchronize_session="fetch")
        result = await self.db.execute(stmt)
        log.info(f"Deleted {result.rowcount} class events of tuition {tuition_id}.")
        return result.rowcount

    def format_events_for_api(self, events: list[db_models.ClassEvents]) -> list[class_event_models.ClassEventRead]:
        return [class_event_models.ClassEventRead.model_validate(event) for event in events]
