'''

'''
from typing import Annotated, Optional
from uuid import UUID
from fastapi import Depends

from ..database import models as db_models
from ..common.logger import log
from ..core import report as report_core
from .tuition_service import TuitionService
from .class_log_service import ClassLogService


class ReportService:
    """
    Produces the PDF class report of a tuition for anyone who may read it.
    """
    def __init__(
        self,
        tuition_service: Annotated[TuitionService, Depends(TuitionService)],
        class_log_service: Annotated[ClassLogService, Depends(ClassLogService)]
    ):
        self.tuition_service = tuition_service
        self.class_log_service = class_log_service

    async def generate_report(
        self,
        tuition_id: UUID,
        current_user: db_models.Users,
        month: Optional[str] = None
    ) -> tuple[bytes, str]:
        """Returns the PDF bytes and the download filename."""
        log.info(f"User {current_user.id} requested the report of tuition {tuition_id}.")
        tuition = await self.tuition_service.get_tuition_for_read(tuition_id, current_user)
        events = await self.class_log_service.list_by_tuition(tuition.id)

        report = report_core.build_report(tuition, events)
        content = report_core.render_pdf(report)
        filename = report_core.report_filename(tuition.subject, tuition.student_name, month)
        log.info(f"Rendered {report.page_count}-page report '{filename}' for tuition {tuition_id}.")
        return content, filename
