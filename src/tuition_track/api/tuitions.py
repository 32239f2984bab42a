'''
API endpoints for tuitions and their class count, class log and report sub-resources.
'''
from typing import Annotated, Optional
from urllib.parse import quote
from uuid import UUID
from fastapi import APIRouter, Depends, Query, Response, status

from ..database import models as db_models
from ..models import tuition as tuition_models
from ..models import class_event as class_event_models
from ..models.base import ApiResponse
from ..services.security import verify_token_and_get_user
from ..services.tuition_service import TuitionService
from ..services.class_count_service import ClassCountService
from ..services.report_service import ReportService


class TuitionsAPI:
    """
    A class to encapsulate the tuition endpoints.
    """
    def __init__(self):
        self.router = APIRouter(
            prefix="/tuitions",
            tags=["Tuitions"]
        )
        self._register_routes()

    def _register_routes(self):
        """Registers all the API routes for this class."""
        self.router.add_api_route(
                "",
                self.list_tuitions,
                methods=["GET"],
                response_model=tuition_models.TuitionListResponse)
        self.router.add_api_route(
                "",
                self.create_tuition,
                methods=["POST"],
                status_code=status.HTTP_201_CREATED,
                response_model=tuition_models.TuitionCreatedResponse)
        self.router.add_api_route(
                "/{tuition_id}",
                self.get_tuition,
                methods=["GET"],
                response_model=tuition_models.TuitionDetailResponse)
        self.router.add_api_route(
                "/{tuition_id}",
                self.rename_student,
                methods=["PATCH"],
                response_model=tuition_models.TuitionUpdatedResponse)
        self.router.add_api_route(
                "/{tuition_id}",
                self.delete_tuition,
                methods=["DELETE"],
                response_model=ApiResponse)

        # Student assignment
        self.router.add_api_route(
                "/{tuition_id}/student",
                self.assign_student,
                methods=["PATCH"],
                response_model=tuition_models.StudentAssignedResponse)

        # Class count and log
        self.router.add_api_route(
                "/{tuition_id}/classes",
                self.update_class_count,
                methods=["PATCH"],
                response_model=class_event_models.ClassCountResponse)
        self.router.add_api_route(
                "/{tuition_id}/logs",
                self.list_class_logs,
                methods=["GET"],
                response_model=class_event_models.ClassLogList)
        self.router.add_api_route(
                "/{tuition_id}/logs/{log_id}",
                self.delete_class_log,
                methods=["DELETE"],
                response_model=class_event_models.ClassCountResponse)

        # Report
        self.router.add_api_route(
                "/{tuition_id}/report",
                self.download_report,
                methods=["GET"],
                response_class=Response,
                responses={200: {"content": {"application/pdf": {}}}})

    async def list_tuitions(
        self,
        current_user: Annotated[db_models.Users, Depends(verify_token_and_get_user)],
        tuition_service: Annotated[TuitionService, Depends(TuitionService)]
    ):
        """
        Teachers get the tuitions they own, students the ones they are linked to.
        """
        tuitions = await tuition_service.get_all_tuitions_for_api(current_user)
        return tuition_models.TuitionListResponse(tuitions=tuitions)

    async def create_tuition(
        self,
        tuition_data: tuition_models.TuitionCreate,
        current_user: Annotated[db_models.Users, Depends(verify_token_and_get_user)],
        tuition_service: Annotated[TuitionService, Depends(TuitionService)]
    ):
        tuition_id = await tuition_service.create_tuition(tuition_data, current_user)
        return tuition_models.TuitionCreatedResponse(
            message="Tuition created successfully", tuition_id=tuition_id
        )

    async def get_tuition(
        self,
        tuition_id: UUID,
        current_user: Annotated[db_models.Users, Depends(verify_token_and_get_user)],
        tuition_service: Annotated[TuitionService, Depends(TuitionService)]
    ):
        """
        Returns the tuition with its full log and its attended class dates.
        """
        return await tuition_service.get_tuition_detail_for_api(tuition_id, current_user)

    async def rename_student(
        self,
        tuition_id: UUID,
        rename_data: tuition_models.TuitionRename,
        current_user: Annotated[db_models.Users, Depends(verify_token_and_get_user)],
        tuition_service: Annotated[TuitionService, Depends(TuitionService)]
    ):
        tuition = await tuition_service.rename_student(tuition_id, rename_data.student_name, current_user)
        return tuition_models.TuitionUpdatedResponse(
            message="Tuition updated successfully", tuition=tuition
        )

    async def delete_tuition(
        self,
        tuition_id: UUID,
        current_user: Annotated[db_models.Users, Depends(verify_token_and_get_user)],
        tuition_service: Annotated[TuitionService, Depends(TuitionService)]
    ):
        await tuition_service.delete_tuition(tuition_id, current_user)
        return ApiResponse(message="Tuition deleted successfully")

    async def assign_student(
        self,
        tuition_id: UUID,
        assignment: tuition_models.StudentAssignment,
        current_user: Annotated[db_models.Users, Depends(verify_token_and_get_user)],
        tuition_service: Annotated[TuitionService, Depends(TuitionService)]
    ):
        student = await tuition_service.update_student_assignment(
            tuition_id, assignment.student_email, current_user
        )
        return tuition_models.StudentAssignedResponse(
            message="Student added successfully", student=student
        )

    async def update_class_count(
        self,
        tuition_id: UUID,
        update_data: class_event_models.ClassCountUpdate,
        current_user: Annotated[db_models.Users, Depends(verify_token_and_get_user)],
        class_count_service: Annotated[ClassCountService, Depends(ClassCountService)]
    ):
        """
        Applies `increment` (optionally backdated with `classDate`),
        `decrement` or `reset` to the tuition's class counter.
        """
        return await class_count_service.update_class_count(tuition_id, update_data, current_user)

    async def list_class_logs(
        self,
        tuition_id: UUID,
        current_user: Annotated[db_models.Users, Depends(verify_token_and_get_user)],
        class_count_service: Annotated[ClassCountService, Depends(ClassCountService)]
    ):
        logs = await class_count_service.list_logs_for_api(tuition_id, current_user)
        return class_event_models.ClassLogList(logs=logs)

    async def delete_class_log(
        self,
        tuition_id: UUID,
        log_id: UUID,
        current_user: Annotated[db_models.Users, Depends(verify_token_and_get_user)],
        class_count_service: Annotated[ClassCountService, Depends(ClassCountService)]
    ):
        """
        Deletes one attendance entry and takes one class off the counter.
        """
        new_count = await class_count_service.delete_class_log(tuition_id, log_id, current_user)
        return class_event_models.ClassCountResponse(
            message="Class log deleted successfully", new_count=new_count
        )

    async def download_report(
        self,
        tuition_id: UUID,
        current_user: Annotated[db_models.Users, Depends(verify_token_and_get_user)],
        report_service: Annotated[ReportService, Depends(ReportService)],
        month: Annotated[Optional[str], Query(pattern=r"^\d{4}-\d{2}$", description="YYYY-MM label used in the filename")] = None
    ):
        content, filename = await report_service.generate_report(tuition_id, current_user, month)
        return Response(
            content=content,
            media_type="application/pdf",
            headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(filename)}"}
        )


# Instantiate the class and export its router
tuitions_api = TuitionsAPI()
router = tuitions_api.router
