'''
API endpoints for the signed-in user's profile and teacher-created student accounts.
'''
from typing import Annotated
from fastapi import APIRouter, Depends

from ..database import models as db_models
from ..models import user as user_models
from ..services.security import verify_token_and_get_user
from ..services.user_service import StudentService


class UserAPI:
    """Endpoints for general user actions."""
    def __init__(self):
        self.router = APIRouter(tags=["Users"])
        self._register_routes()

    def _register_routes(self):
        self.router.add_api_route("/users/me", self.read_users_me, methods=["GET"], response_model=user_models.UserRead)

    async def read_users_me(
        self,
        current_user: Annotated[db_models.Users, Depends(verify_token_and_get_user)]
    ):
        """
        Returns the profile information for the currently authenticated user.
        """
        return user_models.UserRead.model_validate(current_user)


class StudentsAPI:
    """Student accounts created on a teacher's behalf."""
    def __init__(self):
        self.router = APIRouter(
                prefix="/students",
                tags=["Students"])
        self._register_routes()

    def _register_routes(self):
        self.router.add_api_route(
                "",
                self.create,
                methods=["POST"],
                response_model=user_models.StudentCreatedResponse)

    async def create(
        self,
        student_data: user_models.StudentCreate,
        current_user: Annotated[db_models.Users, Depends(verify_token_and_get_user)],
        student_service: Annotated[StudentService, Depends(StudentService)]
    ):
        """
        Creates a student account with a temporary password. Teachers only.
        The password is returned once and never stored in plain text.
        """
        return await student_service.create_student(student_data, current_user)


# Instantiate and combine routers
user_api = UserAPI()
students_api = StudentsAPI()

router = APIRouter()
router.include_router(user_api.router)
router.include_router(students_api.router)
