'''
Identity store accessor: user lookups, creation and linked-tuition bookkeeping.
'''
from typing import Annotated
from uuid import UUID
from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..database.engine import get_db_session
from ..database import models as db_models
from ..database.db_enums import UserRole
from ..common.logger import log
from ..common.exceptions import AuthenticationError, ConflictError
from ..common.security_utils import HashedPassword, OneTimeCode, generate_temporary_password
from ..models import user as user_models
from .email_service import EmailService


def normalize_email(email: str) -> str:
    """Emails are stored and looked up trimmed and lower-cased."""
    return email.strip().lower()


class UserService:
    """
    Base service for user-related database operations.
    """
    def __init__(self, db: Annotated[AsyncSession, Depends(get_db_session)]):
        self.db = db

    async def get_user_by_email(self, email: str) -> db_models.Users | None:
        email = normalize_email(email)
        log.info(f"Fetching user by email: {email}")
        try:
            stmt = select(db_models.Users).filter(db_models.Users.email == email)
            result = await self.db.execute(stmt)
            return result.scalars().first()
        except Exception as e:
            log.error(f"Database error fetching user by email {email}: {e}", exc_info=True)
            raise

    async def get_user_by_id(self, user_id: UUID) -> db_models.Users | None:
        log.info(f"Fetching user by ID: {user_id}")
        try:
            return await self.db.get(db_models.Users, user_id)
        except Exception as e:
            log.error(f"Database error fetching user by ID {user_id}: {e}", exc_info=True)
            raise

    async def create_user(
        self,
        email: str,
        password: str,
        name: str,
        role: UserRole,
        email_verified: bool = False
    ) -> db_models.Users:
        """
        Creates a new user with a hashed password.
        Raises ConflictError if the email is already registered.
        """
        email = normalize_email(email)
        log.info(f"Attempting to create {role.value} user {email}.")

        if await self.get_user_by_email(email):
            log.warning(f"User creation failed: {email} is already registered.")
            raise ConflictError("User with this email already exists")

        new_user = db_models.Users(
            email=email,
            password=HashedPassword.get_hash(password),
            name=name.strip(),
            role=role.value,
            email_verified=email_verified,
            linked_tuitions=[]
        )
        self.db.add(new_user)
        await self.db.flush()
        log.info(f"Created user {new_user.id} ({email}).")
        return new_user

    async def add_linked_tuition(self, user_id: UUID, tuition_id: UUID):
        """Links a tuition onto a user. Adding an id that is already present does nothing."""
        user = await self.get_user_by_id(user_id)
        if user is None:
            log.warning(f"Cannot link tuition {tuition_id}: user {user_id} does not exist.")
            return

        tuition_key = str(tuition_id)
        current = list(user.linked_tuitions or [])
        if tuition_key in current:
            return
        # Reassign so the JSON column is flagged dirty.
        user.linked_tuitions = current + [tuition_key]
        await self.db.flush()
        log.info(f"Linked tuition {tuition_id} to user {user_id}.")

    async def remove_linked_tuition(self, user_id: UUID, tuition_id: UUID):
        """Unlinks a tuition from a user. A missing user or id is a no-op."""
        user = await self.get_user_by_id(user_id)
        if user is None:
            return

        tuition_key = str(tuition_id)
        current = list(user.linked_tuitions or [])
        if tuition_key not in current:
            return
        user.linked_tuitions = [tid for tid in current if tid != tuition_key]
        await self.db.flush()
        log.info(f"Unlinked tuition {tuition_id} from user {user_id}.")


class StudentService(UserService):
    """Service for teacher-driven student account creation."""

    def __init__(
        self,
        db: Annotated[AsyncSession, Depends(get_db_session)],
        email_service: Annotated[EmailService, Depends(EmailService)]
    ):
        super().__init__(db)
        self.email_service = email_service

    async def create_student(
        self,
        student_data: user_models.StudentCreate,
        current_user: db_models.Users
    ) -> user_models.StudentCreatedResponse:
        """
        Creates an unverified student account with a generated password.
        The password is only ever returned in this response.
        """
        log.info(f"User {current_user.id} attempting to create student {student_data.email}.")
        if current_user.role != UserRole.TEACHER.value:
            log.warning(f"SECURITY: Non-teacher {current_user.id} attempted to create a student.")
            raise AuthenticationError()

        temp_password = generate_temporary_password()
        student = await self.create_user(
            email=student_data.email,
            password=temp_password,
            name=student_data.name,
            role=UserRole.STUDENT
        )

        student.verification_otp = OneTimeCode.generate()
        student.verification_otp_expiry = OneTimeCode.expiry()
        await self.db.flush()
        await self.email_service.send_verification_code(student.email, student.name, student.verification_otp)

        return user_models.StudentCreatedResponse(
            message="Student added successfully",
            uid=student.id,
            temp_password=temp_password
        )
