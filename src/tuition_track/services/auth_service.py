'''
Login and self-service registration with email verification codes.
'''
from typing import Annotated
from fastapi import Depends
from fastapi.security import OAuth2PasswordRequestForm

from .security import JWTHandler
from .user_service import UserService, normalize_email
from .email_service import EmailService
from ..database import models as db_models
from ..models import token as token_models
from ..models import user as user_models
from ..common.logger import log
from ..common.exceptions import AuthenticationError, NotFoundError, ValidationError
from ..common.security_utils import HashedPassword, OneTimeCode

class LoginService:
    """
    Service for handling user login and authentication.
    Depends on the UserService to fetch user data.
    """
    def __init__(
        self,
        user_service: Annotated[UserService, Depends(UserService)]
    ):
        self.user_service = user_service

    async def login_user(self, form_data: OAuth2PasswordRequestForm) -> token_models.Token:
        log.info(f"Attempting login for user: {form_data.username}")

        user = await self.user_service.get_user_by_email(form_data.username)

        if not user or not HashedPassword.verify(form_data.password, user.password):
            log.warning(f"Login failed for user: {form_data.username} - Incorrect email or password")
            raise AuthenticationError("Incorrect email or password")

        if not user.is_active:
            log.warning(f"Login failed for user: {form_data.username} - User is inactive.")
            raise ValidationError("Inactive user.")

        if not user.email_verified:
            log.warning(f"Login failed for user: {form_data.username} - Email not verified.")
            raise ValidationError("Please verify your email before signing in")

        access_token = JWTHandler.issue_for_user(user)
        log.info(f"Login successful for user: {form_data.username}")

        return token_models.Token(
            access_token=access_token,
            token_type="bearer",
            user=user_models.UserRead.model_validate(user)
        )


class RegistrationService:
    """
    Sign-up and the one-time-code email verification flow.
    """
    def __init__(
        self,
        user_service: Annotated[UserService, Depends(UserService)],
        email_service: Annotated[EmailService, Depends(EmailService)]
    ):
        self.user_service = user_service
        self.email_service = email_service

    async def register(self, data: user_models.UserRegister) -> db_models.Users:
        """
        Creates an unverified account and emails it a verification code.
        """
        log.info(f"Registration requested for {data.email} as {data.role.value}.")
        user = await self.user_service.create_user(
            email=data.email,
            password=data.password,
            name=data.name,
            role=data.role
        )
        await self._issue_code(user)
        return user

    async def verify_otp(self, email: str, otp: str) -> db_models.Users:
        log.info(f"Verifying email code for {email}.")
        user = await self._get_user_or_404(email)

        if user.email_verified:
            raise ValidationError("Email is already verified")
        if not OneTimeCode.matches(otp, user.verification_otp):
            log.warning(f"SECURITY: Wrong verification code submitted for {user.email}.")
            raise ValidationError("Invalid verification code")
        if OneTimeCode.is_expired(user.verification_otp_expiry):
            raise ValidationError("Verification code has expired. Please request a new one.")

        user.email_verified = True
        user.verification_otp = None
        user.verification_otp_expiry = None
        await self.user_service.db.flush()
        log.info(f"Email verified for user {user.id}.")
        return user

    async def resend_verification(self, email: str):
        log.info(f"Resending verification code to {email}.")
        user = await self._get_user_or_404(email)
        if user.email_verified:
            raise ValidationError("Email is already verified")
        await self._issue_code(user)

    async def _get_user_or_404(self, email: str) -> db_models.Users:
        user = await self.user_service.get_user_by_email(email)
        if user is None:
            raise NotFoundError(f"No account found for {normalize_email(email)}")
        return user

    async def _issue_code(self, user: db_models.Users):
        """Stores a fresh code on the user (replacing any older one) and sends it."""
        user.verification_otp = OneTimeCode.generate()
        user.verification_otp_expiry = OneTimeCode.expiry()
        await self.user_service.db.flush()
        await self.email_service.send_verification_code(user.email, user.name, user.verification_otp)
