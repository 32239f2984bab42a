'''
API endpoints for Authentication: login, registration and email verification.
'''
from typing import Annotated
from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm

from ..services.auth_service import LoginService, RegistrationService
from ..models import token as token_models
from ..models import user as user_models
from ..models.base import ApiResponse
from ..common.exceptions import ValidationError

class AuthRoutes:
    """
    A class to encapsulate all authentication and sign-up endpoints.
    """
    def __init__(self):
        self.router = APIRouter(
            prefix="/auth",
            tags=["Authentication"]
        )
        self._register_routes()

    def _register_routes(self):
        """Registers all the API routes for this class."""
        self.router.add_api_route(
            "/login",
            self.login_for_access_token,
            methods=["POST"],
            response_model=token_models.Token,
            summary="Login for Access Token"
        )
        self.router.add_api_route(
            "/register",
            self.register,
            methods=["POST"],
            response_model=user_models.RegisterResponse,
            status_code=status.HTTP_201_CREATED,
            summary="Register a teacher or student"
        )
        self.router.add_api_route(
            "/verify-otp",
            self.verify_otp,
            methods=["POST"],
            response_model=ApiResponse,
            summary="Verify email with a one-time code"
        )
        self.router.add_api_route(
            "/resend-verification",
            self.resend_verification,
            methods=["POST"],
            response_model=ApiResponse,
            summary="Send a new verification code"
        )
        self.router.add_api_route(
            "/verify",
            self.verify_with_link,
            methods=["GET"],
            summary="Legacy verification link (no longer supported)"
        )

    async def login_for_access_token(
        self,
        form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
        login_service: Annotated[LoginService, Depends(LoginService)]
    ):
        """
        Authenticates a user and returns an access token.
        Uses OAuth2PasswordRequestForm (username = email).
        """
        return await login_service.login_user(form_data)

    async def register(
        self,
        register_data: user_models.UserRegister,
        registration_service: Annotated[RegistrationService, Depends(RegistrationService)]
    ):
        user = await registration_service.register(register_data)
        return user_models.RegisterResponse(
            message="User registered successfully. Please check your email for verification.",
            uid=user.id
        )

    async def verify_otp(
        self,
        verify_data: user_models.VerifyOTPRequest,
        registration_service: Annotated[RegistrationService, Depends(RegistrationService)]
    ):
        await registration_service.verify_otp(verify_data.email, verify_data.otp)
        return ApiResponse(message="Email verified successfully")

    async def resend_verification(
        self,
        resend_data: user_models.ResendVerificationRequest,
        registration_service: Annotated[RegistrationService, Depends(RegistrationService)]
    ):
        await registration_service.resend_verification(resend_data.email)
        return ApiResponse(message="Verification code sent")

    async def verify_with_link(self):
        """Old emails carried a token link. Those links are dead; the code flow replaced them."""
        raise ValidationError("Token-based verification is deprecated. Please use OTP verification instead.")

# Create an instance of the class and export its router
auth_routes = AuthRoutes()
router = auth_routes.router
