'''
Bearer tokens for TuitionTrack.

A token names its user by email (`sub`), in the same trimmed, lower-cased
form the identity store keys users by, so a token always resolves through
`UserService.get_user_by_email`. Tokens carry no role: the role is read from
the stored user on every request, which keeps a role change effective at once.
'''
from datetime import datetime, timedelta, timezone
from typing import Optional, Annotated
from jose import JWTError, jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from ..common.config import settings
from ..models.token import TokenPayload
from ..common.logger import log
from ..database import models as db_models
from .user_service import UserService, normalize_email


class JWTHandler:
    """Signs and reads the HS256 access tokens handed out by /auth/login."""

    @staticmethod
    def create_access_token(
        subject: str,
        expires_delta: Optional[timedelta] = None
    ) -> str:
        lifetime = expires_delta if expires_delta is not None \
            else timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        claims = {
            "sub": normalize_email(subject),
            "exp": datetime.now(timezone.utc) + lifetime,
        }
        return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

    @classmethod
    def issue_for_user(cls, user: db_models.Users) -> str:
        return cls.create_access_token(subject=user.email)

    @staticmethod
    def decode_token(token: str) -> TokenPayload | None:
        """None for a bad signature, an expired token or a malformed subject."""
        try:
            claims = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
            return TokenPayload(**claims)
        except (JWTError, ValueError) as e:
            log.warning(f"Rejected access token: {e}")
            return None


# Swagger's "Authorize" button posts the login form here.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")

def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized",
        headers={"WWW-Authenticate": "Bearer"},
    )

async def verify_token_and_get_user(
    token: Annotated[str, Depends(oauth2_scheme)],
    user_service: Annotated[UserService, Depends(UserService)]
    ) -> db_models.Users:
    """
    Resolves the bearer token to the signed-in teacher or student.
    A bad token, an unknown email or a deactivated account all answer 401
    with the same message, so callers cannot probe which accounts exist.
    """
    token_data = JWTHandler.decode_token(token)
    if token_data is None:
        raise _unauthorized()

    user = await user_service.get_user_by_email(token_data.sub)
    if user is None:
        log.warning(f"SECURITY: Token for unknown account '{token_data.sub}'.")
        raise _unauthorized()
    if not user.is_active:
        log.warning(f"SECURITY: Token used by deactivated account {user.id}.")
        raise _unauthorized()

    log.info(f"Authenticated {user.role} {user.id}.")
    return user
