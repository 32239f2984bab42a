'''
Models returned by the login endpoint and carried inside the JWT.
'''
from datetime import datetime
from pydantic import BaseModel, EmailStr

from .user import UserRead

class Token(BaseModel):
    """
    OAuth2 clients read `access_token` / `token_type` verbatim, so this model
    keeps snake_case keys instead of the camelCase used elsewhere.
    """
    access_token: str
    token_type: str
    user: UserRead

class TokenPayload(BaseModel):
    sub: EmailStr # the user's email
    exp: datetime
