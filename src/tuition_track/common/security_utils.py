'''
This file contains common security-related utilities, such as password hashing
and one-time codes, that are decoupled from other services to prevent circular imports.
'''
import secrets
import string
from datetime import datetime, timedelta, timezone
from passlib.context import CryptContext

from .config import settings

# --- Password Hashing ---
class HashedPassword:
    pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
    @classmethod
    def verify(cls, plain_password: str, hashed_password: str) -> bool:
        return cls.pwd_context.verify(plain_password, hashed_password)

    @classmethod
    def get_hash(cls, password: str) -> str:
        return cls.pwd_context.hash(password)

# --- One-Time Passcodes ---
class OneTimeCode:
    @staticmethod
    def generate(length: int | None = None) -> str:
        """Returns a numeric code that never starts with 0."""
        length = length or settings.OTP_LENGTH
        first = secrets.choice("123456789")
        rest = "".join(secrets.choice(string.digits) for _ in range(length - 1))
        return first + rest

    @staticmethod
    def expiry(minutes: int | None = None) -> datetime:
        minutes = minutes if minutes is not None else settings.OTP_EXPIRE_MINUTES
        return datetime.now(timezone.utc) + timedelta(minutes=minutes)

    @staticmethod
    def matches(provided: str, stored: str | None) -> bool:
        if not stored:
            return False
        return secrets.compare_digest(provided.strip(), stored)

    @staticmethod
    def is_expired(expiry: datetime | None) -> bool:
        if expiry is None:
            return True
        return datetime.now(timezone.utc) > expiry

def generate_temporary_password(length: int = 10) -> str:
    alphabet = string.ascii_letters + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(length))
