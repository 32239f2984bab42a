'''
Holds all the configurations
'''
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """
    Manages application configuration using environment variables.
    """
    # Application Metadata
    APP_NAME: str = "TuitionTrack Backend"
    APP_VERSION: str = "1.0.0"
    APP_DESCRIPTION: str = "The backend API for the TuitionTrack class tracking platform."
    TEST_MODE: bool = False
    LOG_LEVEL: str = "INFO"

    # Database URL
    DATABASE_URL_PROD: str
    DATABASE_URL_TEST: str = "sqlite+aiosqlite:///:memory:"
    CREATE_TABLES_ON_STARTUP: bool = False
    @property
    def database_url(self) -> str:
        """
        Dynamically returns the correct database URL based on the test_mode flag.
        """
        if self.TEST_MODE:
            return self.DATABASE_URL_TEST
        return self.DATABASE_URL_PROD

    # JWT Settings
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # Email verification
    OTP_EXPIRE_MINUTES: int = 10
    OTP_LENGTH: int = 6

    # SMTP (empty host means OTPs are written to the log instead)
    SMTP_HOST: str = ""
    SMTP_PORT: int = 587
    SMTP_USERNAME: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_USE_TLS: bool = True
    FROM_EMAIL: str = "TuitionTrack <noreply@tuitiontrack.app>"

    # Other settings
    BACKEND_CORS_ORIGINS: list[str] = []

    class Config:
        env_file = ".env" # automatically loads the .env

# Create a single, importable instance of the settings
settings = Settings()
