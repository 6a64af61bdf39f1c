from pydantic_settings import BaseSettings
from typing import Optional, List
import os


def _env_flag(name: str) -> bool:
    return os.getenv(name, "0").lower() in ("1", "true", "t", "yes", "y")


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "Sehat Saathi"
    DEBUG: bool = False
    TESTING: bool = _env_flag("TESTING")
    HOST: str = "0.0.0.0"
    PORT: int = 5000

    # Persistence: "sql" goes through SQLAlchemy, "memory" keeps everything in process
    STORAGE_BACKEND: str = "sql"
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./sehat_saathi.db")
    TEST_DATABASE_URL: str = os.getenv("TEST_DATABASE_URL", "sqlite:///./test.db")

    # Bearer tokens; JWT_SECRET is required at startup
    JWT_SECRET: Optional[str] = None
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_MINUTES: int = 60 * 24 * 7
    JWT_ISSUER: str = "sehat-saathi"
    JWT_AUDIENCE: str = "sehat-saathi-users"

    # How far in the past an appointment date may be and still count as "now"
    CLOCK_SKEW_SECONDS: int = 60

    # Load the default pharmacy directory into an empty store on startup
    SEED_PHARMACIES: bool = True

    # AI assistant upstream
    GEMINI_API_KEY: Optional[str] = None
    AI_MODEL: str = "gemini-1.5-flash"
    AI_API_URL: str = "https://generativelanguage.googleapis.com/v1beta/models"
    AI_TIMEOUT_SECONDS: float = 20.0

    # HTTP
    ALLOWED_ORIGINS: List[str] = ["http://localhost:5173", "http://localhost:5000", "http://testserver"]
    ALLOWED_HOSTS: List[str] = ["localhost", "127.0.0.1", "*.localhost"]

    @property
    def get_database_url(self) -> str:
        """Database URL for the current mode (test or normal)."""
        return self.TEST_DATABASE_URL if self.TESTING else self.DATABASE_URL

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
