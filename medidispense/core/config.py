from typing import List, Union
import re

from pydantic import AnyHttpUrl, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    PROJECT_NAME: str = "MediDispense"
    API_V1_STR: str = "/api/v1"

    # CORS
    BACKEND_CORS_ORIGINS: List[AnyHttpUrl] = []

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> Union[List[str], str]:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",") if i.strip()]
        elif isinstance(v, (list, str)):
            return v
        raise ValueError(v)

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./medidispense.db"
    DEBUG: bool = False

    @model_validator(mode="after")
    def normalize_db_url(self) -> "Settings":
        if self.DATABASE_URL.startswith("postgresql://"):
            self.DATABASE_URL = self.DATABASE_URL.replace("postgresql://", "postgresql+asyncpg://", 1)
        elif self.DATABASE_URL.startswith("sqlite:///"):
            self.DATABASE_URL = self.DATABASE_URL.replace("sqlite:///", "sqlite+aiosqlite:///", 1)

        if self.DATABASE_URL.startswith("postgresql+asyncpg://"):
            # asyncpg takes ssl=, and rejects channel_binding as a connect kwarg
            self.DATABASE_URL = self.DATABASE_URL.replace("sslmode=require", "ssl=require")
            if "channel_binding=" in self.DATABASE_URL:
                self.DATABASE_URL = re.sub(r"[&?]channel_binding=[^&]*", "", self.DATABASE_URL)

        return self

    # Logging
    LOG_LEVEL: str = "INFO"

    # Redis (shared inventory lock)
    REDIS_URL: str = "redis://localhost:6379/0"
    LOCK_TIMEOUT: int = 30
    LOCK_RETRY_DELAY: float = 0.1
    LOCK_MAX_RETRIES: int = 50

    # Dispenser rules
    LOW_STOCK_THRESHOLD: int = 10
    MAX_SLOTS: int = 12
    DEFAULT_SLOT_CAPACITY: int = 100
    REFUND_STOCK_ON_CANCEL: bool = False

    model_config = SettingsConfigDict(case_sensitive=True, env_file=".env", extra="ignore")


settings = Settings()
