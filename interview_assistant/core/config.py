from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from enum import Enum
from pathlib import Path
from typing import Literal

class EnvironmentType(str, Enum):
    DEVELOPMENT = "development"
    TESTING = "testing"
    PRODUCTION = "production"

# Value shipped in the sample .env; treated as "not configured"
PLACEHOLDER_API_KEY = "your_openai_api_key_here"

class Settings(BaseSettings):
    # Basic Settings
    APP_NAME: str = "Interview Assistant"
    ENVIRONMENT: EnvironmentType = EnvironmentType.DEVELOPMENT
    DEBUG: bool = True
    API_PREFIX: str = "/api"

    # Server Settings
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "DEBUG"

    # AI Settings
    OPENAI_API_KEY: str | None = None
    OPENAI_BASE_URL: str | None = None
    AI_MODEL: str = "gpt-3.5-turbo"
    AI_MAX_TOKENS: int = 1000
    AI_TEMPERATURE: float = 0.7
    AI_TIMEOUT_SECONDS: float = 30.0

    # Persistence
    PERSIST_STATE: bool = True

    # Interview
    TIMER_TICK_SECONDS: float = 1.0
    STRICT_QUESTION_GENERATION: bool = False

    # Resume upload
    MAX_RESUME_BYTES: int = 10 * 1024 * 1024

    # Paths
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    STATE_FILE: Path = BASE_DIR / "data" / "interview_state.json"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra='ignore'
    )

    @property
    def has_api_key(self) -> bool:
        return bool(self.OPENAI_API_KEY) and self.OPENAI_API_KEY != PLACEHOLDER_API_KEY

@lru_cache
def get_settings() -> Settings:
    return Settings()
