from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Base
    APP_ENV: str = "dev"  # dev | staging | prod
    APP_NAME: str = "PDF Mind API"
    APP_VERSION: str = "0.1.0"

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    # Security (protects the hosted functions)
    API_KEY: str = "change_me"

    # Upload
    MAX_UPLOAD_MB: int = 10

    # Logging
    LOG_LEVEL: str = "INFO"

    # Extraction provider (PDF.co)
    PDFCO_API_KEY: Optional[str] = None
    PDFCO_BASE_URL: str = "https://api.pdf.co/v1"

    # Generative provider (OpenAI compatible)
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_MODEL: str = "gpt-4o-mini"
    OPENAI_BASE_URL: Optional[str] = None

    # Hosted functions proxy, ex: "https://example.org/functions/v1"
    FUNCTIONS_URL: Optional[str] = None
    FUNCTIONS_API_KEY: Optional[str] = None

    # Behaviour
    LOCAL_HEURISTICS: bool = True
    QUIZ_DURATION_SECONDS: int = 1800
    SESSION_TTL_SECONDS: int = 60 * 60
    HTTP_TIMEOUT_SECONDS: float = 60.0

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache
def get_settings() -> Settings:
    return Settings()
