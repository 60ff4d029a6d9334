"""
Configuration management using Pydantic Settings
"""
from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Database (quiz/result store is optional)
    DATABASE_URL: Optional[str] = None

    # Gemini API
    GEMINI_API_KEY: Optional[str] = None
    GEMINI_MODEL: str = "gemini-3-flash-preview"
    MAX_OUTPUT_TOKENS: int = 1200

    # Redis (shared cache / rate-limit backend; in-memory when unset)
    REDIS_URL: Optional[str] = None

    # Wikipedia retrieval
    WIKIPEDIA_API_URL: str = "https://en.wikipedia.org/api/rest_v1"
    WIKI_SUMMARY_TTL: int = 60 * 60 * 24
    WIKI_PAGEINFO_TTL: int = 60 * 60 * 12

    # Application
    APP_NAME: str = "Topic Quiz Generator"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8000"]

    # Rate Limiting
    GENERATE_RATE_LIMIT: int = 20
    GENERATE_RATE_WINDOW: int = 60  # seconds

    # Quiz Settings
    QUIZ_CACHE_TTL: int = 3600  # 1 hour
    MIN_QUESTIONS: int = 5
    MAX_QUESTIONS: int = 10
    OPTIONS_PER_QUESTION: int = 4

    # Logging
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = True


# Global settings instance
settings = Settings()
