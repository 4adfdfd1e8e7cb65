from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # core
    ENV: str = "dev"
    API_PREFIX: str = "/api"

    # database & redis
    DATABASE_URL: str = "sqlite:///./trajectory.db"
    # Optional: enables search-result caching and the Celery broker
    REDIS_URL: str | None = None

    # external APIs (absence is expected; the pipeline degrades instead of failing)
    WEB_SEARCH_API_KEY: str | None = None
    WEB_SEARCH_URL: str = "https://api.tavily.com/search"
    WEB_SEARCH_TIMEOUT_SECONDS: float = 10.0
    WEB_SEARCH_CACHE_TTL_SECONDS: int = 60 * 60

    # llm (Gemini through its OpenAI-compatible endpoint)
    GEMINI_API_KEY: str | None = None
    LLM_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta/openai/"
    LLM_MODEL: str = "gemini-2.5-flash"
    LLM_TIMEOUT_SECONDS: float = 10.0
    # Hard cap on concurrent LLM calls per process
    LLM_MAX_CONCURRENCY: int = 4

    # When False, a missing GEMINI_API_KEY degrades to search-only stories
    STORIES_REQUIRE_LLM_KEY: bool = True

    # cors
    FRONTEND_ORIGIN: str | None = None
    # Explicit debug-only switch for wide-open CORS in non-prod envs
    CORS_ALLOW_ALL_ORIGINS: bool = False

    # data retention (in days)
    CASE_STUDY_RETENTION_DAYS: int = 180

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache
def get_settings() -> Settings:
    return Settings()
