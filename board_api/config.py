from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Safe defaults; override via environment or .env file
    APP_NAME: str = "AI Jobs"
    APP_ENV: str = "dev"
    DATABASE_URL: str = "postgresql+psycopg2://postgres:postgres@db:5432/postgres"
    SERVER_URL: str = "https://ai-jobs.com"
    CORS_ALLOW_ORIGINS: str = "*"  # comma-separated
    LOG_LEVEL: str = "INFO"
    API_KEY: str = ""

    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    AI_SEARCH_URL: str = "http://ai-search:8080/search"
    AI_SEARCH_TIMEOUT_SECONDS: float = 120.0

    # load-more trigger: fire when 10% of the sentinel is within 100 units of the viewport
    LOADER_THRESHOLD: float = 0.1
    LOADER_ROOT_MARGIN: int = 100

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


settings = Settings()
