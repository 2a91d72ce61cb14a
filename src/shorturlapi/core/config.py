from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env")

    # Application
    app_env: str = "dev"
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 8000

    # Database
    database_url: str = "sqlite:///./shorturls.db"

    # Short links
    base_url: str = "http://localhost:8000"
    max_code_attempts: int = 5


@lru_cache
def get_settings() -> Settings:
    return Settings()
