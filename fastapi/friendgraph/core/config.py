from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # flat = easy env overrides
    project_name: str = "friendgraph"
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000

    mongo_url: str = "mongodb://localhost:27017"
    mongo_db_name: str = "friendgraph"

    jwt_secret_key: str = "change-me-before-deploying-this-service"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24

    recommendation_limit: int = 10
    recommendation_max_limit: int = 50

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
