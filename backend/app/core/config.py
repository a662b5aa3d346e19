from pydantic_settings import BaseSettings
from typing import List
import os


class Settings(BaseSettings):
    env: str = "dev"
    project_name: str = "Queue Ticketing API"
    api_version: str = "0.1.0"
    database_url: str = "postgresql+psycopg2://queueuser:queuepass@db:5432/queues"
    log_level: str = "INFO"
    backend_cors_origins: str = "http://localhost:5173"

    # Empty disables Redis; events are then only logged
    redis_url: str = ""
    queue_channel: str = "queue_updates"

    claim_max_retries: int = 3
    default_max_queue: int = 100

    port: int = int(os.getenv("PORT", "8000"))

    @property
    def cors_origins(self) -> List[str]:
        """Parse CORS origins from comma-separated string"""
        origins = self.backend_cors_origins
        return [origin.strip() for origin in origins.split(",") if origin.strip()]

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
