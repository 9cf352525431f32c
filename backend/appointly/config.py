# backend/appointly/config.py

from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[2]


class Settings(BaseSettings):
    database_url: str = "sqlite:///./data/appointly.db"
    redis_url: str = "redis://localhost:6379/0"

    # Slot grid
    slot_step_minutes: int = 30
    horizon_days: int = 60
    slots_cache_ttl_seconds: int = 86400

    # Widen bookings by Service.buffer_before/after when checking conflicts
    conflict_includes_service_buffers: bool = False

    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        extra="ignore",
    )

    @property
    def resolved_database_url(self) -> str:
        url = self.database_url
        if url.startswith("sqlite:///./"):
            relative_path = url.replace("sqlite:///./", "")
            absolute_path = BASE_DIR / relative_path
            return f"sqlite:///{absolute_path}"
        return url


settings = Settings()
