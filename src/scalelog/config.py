from typing import Optional

from pydantic_settings import BaseSettings

from scalelog.models.profile import ActivityLevel


class Settings(BaseSettings):
    database_url: str = "sqlite:///./scalelog.db"
    chart_target_points: int = 13
    downsample_method: str = "simple"  # "none", "simple", "lttb"
    default_activity_level: Optional[ActivityLevel] = None
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
