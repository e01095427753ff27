from typing import Optional

from pydantic import PositiveInt
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    app_name: str = "PWS History"
    app_env: str = "development"
    app_version: str = "0.1.0"
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 3000

    # Weather Underground PWS history API
    wu_api_key: Optional[str] = None
    wu_base_url: str = "https://api.weather.com/v2/pws/history/all"
    wu_timeout_s: Optional[float] = None

    # Storage and static assets
    database_url: str = "sqlite:///data.db"
    static_dir: str = "public"

    # None means every date of a range is requested at once
    range_max_concurrency: Optional[PositiveInt] = None

    # .env support and prefix for clarity
    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )
