from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    host: str = "127.0.0.1"
    port: int = 9000
    log_level: str = "INFO"
    youtube_base_url: str = "https://www.youtube.com"
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    )
    fetch_timeout: float = 10.0
    cache_ttl_seconds: float = 3600.0
    cache_max_entries: int = 10000
    rate_limit_max_requests: int = 30
    rate_limit_window_seconds: float = 60.0
    video_fetch_workers: int = 4
    credits_file: Path = Path("credits.json")
    query_log_file: Path = Path("queries.jsonl")
    default_credits: int = 100
    admin_user_id: str = ""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
