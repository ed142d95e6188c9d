from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_API_BASE_URL = "http://10.0.2.2:3000"


class Settings(BaseSettings):
    # .env is loaded manually in get_settings() so a missing/unreadable env file
    # never breaks the CLI or the test suite.
    model_config = SettingsConfigDict(env_prefix="FWUPLOAD_", extra="ignore")

    api_base_url: str = DEFAULT_API_BASE_URL
    database_url: str = "sqlite:///./fwupload.db"

    request_timeout_s: float = 30.0
    # Storage PUTs of large images can take a while on mobile links.
    transfer_timeout_s: float = 300.0
    transfer_chunk_size: int = 64 * 1024

    log_level: str = "INFO"

    def api_url(self, path: str) -> str:
        return self.api_base_url.rstrip("/") + "/" + path.lstrip("/")


@lru_cache
def get_settings() -> Settings:
    try:
        from dotenv import load_dotenv

        load_dotenv(".env", override=False)
    except Exception:
        pass
    return Settings()
