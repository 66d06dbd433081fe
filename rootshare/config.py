from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file='.env', env_file_encoding='utf-8', extra='ignore')

    app_name: str = 'RootShare'
    host: str = '0.0.0.0'
    port: int = Field(default=3000, ge=1, le=65535)
    root_path: str = '/'
    log_level: str = 'info'
    cors_origins: str = '*'
    upload_chunk_size: int = Field(default=1024 * 1024, ge=4096, le=64 * 1024 * 1024)
    static_dir: str = ''


settings = Settings()
