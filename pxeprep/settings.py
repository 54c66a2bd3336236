from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="PXEPREP_", case_sensitive=False)

    root: Path = Field(default_factory=Path.cwd)
    env_file: Path = Path(".env")
    templates_dir: Path | None = None
    download_attempts: int = Field(default=3, ge=1)
    retry_delay: float = Field(default=2.0, ge=0)
    download_timeout: float = Field(default=60.0, gt=0)
    download_workers: int = Field(default=1, ge=1)
    chunk_size: int = Field(default=64 * 1024, gt=0)
