from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment overrides for the clip pipeline."""
    openai_api_key: str = ""
    clip_min_duration: float = 8.0
    clip_max_duration: float = 30.0
    clip_ideal_duration: float = 15.0
    output_dir: Optional[str] = Field(default=None, validation_alias="AICLIPPER_OUTPUT_DIR")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
