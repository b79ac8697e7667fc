from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class Settings(BaseSettings):
    log_level: str = "WARNING"
    log_file: Optional[Path] = None
    log_format: str = "%(asctime)s [%(levelname)s] %(message)s"
    # Printed before each line is read from an interactive terminal
    prompt: str = ""
    # Echo "> <command>" ahead of its output, transcript style
    echo_commands: bool = False

    model_config = SettingsConfigDict(
        env_prefix="SIMPLEDB_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @field_validator("log_level")
    @classmethod
    def check_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}, got {value!r}")
        return level


@lru_cache
def get_settings() -> Settings:
    return Settings()
