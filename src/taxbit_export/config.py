from __future__ import annotations

import logging
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models.schema import SchemaVersion


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    schema_version: SchemaVersion = Field(default=SchemaVersion.EXTENDED, alias="TAXBIT_SCHEMA")
    on_error: Literal["raise", "collect"] = Field(default="raise", alias="TAXBIT_ON_ERROR")
    encoding: str = Field(default="utf-8", alias="TAXBIT_ENCODING")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    def validate_required(self) -> None:
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"LOG_LEVEL is not a logging level: {self.log_level}")


@lru_cache
def load_settings() -> Settings:
    settings = Settings()
    settings.validate_required()
    return settings
