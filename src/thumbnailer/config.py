from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .formats import DEFAULT_DESTINATION_PREFIX
from .images import DEFAULT_MAX_DIMENSION

StorageBackend = Literal["azure", "memory"]


class ThumbnailerSettings(BaseSettings):
    """Configuration container for the blob thumbnailer."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    max_dimension: int = Field(
        DEFAULT_MAX_DIMENSION,
        gt=0,
        validation_alias=AliasChoices("THUMBNAILER_MAX_DIMENSION", "MAX_DIMENSION"),
    )
    input_container: str = Field(
        "input-container",
        validation_alias=AliasChoices(
            "THUMBNAILER_INPUT_CONTAINER", "INPUT_CONTAINER"
        ),
    )
    output_container: str = Field(
        "output-container",
        validation_alias=AliasChoices(
            "THUMBNAILER_OUTPUT_CONTAINER", "OUTPUT_CONTAINER"
        ),
    )
    destination_prefix: str = Field(
        DEFAULT_DESTINATION_PREFIX,
        validation_alias=AliasChoices(
            "THUMBNAILER_DESTINATION_PREFIX", "DESTINATION_PREFIX"
        ),
    )

    storage_backend: StorageBackend = Field(
        "azure",
        validation_alias=AliasChoices(
            "THUMBNAILER_STORAGE_BACKEND", "STORAGE_BACKEND"
        ),
    )
    storage_connection_setting: str = Field(
        "AzureWebJobsStorage",
        validation_alias=AliasChoices(
            "THUMBNAILER_STORAGE_CONNECTION_SETTING", "STORAGE_CONNECTION_SETTING"
        ),
    )
    azure_storage_connection_string: str | None = Field(
        None,
        validation_alias=AliasChoices(
            "THUMBNAILER_AZURE_STORAGE_CONNECTION_STRING", "AzureWebJobsStorage"
        ),
    )
    output_binding: bool = Field(
        False,
        validation_alias=AliasChoices(
            "THUMBNAILER_OUTPUT_BINDING", "OUTPUT_BINDING"
        ),
    )

    log_level: str = Field(
        "INFO", validation_alias=AliasChoices("THUMBNAILER_LOG_LEVEL", "LOG_LEVEL")
    )


@lru_cache(maxsize=1)
def get_settings() -> ThumbnailerSettings:
    """Return a cached instance of the thumbnailer settings."""

    return ThumbnailerSettings()
