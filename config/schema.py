"""Configuration schema for dok using Pydantic.

Nested groups:
- storage: provider strategy and database location
- documents: defaults applied to newly created entries
- render: markdown extensions for the view endpoint
- server: HTTP binding and CORS
- logging: log level
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

_STRATEGIES = {"sqlite", "memory"}
_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


class StorageConfig(BaseModel):
    """Where and how entries are persisted."""

    strategy: str = Field("sqlite", description="Storage provider: sqlite/memory")
    db_path: Path = Field(Path.home() / ".dok" / "dok.db", description="SQLite database file")

    @field_validator("strategy")
    @classmethod
    def validate_strategy(cls, v: str) -> str:
        value = v.strip().lower()
        if value not in _STRATEGIES:
            raise ValueError(f"Unsupported storage strategy: {v!r}. Supported: {', '.join(sorted(_STRATEGIES))}")
        return value


class DocumentsConfig(BaseModel):
    default_file_content: str = Field("# New File\n", description="Placeholder body for new files")


class RenderConfig(BaseModel):
    extensions: list[str] = Field(
        default_factory=lambda: [
            "tables",
            "fenced_code",
            "sane_lists",
            "toc",
            "wikilinks",
            "pymdownx.tilde",
            "pymdownx.caret",
            "pymdownx.tasklist",
            "pymdownx.magiclink",
        ],
        description="Python-Markdown extensions used by the view endpoint",
    )


class ServerConfig(BaseModel):
    host: str = Field("0.0.0.0", description="Bind address")
    port: int = Field(8080, gt=0, lt=65536, description="Bind port")
    cors_origins: list[str] = Field(default_factory=lambda: ["*"], description="Allowed CORS origins")


class LoggingConfig(BaseModel):
    level: str = Field("INFO", description="Root log level")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        value = v.strip().upper()
        if value not in _LOG_LEVELS:
            raise ValueError(f"Invalid log level: {v!r}")
        return value

    @property
    def numeric_level(self) -> int:
        return logging.getLevelName(self.level)


class DokSettings(BaseModel):
    """Complete dok configuration."""

    storage: StorageConfig = Field(default_factory=StorageConfig)
    documents: DocumentsConfig = Field(default_factory=DocumentsConfig)
    render: RenderConfig = Field(default_factory=RenderConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
