"""Logging configuration model."""

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator


class LoggingConfig(BaseModel):
    """``[logging]`` table: console output plus an optional rotating JSON file."""

    model_config = ConfigDict(extra='forbid')

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["simple", "detailed", "json"] = "simple"
    file: Path | None = Field(default=None, description="JSON log file; disabled when unset")
    max_file_size_mb: int = Field(default=10, gt=0, description="Rotate the log file at this size")
    backup_count: int = Field(default=5, ge=0, description="Rotated log files to keep")

    @field_validator('level', 'format', mode='before')
    @classmethod
    def normalize_case(cls, v: Any, info: ValidationInfo) -> Any:
        """Accept level and format names in any case."""
        if not isinstance(v, str):
            return v
        return v.upper() if info.field_name == 'level' else v.lower()

    @field_validator('file', mode='before')
    @classmethod
    def empty_file_disables(cls, v: Any) -> Any:
        """Treat an empty string (e.g. from an env override) as no file."""
        if isinstance(v, str) and not v.strip():
            return None
        return v
