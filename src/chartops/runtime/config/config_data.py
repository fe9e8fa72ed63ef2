"""Validated runtime settings for chartops."""

from __future__ import annotations

import re
import shlex
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Settings(BaseModel):
    """Runtime settings.

    Every field has a default so the tool works without a config file;
    ``chartops.yaml`` and ``CHARTOPS_*`` environment variables override them.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    debug: bool = False

    # Local chart layout
    chart_root: Path = Path("chart")

    # Cluster discovery
    app_pod_pattern: str | None = None
    secret_name: str | None = None
    database_url_key: str = "DATABASE_URL"

    # Database tunnel
    db_pod_pattern: str = "postgres"
    db_remote_port: int = Field(default=5432, gt=0, lt=65536)
    db_local_port: int = Field(default=54320, gt=0, lt=65536)
    db_local_host: str = "127.0.0.1"
    tunnel_settle_seconds: float = Field(default=2.0, ge=0)

    # Registry
    registry_max_items: int = Field(default=100, gt=0)
    version_sort: Literal["lexical", "semantic"] = "lexical"

    # Database operations
    migration_command: list[str] = Field(
        default_factory=lambda: ["alembic", "upgrade", "head"]
    )
    dump_dir: Path = Path(".")

    @field_validator("migration_command", mode="before")
    @classmethod
    def _split_command(cls, value: object) -> object:
        if isinstance(value, str):
            return shlex.split(value)
        return value

    @field_validator("migration_command")
    @classmethod
    def _non_empty_command(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("migration_command must not be empty")
        return value

    @field_validator("app_pod_pattern", "db_pod_pattern")
    @classmethod
    def _valid_pattern(cls, value: str | None) -> str | None:
        if value is not None:
            try:
                re.compile(value)
            except re.error as e:
                raise ValueError(f"invalid regular expression '{value}': {e}") from e
        return value
