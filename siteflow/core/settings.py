"""Application settings and configuration management."""

from __future__ import annotations

import os
from functools import cached_property, lru_cache
from pathlib import Path
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_base_dir() -> Path:
    """Determine a sensible default base directory for the application."""

    base_dir_env = os.getenv("APP_BASE_DIR") or os.getenv("BASE_DIR")
    if base_dir_env:
        return Path(base_dir_env).expanduser()

    docker_default = Path("/app")
    if docker_default.exists() or os.access(docker_default.parent, os.W_OK):
        return docker_default

    return Path(__file__).resolve().parents[2]


class AppPaths(BaseModel):
    """Resolved filesystem paths used by the application."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    base_dir: Path
    data_dir: Path
    projects_dir: Path


class Settings(BaseSettings):
    """Runtime configuration derived from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=(".env",),
        extra="ignore",
        populate_by_name=True,
    )

    app_name: str = Field(default="Siteflow Execution Tracker")
    app_version: str = Field(default="0.1.0")
    environment: str = Field(default="development")
    log_level: str = Field(
        default="INFO",
        description="Level applied to the siteflow logger hierarchy.",
    )

    allowed_origins: list[str] = Field(
        default_factory=list,
        description="List of origins permitted by CORS configuration.",
    )

    base_dir: Path = Field(
        default_factory=_default_base_dir,
        validation_alias=AliasChoices("APP_BASE_DIR", "BASE_DIR"),
        description="Root directory for application data.",
    )
    data_dir: Path | None = Field(
        default=None,
        validation_alias=AliasChoices("APP_DATA_DIR", "DATA_DIR"),
        description="Optional override for data directory location.",
    )
    projects_subdir: str = Field(
        default="projects",
        description="Name of the projects sub-directory within the data directory.",
    )

    expected_task_total: int = Field(
        default=30,
        gt=0,
        description="Number of completed tasks that corresponds to a fully progressed project.",
    )

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def _split_allowed_origins(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator("log_level")
    @classmethod
    def _normalise_log_level(cls, value: str) -> str:
        return value.strip().upper()

    @cached_property
    def paths(self) -> AppPaths:
        base_dir = self.base_dir.expanduser().resolve()
        data_source = self.data_dir or (base_dir / "data")
        data_dir = Path(data_source).expanduser().resolve()
        projects_dir = (data_dir / self.projects_subdir).resolve()
        return AppPaths(
            base_dir=base_dir,
            data_dir=data_dir,
            projects_dir=projects_dir,
        )

    def ensure_directories(self) -> None:
        """Create required data directories if they do not already exist."""

        for path in {
            self.paths.base_dir,
            self.paths.data_dir,
            self.paths.projects_dir,
        }:
            path.mkdir(parents=True, exist_ok=True)


@lru_cache()
def get_settings() -> Settings:
    """Return a cached instance of application settings."""

    return Settings()
