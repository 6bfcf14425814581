from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _default_data_dir() -> Path:
    return Path.home() / ".config" / "recipebox"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="RECIPEBOX_",
        env_file=".env",
        env_file_encoding="utf-8-sig",
        case_sensitive=False,
        extra="ignore",
    )

    data_dir: Path = Field(default_factory=_default_data_dir)
    recipes_file: Optional[Path] = None
    restaurants_file: Optional[Path] = None
    users_file: Optional[Path] = None
    encyclopedia_file: Optional[Path] = None
    log_level: str = "WARNING"
    admin_username: Optional[str] = None
    admin_password: Optional[str] = None

    @field_validator("data_dir", "recipes_file", "restaurants_file", "users_file", "encyclopedia_file")
    @classmethod
    def _expand_home(cls, value: Optional[Path]) -> Optional[Path]:
        return value.expanduser() if value is not None else None

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_LOG_LEVELS)}")
        return level

    @property
    def recipes_path(self) -> Path:
        return self.recipes_file or self.data_dir / "recipes.json"

    @property
    def restaurants_path(self) -> Path:
        return self.restaurants_file or self.data_dir / "restaurants.json"

    @property
    def users_path(self) -> Path:
        return self.users_file or self.data_dir / "users.json"

    @property
    def log_level_value(self) -> int:
        return getattr(logging, self.log_level)

    def validate_paths(self) -> list[str]:
        """
        Check the configured locations without touching them.

        Returns:
            Human readable problems, empty when everything is usable
        """
        problems: list[str] = []
        if self.data_dir.exists() and not self.data_dir.is_dir():
            problems.append(f"data_dir {self.data_dir} is not a directory")

        for label, path in (
            ("recipes_file", self.recipes_path),
            ("restaurants_file", self.restaurants_path),
            ("users_file", self.users_path),
        ):
            if path.is_dir():
                problems.append(f"{label} {path} is a directory")

        if len({self.recipes_path, self.restaurants_path, self.users_path}) < 3:
            problems.append("recipes, restaurants and users must use different files")

        if self.encyclopedia_file is not None and self.encyclopedia_file.is_dir():
            problems.append(f"encyclopedia_file {self.encyclopedia_file} is a directory")

        if bool(self.admin_username) != bool(self.admin_password):
            problems.append("admin_username and admin_password must be set together")

        return problems


def get_settings(**overrides: Any) -> Settings:
    """Build settings from the environment, .env and explicit overrides."""
    return Settings(**overrides)
