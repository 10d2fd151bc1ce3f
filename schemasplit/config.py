# schemasplit/config.py
"""
schemasplit Configuration - Single source of truth via Pydantic Settings.

Resolution order: CLI flags > env vars (SCHEMASPLIT_*) > .env file > defaults.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PACKAGE_DIR = Path(__file__).resolve().parent
"""Directory holding the installed package; the default root is its parent."""


class SchemaSplitConfig(BaseSettings):
    """Central configuration for schemasplit."""

    model_config = SettingsConfigDict(
        env_prefix="SCHEMASPLIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- Traversal ---
    # None means "one directory above the package", the workspace it lives in.
    root_dir: Optional[Path] = None
    excluded_dirs: list[str] = Field(
        default_factory=lambda: ["node_modules", "target", ".git"]
    )

    # --- Processing ---
    workers: int = 1

    # --- Logging ---
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # --- Paths ---
    home_dir: Path = Field(default_factory=lambda: Path.home() / ".schemasplit")

    @field_validator("workers")
    @classmethod
    def _at_least_one_worker(cls, v: int) -> int:
        if v < 1:
            raise ValueError("workers must be >= 1")
        return v

    @property
    def log_dir(self) -> Path:
        return self.home_dir / "logs"

    @property
    def effective_root(self) -> Path:
        if self.root_dir is not None:
            return Path(self.root_dir)
        return PACKAGE_DIR.parent


@lru_cache(maxsize=1)
def get_config() -> SchemaSplitConfig:
    """Return the global config singleton."""
    return SchemaSplitConfig()
