from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from artifacts.models.usages import Confidence

CONFIG_FILENAME = "phpusage.toml"

DEFAULT_EXCLUDE_DIRS = ("vendor", "node_modules", ".git")

RescoreScope = Literal["all", "method-calls"]


class FinderConfig(BaseModel):
    """Configuration for discovering PHP files and scoring usages."""

    model_config = ConfigDict(extra="forbid")

    include: list[str] = Field(
        default_factory=list,
        description="Glob patterns for files to include (empty = all PHP files)",
    )
    exclude: list[str] = Field(
        default_factory=list,
        description="Glob patterns for files to exclude",
    )
    exclude_dirs: list[str] = Field(
        default_factory=lambda: list(DEFAULT_EXCLUDE_DIRS),
        description="Directory names never descended into",
    )
    extensions: list[str] = Field(
        default_factory=lambda: [".php"],
        description="File suffixes treated as PHP source",
    )
    nested_gitignore: bool = Field(
        default=False,
        description=(
            "Enable nested .gitignore composition (default: false for root-only)"
        ),
    )
    jobs: int = Field(
        default=1,
        ge=1,
        description="Worker threads used to analyze files (1 = sequential)",
    )
    rescore: RescoreScope = Field(
        default="all",
        description=(
            "Which usages the confidence scorer re-classifies: every usage, "
            "or only instance method calls"
        ),
    )
    min_confidence: Confidence = Field(
        default=Confidence.POSSIBLE,
        description="Lowest confidence tier reported by the CLI",
    )

    @field_validator("extensions", mode="before")
    @classmethod
    def validate_extensions(cls, v: Any) -> Any:
        """Normalize extensions to lowercase with a leading dot."""
        if v is None:
            return [".php"]

        if not isinstance(v, list) or not all(isinstance(ext, str) for ext in v):
            msg = "extensions must be a list of strings"
            raise TypeError(msg)

        normalized = []
        for ext in v:
            ext = ext.strip().lower()
            if not ext:
                msg = "extensions must not contain empty values"
                raise ValueError(msg)
            normalized.append(ext if ext.startswith(".") else f".{ext}")
        return normalized


class ConfigError(Exception):
    """Raised when config file exists but cannot be parsed."""


def load_config(root: Path) -> FinderConfig:
    """Load configuration from phpusage.toml if it exists."""
    config_path = Path(root) / CONFIG_FILENAME

    if not config_path.is_file():
        return FinderConfig()

    try:
        with config_path.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in {config_path}: {e}"
        raise ConfigError(msg) from e
    except OSError as e:
        msg = f"Cannot read {config_path}: {e}"
        raise ConfigError(msg) from e

    try:
        return FinderConfig.model_validate(data)
    except Exception as e:
        msg = f"Invalid config in {config_path}: {e}"
        raise ConfigError(msg) from e
