"""Configuration management for vault-query."""

import os
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SKIP_DIRS = (".obsidian", ".git", ".trash", "node_modules")


def default_vault_path() -> Path:
    """VAULT_QUERY_HOME if set, else ~/vault."""
    return Path(os.getenv("VAULT_QUERY_HOME", str(Path.home() / "vault")))


class VaultQueryConfig(BaseSettings):
    """Settings for indexing and querying a vault.

    Every field can be set through a `VAULT_QUERY_` prefixed environment
    variable, e.g. `VAULT_QUERY_LOG_LEVEL=DEBUG`. List fields take JSON.
    """

    vault_path: Path = Field(
        default_factory=default_vault_path,
        description="Root directory of the note vault",
    )
    skip_dirs: list[str] = Field(
        default_factory=lambda: list(DEFAULT_SKIP_DIRS),
        description="Directory names never descended into",
    )
    ignore_patterns: list[str] = Field(
        default_factory=list,
        description="Gitignore-style patterns matched against vault-relative paths",
    )
    note_extension: str = Field(default=".md", description="Extension of note files")
    log_level: str = Field(default="INFO", description="Log level for the CLI")

    model_config = SettingsConfigDict(
        env_prefix="VAULT_QUERY_",
        extra="ignore",
    )

    @field_validator("vault_path")
    @classmethod
    def expand_vault_path(cls, v: Path) -> Path:
        return Path(v).expanduser()

    @field_validator("note_extension")
    @classmethod
    def normalize_extension(cls, v: str) -> str:
        return v if v.startswith(".") else f".{v}"

    @field_validator("log_level")
    @classmethod
    def upper_log_level(cls, v: str) -> str:
        return v.upper()
