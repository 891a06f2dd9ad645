"""Configuration models for sshconfman."""

from pathlib import Path

import yaml
from pydantic import BaseModel, field_validator

DEFAULT_BACKUP_DIR_NAME = "sshconfman_backups"


def default_config_path() -> Path:
    """Location of the current user's SSH client config."""
    return Path.home() / ".ssh" / "config"


class ManagerConfig(BaseModel):
    """Where the SSH config lives and how it is read and written."""

    config_path: Path = default_config_path()
    backup_dir_name: str = DEFAULT_BACKUP_DIR_NAME
    indent: str = "  "
    encoding: str = "utf-8"
    chunk_size: int = 8192

    @field_validator("config_path")
    @classmethod
    def expand_config_path(cls, v: Path) -> Path:
        return v.expanduser()

    @field_validator("backup_dir_name")
    @classmethod
    def validate_backup_dir_name(cls, v: str) -> str:
        if not v or v in (".", "..") or "/" in v or "\\" in v:
            raise ValueError(f"backup_dir_name must be a single directory name, got {v!r}")
        return v

    @field_validator("indent")
    @classmethod
    def validate_indent(cls, v: str) -> str:
        if v.strip():
            raise ValueError("indent must contain only whitespace")
        return v

    @field_validator("chunk_size")
    @classmethod
    def validate_chunk_size(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("chunk_size must be positive")
        return v

    @property
    def backup_dir(self) -> Path:
        return self.config_path.parent / self.backup_dir_name


def load_config(path: Path) -> ManagerConfig:
    """Load settings from YAML file."""
    with open(path) as f:
        data = yaml.safe_load(f)
    return ManagerConfig.model_validate(data or {})


def get_config_template() -> str:
    """Get the default settings template."""
    return f"""# sshconfman settings

# SSH client config file to manage
# config_path: ~/.ssh/config

# Backups are written to this directory, created beside config_path
backup_dir_name: {DEFAULT_BACKUP_DIR_NAME}

# Indentation for directives under each Host line
indent: "  "

encoding: utf-8

# Read size when hashing the config file
chunk_size: 8192
"""
