"""Configuration management for chat-cmd."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator


# ============================================================================
# Command and Platform Settings
# ============================================================================


class CommandsConfig(BaseModel):
    """Command system configuration."""

    prefix: str = "!"
    ignore_bots: bool = True
    run_in_dm: bool = True
    log_errors: bool = True
    help_names: list[str] = Field(default_factory=lambda: ["help"])
    extensions: list[str] = Field(default_factory=list)  # modules exposing setup(container)

    @field_validator("help_names")
    @classmethod
    def help_names_not_empty(cls, v: list[str]) -> list[str]:
        if not v or any(not name.strip() for name in v):
            raise ValueError("help_names must contain at least one non-empty name")
        return v


class DiscordConfig(BaseModel):
    """Discord platform configuration."""

    enabled: bool = True
    bot_token: str
    channel_id: str | None = None
    allowed_user_ids: list[str] = Field(default_factory=list)


class CliConfig(BaseModel):
    """CLI platform configuration."""

    user_id: int = Field(default=1, gt=0)
    username: str = "cli-user"
    bot_id: int = Field(default=2, gt=0)


# ============================================================================
# Workspace Configuration
# ============================================================================


class Config(BaseModel):
    """
    Settings for one chat-cmd workspace.

    Two YAML files in the workspace are read, both optional:
    config.user.yaml holds what the user edits, config.runtime.yaml is
    merged on top of it. Anything missing from both falls back to the
    model defaults.
    """

    workspace: Path
    commands: CommandsConfig = Field(default_factory=CommandsConfig)
    discord: DiscordConfig | None = None
    cli: CliConfig = Field(default_factory=CliConfig)
    logging_path: Path = Field(default=Path(".logs"))

    @model_validator(mode="after")
    def resolve_paths(self) -> "Config":
        """Resolve relative paths against the workspace."""
        if self.logging_path.is_absolute():
            raise ValueError(f"logging_path must be relative, got: {self.logging_path}")
        self.logging_path = self.workspace / self.logging_path
        return self

    @classmethod
    def load(cls, workspace_dir: Path) -> "Config":
        """
        Read and validate the config files of a workspace.

        Raises:
            ValidationError: If the merged settings are invalid
        """
        config_data: dict = {"workspace": workspace_dir}

        for name in ("config.user.yaml", "config.runtime.yaml"):
            path = workspace_dir / name
            if path.exists():
                with open(path) as f:
                    file_data = yaml.safe_load(f) or {}
                config_data = cls._deep_merge(config_data, file_data)

        return cls.model_validate(config_data)

    @staticmethod
    def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """
        Merge ``override`` into a copy of ``base``, recursing into nested dicts.

        Values from ``override`` win; ``base`` is left untouched.
        """
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = Config._deep_merge(result[key], value)
            else:
                result[key] = value

        return result
