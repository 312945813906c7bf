"""Configuration for templint using pydantic-settings."""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

LintMode = Literal["block", "template"]


class RulesSettings(BaseSettings):
    """Settings for loading rules."""

    model_config = SettingsConfigDict(
        env_prefix="RULES_",
    )

    rules_dir: Path | None = Field(
        default=None,
        description="Directory of rule modules, loaded in file name order",
    )
    app: str | None = Field(
        default=None,
        description="Application name made available to rules",
    )


class SyntaxSettings(BaseSettings):
    """Template syntax options shared by parsing and source indexing."""

    model_config = SettingsConfigDict(
        env_prefix="SYNTAX_",
    )

    block_start_string: str = Field(default="{%", description="Start of a block tag")
    block_end_string: str = Field(default="%}", description="End of a block tag")
    variable_start_string: str = Field(default="{{", description="Start of a variable tag")
    variable_end_string: str = Field(default="}}", description="End of a variable tag")
    comment_start_string: str = Field(default="{#", description="Start of a comment")
    comment_end_string: str = Field(default="#}", description="End of a comment")
    line_statement_prefix: str | None = Field(
        default=None, description="Prefix marking a line as a statement"
    )
    line_comment_prefix: str | None = Field(
        default=None, description="Prefix marking a line as a comment"
    )
    trim_blocks: bool = Field(
        default=False, description="Remove the first newline after a block tag"
    )
    lstrip_blocks: bool = Field(
        default=False, description="Strip whitespace from the start of a line up to a block tag"
    )
    extensions: list[str] = Field(
        default_factory=list,
        description="Import paths of extra Jinja2 extensions needed to parse the templates",
    )


class LintSettings(BaseSettings):
    """Global settings for a lint run."""

    model_config = SettingsConfigDict(
        env_prefix="TEMPLINT_",
    )

    rules: RulesSettings = Field(default_factory=RulesSettings)
    syntax: SyntaxSettings = Field(default_factory=SyntaxSettings)
    mode: LintMode = Field(
        default="block",
        description="'block' lints {% lint %} blocks, 'template' lints whole templates",
    )
    template_suffixes: list[str] = Field(
        default_factory=lambda: [".html", ".htm", ".j2", ".jinja", ".jinja2", ".njk", ".tmpl"],
        description="File suffixes collected when linting a directory",
    )
    ignore_patterns: list[str] = Field(
        default_factory=list,
        description="List of glob patterns to ignore files",
    )
    ignore_file_patterns: list[str] = Field(
        default_factory=lambda: ["**/.templintignore"],
        description="List of glob patterns to find ignore files",
    )


# Global settings instance that can be accessed throughout the application
_settings: LintSettings | None = None


def get_settings() -> LintSettings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = LintSettings()
    return _settings


def set_settings(settings: LintSettings) -> None:
    """Set the global settings instance."""
    global _settings
    _settings = settings
