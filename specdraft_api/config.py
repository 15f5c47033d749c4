from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .agent.models import OutputFormat


class AWSSettings(BaseSettings):
    """Configuration for AWS integrations."""

    region_name: str | None = None
    profile_name: str | None = None
    use_bedrock: bool = True

    model_config = SettingsConfigDict(env_prefix="SPECDRAFT_AWS_", env_file=None)


class AgentSettings(BaseSettings):
    """Controls for the specification generation agent."""

    generation_model: str = "anthropic.claude-3-5-sonnet-20240620-v1:0"
    max_tokens: int = Field(default=4096, gt=0)
    temperature: float = Field(default=0.2, ge=0.0, le=1.0)

    model_config = SettingsConfigDict(env_prefix="SPECDRAFT_AGENT_", env_file=None)


class Settings(BaseSettings):
    """Application configuration."""

    preferred_format: OutputFormat = OutputFormat.MARKDOWN
    log_file: Path | None = None
    structured_logging: bool = False
    aws: AWSSettings = Field(default_factory=AWSSettings)
    agent: AgentSettings = Field(default_factory=AgentSettings)

    model_config = SettingsConfigDict(env_prefix="SPECDRAFT_", env_file=None)

    @field_validator("preferred_format", mode="before")
    @classmethod
    def fallback_format(cls, v: Any) -> OutputFormat:
        # Unknown or empty values fall back to the default format
        if isinstance(v, OutputFormat):
            return v
        try:
            return OutputFormat(str(v).strip().lower())
        except ValueError:
            return OutputFormat.default()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
