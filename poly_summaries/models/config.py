"""
Configuration Models

Pydantic models for system configuration validation.
"""

import json
import os
from enum import Enum
from pathlib import Path
from typing import Mapping, Optional

from pydantic import BaseModel, Field, field_validator

DEFAULT_CONFIG_PATH = Path("config/system_params.json")
RUN_MODE_ENV_VAR = "SUMMARY_RUN_MODE"


class RunMode(str, Enum):
    """Run mode selected once per invocation."""

    BATCH = "batch"  # next slice of the list, skip existing summaries
    FULL = "full"  # every professor, never regress a good summary


class SourceConfig(BaseModel):
    """Remote CSV sources and permalink base."""

    ratings_url: str = Field(
        default=(
            "https://raw.githubusercontent.com/sreshtalluri/polyratings-data-collection"
            "/refs/heads/main/data/main/professors_data.csv"
        )
    )
    comments_url: str = Field(
        default=(
            "https://raw.githubusercontent.com/sreshtalluri/polyratings-data-collection"
            "/refs/heads/main/data/main/professor_detailed_reviews.csv"
        )
    )
    site_base_url: str = Field(default="https://polyratings.dev")
    fetch_timeout: float = Field(default=30.0, gt=0)


class BatchConfig(BaseModel):
    """Batch sizing and comment bounding."""

    batch_size: int = Field(default=400, gt=0)
    max_comment_length: int = Field(default=2000, gt=0)
    prompt_comment_length: int = Field(default=1000, gt=0)


class ApiConfig(BaseModel):
    """Generative-language API settings."""

    endpoint_base: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta/models"
    )
    model: str = Field(default="gemini-2.0-flash")
    timeout: float = Field(default=60.0, gt=0)


class RetryConfig(BaseModel):
    """Retry, backoff and pacing in seconds."""

    max_attempts: int = Field(default=3, gt=0, le=10)
    retry_delay: float = Field(default=2.0, ge=0)
    rate_limit_backoff: float = Field(default=5.0, ge=0)
    request_delay: float = Field(default=1.0, ge=0)


class StorageConfig(BaseModel):
    """Where results, cursor state and run history are written."""

    output_dir: str = Field(default="summaries")
    results_file: str = Field(default="ai_summaries.json")
    state_file: str = Field(default="state.json")
    history_file: str = Field(default="run_history.jsonl")


class SystemParams(BaseModel):
    """System parameters configuration model."""

    sources: SourceConfig = Field(default_factory=SourceConfig)
    batch_config: BatchConfig = Field(default_factory=BatchConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    run_mode: RunMode = Field(default=RunMode.BATCH)
    log_level: str = Field(default="INFO")
    log_file: str = Field(default="logs/poly-summaries.log")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {', '.join(valid_levels)}")
        return v.upper()

    @classmethod
    def load(cls, config_path: Path | str | None = None) -> "SystemParams":
        """Load system parameters from config file.

        Args:
            config_path: Path to system_params.json. When omitted, the default
                config/system_params.json is used if present, otherwise defaults.

        Returns:
            SystemParams: Validated configuration

        Raises:
            FileNotFoundError: If an explicitly requested config file doesn't exist
            ValueError: If config validation fails
        """
        if config_path is None:
            if not DEFAULT_CONFIG_PATH.exists():
                return cls()
            config_path = DEFAULT_CONFIG_PATH
        else:
            config_path = Path(config_path)

        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}. "
                f"Copy {config_path.stem}.example.json to {config_path.name}"
            )

        with open(config_path, "r", encoding="utf-8") as f:
            config_data = json.load(f)

        return cls(**config_data)


def resolve_run_mode(
    params: SystemParams,
    cli_mode: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None,
) -> RunMode:
    """
    Decide the run mode for this invocation.

    Precedence: CLI flag, then the SUMMARY_RUN_MODE environment variable,
    then the config file value.

    Raises:
        ValueError: If the CLI or environment value is not a valid mode
    """
    if cli_mode:
        return RunMode(cli_mode.strip().lower())

    env = os.environ if env is None else env
    env_mode = env.get(RUN_MODE_ENV_VAR, "").strip().lower()
    if env_mode:
        return RunMode(env_mode)

    return params.run_mode
