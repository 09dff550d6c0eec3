"""Configuration Management - Fuzzer Settings.

Provides typed configuration with validation for the selection engine,
the mutators and the reference fuzzing loop. Values can be overridden with
environment variables prefixed ``IO_FUZZER_`` (nested with ``__``).
"""

from enum import Enum

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class SelectionConfig(BaseSettings):
    """Adaptive selection configuration.

    Controls the bootstrap threshold and the utility score weights.
    """

    model_config = SettingsConfigDict(env_prefix="IO_FUZZER_SELECTION_")

    min_executions_for_stats: int = Field(
        default=10,
        ge=1,
        description="Executions every mutator needs before scores are trusted",
    )
    coverage_weight: float = Field(
        default=0.6, ge=0.0, le=1.0, description="Weight of the coverage rate"
    )
    crash_weight: float = Field(
        default=0.3, ge=0.0, le=1.0, description="Weight of the crash rate"
    )
    speed_weight: float = Field(
        default=0.1, ge=0.0, le=1.0, description="Weight of the normalized speed"
    )
    min_score: float = Field(
        default=0.1,
        gt=0.0,
        le=1.0,
        description="Score floor keeping every mutator selectable",
    )


class MutationConfig(BaseSettings):
    """Mutation limits."""

    model_config = SettingsConfigDict(env_prefix="IO_FUZZER_MUTATION_")

    max_mutations: int = Field(
        default=5, ge=1, le=100, description="Maximum stacked mutations per input"
    )
    max_insert_growth: int = Field(
        default=10000,
        ge=1,
        description="Buffer size above which values are overwritten, not inserted",
    )


class LoopConfig(BaseSettings):
    """Reference fuzzing loop configuration."""

    model_config = SettingsConfigDict(env_prefix="IO_FUZZER_LOOP_")

    iterations: int = Field(default=1000, ge=1, description="Iterations to run")
    seed: int = Field(default=0, ge=0, description="Random seed (0 for random)")
    corpus_selection_probability: float = Field(
        default=0.8,
        ge=0.0,
        le=1.0,
        description="Probability of mutating a corpus entry instead of fresh bytes",
    )
    timeout_ms: int = Field(
        default=5000, ge=1, description="Timeout per execution in milliseconds"
    )
    report_interval: int = Field(
        default=100, ge=1, description="Iterations between progress reports"
    )
    max_input_size: int = Field(
        default=10240, ge=2, description="Maximum size of generated inputs"
    )
    guided: bool = Field(
        default=True, description="Use the coverage-guided engine"
    )


class LoggingConfig(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="IO_FUZZER_LOGGING_")

    log_level: LogLevel = Field(default=LogLevel.INFO, description="Logging level")
    log_format: str = Field(default="json", description="Log format: json or console")

    @model_validator(mode="after")
    def check_format(self) -> "LoggingConfig":
        """Reject unknown renderers."""
        if self.log_format not in ("json", "console"):
            raise ValueError("log_format must be 'json' or 'console'")
        return self


class Settings(BaseSettings):
    """Main application settings.

    Usage:
        from io_fuzzer.core.config import get_settings
        settings = get_settings()
    """

    model_config = SettingsConfigDict(
        env_prefix="IO_FUZZER_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="IO-Fuzzer", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")

    selection: SelectionConfig = Field(default_factory=SelectionConfig)
    mutation: MutationConfig = Field(default_factory=MutationConfig)
    loop: LoopConfig = Field(default_factory=LoopConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def get_summary(self) -> str:
        """Get configuration summary."""
        return f"""
IO-Fuzzer Configuration
=======================
Version: {self.app_version}

Selection:
  - Bootstrap Threshold: {self.selection.min_executions_for_stats}
  - Weights (coverage/crash/speed): {self.selection.coverage_weight}/{self.selection.crash_weight}/{self.selection.speed_weight}
  - Score Floor: {self.selection.min_score}

Mutation:
  - Max Mutations: {self.mutation.max_mutations}
  - Max Insert Growth: {self.mutation.max_insert_growth} bytes

Loop:
  - Iterations: {self.loop.iterations}
  - Seed: {self.loop.seed}
  - Guided: {self.loop.guided}
  - Timeout: {self.loop.timeout_ms} ms

Logging:
  - Level: {self.logging.log_level.value}
  - Format: {self.logging.log_format}
"""


# Global settings instance (singleton pattern)
_settings: Settings | None = None


def get_settings(force_reload: bool = False) -> Settings:
    """Get application settings (singleton).

    Args:
        force_reload: Force reload settings from environment

    Returns:
        Settings instance

    """
    global _settings
    if _settings is None or force_reload:
        _settings = Settings()
    return _settings
