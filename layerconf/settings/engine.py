"""Engine and logging settings powered by Pydantic BaseSettings."""

from pathlib import Path
from typing import Final, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_ENV_PREFIXES: Final = ("APP_", "CONFIG_", "MYAPP_")
DEFAULT_ENV_SUFFIXES: Final = ("_CONFIG",)
DEFAULT_CLI_PREFIX: Final = "--config-"


class EngineSettings(BaseSettings):
    """Engine-wide switches for the configuration store.

    Read from ``CONFIG_*`` environment variables, e.g. ``CONFIG_STRICT_MODE=0``
    or ``CONFIG_ENV_PREFIXES="APP_ SERVICE_"``.
    """

    model_config = SettingsConfigDict(
        env_prefix="CONFIG_", case_sensitive=False, validate_assignment=True
    )

    case_sensitive: bool = False
    strict_mode: bool = True
    allow_undefined: bool = False
    auto_transform_keys: bool = True
    kebab_to_dot: bool = True
    support_short_opts: bool = True
    cli_prefix: str = DEFAULT_CLI_PREFIX
    env_prefixes: str = " ".join(DEFAULT_ENV_PREFIXES)
    env_suffixes: str = " ".join(DEFAULT_ENV_SUFFIXES)
    flattener_backend: Literal["python", "external"] = "python"

    @property
    def strict_undefined(self) -> bool:
        """Whether reading an undefined key without a default is an error."""
        return self.strict_mode and not self.allow_undefined

    def prefix_list(self) -> list[str]:
        """Return the configured env prefixes in declaration order."""
        return self.env_prefixes.split()

    def suffix_list(self) -> list[str]:
        """Return the configured env suffixes in declaration order."""
        return self.env_suffixes.split()


class LoggingSettings(BaseSettings):
    """Diagnostic sink settings."""

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=False)

    log_level: str = Field(default="INFO")
    log_file: Path | None = None
    be_quiet: bool = False
    be_verbose: bool = False

    @property
    def effective_level(self) -> str:
        """Return the level name after applying verbose mode."""
        return "DEBUG" if self.be_verbose else self.log_level.upper()


def get_engine_settings() -> EngineSettings:
    """Get an engine settings instance from the environment."""
    return EngineSettings()


def get_logging_settings() -> LoggingSettings:
    """Get a logging settings instance from the environment."""
    return LoggingSettings()
