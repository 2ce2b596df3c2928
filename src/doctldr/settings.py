from __future__ import annotations

import os
from pathlib import Path

import tomlkit
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from tomlkit.exceptions import TOMLKitError

from doctldr.config import (
    DEFAULT_EXCLUDE_PATTERNS,
    DEFAULT_FORMAT,
    DEFAULT_INCLUDE_PATTERNS,
    DEFAULT_KEY_ENV,
    DEFAULT_MAX_DEPTH,
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODEL,
    DEFAULT_PROVIDER,
    OPENAI_CHAT_URL,
)
from doctldr.exceptions import ConfigFileError, MissingCredentialError

APP_NAME = "doctldr"
CONFIG_FILE_NAME = "config.toml"


class Settings(BaseModel):
    """Command line settings for a doctldr run."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    input_dirs: list[Path] = Field(..., min_length=1, description="Input directories.")
    output: Path | None = Field(default=None, description="Output file; stdout if unset.")
    format: str | None = Field(default=None, description="Output format (md, json, txt).")
    model: str | None = Field(default=None, description="LLM model to use.")
    max_tokens: int | None = Field(default=None, gt=0, description="Maximum tokens in summary.")
    verbose: bool = Field(default=False, description="Enable verbose output.")
    config: Path | None = Field(default=None, description="Custom config file path.")
    dry_run: bool = Field(default=False, description="List files without summarizing.")
    debug: bool = Field(default=False, description="Enable debug logging.")
    keep_going: bool = Field(
        default=False,
        description="Skip documents whose summarization fails.",
    )
    log_file: str = Field(default="", description="Log file path.")


class _Section(BaseModel):
    model_config = ConfigDict(extra="forbid")


class DefaultConfig(_Section):
    model: str = DEFAULT_MODEL
    max_tokens: int = Field(default=DEFAULT_MAX_TOKENS, gt=0)
    format: str = DEFAULT_FORMAT
    verbose: bool = False


class ApiConfig(_Section):
    provider: str = DEFAULT_PROVIDER
    key_env: str = DEFAULT_KEY_ENV
    base_url: str = OPENAI_CHAT_URL
    timeout: float = Field(default=120.0, ge=0, description="Request timeout in seconds; 0 disables it.")


class ProcessingConfig(_Section):
    include_patterns: list[str] = Field(default_factory=lambda: list(DEFAULT_INCLUDE_PATTERNS))
    exclude_patterns: list[str] = Field(default_factory=lambda: list(DEFAULT_EXCLUDE_PATTERNS))
    max_depth: int = Field(default=DEFAULT_MAX_DEPTH, ge=0)


class OutputConfig(_Section):
    default_format: str = DEFAULT_FORMAT
    include_metadata: bool = True


class DoctldrConfig(_Section):
    """Contents of the doctldr TOML configuration file.

    Every section and key is optional and falls back to the built-in defaults.
    """

    default: DefaultConfig = Field(default_factory=DefaultConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)
    processing: ProcessingConfig = Field(default_factory=ProcessingConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    @property
    def output_format(self) -> str:
        """The output format name, falling back to `output.default_format`."""
        return self.default.format or self.output.default_format

    def with_overrides(self, settings: Settings) -> DoctldrConfig:
        """Return a copy with the command line overrides applied.

        Args:
            settings (Settings): the parsed command line

        Returns:
            DoctldrConfig: the merged configuration
        """
        default = self.default.model_copy(
            update={
                "model": settings.model or self.default.model,
                "max_tokens": settings.max_tokens or self.default.max_tokens,
                "format": settings.format or self.default.format,
                "verbose": settings.verbose or self.default.verbose,
            },
        )
        return self.model_copy(update={"default": default})


def default_config_path() -> Path:
    """Per-user configuration file location (XDG style)."""
    base = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(base) / APP_NAME / CONFIG_FILE_NAME


def load_config(path: Path | None = None) -> DoctldrConfig:
    """Load the configuration file.

    A missing default file yields the built-in defaults; a missing explicit
    `path` is an error.

    Args:
        path (Path | None): custom configuration file, or None for the default location

    Raises:
        ConfigFileError: if the file cannot be read, parsed or validated

    Returns:
        DoctldrConfig: the loaded configuration
    """
    explicit = path is not None
    cfg_path = path if explicit else default_config_path()
    if not cfg_path.exists():
        if explicit:
            raise ConfigFileError(message="Config file not found", path=cfg_path)
        return DoctldrConfig()

    try:
        data = tomlkit.parse(cfg_path.read_text(encoding="utf-8")).unwrap()
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigFileError(message=f"Failed to read config file ({e})", path=cfg_path) from e
    except TOMLKitError as e:
        raise ConfigFileError(message=f"Failed to parse config file ({e})", path=cfg_path) from e

    try:
        return DoctldrConfig.model_validate(data)
    except ValidationError as e:
        msg = f"Invalid config file ({e.error_count()} errors: {e.errors()[0]['msg']})"
        raise ConfigFileError(message=msg, path=cfg_path) from e


def read_api_key(key_env: str) -> str:
    """Read the API key from the environment.

    Raises:
        MissingCredentialError: if the variable is unset or empty
    """
    value = os.environ.get(key_env, "").strip()
    if not value:
        raise MissingCredentialError(
            message=f"{key_env} environment variable not found",
            env_var=key_env,
        )
    return value
