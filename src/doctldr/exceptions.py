from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class DoctldrError(Exception):
    """Base exception for errors in the doctldr package."""

    def __str__(self) -> str:
        message = getattr(self, "message", "") or type(self).__name__
        path = getattr(self, "path", None)
        return f"{message}: {path}" if path else message


@dataclass(frozen=True)
class ConfigError(DoctldrError):
    """Raised when the run configuration is invalid."""

    message: str


@dataclass(frozen=True)
class ConfigFileError(ConfigError):
    """Raised when a configuration file cannot be read or parsed."""

    path: Path | None = None


@dataclass(frozen=True)
class MissingCredentialError(ConfigError):
    """Raised when the API key environment variable is not set."""

    env_var: str = ""


@dataclass(frozen=True)
class UnsupportedFormatError(ConfigError):
    """Raised when the requested output format is unknown."""

    format: str = ""


@dataclass(frozen=True)
class InputPathError(DoctldrError):
    """Raised when an input root does not exist or is not a directory."""

    path: Path
    message: str = "The input path does not exist or is not a directory."


@dataclass(frozen=True)
class FileProcessingError(DoctldrError):
    """Raised when an error occurs during file processing."""

    path: Path
    message: str


@dataclass(frozen=True)
class ExtractionError(FileProcessingError):
    """Raised when plain text cannot be extracted from a document."""


@dataclass(frozen=True)
class SummarizationError(DoctldrError):
    """Raised when the LLM provider fails to return a summary."""

    message: str
    status_code: int | None = None


@dataclass(frozen=True)
class OutputWriteError(DoctldrError):
    """Raised when the rendered output cannot be written."""

    path: Path
    message: str
