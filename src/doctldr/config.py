from __future__ import annotations

from enum import StrEnum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, computed_field


class DocumentFormat(StrEnum):
    """Markup format of a document, decided once from its file extension."""

    MARKDOWN = "markdown"
    RESTRUCTUREDTEXT = "restructuredtext"
    HTML = "html"
    PLAINTEXT = "plaintext"


EXT2FORMAT: dict[str, DocumentFormat] = {
    ".htm": DocumentFormat.HTML,
    ".html": DocumentFormat.HTML,
    ".markdown": DocumentFormat.MARKDOWN,
    ".md": DocumentFormat.MARKDOWN,
    ".rst": DocumentFormat.RESTRUCTUREDTEXT,
}

DEFAULT_INCLUDE_PATTERNS = ["*.md", "*.rst", "*.txt", "*.html"]
DEFAULT_EXCLUDE_PATTERNS = ["node_modules", ".git"]
DEFAULT_MAX_DEPTH = 5
DEFAULT_MODEL = "gpt-4"
DEFAULT_MAX_TOKENS = 2048
DEFAULT_FORMAT = "md"
DEFAULT_KEY_ENV = "OPENAI_API_KEY"
DEFAULT_PROVIDER = "openai"
OPENAI_CHAT_URL = "https://api.openai.com/v1/chat/completions"

HTML_WRAP_WIDTH = 80


def guess_document_format(path: Path) -> DocumentFormat:
    """Guess a document's format from its extension.

    Unknown extensions are treated as plain text.

    Args:
        path (Path): The file path to guess the format for.

    Returns:
        DocumentFormat: The detected format.
    """
    return EXT2FORMAT.get(path.suffix.lower(), DocumentFormat.PLAINTEXT)


class DocumentMetadata(BaseModel):
    """Size information computed from the decoded text of a document.

    Attributes:
        file_size: UTF-8 byte length of the decoded content (not the size on disk).
        encoding: Canonical name of the detected source encoding.
        line_count: Number of newline-delimited lines in the decoded content.
    """

    model_config = ConfigDict(frozen=True)

    file_size: int = Field(..., ge=0, description="Decoded content size in bytes")
    encoding: str = Field(..., description="Detected encoding name")
    line_count: int = Field(..., ge=0, description="Number of lines")


class Document(BaseModel):
    """A discovered document with its extracted plain text."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    path: Path = Field(..., description="File path as discovered by the walker")
    content: str = Field(..., description="Extracted plain text")
    format: DocumentFormat = Field(..., description="Format derived from the extension")
    metadata: DocumentMetadata


class SummaryMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    original_size: int = Field(..., ge=0)
    summary_size: int = Field(..., ge=0)

    @computed_field
    @property
    def compression_ratio(self) -> float:
        """Summary size divided by original size (0.0 for empty originals)."""
        if self.original_size == 0:
            return 0.0
        return self.summary_size / self.original_size


class Summary(BaseModel):
    """The LLM summary of one document, ready for rendering."""

    model_config = ConfigDict(frozen=True)

    original_path: str
    summary: str
    metadata: SummaryMetadata

    @classmethod
    def from_document(cls, document: Document, summary: str) -> Summary:
        """Pair a document with its summary text.

        Args:
            document (Document): The summarized document.
            summary (str): The text returned by the LLM.

        Returns:
            Summary: The summary with size metrics against the decoded original.
        """
        return cls(
            original_path=str(document.path),
            summary=summary,
            metadata=SummaryMetadata(
                original_size=document.metadata.file_size,
                summary_size=len(summary.encode("utf-8")),
            ),
        )
