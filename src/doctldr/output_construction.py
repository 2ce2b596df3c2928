from __future__ import annotations

import io
import json
from enum import StrEnum
from typing import TYPE_CHECKING

from doctldr.exceptions import OutputWriteError, UnsupportedFormatError
from doctldr.logging import logger

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from pathlib import Path

    from doctldr.config import Summary

    Formatter = Callable[..., str]


class OutputFormat(StrEnum):
    MARKDOWN = "md"
    JSON = "json"
    TEXT = "txt"


FORMAT_ALIASES: dict[str, OutputFormat] = {
    "md": OutputFormat.MARKDOWN,
    "markdown": OutputFormat.MARKDOWN,
    "json": OutputFormat.JSON,
    "txt": OutputFormat.TEXT,
    "text": OutputFormat.TEXT,
}


def parse_output_format(name: str) -> OutputFormat:
    """Resolve an output format name (case-insensitive).

    Args:
        name (str): one of md, markdown, json, txt, text

    Raises:
        UnsupportedFormatError: if the name is unknown

    Returns:
        OutputFormat: the selected format
    """
    try:
        return FORMAT_ALIASES[name.strip().lower()]
    except KeyError:
        raise UnsupportedFormatError(
            message=f"Unsupported output format: {name}",
            format=name,
        ) from None


def build_markdown(summaries: Sequence[Summary], *, include_metadata: bool = True) -> str:
    """Render summaries as markdown sections.

    Each summary gets a heading, its body and a separator. When the summary is
    smaller than a non-empty original, a compression note follows the separator.

    Args:
        summaries (Sequence[Summary]): the summaries to render, in order
        include_metadata (bool): whether to add compression notes. Defaults to True.

    Returns:
        str: the markdown document
    """
    out = io.StringIO()
    for s in summaries:
        out.write(f"# Summary of {s.original_path}\n\n")
        out.write(s.summary)
        out.write("\n\n---\n\n")
        ratio = s.metadata.compression_ratio
        if include_metadata and s.metadata.original_size > 0 and ratio < 1.0:
            out.write(f"_Compressed to {ratio * 100:.1f}% of original size_\n\n")
    return out.getvalue()


def build_json(summaries: Sequence[Summary], *, include_metadata: bool = True) -> str:
    """Render summaries as a pretty-printed JSON array."""
    exclude = None if include_metadata else {"metadata"}
    items = [s.model_dump(mode="json", exclude=exclude) for s in summaries]
    return json.dumps(items, indent=2, ensure_ascii=False)


def build_text(summaries: Sequence[Summary], *, include_metadata: bool = True) -> str:  # noqa: ARG001
    out = io.StringIO()
    for s in summaries:
        out.write(f"=== {s.original_path} ===\n\n")
        out.write(s.summary)
        out.write("\n\n")
    return out.getvalue()


FORMATTERS: dict[OutputFormat, Formatter] = {
    OutputFormat.MARKDOWN: build_markdown,
    OutputFormat.JSON: build_json,
    OutputFormat.TEXT: build_text,
}


def render(summaries: Sequence[Summary], fmt: OutputFormat, *, include_metadata: bool = True) -> str:
    return FORMATTERS[fmt](summaries, include_metadata=include_metadata)


def write_output(content: str, output_path: Path | None) -> None:
    """Write rendered output to a file, or to stdout when no path is given.

    Args:
        content (str): the rendered output
        output_path (Path | None): destination file

    Raises:
        OutputWriteError: if the file cannot be written
    """
    if output_path is None:
        print(content)
        return
    try:
        output_path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise OutputWriteError(path=output_path, message=f"cannot write output: {e}") from e
    logger.info("Written output to %s", output_path)
