from __future__ import annotations

import textwrap
from typing import TYPE_CHECKING

from bs4 import BeautifulSoup
from markdown_it import MarkdownIt

from doctldr.config import HTML_WRAP_WIDTH, DocumentFormat

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from markdown_it.token import Token

    ExtractorFn = Callable[[str], str]

_MD_LITERAL_TOKENS = {"text", "text_special", "code_inline"}
_MD_BREAK_TOKENS = {"softbreak", "hardbreak"}
_MD_CODE_BLOCK_TOKENS = {"fence", "code_block"}

_HTML_DROP_TAGS = ["script", "style", "head", "noscript", "template"]
_HTML_BLOCK_TAGS = [
    "address",
    "article",
    "aside",
    "blockquote",
    "dd",
    "div",
    "dl",
    "dt",
    "figcaption",
    "figure",
    "footer",
    "form",
    "h1",
    "h2",
    "h3",
    "h4",
    "h5",
    "h6",
    "header",
    "hr",
    "li",
    "main",
    "nav",
    "ol",
    "p",
    "pre",
    "section",
    "table",
    "td",
    "th",
    "tr",
    "ul",
]

_markdown = MarkdownIt("commonmark")


def _flatten_inline(tokens: Iterable[Token], out: list[str]) -> None:
    for tok in tokens:
        if tok.type in _MD_LITERAL_TOKENS:
            out.append(tok.content)
        elif tok.type in _MD_BREAK_TOKENS:
            out.append("\n")
        elif tok.children:
            # image alt text lives in the children of the image token
            _flatten_inline(tok.children, out)


def markdown_to_text(text: str) -> str:
    """Flatten markdown into unstyled text.

    Only literal text runs, inline code and code block contents are kept;
    soft and hard line breaks become newlines. Headings, emphasis markers,
    link targets, raw HTML and block structure are dropped, so consecutive
    blocks are concatenated without a separator.

    Args:
        text (str): markdown source

    Returns:
        str: the flattened text
    """
    out: list[str] = []
    for tok in _markdown.parse(text):
        if tok.type in _MD_CODE_BLOCK_TOKENS:
            out.append(tok.content)
        elif tok.type == "inline" and tok.children:
            _flatten_inline(tok.children, out)
    return "".join(out)


def html_to_text(text: str, width: int = HTML_WRAP_WIDTH) -> str:
    """Render HTML as plain text wrapped at `width` columns.

    Args:
        text (str): HTML source
        width (int): maximum line width. Defaults to 80.

    Returns:
        str: the tag-free text, one paragraph per line group
    """
    soup = BeautifulSoup(text, "html.parser")
    for tag in soup.find_all(_HTML_DROP_TAGS):
        tag.decompose()
    for br in soup.find_all("br"):
        br.replace_with("\n")
    for tag in soup.find_all(_HTML_BLOCK_TAGS):
        tag.insert_before("\n")
        tag.insert_after("\n")

    lines: list[str] = []
    blank = True
    for raw in soup.get_text().splitlines():
        line = " ".join(raw.split())
        if not line:
            if not blank:
                lines.append("")
            blank = True
            continue
        lines.extend(textwrap.wrap(line, width=width) or [line])
        blank = False
    return "\n".join(lines).strip("\n")


def passthrough(text: str) -> str:
    return text


EXTRACTORS: dict[DocumentFormat, ExtractorFn] = {
    DocumentFormat.MARKDOWN: markdown_to_text,
    DocumentFormat.HTML: html_to_text,
    # TODO: real reStructuredText to text conversion (docutils) instead of passthrough
    DocumentFormat.RESTRUCTUREDTEXT: passthrough,
    DocumentFormat.PLAINTEXT: passthrough,
}


def extract_text(text: str, fmt: DocumentFormat) -> str:
    """Extract normalized plain text from decoded document text.

    Args:
        text (str): decoded file contents
        fmt (DocumentFormat): the format detected from the file extension

    Returns:
        str: the plain text to summarize
    """
    return EXTRACTORS[fmt](text)
