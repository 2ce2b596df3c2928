import pytest

from doctldr.config import DocumentFormat
from doctldr.extraction import extract_text, html_to_text, markdown_to_text


@pytest.mark.unit
def test_markdown_strips_formatting_and_keeps_code_spans() -> None:
    assert markdown_to_text("**bold** and `code`") == "bold and code"


@pytest.mark.unit
def test_markdown_line_breaks_become_newlines() -> None:
    assert markdown_to_text("line one\nline two") == "line one\nline two"
    assert markdown_to_text("hard  \nbreak") == "hard\nbreak"


@pytest.mark.unit
def test_markdown_drops_structure_and_link_targets() -> None:
    text = markdown_to_text("# Title\n\nSee [the docs](https://example.com).\n")

    assert text == "TitleSee the docs."


@pytest.mark.unit
def test_markdown_keeps_code_blocks_and_image_alt_text() -> None:
    assert markdown_to_text("```python\nx = 1\n```\n") == "x = 1\n"
    assert markdown_to_text("![diagram of flow](flow.png)") == "diagram of flow"


@pytest.mark.unit
def test_markdown_drops_raw_html() -> None:
    assert markdown_to_text("a <span>b</span> c") == "a b c"


@pytest.mark.unit
def test_html_strips_tags_scripts_and_head() -> None:
    html = (
        "<html><head><title>T</title><style>p { color: red; }</style></head>"
        "<body><h1>Hi</h1><p>Hello <b>world</b></p><script>alert(1)</script></body></html>"
    )

    assert html_to_text(html) == "Hi\n\nHello world"


@pytest.mark.unit
def test_html_wraps_at_80_columns() -> None:
    html = "<p>" + "word " * 60 + "</p>"

    lines = html_to_text(html).splitlines()

    assert len(lines) > 1
    assert all(len(line) <= 80 for line in lines)  # noqa: PLR2004


@pytest.mark.unit
def test_html_line_breaks() -> None:
    assert html_to_text("<p>one<br>two</p>") == "one\ntwo"


@pytest.mark.unit
@pytest.mark.parametrize("fmt", [DocumentFormat.PLAINTEXT, DocumentFormat.RESTRUCTUREDTEXT])
def test_plain_and_rst_pass_through(fmt: DocumentFormat) -> None:
    text = "Title\n=====\n\n*not* touched\n"

    assert extract_text(text, fmt) == text


@pytest.mark.unit
def test_extract_text_dispatches_on_format() -> None:
    assert extract_text("<i>x</i>", DocumentFormat.HTML) == "x"
    assert extract_text("_x_", DocumentFormat.MARKDOWN) == "x"
