from __future__ import annotations

import codecs
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from doctldr import cli
from doctldr.llm import OpenAIProvider

if TYPE_CHECKING:
    from pytest_mock import MockerFixture


@pytest.mark.integration
def test_main_summarizes_every_format_to_text_on_stdout(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    mocker: MockerFixture,
    capsys: pytest.CaptureFixture[str],
) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.setenv("OPENAI_API_KEY", "k")
    docs = tmp_path / "docs"
    (docs / "guide").mkdir(parents=True)
    (docs / "README.md").write_text("**Read** me `now`", encoding="utf-8")
    (docs / "guide" / "page.html").write_text("<h1>Page</h1><p>Body</p>", encoding="utf-8")
    (docs / "guide" / "legacy.txt").write_bytes(codecs.BOM_UTF16_LE + "old notes".encode("utf-16-le"))
    (docs / "guide" / "script.py").write_text("print('skip')", encoding="utf-8")

    seen: list[str] = []

    def fake_summarize(self: OpenAIProvider, content: str, max_tokens: int) -> str:  # noqa: ARG001
        seen.append(content)
        return f"summary {len(seen)}"

    mocker.patch.object(OpenAIProvider, "summarize", autospec=True, side_effect=fake_summarize)

    exit_code = cli.main([str(docs), "--format", "text", "--max-tokens", "64"])

    assert exit_code == 0
    assert seen == ["Read me now", "old notes", "Page\n\nBody"]
    out = capsys.readouterr().out
    assert out.count("=== ") == 3  # noqa: PLR2004
    assert f"=== {docs / 'README.md'} ===\n\nsummary 1\n\n" in out


@pytest.mark.integration
def test_main_reads_config_file(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    mocker: MockerFixture,
) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("DOCS_API_KEY", "k")
    cfg = tmp_path / "doctldr.toml"
    cfg.write_text(
        '[default]\nmodel = "gpt-4o-mini"\nmax_tokens = 100\nformat = "markdown"\n\n'
        '[api]\nkey_env = "DOCS_API_KEY"\n\n'
        '[processing]\ninclude_patterns = ["*.rst"]\nmax_depth = 1\n\n'
        "[output]\ninclude_metadata = false\n",
        encoding="utf-8",
    )
    docs = tmp_path / "docs"
    (docs / "deep").mkdir(parents=True)
    (docs / "index.rst").write_text("Index\n=====\n" + "text " * 50, encoding="utf-8")
    (docs / "deep" / "nested.rst").write_text("Nested\n", encoding="utf-8")
    (docs / "notes.md").write_text("# Notes", encoding="utf-8")
    summarize = mocker.patch.object(OpenAIProvider, "summarize", return_value="Short.")
    output = tmp_path / "out.md"

    exit_code = cli.main([str(docs), "--config", str(cfg), "--output", str(output)])

    assert exit_code == 0
    summarize.assert_called_once()
    assert summarize.call_args.args[1] == 100  # noqa: PLR2004
    content = output.read_text(encoding="utf-8")
    assert content == f"# Summary of {docs / 'index.rst'}\n\nShort.\n\n---\n\n"
