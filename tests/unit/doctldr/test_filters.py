from pathlib import Path

import pytest
from pytest_mock import MockerFixture

from doctldr import file_manipulation
from doctldr.file_manipulation import (
    DocumentProcessor,
    compile_glob,
    glob_to_regex,
    match_candidates,
    normalize_globs,
)


@pytest.mark.unit
def test_glob_to_regex_escapes_and_anchors() -> None:
    assert glob_to_regex("*.md") == r"^.*\.md$"
    assert glob_to_regex("a?(b)") == r"^a.\(b\)$"


@pytest.mark.unit
@pytest.mark.parametrize(
    ("pattern", "candidate", "expected"),
    [
        ("*.md", "docs/guide.md", True),
        ("*.md", "docs/guide.MD", True),
        ("*.md", "guide.mdx", False),
        ("README.md", "readme.md", True),
        ("README.md", "xREADME.md", False),
        ("README.md", "README.md.bak", False),
        ("a?c", "abc", True),
        ("a?c", "ac", False),
        ("[ab].md", "[ab].md", True),
        ("[ab].md", "a.md", False),
        ("a+b(1)|{x}^$.txt", "a+b(1)|{x}^$.txt", True),
        ("a+b.txt", "aab.txt", False),
    ],
)
def test_compile_glob_full_case_insensitive_match(pattern: str, candidate: str, expected: bool) -> None:  # noqa: FBT001
    assert compile_glob(pattern)(candidate) is expected


@pytest.mark.unit
def test_compile_glob_failure_never_matches(mocker: MockerFixture) -> None:
    mocker.patch.object(file_manipulation, "glob_to_regex", return_value="(")

    predicate = compile_glob("*")

    assert predicate("anything") is False
    assert predicate("") is False


@pytest.mark.unit
def test_normalize_globs_strips_and_normalizes() -> None:
    assert normalize_globs(["  *.md ", "docs\\*.txt", ""]) == ["*.md", "docs/*.txt"]


@pytest.mark.unit
def test_match_candidates_lists_full_relative_and_components() -> None:
    root = Path("/repo")

    candidates = match_candidates(root / "node_modules" / "pkg" / "b.md", root)

    assert candidates == [
        "/repo/node_modules/pkg/b.md",
        "node_modules/pkg/b.md",
        "node_modules",
        "pkg",
        "b.md",
    ]


@pytest.mark.unit
def test_exclude_takes_precedence_over_include(tmp_path: Path) -> None:
    doc = tmp_path / "secret.md"
    doc.write_text("hidden", encoding="utf-8")
    processor = DocumentProcessor(5, ["*.md"], ["*secret*"])

    assert processor.should_process_file(doc, tmp_path) is False


@pytest.mark.unit
def test_should_process_requires_an_include_match(tmp_path: Path) -> None:
    keep = tmp_path / "guide.md"
    drop = tmp_path / "main.py"
    keep.write_text("# Guide", encoding="utf-8")
    drop.write_text("print('x')", encoding="utf-8")
    processor = DocumentProcessor()

    assert processor.should_process_file(keep, tmp_path) is True
    assert processor.should_process_file(drop, tmp_path) is False


@pytest.mark.unit
def test_should_process_rejects_non_regular_files(tmp_path: Path) -> None:
    folder = tmp_path / "folder.md"
    folder.mkdir()

    assert DocumentProcessor().should_process_file(folder, tmp_path) is False
    assert DocumentProcessor().should_process_file(tmp_path / "missing.md", tmp_path) is False


@pytest.mark.unit
def test_default_excludes_reject_node_modules(tmp_path: Path) -> None:
    nested = tmp_path / "node_modules" / "b.md"
    nested.parent.mkdir()
    nested.write_text("# dep", encoding="utf-8")

    assert DocumentProcessor().should_process_file(nested, tmp_path) is False
