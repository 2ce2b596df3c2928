from __future__ import annotations

import os
import re
import stat
from pathlib import Path
from typing import TYPE_CHECKING

import pathspec

from doctldr.config import (
    DEFAULT_EXCLUDE_PATTERNS,
    DEFAULT_INCLUDE_PATTERNS,
    DEFAULT_MAX_DEPTH,
    Document,
    DocumentMetadata,
    guess_document_format,
)
from doctldr.encoding import detect_and_decode
from doctldr.exceptions import ExtractionError, InputPathError
from doctldr.extraction import extract_text
from doctldr.logging import logger

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    GlobPredicate = Callable[[str], bool]

_GLOB_TRANSLATION: dict[str, str] = {
    "*": ".*",
    "?": ".",
    ".": r"\.",
    "\\": r"\\",
    "+": r"\+",
    "(": r"\(",
    ")": r"\)",
    "[": r"\[",
    "]": r"\]",
    "{": r"\{",
    "}": r"\}",
    "|": r"\|",
    "^": r"\^",
    "$": r"\$",
}


def relpath(path: Path, root: Path) -> str:
    """Send the relative path of path from root.

    Args:
        path (Path): the path to "relativise"
        root (Path): the root to relativise from

    Returns:
        str: the relative path from root to path, with POSIX separators.
            If path is not under root, returns the original path as a string.
    """
    try:
        return str(path.relative_to(root)).replace("\\", "/")
    except ValueError:
        return str(path)


def glob_to_regex(pattern: str) -> str:
    """Translate a shell glob into an anchored regular expression.

    `*` matches any sequence and `?` any single character; every other
    character is literal.

    Args:
        pattern (str): the glob pattern

    Returns:
        str: a regular expression matching the whole string
    """
    return "^" + "".join(_GLOB_TRANSLATION.get(c, c) for c in pattern) + "$"


def _never(_: str) -> bool:
    return False


def compile_glob(pattern: str) -> GlobPredicate:
    """Compile a glob pattern into a case-insensitive full-match predicate.

    A pattern that fails to compile yields a predicate that never matches.

    Args:
        pattern (str): the glob pattern

    Returns:
        GlobPredicate: a function telling whether a string matches the pattern
    """
    try:
        regex = re.compile(glob_to_regex(pattern), re.IGNORECASE)
    except Exception as e:  # noqa: BLE001
        logger.warning("Invalid glob pattern %r: %s", pattern, e)
        return _never
    return lambda candidate: regex.match(candidate) is not None


def normalize_globs(globs: Sequence[str]) -> list[str]:
    """Normalize a sequence of path glob patterns.

    Normalize a sequence of glob patterns by stripping whitespace and
    replacing backslashes with forward slashes.

    Args:
        globs (Sequence[str]): the glob patterns to normalize

    Returns:
        list[str]: the normalized glob patterns
    """
    out: list[str] = []
    for g in globs:
        g2 = (g or "").strip()
        if not g2:
            continue
        out.append(g2.replace("\\", "/"))
    return out


def match_candidates(path: Path, root: Path) -> list[str]:
    """List the strings a glob is tested against for `path`.

    These are the full path, the path relative to `root` and each component
    of that relative path, so that `node_modules` rejects everything below a
    `node_modules/` directory while `*.md` still matches a full path.

    Args:
        path (Path): the candidate file
        root (Path): the walked root directory

    Returns:
        list[str]: the candidate strings, without duplicates
    """
    rel = relpath(path, root)
    out = [str(path).replace("\\", "/"), rel]
    out.extend(part for part in rel.split("/") if part and part != ".")
    return list(dict.fromkeys(out))


def matches_any(candidates: Sequence[str], predicates: Sequence[GlobPredicate]) -> bool:
    """Check if any candidate string matches any compiled glob."""
    return any(pred(c) for pred in predicates for c in candidates)


def is_regular_file(path: Path) -> bool:
    """Check if a file is regular.

    Args:
        path (Path): path to test.

    Returns:
        bool: True if the file is regular, False otherwise.
    """
    try:
        st = path.stat()
        return stat.S_ISREG(st.st_mode)
    except OSError:
        return False


def is_hidden(name: str) -> bool:
    return name.startswith(".") and name not in {".", ".."}


IGNORE_FILE_NAMES: tuple[str, ...] = (".gitignore", ".ignore")


def load_ignore_rules(directory: Path) -> pathspec.GitIgnoreSpec | None:
    """Load the `.gitignore` and `.ignore` files found directly in `directory`.

    Args:
        directory (Path): the directory to look in

    Returns:
        pathspec.GitIgnoreSpec | None: the combined rules, relative to `directory`,
            or None when there is no readable ignore file
    """
    lines: list[str] = []
    for name in IGNORE_FILE_NAMES:
        ignore_file = directory / name
        if not ignore_file.is_file():
            continue
        try:
            lines.extend(ignore_file.read_text(encoding="utf-8", errors="replace").splitlines())
        except OSError as e:
            logger.warning("Cannot read %s: %s", ignore_file, e)
    if not lines:
        return None
    return pathspec.GitIgnoreSpec.from_lines(lines)


def is_ignored(
    path: Path,
    rules: dict[Path, pathspec.GitIgnoreSpec],
    *,
    is_dir: bool = False,
) -> bool:
    """Whether any ignore file of an ancestor directory of `path` matches it.

    Each set of rules only applies below the directory holding its ignore file,
    and patterns are matched against the path relative to that directory.
    """
    suffix = "/" if is_dir else ""
    for base in path.parents:
        spec = rules.get(base)
        if spec is not None and spec.match_file(relpath(path, base) + suffix):
            return True
    return False


def walk_files(root: Path, max_depth: int = DEFAULT_MAX_DEPTH) -> list[Path]:
    """Walk the directory tree rooted at `root` and return candidate files.

    `root` is depth 0 and its direct children are depth 1; nothing deeper
    than `max_depth` is returned. Hidden entries and entries ignored by a
    `.gitignore` or `.ignore` file of the root or of any walked subdirectory
    are pruned. If `root` is a file it is returned as-is.

    Args:
        root (Path): the root directory to walk
        max_depth (int): the maximum depth of returned entries

    Returns:
        list[Path]: the files found, in deterministic (sorted) walk order
    """
    if not root.is_dir():
        return [root] if root.exists() else []

    rules: dict[Path, pathspec.GitIgnoreSpec] = {}

    def on_error(err: OSError) -> None:
        logger.warning("Cannot read directory %s: %s", err.filename, err.strerror)

    results: list[Path] = []
    for dirpath, dirs, files in os.walk(root, onerror=on_error):
        current = Path(dirpath)
        depth = 0 if current == root else len(current.relative_to(root).parts)
        if depth + 1 > max_depth:
            dirs[:] = []
            continue
        spec = load_ignore_rules(current)
        if spec is not None:
            rules[current] = spec
        dirs[:] = sorted(
            d for d in dirs if not is_hidden(d) and not is_ignored(current / d, rules, is_dir=True)
        )
        for f in sorted(files):
            p = current / f
            if is_hidden(f) or is_ignored(p, rules):
                continue
            results.append(p)
    return results


def count_lines(text: str) -> int:
    """Count newline-delimited lines; a trailing newline does not open a new line."""
    if not text:
        return 0
    return text.count("\n") + (0 if text.endswith("\n") else 1)


def make_document(path: Path, decoded: str, encoding: str) -> Document:
    """Bundle a decoded file into a Document.

    The metadata describes the decoded text, so `file_size` is its UTF-8 byte
    length rather than the size of the file on disk.

    Args:
        path (Path): the source file
        decoded (str): the decoded file contents
        encoding (str): the detected encoding name

    Raises:
        ExtractionError: if plain text cannot be extracted

    Returns:
        Document: the assembled document
    """
    metadata = DocumentMetadata(
        file_size=len(decoded.encode("utf-8")),
        encoding=encoding,
        line_count=count_lines(decoded),
    )
    fmt = guess_document_format(path)
    try:
        content = extract_text(decoded, fmt)
    except Exception as e:
        raise ExtractionError(path=path, message=f"cannot extract {fmt} text: {e}") from e
    return Document(path=path, content=content, format=fmt, metadata=metadata)


def process_file(path: Path) -> Document:
    """Read, decode and extract a single file.

    Args:
        path (Path): the file to process

    Returns:
        Document: the processed document
    """
    decoded, encoding = detect_and_decode(path.read_bytes())
    logger.debug("Decoded %s as %s", path, encoding)
    return make_document(path, decoded, encoding)


class DocumentProcessor:
    """Discover and normalize the documents under a directory.

    Include and exclude globs are compiled once; a file is processed iff it
    is a regular file, matches no exclude glob and at least one include glob.
    """

    def __init__(
        self,
        max_depth: int = DEFAULT_MAX_DEPTH,
        include_patterns: Sequence[str] | None = None,
        exclude_patterns: Sequence[str] | None = None,
    ) -> None:
        self.max_depth = max_depth
        self.include_patterns = normalize_globs(
            DEFAULT_INCLUDE_PATTERNS if include_patterns is None else include_patterns,
        )
        self.exclude_patterns = normalize_globs(
            DEFAULT_EXCLUDE_PATTERNS if exclude_patterns is None else exclude_patterns,
        )
        self._includes = [compile_glob(p) for p in self.include_patterns]
        self._excludes = [compile_glob(p) for p in self.exclude_patterns]

    def should_process_file(self, path: Path, root: Path) -> bool:
        """Apply the regular-file check and the exclude-then-include policy.

        Args:
            path (Path): the candidate file
            root (Path): the walked root, used for relative matching

        Returns:
            bool: True if the file should be processed
        """
        if not is_regular_file(path):
            return False
        candidates = match_candidates(path, root)
        if matches_any(candidates, self._excludes):
            return False
        return matches_any(candidates, self._includes)

    def discover(self, root: Path) -> list[Path]:
        """Return the files under `root` accepted by the filters, in walk order.

        Raises:
            InputPathError: if `root` does not exist
        """
        if not root.exists():
            raise InputPathError(path=root)
        return [p for p in walk_files(root, self.max_depth) if self.should_process_file(p, root)]

    def process_directory(self, root: Path) -> list[Document]:
        """Process every accepted file under `root`.

        A file that cannot be read or extracted is logged and skipped; it
        never aborts the traversal.

        Args:
            root (Path): the directory to process

        Raises:
            InputPathError: if `root` does not exist

        Returns:
            list[Document]: the documents, in walk order
        """
        documents: list[Document] = []
        for path in self.discover(root):
            try:
                documents.append(process_file(path))
            except Exception as e:  # noqa: BLE001
                logger.warning("Failed to process file %s: %s", path, e)
        logger.info("Processed %s: %d documents", root, len(documents))
        return documents


def process_directory(
    root: Path,
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
    includes: Sequence[str] | None = None,
    excludes: Sequence[str] | None = None,
) -> list[Document]:
    """Shortcut for `DocumentProcessor(...).process_directory(root)`."""
    return DocumentProcessor(max_depth, includes, excludes).process_directory(root)
