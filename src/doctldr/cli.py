"""
doctldr: summarize documentation trees with an LLM.

Overview
--------
doctldr walks one or more directories, picks documentation files with
include/exclude globs (`*.md`, `*.rst`, `*.txt`, `*.html` by default), detects
their encoding, flattens them to plain text and asks an OpenAI chat model for
a concise technical summary of each. The summaries are written as Markdown,
JSON or plain text, to a file or to stdout.

Configuration is read from `~/.config/doctldr/config.toml` (or `--config`);
command line flags override it. The API key is taken from the environment
variable named by `api.key_env` (`OPENAI_API_KEY` by default), and a `.env`
file in the working directory is honored.

Usage
-----
    - Summarize the docs of a project to markdown on stdout:
        doctldr docs/

    - JSON output to a file with a different model:
        doctldr docs/ guides/ --format json --model gpt-4o-mini --output summaries.json

    - See which files would be summarized:
        doctldr docs/ --dry-run --verbose
"""

from __future__ import annotations

import argparse
import sys
from typing import TYPE_CHECKING

from dotenv import find_dotenv, load_dotenv

from doctldr import __version__
from doctldr.config import Summary
from doctldr.exceptions import ConfigError, DoctldrError, SummarizationError
from doctldr.file_manipulation import DocumentProcessor
from doctldr.llm import LLMSummarizer, OpenAIProvider
from doctldr.logging import level_from_flags, logger, setup_logging
from doctldr.output_construction import parse_output_format, render, write_output
from doctldr.settings import DoctldrConfig, Settings, load_config, read_api_key

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from doctldr.config import Document
    from doctldr.llm import LLMProvider
    from doctldr.settings import ApiConfig

    ProviderFactory = Callable[[ApiConfig, str, str], LLMProvider]

PROVIDERS: dict[str, ProviderFactory] = {
    "openai": OpenAIProvider.from_config,
}


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}") from None
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer: {value}")
    return number


def parse_args(argv: Sequence[str] | None = None) -> Settings:
    p = argparse.ArgumentParser(
        prog="doctldr",
        description="Summarize documentation files with an LLM.",
    )
    p.add_argument("input_dirs", nargs="+", help="Input directories to process.")
    p.add_argument("-o", "--output", type=str, default=None, help="Output file path (stdout if omitted).")
    p.add_argument("-f", "--format", type=str, default=None, help="Output format (md, json, txt).")
    p.add_argument("--model", type=str, default=None, help="LLM model to use.")
    p.add_argument("--max-tokens", type=_positive_int, default=None, help="Maximum tokens in summary.")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable verbose output.")
    p.add_argument("-c", "--config", type=str, default=None, help="Custom config file path.")
    p.add_argument("--dry-run", action="store_true", help="Process without generating output.")
    p.add_argument("--debug", action="store_true", help="Enable debug logging.")
    p.add_argument(
        "--keep-going",
        action="store_true",
        help="Skip documents whose summarization fails instead of aborting.",
    )
    p.add_argument("--log-file", type=str, default="", help="Log file path.")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    args = p.parse_args(argv)
    return Settings(**vars(args))


def build_summarizer(config: DoctldrConfig) -> LLMSummarizer:
    """Create the summarizer for the configured provider.

    Args:
        config (DoctldrConfig): the merged configuration

    Raises:
        ConfigError: if the provider is unknown
        MissingCredentialError: if the API key is not set

    Returns:
        LLMSummarizer: the ready-to-use summarizer
    """
    provider_name = config.api.provider.strip().lower()
    factory = PROVIDERS.get(provider_name)
    if factory is None:
        raise ConfigError(message=f"Unsupported API provider: {config.api.provider}")
    api_key = read_api_key(config.api.key_env)
    provider = factory(config.api, api_key, config.default.model)
    return LLMSummarizer(provider, config.default.max_tokens)


def summarize_documents(
    documents: Sequence[Document],
    summarizer: LLMSummarizer,
    *,
    keep_going: bool = False,
) -> list[Summary]:
    """Summarize documents one at a time, in order.

    Args:
        documents (Sequence[Document]): the documents to summarize
        summarizer (LLMSummarizer): the summarizer to use
        keep_going (bool): log and skip failed documents instead of raising

    Raises:
        SummarizationError: on the first failure unless `keep_going`

    Returns:
        list[Summary]: the summaries of the successful documents
    """
    summaries: list[Summary] = []
    for doc in documents:
        logger.info("Summarizing %s", doc.path)
        try:
            text = summarizer.summarize(doc.content)
        except SummarizationError as e:
            if not keep_going:
                raise
            logger.warning("Failed to summarize %s: %s", doc.path, e)
            continue
        summaries.append(Summary.from_document(doc, text))
    return summaries


def run(settings: Settings) -> int:
    config = load_config(settings.config).with_overrides(settings)
    if config.default.verbose and not settings.verbose:
        setup_logging(
            level_from_flags(verbose=True, debug=settings.debug),
            settings.log_file or None,
            force=True,
        )

    fmt = parse_output_format(config.output_format)
    summarizer = build_summarizer(config)
    processor = DocumentProcessor(
        config.processing.max_depth,
        config.processing.include_patterns,
        config.processing.exclude_patterns,
    )

    summaries: list[Summary] = []
    for root in settings.input_dirs:
        documents = processor.process_directory(root)
        if settings.dry_run:
            for doc in documents:
                print(f"Would process: {doc.path}")
            continue
        summaries.extend(summarize_documents(documents, summarizer, keep_going=settings.keep_going))

    if not settings.dry_run:
        content = render(summaries, fmt, include_metadata=config.output.include_metadata)
        write_output(content, settings.output)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    settings = parse_args(argv)
    setup_logging(
        level_from_flags(verbose=settings.verbose, debug=settings.debug),
        settings.log_file or None,
        force=True,
    )
    load_dotenv(find_dotenv(usecwd=True))

    try:
        return run(settings)
    except DoctldrError as e:
        logger.error("Aborting: %s", e, error_type=type(e).__name__)
        print(f"doctldr: error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
