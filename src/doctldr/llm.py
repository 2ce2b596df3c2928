"""Summarization through an OpenAI-compatible chat completion API."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any, Protocol

import requests

from doctldr.config import DEFAULT_MODEL, OPENAI_CHAT_URL
from doctldr.exceptions import SummarizationError
from doctldr.logging import logger

if TYPE_CHECKING:
    from doctldr.settings import ApiConfig

SYSTEM_PROMPT = (
    "You are a technical documentation summarizer. Your goal is to create ultra-concise "
    "summaries that preserve critical technical information while eliminating redundancy."
)

SUMMARY_PROMPT = (
    "Create a concise technical summary of the following documentation. "
    "Focus on preserving critical technical information while removing redundant or "
    "commonly known details. Use precise technical terminology. The summary should be "
    "optimized for use as context in other LLM workflows.\n\n"
)

TEMPERATURE = 0.3


class LLMProvider(Protocol):
    """A backend able to summarize a piece of text."""

    def summarize(self, content: str, max_tokens: int) -> str: ...


def create_summary_prompt(content: str) -> str:
    return SUMMARY_PROMPT + content


class OpenAIProvider:
    """Chat completion client for the OpenAI API.

    One request per call; there is no retry, caching or streaming.
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        *,
        base_url: str = OPENAI_CHAT_URL,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.model = model
        self.base_url = base_url
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
        )

    @classmethod
    def from_config(cls, api: ApiConfig, api_key: str, model: str) -> OpenAIProvider:
        return cls(
            api_key,
            model,
            base_url=api.base_url,
            timeout=api.timeout or None,
        )

    def build_payload(self, content: str, max_tokens: int) -> dict[str, Any]:
        """Build the chat completion request body.

        Args:
            content (str): the document text to summarize
            max_tokens (int): the completion token limit

        Returns:
            dict[str, Any]: the JSON payload
        """
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": create_summary_prompt(content)},
            ],
            "max_tokens": max_tokens,
            "temperature": TEMPERATURE,
        }

    def summarize(self, content: str, max_tokens: int) -> str:
        """Request a summary of `content`.

        Args:
            content (str): the document text to summarize
            max_tokens (int): the completion token limit

        Raises:
            SummarizationError: on transport errors, non-2xx responses,
                undecodable or malformed bodies and empty choice lists

        Returns:
            str: the content of the first returned choice
        """
        payload = self.build_payload(content, max_tokens)
        start = time.perf_counter()
        try:
            response = self.session.post(self.base_url, json=payload, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            msg = f"LLM request to {self.base_url} failed: {e}"
            raise SummarizationError(message=msg) from e
        elapsed_ms = round((time.perf_counter() - start) * 1000, 2)

        if not response.ok:
            raise SummarizationError(
                message=f"LLM API returned {response.status_code}: {response.text[:500]}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise SummarizationError(
                message="LLM API returned a non-JSON body",
                status_code=response.status_code,
            ) from e

        logger.debug(
            "LLM request completed",
            model=self.model,
            elapsed_ms=elapsed_ms,
            usage=data.get("usage") if isinstance(data, dict) else None,
        )
        return extract_first_choice(data)


def extract_first_choice(data: Any) -> str:  # noqa: ANN401
    """Return the message content of the first choice of a chat completion.

    Args:
        data (Any): the decoded response body

    Raises:
        SummarizationError: if there is no choice or the structure is unexpected

    Returns:
        str: the summary text
    """
    if not isinstance(data, dict) or not isinstance(data.get("choices"), list):
        raise SummarizationError(message="Malformed LLM API response: missing 'choices'")
    choices = data["choices"]
    if not choices:
        raise SummarizationError(message="No response from LLM API: empty 'choices'")
    try:
        content = choices[0]["message"]["content"]
    except (KeyError, TypeError, IndexError) as e:
        raise SummarizationError(message=f"Malformed LLM API response: {e!r}") from e
    if not isinstance(content, str):
        raise SummarizationError(message="Malformed LLM API response: content is not a string")
    return content


class LLMSummarizer:
    """Summarize documents with a provider and a fixed token limit."""

    def __init__(self, provider: LLMProvider, max_tokens: int) -> None:
        self.provider = provider
        self.max_tokens = max_tokens

    def summarize(self, content: str) -> str:
        return self.provider.summarize(content, self.max_tokens)
