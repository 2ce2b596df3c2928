"""doctldr: summarize documentation trees with an LLM."""

__version__ = "0.1.0"
