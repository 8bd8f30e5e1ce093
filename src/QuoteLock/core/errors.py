from __future__ import annotations


class QuoteLockError(Exception):
    """Base class for QuoteLock errors."""


class ConfigurationError(QuoteLockError):
    """Raised when startup resources cannot be resolved from configuration."""


class QuoteParseError(QuoteLockError):
    """Raised by provider parsers when content does not have the expected shape.

    Attributes:
        stage: Parsing step that failed (e.g. "locate content block").
        detail: Optional extra context for logs.
    """

    def __init__(self, stage: str, detail: str = "") -> None:
        super().__init__(f"{stage}: {detail}" if detail else stage)
        self.stage = stage
        self.detail = detail
