"""Exception types shared by the collectors, the LLM gateway and the pipeline."""

from __future__ import annotations


class SolscoutError(Exception):
    """Base class for all solscout failures."""


class ConfigError(SolscoutError):
    """Configuration is missing or invalid."""


class TransportError(SolscoutError):
    """A network request could not be completed."""


class ApiError(TransportError):
    """A remote API answered with an error status or error payload."""

    def __init__(self, message: str, *, status_code: int | None = None, url: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class LLMCallError(SolscoutError):
    """The LLM provider request failed or returned an unusable envelope."""


class LLMResponseParseError(SolscoutError):
    """The model text could not be turned into the expected structure.

    ``raw_text`` carries the untouched model reply for diagnostics.
    """

    def __init__(self, message: str, raw_text: str):
        super().__init__(f"{message}\nraw: {raw_text}")
        self.raw_text = raw_text


class NoSignalsError(SolscoutError):
    """No collector produced any signal."""
