"""Error taxonomy shared by every codepulse package.

Each error carries the HTTP status the server answers with, so the transport
layer maps exceptions to responses without knowing about individual types.
Nothing in codepulse retries on any of these; they are surfaced to the
caller as-is.
"""

from __future__ import annotations


class CodePulseError(Exception):
    """Base class for all errors raised deliberately by codepulse."""

    status_code: int = 500


class ValidationError(CodePulseError):
    """The request payload is missing, malformed or too large."""

    status_code = 400


class AuthError(CodePulseError):
    """The LLM provider rejected the configured API key."""

    status_code = 401


class BudgetError(CodePulseError):
    """The LLM provider account has run out of credit."""

    status_code = 402


class RateLimitError(CodePulseError):
    """The LLM provider throttled the request."""

    status_code = 429


class ParseError(CodePulseError):
    """The model returned text that could not be parsed into a review."""

    status_code = 502


class ProviderError(CodePulseError):
    """Any other provider-side failure (bad request, 5xx, unexpected payload)."""

    status_code = 502


class NetworkError(CodePulseError):
    """The provider or the code-search API could not be reached."""

    status_code = 503


class DependencySearchError(CodePulseError):
    """A single repository code search failed.

    The dependency analyzer catches this per symbol and keeps going, so it
    normally never reaches an HTTP client.
    """

    status_code = 502
