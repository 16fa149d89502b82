from __future__ import annotations

from typing import Optional

from codepulse_core import errors
from codepulse_core.models import Completion, Usage
from codepulse_core.providers.base import BaseProvider


class AnthropicProvider(BaseProvider):
    MODEL = "claude-sonnet-4-20250514"

    def __init__(self, api_key: str, model: Optional[str] = None):
        try:
            from anthropic import Anthropic
        except ImportError:
            raise ImportError(
                "The 'anthropic' package is required for this provider. "
                "Install it with: pip install anthropic"
            )
        self.client = Anthropic(api_key=api_key, max_retries=0)
        if model:
            self.MODEL = model

    def _call_api(
        self,
        prompt: str,
        max_tokens: int,
        temperature: float,
        system: Optional[str],
    ) -> Completion:
        from anthropic.types import TextBlock

        kwargs = {}
        if system:
            kwargs["system"] = system
        response = self.client.messages.create(
            model=self.MODEL,
            messages=[{"role": "user", "content": prompt}],
            temperature=temperature,
            max_tokens=max_tokens,
            **kwargs,
        )
        text_blocks = [block.text for block in response.content if isinstance(block, TextBlock)]
        return Completion(
            text="".join(text_blocks),
            usage=Usage(
                input_tokens=response.usage.input_tokens,
                output_tokens=response.usage.output_tokens,
            ),
        )

    def _translate_error(self, error: Exception) -> errors.CodePulseError:
        import anthropic

        if isinstance(error, anthropic.AuthenticationError):
            return errors.AuthError("Invalid Anthropic API key. Check ANTHROPIC_API_KEY.")
        if isinstance(error, anthropic.RateLimitError):
            return errors.RateLimitError("Rate limit exceeded. Please try again in a few moments.")
        if isinstance(error, anthropic.APIConnectionError):
            return errors.NetworkError("Network error: unable to reach the Anthropic API.")
        if isinstance(error, anthropic.BadRequestError):
            message = _error_message(error)
            if "credit balance" in message.lower():
                return errors.BudgetError("Insufficient Anthropic API credits.")
            return errors.ProviderError(f"Invalid request: {message}")
        if isinstance(error, anthropic.APIStatusError):
            if error.status_code in (500, 502, 503, 529):
                return errors.ProviderError("Anthropic API is temporarily unavailable. Please try again later.")
            return errors.ProviderError(f"Anthropic API error ({error.status_code}): {_error_message(error)}")
        return super()._translate_error(error)


def _error_message(error) -> str:
    """Pull the human-readable message out of an Anthropic error body."""
    body = getattr(error, "body", None)
    if isinstance(body, dict):
        inner = body.get("error")
        if isinstance(inner, dict) and inner.get("message"):
            return inner["message"]
        if body.get("message"):
            return body["message"]
    return getattr(error, "message", None) or str(error)
