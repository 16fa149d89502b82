from __future__ import annotations

from typing import Optional

try:
    import openai as _openai
    from openai import OpenAI as _OpenAI
except ImportError:
    _openai = None  # type: ignore[assignment]
    _OpenAI = None  # type: ignore[assignment,misc]

from codepulse_core import errors
from codepulse_core.models import Completion, Usage
from codepulse_core.providers.base import BaseProvider


class OpenAIProvider(BaseProvider):
    MODEL = "gpt-4o"

    def __init__(self, api_key: str, model: Optional[str] = None):
        if _OpenAI is None:
            raise ImportError(
                "The 'openai' package is required for this provider. " "Install it with: pip install 'codepulse[openai]'"
            )
        self.client = _OpenAI(api_key=api_key, max_retries=0)
        if model:
            self.MODEL = model

    def _call_api(
        self,
        prompt: str,
        max_tokens: int,
        temperature: float,
        system: Optional[str],
    ) -> Completion:
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})
        response = self.client.chat.completions.create(
            model=self.MODEL,
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
        )
        usage = response.usage
        return Completion(
            text=response.choices[0].message.content or "",
            usage=Usage(
                input_tokens=usage.prompt_tokens if usage else 0,
                output_tokens=usage.completion_tokens if usage else 0,
            ),
        )

    def _translate_error(self, error: Exception) -> errors.CodePulseError:
        if isinstance(error, _openai.AuthenticationError):
            return errors.AuthError("Invalid OpenAI API key. Check OPENAI_API_KEY.")
        if isinstance(error, _openai.RateLimitError):
            # OpenAI reports an exhausted balance as a 429 with this code.
            if getattr(error, "code", None) == "insufficient_quota":
                return errors.BudgetError("Insufficient OpenAI API credits.")
            return errors.RateLimitError("Rate limit exceeded. Please try again in a few moments.")
        if isinstance(error, _openai.APIConnectionError):
            return errors.NetworkError("Network error: unable to reach the OpenAI API.")
        if isinstance(error, _openai.APIStatusError):
            if error.status_code >= 500:
                return errors.ProviderError("OpenAI API is temporarily unavailable. Please try again later.")
            return errors.ProviderError(f"OpenAI API error ({error.status_code}): {error.message}")
        return super()._translate_error(error)
