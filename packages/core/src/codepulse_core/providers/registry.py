from __future__ import annotations

from codepulse_core.providers.anthropic import AnthropicProvider
from codepulse_core.providers.base import BaseProvider
from codepulse_core.providers.openai import OpenAIProvider


def get_provider(config: dict) -> BaseProvider:
    """Instantiate the provider selected by ``config["model"]``."""
    model = config["model"]
    if model == "anthropic":
        return AnthropicProvider(api_key=config["anthropic_api_key"], model=config.get("anthropic_model"))
    if model == "openai":
        return OpenAIProvider(api_key=config["openai_api_key"], model=config.get("openai_model"))
    raise ValueError(f"Unknown model provider: {model!r}. Choose 'anthropic' or 'openai'.")
