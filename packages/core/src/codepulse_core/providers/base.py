"""Base LLM provider implementing the Template Method pattern.

Every caller in codepulse talks to the model through one operation:
    complete() → _call_api()         ← only this differs per provider
               → _translate_error()  ← SDK exceptions → codepulse errors

Subclasses implement three things only:
  - __init__: validate and store the SDK client
  - _call_api: make one raw API call and return a Completion
  - _translate_error: map the SDK's exception types onto codepulse errors

There is no retry loop here, and subclasses build their SDK clients with
retries disabled. Auth, rate-limit and budget failures are surfaced to the
caller on the first attempt.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional

from codepulse_core.errors import CodePulseError, ProviderError
from codepulse_core.models import Completion

logger = logging.getLogger(__name__)


class BaseProvider(ABC):
    MODEL: str = ""

    # ------------------------------------------------------------------ #
    # Public interface                                                     #
    # ------------------------------------------------------------------ #

    def complete(
        self,
        prompt: str,
        max_tokens: int,
        temperature: float = 0.0,
        system: Optional[str] = None,
    ) -> Completion:
        """Run a single completion and return its text and token usage.

        Blocks until the SDK returns; no timeout is applied beyond the SDK's
        own default.
        """
        try:
            completion = self._call_api(prompt, max_tokens, temperature, system)
        except CodePulseError:
            raise
        except Exception as e:
            logger.error("%s API error: %s", self.__class__.__name__, e)
            raise self._translate_error(e) from e

        if not completion.text:
            raise ProviderError(f"{self.__class__.__name__} returned an empty response")
        return completion

    # ------------------------------------------------------------------ #
    # Abstract: implement in each provider                                #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def _call_api(
        self,
        prompt: str,
        max_tokens: int,
        temperature: float,
        system: Optional[str],
    ) -> Completion:
        """Make a single API call and return the text plus usage.

        Should raise on failure; complete() translates the exception.
        """

    def _translate_error(self, error: Exception) -> CodePulseError:
        """Map an SDK exception to a codepulse error. Override per provider."""
        return ProviderError(f"{self.__class__.__name__} API error: {error}")
