"""Cached LLM code review.

review() → validate → cache lookup ─hit→ stored result, cached=True
                               └miss→ prompt → provider.complete() → parse
                                      → cost → cache.store → result

Only successful, parseable reviews are cached. A ParseError discards the
response entirely, so the next identical request calls the model again.
"""

from __future__ import annotations

import copy
import dataclasses
import json
import logging
import re
import time
import uuid
from typing import TYPE_CHECKING, Optional

from codepulse_core.cost import compute_cost
from codepulse_core.errors import ParseError, ValidationError
from codepulse_core.models import SEVERITIES, CodeIssue, ReviewResult

if TYPE_CHECKING:
    from codepulse_core.cost import UsageAccountant
    from codepulse_core.providers.base import BaseProvider

logger = logging.getLogger(__name__)

MAX_DIFF_BYTES = 50 * 1024
REVIEW_MAX_TOKENS = 4096
_DEFAULT_SEVERITY = "medium"


def validate_diff(diff, max_bytes: int = MAX_DIFF_BYTES) -> str:
    """Reject anything that is not a non-empty string of at most max_bytes UTF-8 bytes."""
    if not isinstance(diff, str) or not diff:
        raise ValidationError("Diff is required and must be a string")
    if len(diff.encode("utf-8")) > max_bytes:
        raise ValidationError(f"Diff size exceeds {max_bytes // 1024}KB limit")
    return diff


def build_system_prompt(guidelines: str = "") -> str:
    prompt = """You are an expert senior code reviewer for a transportation management system (TMS) codebase:
shipments, loads, carriers, routing, rating and dispatch. You have deep knowledge of software
engineering, security, performance optimization and accessibility.

Perform a COMPREHENSIVE review covering:
1. Critical errors — runtime, type, reference, syntax and logic errors.
2. Performance — unnecessary re-renders, infinite loops, memory leaks, inefficient algorithms,
   Big O complexity, N+1 queries, bundle size.
3. Code quality — maintainability, readability, duplication, abstractions, error handling, testability.
4. Scalability — hard-coded limits, missing pagination, blocking operations, missing caching.
5. Accessibility — ARIA attributes, alt text, keyboard navigation, contrast, focus management.
6. Security — injection, XSS, authentication/authorization, data exposure, CSRF, insecure dependencies.

Be thorough, concise and actionable. Do not invent issues when the diff is clean."""
    if guidelines:
        prompt += f"\n\nTeam guidelines:\n{guidelines}"
    return prompt


def build_review_prompt(diff: str, language: Optional[str] = None, context: Optional[str] = None) -> str:
    """Build the user prompt carrying the diff and the required JSON schema."""
    header = ""
    if language:
        header += f"Language/Framework: {language}\n"
    if context:
        header += f"Additional Context: {context}\n"
    return f"""{header}
Review the following code diff and provide a structured analysis:

```diff
{diff}
```

Respond with ONLY a valid JSON object (no markdown, no code blocks) in this exact format:
{{
  "summary": "Brief 1-2 sentence overview of the changes and overall assessment",
  "issues": [
    {{
      "severity": "critical|high|medium|low",
      "category": "error|performance|code-quality|scalability|accessibility|security|logic",
      "file": "filename if identifiable",
      "line": <line number if applicable>,
      "description": "Detailed description of the issue",
      "suggestion": "How to fix it, with a code example where possible"
    }}
  ],
  "complexity": {{
    "timeComplexity": "O(n) analysis",
    "spaceComplexity": "O(n) analysis",
    "optimizationSuggestions": ["suggestion 1"]
  }},
  "accessibility": {{
    "missingAria": ["missing ARIA attributes"],
    "issues": ["accessibility issue"]
  }}
}}

If no issues are found, return an empty issues array."""


def parse_review_response(raw: str) -> dict:
    """Parse the model's text into ``{"summary", "issues", ...}``.

    Strips one outer ```json fence if the model added it, then requires a
    JSON object. Anything else raises ParseError.
    """
    cleaned = re.sub(r"^```(?:json)?\s*", "", raw.strip())
    cleaned = re.sub(r"\s*```$", "", cleaned.strip())
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.warning("Failed to parse review response as JSON: %s", raw[:200])
        raise ParseError("Failed to parse model response as JSON") from e
    if not isinstance(data, dict):
        raise ParseError("Model response is not a JSON object")
    return data


def _to_issue(item: dict) -> CodeIssue:
    severity = str(item.get("severity", _DEFAULT_SEVERITY)).lower()
    if severity not in SEVERITIES:
        severity = _DEFAULT_SEVERITY
    line = item.get("line")
    if not isinstance(line, int) or isinstance(line, bool):
        line = None
    return CodeIssue(
        severity=severity,
        category=str(item.get("category", "")),
        description=str(item.get("description", "")),
        suggestion=str(item.get("suggestion", "")),
        file=item.get("file") or None,
        line=line,
    )


class ReviewEngine:
    """Reviews diffs through an LLM provider with a content-addressed cache in front."""

    def __init__(
        self,
        provider: BaseProvider,
        cache,
        accountant: Optional[UsageAccountant] = None,
        guidelines: str = "",
        max_tokens: int = REVIEW_MAX_TOKENS,
        max_diff_bytes: int = MAX_DIFF_BYTES,
    ):
        self.provider = provider
        self.cache = cache
        self.accountant = accountant
        self.guidelines = guidelines
        self.max_tokens = max_tokens
        self.max_diff_bytes = max_diff_bytes

    def review(self, diff, language: Optional[str] = None, context: Optional[str] = None) -> ReviewResult:
        start = time.perf_counter()
        validate_diff(diff, self.max_diff_bytes)

        key = self.cache.key_for(diff)
        hit = self.cache.lookup(key)
        if hit is not None:
            # duration reflects this lookup only, not the original model call.
            result = dataclasses.replace(copy.deepcopy(hit), cached=True, duration_ms=_elapsed_ms(start))
            logger.info("Cache hit: %s", key[:8])
            self._record(result)
            return result

        logger.info("Cache miss, calling %s: %s", self.provider.__class__.__name__, key[:8])
        completion = self.provider.complete(
            build_review_prompt(diff, language, context),
            max_tokens=self.max_tokens,
            temperature=0,
            system=build_system_prompt(self.guidelines),
        )
        parsed = parse_review_response(completion.text)

        raw_issues = parsed.get("issues") or []
        if not isinstance(raw_issues, list):
            raise ParseError("Model response 'issues' is not a list")

        usage = completion.usage
        result = ReviewResult(
            id=str(uuid.uuid4()),
            summary=str(parsed.get("summary", "")),
            issues=[_to_issue(item) for item in raw_issues if isinstance(item, dict)],
            cost=compute_cost(usage.input_tokens, usage.output_tokens),
            tokens_used=usage,
            duration_ms=_elapsed_ms(start),
            cached=False,
            complexity=parsed.get("complexity") if isinstance(parsed.get("complexity"), dict) else None,
            accessibility=parsed.get("accessibility") if isinstance(parsed.get("accessibility"), dict) else None,
        )
        self.cache.store(key, copy.deepcopy(result))
        logger.info("Review completed in %dms, cost: $%.5f", result.duration_ms, result.cost)
        self._record(result)
        return result

    def _record(self, result: ReviewResult) -> None:
        if self.accountant is not None:
            self.accountant.record(result)


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)
