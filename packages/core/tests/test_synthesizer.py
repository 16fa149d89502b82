"""Tests for fix prompt construction and free-form response parsing."""

import pytest

from codepulse_core.errors import AuthError
from codepulse_core.fixes.synthesizer import (
    DEFAULT_EXPLANATION,
    FixSynthesizer,
    build_fix_prompt,
    extract_explanation,
    extract_fixed_code,
)
from codepulse_core.models import Completion, DependencyCheck, FixIssue, Usage
from codepulse_core.providers.base import BaseProvider

ORIGINAL = "function rate(load) {\n  return load.miles * load.perMile\n}"

RESPONSE = """```javascript
function rate(load) {
  if (!load) return 0
  return load.miles * load.perMile
}
```

Explanation:
Added a guard for a missing load.

Let me know if you need anything else."""


class StubProvider(BaseProvider):
    def __init__(self, text=RESPONSE, error=None):
        self.text = text
        self.error = error
        self.calls = []

    def _call_api(self, prompt, max_tokens, temperature, system):
        self.calls.append({"prompt": prompt, "max_tokens": max_tokens, "temperature": temperature, "system": system})
        if self.error is not None:
            raise self.error
        return Completion(text=self.text, usage=Usage(10, 10))


ISSUES = [
    FixIssue(description="Crashes on a missing load", suggestion="Guard against None", line=2),
    FixIssue(description="Magic number", suggestion="Extract a constant"),
]


class TestExtractFixedCode:
    def test_first_fenced_block_with_language(self):
        assert extract_fixed_code(RESPONSE).startswith("function rate(load) {\n  if (!load) return 0")

    def test_block_without_language(self):
        assert extract_fixed_code("```\nx = 1\n```") == "x = 1"

    def test_only_first_block_used(self):
        text = "```js\nfirst()\n```\n\nAlso consider:\n```js\nsecond()\n```"
        assert extract_fixed_code(text) == "first()"

    def test_content_is_stripped(self):
        assert extract_fixed_code("```\n\n  x = 1  \n\n```") == "x = 1"

    def test_falls_back_to_whole_response(self):
        text = "x = 1\nExplanation: nothing fenced"
        assert extract_fixed_code(text) == text

    def test_fence_without_newline_falls_back(self):
        # The opening fence must end its line.
        text = "```x = 1```"
        assert extract_fixed_code(text) == text


class TestExtractExplanation:
    def test_until_blank_line(self):
        assert extract_explanation(RESPONSE) == "Added a guard for a missing load."

    def test_case_insensitive(self):
        assert extract_explanation("EXPLANATION: tightened types") == "tightened types"

    def test_until_end_of_text(self):
        assert extract_explanation("```\nx\n```\nExplanation: line one\nline two") == "line one\nline two"

    def test_default_when_absent(self):
        assert extract_explanation("```\nx\n```") == DEFAULT_EXPLANATION


class TestBuildFixPrompt:
    def test_includes_fenced_code(self):
        prompt = build_fix_prompt(ORIGINAL, ISSUES, DependencyCheck())
        assert f"```\n{ORIGINAL}\n```" in prompt

    def test_issues_enumerated_with_optional_line(self):
        prompt = build_fix_prompt(ORIGINAL, ISSUES, DependencyCheck())
        assert "1. Crashes on a missing load\n   Suggestion: Guard against None\n   Line: 2" in prompt
        assert "2. Magic number\n   Suggestion: Extract a constant\n\n" in prompt

    def test_dependency_warning_only_with_dependencies(self):
        assert "WARNING" not in build_fix_prompt(ORIGINAL, ISSUES, DependencyCheck())

        check = DependencyCheck(has_dependencies=True, dependencies=["src/quote.js", "src/dispatch.js"])
        prompt = build_fix_prompt(ORIGINAL, ISSUES, check)
        assert "WARNING: This code has dependencies in other files:" in prompt
        assert "- src/quote.js\n- src/dispatch.js" in prompt

    def test_requests_explanation_format(self):
        assert "Explanation:" in build_fix_prompt(ORIGINAL, [], DependencyCheck())


class TestFixSynthesizer:
    def test_synthesize(self):
        provider = StubProvider()
        fix = FixSynthesizer(provider).synthesize(ORIGINAL, ISSUES, DependencyCheck())
        assert "if (!load) return 0" in fix.fixed_code
        assert fix.explanation == "Added a guard for a missing load."

    def test_single_call_with_fix_budget_and_zero_temperature(self):
        provider = StubProvider()
        FixSynthesizer(provider).synthesize(ORIGINAL, ISSUES, DependencyCheck())
        assert len(provider.calls) == 1
        assert provider.calls[0]["max_tokens"] == 8192
        assert provider.calls[0]["temperature"] == 0

    def test_custom_extractors(self):
        synthesizer = FixSynthesizer(
            StubProvider(text="<<fixed>>"),
            code_extractor=lambda text: text.strip("<>"),
            explanation_extractor=lambda text: "custom",
        )
        fix = synthesizer.synthesize(ORIGINAL, ISSUES, DependencyCheck())
        assert fix.fixed_code == "fixed"
        assert fix.explanation == "custom"

    def test_provider_errors_propagate(self):
        synthesizer = FixSynthesizer(StubProvider(error=AuthError("bad key")))
        with pytest.raises(AuthError):
            synthesizer.synthesize(ORIGINAL, ISSUES, DependencyCheck())
