"""Ask the model to patch flagged issues and pull the result out of its reply.

The reply is free-form text, so parsing is split into two module-level
functions that the synthesizer receives as parameters. They can be tested
without a provider and replaced without touching the network path.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Sequence

if TYPE_CHECKING:
    from codepulse_core.models import DependencyCheck, FixIssue
    from codepulse_core.providers.base import BaseProvider

FIX_MAX_TOKENS = 8192
DEFAULT_EXPLANATION = "Code has been fixed based on the issues identified."

_CODE_BLOCK_RE = re.compile(r"```(?:\w+)?\n([\s\S]*?)```", re.ASCII)
_EXPLANATION_RE = re.compile(r"Explanation:\s*([\s\S]*?)(?:\n\n|\Z)", re.IGNORECASE)


def extract_fixed_code(response: str) -> str:
    """Return the first fenced code block, or the whole response if there is none.

    The fallback is lossy: any prose around unfenced code ends up in the
    fixed code.
    """
    match = _CODE_BLOCK_RE.search(response)
    return match.group(1).strip() if match else response


def extract_explanation(response: str) -> str:
    match = _EXPLANATION_RE.search(response)
    return match.group(1).strip() if match else DEFAULT_EXPLANATION


def build_fix_prompt(code: str, issues: Sequence[FixIssue], dependency_check: DependencyCheck) -> str:
    warning = ""
    if dependency_check.has_dependencies:
        listed = "\n".join(f"- {d}" for d in dependency_check.dependencies)
        warning = (
            f"WARNING: This code has dependencies in other files:\n{listed}\n"
            "Make sure your fixes don't break these dependencies."
        )

    numbered = []
    for i, issue in enumerate(issues, start=1):
        entry = f"{i}. {issue.description}\n   Suggestion: {issue.suggestion}"
        if issue.line:
            entry += f"\n   Line: {issue.line}"
        numbered.append(entry)
    issues_text = "\n\n".join(numbered)

    return f"""You are an expert code fixer. Your task is to fix the following code issues while ensuring you don't break any existing functionality.

IMPORTANT: Before making any changes, analyze the code carefully:
1. Check if any functions, classes, or exports are used elsewhere in the project
2. Maintain backward compatibility
3. Preserve existing functionality
4. Only fix the specific issues mentioned
5. Add proper error handling
6. Ensure type safety
7. Add ARIA attributes for accessibility where needed

{warning}

Code to fix:
```
{code}
```

Issues to fix:
{issues_text}

Respond with ONLY the fixed code in a code block, followed by a brief explanation of changes made.
Format:
```
[fixed code here]
```

Explanation:
[explanation here]"""  # noqa: E501


@dataclass
class SynthesizedFix:
    fixed_code: str
    explanation: str


class FixSynthesizer:
    def __init__(
        self,
        provider: BaseProvider,
        max_tokens: int = FIX_MAX_TOKENS,
        code_extractor: Callable[[str], str] = extract_fixed_code,
        explanation_extractor: Callable[[str], str] = extract_explanation,
    ):
        self.provider = provider
        self.max_tokens = max_tokens
        self.code_extractor = code_extractor
        self.explanation_extractor = explanation_extractor

    def build_prompt(self, code: str, issues: Sequence[FixIssue], dependency_check: DependencyCheck) -> str:
        return build_fix_prompt(code, issues, dependency_check)

    def call(self, prompt: str) -> str:
        return self.provider.complete(prompt, max_tokens=self.max_tokens, temperature=0).text

    def parse(self, response: str) -> SynthesizedFix:
        return SynthesizedFix(
            fixed_code=self.code_extractor(response),
            explanation=self.explanation_extractor(response),
        )

    def synthesize(self, code: str, issues: Sequence[FixIssue], dependency_check: DependencyCheck) -> SynthesizedFix:
        return self.parse(self.call(self.build_prompt(code, issues, dependency_check)))
