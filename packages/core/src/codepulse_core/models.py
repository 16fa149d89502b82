"""Review and fix data models.

Internally everything is snake_case dataclasses. The ``to_dict`` methods
produce the camelCase wire format the dashboard consumes; timestamps are
integer milliseconds since the Unix epoch.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Optional

SEVERITIES = ("critical", "high", "medium", "low")


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class Usage:
    """Token counts reported by the provider for a single call."""

    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total(self) -> int:
        return self.input_tokens + self.output_tokens


@dataclass
class Completion:
    """Raw result of one LLM call."""

    text: str
    usage: Usage = field(default_factory=Usage)


@dataclass
class CodeIssue:
    severity: str  # "critical" | "high" | "medium" | "low"
    category: str
    description: str
    suggestion: str
    file: Optional[str] = None
    line: Optional[int] = None

    def to_dict(self) -> dict:
        data: dict[str, Any] = {
            "severity": self.severity,
            "category": self.category,
            "description": self.description,
            "suggestion": self.suggestion,
        }
        if self.file is not None:
            data["file"] = self.file
        if self.line is not None:
            data["line"] = self.line
        return data


@dataclass
class ReviewResult:
    """A completed review, as stored in the cache and returned to callers.

    ``cost``, ``tokens_used`` and ``timestamp`` always describe the original
    LLM call; a cache hit only flips ``cached`` and replaces ``duration_ms``.
    """

    id: str
    summary: str
    issues: list[CodeIssue] = field(default_factory=list)
    cost: float = 0.0
    tokens_used: Usage = field(default_factory=Usage)
    duration_ms: int = 0
    cached: bool = False
    timestamp: int = field(default_factory=now_ms)
    complexity: Optional[dict] = None
    accessibility: Optional[dict] = None

    def to_dict(self) -> dict:
        data: dict[str, Any] = {
            "id": self.id,
            "summary": self.summary,
            "issues": [issue.to_dict() for issue in self.issues],
            "cost": self.cost,
            "tokensUsed": {"input": self.tokens_used.input_tokens, "output": self.tokens_used.output_tokens},
            "durationMs": self.duration_ms,
            "cached": self.cached,
            "timestamp": self.timestamp,
        }
        if self.complexity is not None:
            data["complexity"] = self.complexity
        if self.accessibility is not None:
            data["accessibility"] = self.accessibility
        return data


@dataclass
class FixIssue:
    """An issue handed to the fix synthesizer, a subset of CodeIssue."""

    description: str
    suggestion: str
    line: Optional[int] = None

    @classmethod
    def from_dict(cls, d: dict) -> FixIssue:
        return cls(
            description=d.get("description", ""),
            suggestion=d.get("suggestion", ""),
            line=d.get("line"),
        )


@dataclass
class DependencyUsage:
    file: str
    line: int = 0  # code search does not report line numbers


@dataclass
class DependencyCheck:
    has_dependencies: bool = False
    dependencies: list[str] = field(default_factory=list)
    usages: list[DependencyUsage] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "hasDependencies": self.has_dependencies,
            "dependencies": list(self.dependencies),
            "usages": [{"file": u.file, "line": u.line} for u in self.usages],
            "warnings": list(self.warnings),
        }


@dataclass
class CodeFix:
    """Response artifact of the fix pipeline. Never persisted."""

    original_code: str
    fixed_code: str
    changes: str
    dependency_check: DependencyCheck
    explanation: str

    def to_dict(self) -> dict:
        return {
            "originalCode": self.original_code,
            "fixedCode": self.fixed_code,
            "changes": self.changes,
            "dependencyCheck": self.dependency_check.to_dict(),
            "explanation": self.explanation,
        }
