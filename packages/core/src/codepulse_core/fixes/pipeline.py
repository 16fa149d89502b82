"""Fix pipeline: dependency check → fix prompt → model call → parse → line diff.

Stages run strictly in order. A failure in any stage is logged with the
stage name and the original exception is re-raised unchanged; nothing is
retried here.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from codepulse_core.fixes.diff import diff_text
from codepulse_core.models import CodeFix, FixIssue

if TYPE_CHECKING:
    from codepulse_core.fixes.dependencies import DependencyAnalyzer
    from codepulse_core.fixes.synthesizer import FixSynthesizer

logger = logging.getLogger(__name__)


class FixStage(enum.Enum):
    IDLE = "idle"
    DEPENDENCY_CHECK = "dependency_check"
    PROMPTING = "prompting"
    LLM_CALL = "llm_call"
    PARSE_RESPONSE = "parse_response"
    DIFF_SYNTHESIS = "diff_synthesis"
    DONE = "done"
    FAILED = "failed"


@dataclass
class FixRequest:
    token: str
    owner: str
    repo: str
    file_path: str
    original_code: str
    issues: list[FixIssue] = field(default_factory=list)


class FixPipeline:
    def __init__(self, analyzer: DependencyAnalyzer, synthesizer: FixSynthesizer):
        self.analyzer = analyzer
        self.synthesizer = synthesizer

    def run(self, request: FixRequest) -> CodeFix:
        stage = FixStage.IDLE

        def advance(next_stage: FixStage) -> FixStage:
            logger.debug("Fix %s: %s → %s", request.file_path, stage.value, next_stage.value)
            return next_stage

        try:
            stage = advance(FixStage.DEPENDENCY_CHECK)
            dependency_check = self.analyzer.check(
                request.token,
                request.owner,
                request.repo,
                request.original_code,
                exclude_file=request.file_path,
            )

            stage = advance(FixStage.PROMPTING)
            prompt = self.synthesizer.build_prompt(request.original_code, request.issues, dependency_check)

            stage = advance(FixStage.LLM_CALL)
            response = self.synthesizer.call(prompt)

            stage = advance(FixStage.PARSE_RESPONSE)
            fix = self.synthesizer.parse(response)

            stage = advance(FixStage.DIFF_SYNTHESIS)
            changes = diff_text(request.original_code, fix.fixed_code)
        except Exception as e:
            logger.error("Fix for %s failed at stage %s: %s", request.file_path, stage.value, e)
            stage = advance(FixStage.FAILED)
            raise

        stage = advance(FixStage.DONE)
        return CodeFix(
            original_code=request.original_code,
            fixed_code=fix.fixed_code,
            changes=changes,
            dependency_check=dependency_check,
            explanation=fix.explanation,
        )
