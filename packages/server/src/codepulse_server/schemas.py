"""Request payloads accepted by the HTTP API."""

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ReviewRequest(BaseModel):
    # Left untyped so a non-string diff reaches validate_diff() and is
    # rejected with the same envelope as an oversized one.
    diff: Any = None
    language: Optional[str] = None
    context: Optional[str] = None


class FixIssueIn(BaseModel):
    description: str
    suggestion: str = ""
    line: Optional[int] = None


class FixRequestIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    token: str
    owner: str
    repo: str
    file_path: str = Field(alias="filePath")
    original_code: str = Field(alias="originalCode")
    issues: List[FixIssueIn] = Field(default_factory=list)
