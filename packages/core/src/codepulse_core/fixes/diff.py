"""Approximate line diff between original and fixed code.

A greedy walk with a fixed 3-line lookahead, not a minimal edit script.
When lines differ and the original line reappears within the next three
fixed lines, the fixed line is treated as an insertion; otherwise the pair
is emitted as a substitution. Output lines are prefixed with ``"  "``,
``"- "`` or ``"+ "``.
"""

from __future__ import annotations

from typing import Sequence

LOOKAHEAD = 3


def diff_lines(original: Sequence[str], fixed: Sequence[str]) -> list[str]:
    out: list[str] = []
    i = j = 0
    while i < len(original) or j < len(fixed):
        if i >= len(original):
            out.append(f"+ {fixed[j]}")
            j += 1
        elif j >= len(fixed):
            out.append(f"- {original[i]}")
            i += 1
        elif original[i] == fixed[j]:
            out.append(f"  {original[i]}")
            i += 1
            j += 1
        elif original[i] in fixed[j + 1 : j + 1 + LOOKAHEAD]:
            out.append(f"+ {fixed[j]}")
            j += 1
        else:
            out.append(f"- {original[i]}")
            out.append(f"+ {fixed[j]}")
            i += 1
            j += 1
    return out


def diff_text(original: str, fixed: str) -> str:
    """Diff two code strings split on newlines; the result is newline-joined."""
    return "\n".join(diff_lines(original.split("\n"), fixed.split("\n")))
