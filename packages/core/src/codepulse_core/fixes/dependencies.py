"""Find other files in a repository that reference symbols in a code unit.

Symbol extraction is a lexical, best-effort heuristic aimed at JavaScript and
TypeScript sources. It misses destructured exports, re-exports and computed
names, and the export pattern captures the keyword itself for
``export const x`` / ``export function f``. These blind spots are part of the
observable DependencyCheck result and are kept as-is.
"""

from __future__ import annotations

import logging
import re
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from codepulse_core.models import DependencyCheck, DependencyUsage

logger = logging.getLogger(__name__)

_FUNCTION_RE = re.compile(
    r"(?:function\s+(\w+)|const\s+(\w+)\s*=\s*(?:async\s+)?\(|(\w+)\s*:\s*(?:async\s+)?\([^)]*\)\s*=>)",
    re.ASCII,
)
_CLASS_RE = re.compile(r"class\s+(\w+)", re.ASCII)
_IMPORT_RE = re.compile(
    r"import\s+(?:(?:\{[^}]*\}|\*\s+as\s+\w+|\w+)\s+from\s+)?['\"]([^'\"]+)['\"]",
    re.ASCII,
)
_EXPORT_RE = re.compile(r"export\s+(?:const|function|class|default\s+)?(\w+)", re.ASCII)


def _unique(names) -> list[str]:
    return list(dict.fromkeys(n for n in names if n))


def extract_function_names(code: str) -> list[str]:
    """Named function declarations, ``const f = (`` arrows and ``key: (...) =>`` members."""
    return _unique(next((g for g in m.groups() if g), None) for m in _FUNCTION_RE.finditer(code))


def extract_class_names(code: str) -> list[str]:
    return _unique(m.group(1) for m in _CLASS_RE.finditer(code))


def extract_imports(code: str) -> list[str]:
    """Module specifiers of import statements. Extracted but never searched."""
    return _unique(m.group(1) for m in _IMPORT_RE.finditer(code))


def extract_exports(code: str) -> list[str]:
    return _unique(m.group(1) for m in _EXPORT_RE.finditer(code))


def dependency_warning(count: int) -> str:
    return f"This code is used in {count} other file(s). Make sure changes don't break existing functionality."


class DependencyAnalyzer:
    """Runs one code search per extracted symbol and aggregates the hits.

    A failed search is logged and skipped; the check is built from whatever
    searches succeeded. Results are never cached since the repository may
    change between fix requests.
    """

    def __init__(self, search, max_workers: int = 1):
        self.search = search
        self.max_workers = max(1, max_workers)

    def check(
        self,
        token: str,
        owner: str,
        repo: str,
        code: str,
        exclude_file: Optional[str] = None,
    ) -> DependencyCheck:
        symbols = extract_function_names(code) + extract_class_names(code) + extract_exports(code)
        logger.debug("Searching %d symbol(s) in %s/%s", len(symbols), owner, repo)

        if self.max_workers == 1 or len(symbols) < 2:
            hit_lists = [self._search_symbol(token, owner, repo, name) for name in symbols]
        else:
            # map() yields in submission order, so the aggregate matches a sequential run.
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                hit_lists = list(pool.map(lambda name: self._search_symbol(token, owner, repo, name), symbols))

        dependencies: list[str] = []
        usages: list[DependencyUsage] = []
        for hits in hit_lists:
            for hit in hits:
                if hit.path == exclude_file:
                    continue
                dependencies.append(hit.path)
                usages.append(DependencyUsage(file=hit.path, line=0))

        return DependencyCheck(
            has_dependencies=len(dependencies) > 0,
            dependencies=dependencies,
            usages=usages,
            warnings=[dependency_warning(len(dependencies))] if dependencies else [],
        )

    def _search_symbol(self, token: str, owner: str, repo: str, name: str) -> list:
        try:
            return list(self.search.search(token, owner, repo, name))
        except Exception as e:
            logger.warning("Error searching for %s: %s", name, e)
            return []
