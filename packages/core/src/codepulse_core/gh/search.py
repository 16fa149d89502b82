from __future__ import annotations

import logging
from dataclasses import dataclass

from github import Auth, Github, GithubException
from requests.exceptions import RequestException

from codepulse_core.errors import DependencySearchError

logger = logging.getLogger(__name__)


@dataclass
class SearchHit:
    path: str


class GitHubCodeSearch:
    """Repository-scoped code search over the GitHub search API.

    Only the first page of results is read, one HTTP call per query with
    PyGithub's retry disabled. Line numbers are not available from this API.
    """

    def __init__(self, client_factory=None):
        self._client_factory = client_factory or (lambda token: Github(auth=Auth.Token(token), retry=None))

    def search(self, token: str, owner: str, repo: str, query: str) -> list[SearchHit]:
        gh = self._client_factory(token)
        try:
            results = gh.search_code(query=f"{query} repo:{owner}/{repo}")
            return [SearchHit(path=item.path) for item in results.get_page(0)]
        except (GithubException, RequestException) as e:
            raise DependencySearchError(f"Code search for {query!r} in {owner}/{repo} failed: {e}") from e
