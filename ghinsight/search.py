"""Searching issues and pull requests across several repositories."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

from .identifiers import RepositoryId

logger = logging.getLogger(__name__)

MAX_CONCURRENT_REPOSITORIES = 10


@dataclass(frozen=True)
class SearchQuery:
    """A GitHub search query string."""

    value: str

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class SearchCursor:
    """An opaque pagination cursor."""

    value: str

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class SearchCursorByRepository:
    """A pagination cursor bound to the repository it belongs to."""

    cursor: SearchCursor
    repository_id: RepositoryId

    def __post_init__(self) -> None:
        if isinstance(self.cursor, str):
            object.__setattr__(self, "cursor", SearchCursor(self.cursor))


@dataclass(frozen=True)
class Pager:
    """Pagination state returned with one page of results."""

    has_next_page: bool
    next_page_cursor: SearchCursor | None = None


@dataclass
class SearchResult:
    """One repository's page of matching issues and pull requests."""

    repository_id: RepositoryId
    issue_or_pull_requests: list = field(default_factory=list)
    next_pager: Pager | None = None


@dataclass
class SearchResultWithCursors:
    """Results merged over repositories, with cursors for those that have more."""

    results: list = field(default_factory=list)
    cursors: list[SearchCursorByRepository] = field(default_factory=list)


class SearchService:
    """Runs searches through a GitHub client offering an awaitable ``search_resources``."""

    def __init__(self, github_client: Any) -> None:
        self.github_client = github_client

    async def search_resources(
        self, repos, query: SearchQuery, per_page=None, cursors=None
    ) -> SearchResultWithCursors:
        """Search every repository; repositories whose search fails are left out."""
        cursor_by_repo = {c.repository_id: c.cursor for c in cursors or ()}
        semaphore = asyncio.Semaphore(MAX_CONCURRENT_REPOSITORIES)

        async def search_one(repo_id: RepositoryId) -> SearchResult | None:
            async with semaphore:
                try:
                    return await self.github_client.search_resources(
                        repo_id, query, per_page, cursor_by_repo.get(repo_id)
                    )
                except Exception as exc:
                    logger.warning("Failed to search resources in %s: %s", repo_id, exc)
                    return None

        outcomes = await asyncio.gather(*(search_one(repo_id) for repo_id in repos))

        merged = SearchResultWithCursors()
        for outcome in outcomes:
            if outcome is None:
                continue
            merged.results.extend(outcome.issue_or_pull_requests)
            pager = outcome.next_pager
            if pager is not None and pager.has_next_page:
                merged.cursors.append(
                    SearchCursorByRepository(
                        cursor=pager.next_page_cursor or SearchCursor(""),
                        repository_id=outcome.repository_id,
                    )
                )
        return merged