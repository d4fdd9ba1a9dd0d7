"""Batch fetching of issues, pull requests, diffs, repositories and projects."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Iterable, Mapping
from typing import Any, TypeVar

from .identifiers import ProjectId, RepositoryId

logger = logging.getLogger(__name__)

MAX_CONCURRENT_REPOSITORIES = 10

_T = TypeVar("_T")


async def _gather_limited(awaitables: Iterable[Awaitable[_T]], limit: int) -> list[_T]:
    """Await everything with at most ``limit`` running at once."""
    semaphore = asyncio.Semaphore(limit)

    async def run(awaitable: Awaitable[_T]) -> _T:
        async with semaphore:
            return await awaitable

    return list(await asyncio.gather(*(run(item) for item in awaitables)))


def _repository_batches(batches) -> list[tuple[RepositoryId, list]]:
    """Accept either a mapping or an iterable of (repository, numbers) pairs."""
    items = batches.items() if isinstance(batches, Mapping) else batches
    return [(repo_id, list(numbers)) for repo_id, numbers in items]


def _collect(results) -> dict:
    """Drop failed entries and key the rest by repository, in repository order."""
    return dict(sorted((entry for entry in results if entry is not None), key=lambda e: e[0]))


class MultiResourceFetcher:
    """Fetches many resources from a GitHub client, several repositories at a time.

    The client is any object offering the awaitable methods
    ``fetch_multiple_issues_by_numbers``, ``fetch_multiple_pull_requests_by_numbers``,
    ``fetch_all_project_resources``, ``fetch_repository``, ``fetch_project``,
    ``fetch_pull_request_diff`` and ``fetch_pull_request_files``.
    """

    def __init__(self, github_client: Any) -> None:
        self.github_client = github_client

    async def fetch_issues(self, issue_ids_of_repositories) -> dict[RepositoryId, list]:
        """Fetch issues per repository; repositories that fail are left out."""

        async def fetch_one(repo_id: RepositoryId, numbers: list):
            try:
                issues = await self.github_client.fetch_multiple_issues_by_numbers(
                    repo_id, numbers
                )
            except Exception as exc:
                logger.warning("Failed to fetch issues from %s: %s", repo_id, exc)
                return None
            return repo_id, list(issues)

        results = await _gather_limited(
            (fetch_one(repo_id, numbers) for repo_id, numbers in
             _repository_batches(issue_ids_of_repositories)),
            MAX_CONCURRENT_REPOSITORIES,
        )
        return _collect(results)

    async def fetch_pull_requests(self, pr_numbers_of_repositories) -> dict[RepositoryId, list]:
        """Fetch pull requests per repository; repositories that fail are left out."""

        async def fetch_one(repo_id: RepositoryId, numbers: list):
            try:
                prs = await self.github_client.fetch_multiple_pull_requests_by_numbers(
                    repo_id, numbers
                )
            except Exception as exc:
                logger.warning("Failed to fetch PRs from %s: %s", repo_id, exc)
                return None
            return repo_id, list(prs)

        results = await _gather_limited(
            (fetch_one(repo_id, numbers) for repo_id, numbers in
             _repository_batches(pr_numbers_of_repositories)),
            MAX_CONCURRENT_REPOSITORIES,
        )
        return _collect(results)

    async def fetch_project_resources(self, project_id: ProjectId) -> list:
        """Fetch every resource of a project."""
        return await self.github_client.fetch_all_project_resources(project_id)

    async def fetch_repository(self, repository_id: RepositoryId):
        """Fetch one repository."""
        return await self.github_client.fetch_repository(repository_id)

    async def fetch_project(self, project_id: ProjectId):
        """Fetch one project."""
        return await self.github_client.fetch_project(project_id)

    async def _fetch_per_pull_request(self, batches, method_name: str, what: str) -> dict:
        """Fetch one item per PR, sequentially within a repository, skipping failures."""

        async def fetch_repo(repo_id: RepositoryId, numbers: list):
            fetch = getattr(self.github_client, method_name)
            collected = []
            for number in numbers:
                try:
                    item = await fetch(repo_id, number)
                except Exception as exc:
                    logger.warning(
                        "Failed to fetch %s for PR #%s from %s: %s", what, number, repo_id, exc
                    )
                    continue
                collected.append((number, item))
            return repo_id, collected

        results = await _gather_limited(
            (fetch_repo(repo_id, numbers) for repo_id, numbers in _repository_batches(batches)),
            MAX_CONCURRENT_REPOSITORIES,
        )
        return _collect(results)

    async def fetch_pull_request_diffs(
        self, pr_numbers_of_repositories
    ) -> dict[RepositoryId, list[tuple[Any, str]]]:
        """Fetch the diff of every PR, keyed by repository as (number, diff) pairs."""
        return await self._fetch_per_pull_request(
            pr_numbers_of_repositories, "fetch_pull_request_diff", "diff"
        )

    async def fetch_pull_request_files_stats(
        self, pr_numbers_of_repositories
    ) -> dict[RepositoryId, list[tuple[Any, list]]]:
        """Fetch changed-file statistics of every PR, keyed by repository."""
        results = await self._fetch_per_pull_request(
            pr_numbers_of_repositories, "fetch_pull_request_files", "file stats"
        )
        return {
            repo_id: [(number, list(files)) for number, files in entries]
            for repo_id, entries in results.items()
        }