import asyncio

import pytest

from ghinsight.fetch import MAX_CONCURRENT_REPOSITORIES, MultiResourceFetcher
from ghinsight.identifiers import ProjectId, ProjectType, RepositoryId

REPO_A = RepositoryId("alpha", "one")
REPO_B = RepositoryId("beta", "two")
REPO_BAD = RepositoryId("broken", "repo")


class FakeClient:
    def __init__(self):
        self.calls = []
        self.active = 0
        self.max_active = 0

    async def _track(self):
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        await asyncio.sleep(0.01)
        self.active -= 1

    async def fetch_multiple_issues_by_numbers(self, repo_id, numbers):
        self.calls.append(("issues", repo_id, list(numbers)))
        await self._track()
        if repo_id == REPO_BAD:
            raise RuntimeError("boom")
        return [f"issue-{repo_id}-{n}" for n in numbers]

    async def fetch_multiple_pull_requests_by_numbers(self, repo_id, numbers):
        self.calls.append(("prs", repo_id, list(numbers)))
        if repo_id == REPO_BAD:
            raise RuntimeError("boom")
        return [f"pr-{n}" for n in numbers]

    async def fetch_pull_request_diff(self, repo_id, number):
        if number == 13:
            raise RuntimeError("missing")
        return f"diff-{repo_id}-{number}"

    async def fetch_pull_request_files(self, repo_id, number):
        if number == 13:
            raise RuntimeError("missing")
        return [f"file-{number}.py"]

    async def fetch_all_project_resources(self, project_id):
        return [f"resource-of-{project_id.number}"]

    async def fetch_repository(self, repository_id):
        if repository_id == REPO_BAD:
            raise LookupError("no repo")
        return {"id": repository_id}

    async def fetch_project(self, project_id):
        return {"project": project_id}


@pytest.mark.asyncio
async def test_fetch_issues_groups_by_repository_in_order():
    client = FakeClient()
    fetcher = MultiResourceFetcher(client)
    result = await fetcher.fetch_issues([(REPO_B, [3]), (REPO_A, [1, 2])])
    assert list(result) == [REPO_A, REPO_B]
    assert result[REPO_A] == [f"issue-{REPO_A}-1", f"issue-{REPO_A}-2"]
    assert result[REPO_B] == [f"issue-{REPO_B}-3"]


@pytest.mark.asyncio
async def test_fetch_issues_drops_failed_repository():
    fetcher = MultiResourceFetcher(FakeClient())
    result = await fetcher.fetch_issues([(REPO_A, [1]), (REPO_BAD, [7])])
    assert set(result) == {REPO_A}


@pytest.mark.asyncio
async def test_fetch_issues_accepts_mapping():
    fetcher = MultiResourceFetcher(FakeClient())
    result = await fetcher.fetch_issues({REPO_A: [5]})
    assert result == {REPO_A: [f"issue-{REPO_A}-5"]}


@pytest.mark.asyncio
async def test_fetch_issues_limits_concurrency():
    client = FakeClient()
    fetcher = MultiResourceFetcher(client)
    batches = [(RepositoryId("owner", f"repo{i}"), [1]) for i in range(25)]
    result = await fetcher.fetch_issues(batches)
    assert len(result) == 25
    assert client.max_active <= MAX_CONCURRENT_REPOSITORIES
    assert client.max_active > 1


@pytest.mark.asyncio
async def test_fetch_pull_requests_passes_numbers_and_drops_failures():
    client = FakeClient()
    fetcher = MultiResourceFetcher(client)
    result = await fetcher.fetch_pull_requests([(REPO_A, [4, 5]), (REPO_BAD, [1])])
    assert result == {REPO_A: ["pr-4", "pr-5"]}
    assert ("prs", REPO_A, [4, 5]) in client.calls


@pytest.mark.asyncio
async def test_fetch_pull_request_diffs_skips_failed_pull_requests():
    fetcher = MultiResourceFetcher(FakeClient())
    result = await fetcher.fetch_pull_request_diffs([(REPO_A, [1, 13, 2]), (REPO_B, [13])])
    assert result[REPO_A] == [(1, f"diff-{REPO_A}-1"), (2, f"diff-{REPO_A}-2")]
    assert result[REPO_B] == []


@pytest.mark.asyncio
async def test_fetch_pull_request_files_stats_skips_failed_pull_requests():
    fetcher = MultiResourceFetcher(FakeClient())
    result = await fetcher.fetch_pull_request_files_stats([(REPO_A, [13, 8])])
    assert result == {REPO_A: [(8, ["file-8.py"])]}


@pytest.mark.asyncio
async def test_single_resource_fetches_delegate_to_client():
    fetcher = MultiResourceFetcher(FakeClient())
    project_id = ProjectId("someone", 3, ProjectType.USER)
    assert await fetcher.fetch_repository(REPO_A) == {"id": REPO_A}
    assert await fetcher.fetch_project(project_id) == {"project": project_id}
    assert await fetcher.fetch_project_resources(project_id) == [
        f"resource-of-{project_id.number}"
    ]


@pytest.mark.asyncio
async def test_fetch_repository_propagates_errors():
    fetcher = MultiResourceFetcher(FakeClient())
    with pytest.raises(LookupError):
        await fetcher.fetch_repository(REPO_BAD)