import pytest

from ghinsight.identifiers import RepositoryId
from ghinsight.search import (
    Pager,
    SearchCursor,
    SearchCursorByRepository,
    SearchQuery,
    SearchResult,
    SearchService,
)

REPO_A = RepositoryId("alpha", "one")
REPO_B = RepositoryId("beta", "two")
REPO_C = RepositoryId("gamma", "three")
REPO_BAD = RepositoryId("broken", "repo")


class FakeClient:
    def __init__(self, pagers):
        self.pagers = pagers
        self.calls = []

    async def search_resources(self, repo_id, query, per_page, cursor):
        self.calls.append((repo_id, query, per_page, cursor))
        if repo_id == REPO_BAD:
            raise RuntimeError("search failed")
        return SearchResult(
            repository_id=repo_id,
            issue_or_pull_requests=[f"{repo_id}:{query}"],
            next_pager=self.pagers.get(repo_id),
        )


@pytest.mark.asyncio
async def test_results_are_merged_and_cursors_kept_only_with_next_page():
    client = FakeClient(
        {
            REPO_A: Pager(True, SearchCursor("next-a")),
            REPO_B: Pager(False, SearchCursor("unused")),
        }
    )
    service = SearchService(client)
    query = SearchQuery("state:open")
    result = await service.search_resources([REPO_A, REPO_B, REPO_C], query, None, None)
    assert sorted(result.results) == sorted(
        [f"{REPO_A}:{query}", f"{REPO_B}:{query}", f"{REPO_C}:{query}"]
    )
    assert result.cursors == [SearchCursorByRepository(SearchCursor("next-a"), REPO_A)]


@pytest.mark.asyncio
async def test_missing_next_cursor_becomes_empty_cursor():
    client = FakeClient({REPO_A: Pager(True, None)})
    result = await SearchService(client).search_resources(
        [REPO_A], SearchQuery("bug"), None, None
    )
    assert result.cursors == [SearchCursorByRepository(SearchCursor(""), REPO_A)]


@pytest.mark.asyncio
async def test_cursors_and_per_page_are_passed_per_repository():
    client = FakeClient({})
    cursors = [SearchCursorByRepository("cursor-b", REPO_B)]
    await SearchService(client).search_resources(
        [REPO_A, REPO_B], SearchQuery("q"), 20, cursors
    )
    by_repo = {repo: (per_page, cursor) for repo, _, per_page, cursor in client.calls}
    assert by_repo[REPO_A] == (20, None)
    assert by_repo[REPO_B] == (20, SearchCursor("cursor-b"))


@pytest.mark.asyncio
async def test_failed_repository_is_left_out():
    client = FakeClient({REPO_BAD: Pager(True, SearchCursor("x"))})
    result = await SearchService(client).search_resources(
        [REPO_A, REPO_BAD], SearchQuery("q"), None, None
    )
    assert result.results == [f"{REPO_A}:q"]
    assert result.cursors == []


@pytest.mark.asyncio
async def test_no_repositories_gives_empty_result():
    client = FakeClient({})
    result = await SearchService(client).search_resources([], SearchQuery("q"), None, None)
    assert result.results == []
    assert result.cursors == []
    assert client.calls == []


def test_cursor_by_repository_wraps_plain_string():
    entry = SearchCursorByRepository("abc", REPO_A)
    assert entry.cursor == SearchCursor("abc")
    assert str(entry.cursor) == "abc"