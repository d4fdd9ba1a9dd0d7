# ghinsight

`ghinsight` keeps track of the GitHub repositories, projects and branch
groups you care about, stored as profiles on disk, and fans requests for
issues, pull requests, diffs, repositories, projects and searches out over
many repositories at once through a GitHub client object you supply.

## Modules

- `ghinsight.identifiers`: value types with URL parsing and formatting:
  `ProfileName` (defaults to `default`), `GroupName`, `Owner`,
  `RepositoryName`, `Branch`, `RepositoryId`, `RepositoryBranchPair`,
  `ProjectType` (`users` or `orgs`), `ProjectNumber` and `ProjectId`.
  A branch is written as `repository_url@branch_name`.
- `ghinsight.profile_service`: `ProfileService` stores each profile as a
  TOML file `<profile>.toml` in a data directory. A profile (`ProfileInfo`)
  holds repositories, projects and `RepositoryBranchGroup`s: named
  collections of repository/branch pairs with an optional description and
  creation/update timestamps. A `default` profile is always created and
  cannot be deleted.
- `ghinsight.profile_tools`: the same operations addressed by plain names,
  URLs and `repo_url@branch` specifiers, each opening the profile directory
  afresh. Failures are raised as `ProfileToolError` with a message naming the
  step that failed.
- `ghinsight.tool_results`: profile and branch-group operations wrapped into
  `ToolResult(text, is_error)` values, with JSON text where data is returned.
- `ghinsight.fetch`: `MultiResourceFetcher`, which batches issue, pull
  request, diff and changed-file requests per repository.
- `ghinsight.search`: `SearchService`, plus `SearchQuery`, `SearchCursor`,
  `SearchCursorByRepository`, `Pager`, `SearchResult` and
  `SearchResultWithCursors`.

## Installation

```
pip install ghinsight
```

For running the test suite:

```
pip install "ghinsight[test]"
pytest
```

## Working with profiles

```python
from pathlib import Path

from ghinsight.identifiers import ProfileName, RepositoryBranchPair, RepositoryId
from ghinsight.profile_service import ProfileService

service = ProfileService(Path("/tmp/ghinsight-profiles"))
default = ProfileName("default")

repo = RepositoryId.parse_url("https://github.com/example-owner/example-repo")
service.register_repository(default, repo)
print(service.list_repositories(default))

pairs = RepositoryBranchPair.try_from_specifiers([
    "https://github.com/example-owner/example-repo@main",
    "https://github.com/example-owner/example-repo@develop",
])
group_name = service.register_repository_branch_group(default, None, pairs, None)
print(service.get_repository_branch_group(default, group_name))

service.rename_repository_branch_group(default, group_name, "release-branches")

# Drop groups created 30 or more days ago; returns the removed names.
removed = service.remove_groups_older_than(default, 30)
```

When no group name is given, one is generated as `yyyymmdd-` followed by
eight hex digits. Registering a repository, project or group in a profile
that does not exist creates that profile. Profile names must be 1 to 100
bytes long and may not contain any of `/ \ : * ? " < > |`.

Errors are raised as subclasses of `ProfileServiceError`:
`ProfileAlreadyExistsError`, `ProfileNotFoundError`,
`RepositoryAlreadyExistsError`, `RepositoryNotFoundError`,
`ProjectAlreadyExistsError`, `ProjectNotFoundError`,
`GroupAlreadyExistsError`, `GroupNotFoundError`, `PairAlreadyExistsError`,
`PairNotFoundError`, `InvalidGroupNameError`, `InvalidProfileNameError`,
`ProfileIOError` and `ProfileSerializationError`.

`default_profile_config_dir()` returns the per-user location for profile
files (`~/.local/share/github-insight/profiles` on Linux and similar,
`~/Library/Application Support/github-insight/profiles` on macOS,
`~/AppData/Roaming/github-insight/profiles` on Windows). The functions in
`ghinsight.profile_tools` and `ghinsight.tool_results` use it whenever
`data_dir` is `None`.

## Tool results

```python
from ghinsight import tool_results

result = tool_results.register_repository_branch_group(
    "default", "feature-x", ["https://github.com/example-owner/example-repo@feature-x"],
    None, "/tmp/ghinsight-profiles",
)
print(result.text)  # "feature-x" as a JSON string

print(tool_results.list_repository_urls_in_current_profile(None, "/tmp/ghinsight-profiles").text)
```

Adding, removing and renaming return the confirmation texts
`Branches added successfully`, `Branches removed successfully` and
`Group renamed successfully`; unregistering returns the removed group as
JSON, and cleanup returns the removed group names as a JSON array.

## Fetching and searching

`MultiResourceFetcher(client)` and `SearchService(client)` work with any
object offering these awaitable methods:

- `fetch_multiple_issues_by_numbers(repo_id, numbers)`
- `fetch_multiple_pull_requests_by_numbers(repo_id, numbers)`
- `fetch_pull_request_diff(repo_id, number)`
- `fetch_pull_request_files(repo_id, number)`
- `fetch_all_project_resources(project_id)`
- `fetch_repository(repo_id)`
- `fetch_project(project_id)`
- `search_resources(repo_id, query, per_page, cursor)`, returning a
  `SearchResult`

Up to ten repositories are handled at once. Batch methods accept a mapping
or an iterable of `(RepositoryId, numbers)` pairs and return a dict keyed by
repository in sorted order. A repository whose request fails is logged and
left out; for diffs and changed files, pull requests within a repository are
fetched one after another and a failing one is skipped.
`SearchService.search_resources` merges the results of all repositories and
returns a cursor for each repository whose pager reports a next page.

```python
import asyncio

from ghinsight.fetch import MultiResourceFetcher
from ghinsight.identifiers import RepositoryId

async def main(client):
    fetcher = MultiResourceFetcher(client)
    repo = RepositoryId.parse_url("https://github.com/example-owner/example-repo")
    return await fetcher.fetch_issues({repo: [1, 2, 3]})
```

## What it does not do

`ghinsight` contains no GitHub API client: it does not talk to GitHub
itself, and fetching and searching need a client object as described above.
There is no command-line program and no server; the package is used as a
library.