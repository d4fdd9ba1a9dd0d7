"""Value types identifying profiles, groups, repositories, branches and projects."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from urllib.parse import urlsplit

GITHUB_BASE_URL = "https://github.com"
_GITHUB_HOSTS = frozenset({"github.com", "www.github.com"})


@dataclass(frozen=True, order=True)
class _Name:
    """A non-container string value with a distinct type."""

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str):
            raise TypeError(
                f"{type(self).__name__} expects a str, got {type(self.value).__name__}"
            )

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, order=True)
class ProfileName(_Name):
    """Name of a profile; defaults to ``default``."""

    value: str = "default"


class GroupName(_Name):
    """Name of a repository branch group."""


class Owner(_Name):
    """A GitHub user or organisation login."""


class RepositoryName(_Name):
    """The name part of a GitHub repository."""


class Branch(_Name):
    """A git branch name."""


def _github_path_segments(url: str, kind: str) -> list[str]:
    """Validate a GitHub URL and return its non-empty path segments."""
    if not isinstance(url, str):
        raise TypeError(f"{kind} URL must be a str")
    text = url.strip()
    if not text:
        raise ValueError(f"Empty {kind} URL")
    if "://" not in text:
        text = "https://" + text
    parts = urlsplit(text)
    if parts.scheme not in ("http", "https"):
        raise ValueError(f"Unsupported scheme in {kind} URL: {url!r}")
    host = (parts.hostname or "").lower()
    if host not in _GITHUB_HOSTS:
        raise ValueError(f"Not a GitHub {kind} URL: {url!r}")
    return [segment for segment in parts.path.split("/") if segment]


@dataclass(frozen=True, order=True)
class RepositoryId:
    """A repository identified by owner and name."""

    owner: Owner
    repository_name: RepositoryName

    def __post_init__(self) -> None:
        if isinstance(self.owner, str):
            object.__setattr__(self, "owner", Owner(self.owner))
        if isinstance(self.repository_name, str):
            object.__setattr__(
                self, "repository_name", RepositoryName(self.repository_name)
            )

    def url(self) -> str:
        """Return the repository's web URL."""
        return f"{GITHUB_BASE_URL}/{self.owner}/{self.repository_name}"

    @classmethod
    def parse_url(cls, url: str) -> RepositoryId:
        """Parse ``https://github.com/<owner>/<repo>`` into a repository id."""
        segments = _github_path_segments(url, "repository")
        if len(segments) < 2:
            raise ValueError(f"Repository URL must name an owner and a repository: {url!r}")
        owner, name = segments[0], segments[1]
        if name.endswith(".git"):
            name = name[: -len(".git")]
        if not name:
            raise ValueError(f"Repository URL has an empty repository name: {url!r}")
        return cls(Owner(owner), RepositoryName(name))

    def __str__(self) -> str:
        return f"{self.owner}/{self.repository_name}"


@dataclass(frozen=True, order=True)
class RepositoryBranchPair:
    """A repository paired with one of its branches."""

    repository_id: RepositoryId
    branch: Branch

    def __post_init__(self) -> None:
        if isinstance(self.branch, str):
            object.__setattr__(self, "branch", Branch(self.branch))

    @classmethod
    def parse_specifier(cls, specifier: str) -> RepositoryBranchPair:
        """Parse a ``repository_url@branch`` specifier."""
        repo_part, sep, branch = specifier.strip().rpartition("@")
        if not sep:
            raise ValueError(
                f"Invalid branch specifier {specifier!r}: expected 'repository_url@branch'"
            )
        branch = branch.strip()
        if not branch:
            raise ValueError(f"Invalid branch specifier {specifier!r}: empty branch name")
        return cls(RepositoryId.parse_url(repo_part), Branch(branch))

    @classmethod
    def try_from_specifiers(cls, specifiers) -> list[RepositoryBranchPair]:
        """Parse every specifier, failing on the first invalid one."""
        return [cls.parse_specifier(specifier) for specifier in specifiers]

    def __str__(self) -> str:
        return f"{self.repository_id.url()}@{self.branch}"


class ProjectType(enum.Enum):
    """Owner kind of a GitHub project; the value is its URL path segment."""

    USER = "users"
    ORGANIZATION = "orgs"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, order=True)
class ProjectNumber:
    """The positive number of a GitHub project."""

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeError("ProjectNumber expects an int")
        if self.value <= 0:
            raise ValueError(f"Project number must be positive, got {self.value}")

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class ProjectId:
    """A GitHub project identified by owner, number and owner kind."""

    owner: Owner
    number: ProjectNumber
    project_type: ProjectType

    def __post_init__(self) -> None:
        if isinstance(self.owner, str):
            object.__setattr__(self, "owner", Owner(self.owner))
        if isinstance(self.number, int):
            object.__setattr__(self, "number", ProjectNumber(self.number))
        if isinstance(self.project_type, str):
            object.__setattr__(self, "project_type", ProjectType(self.project_type))

    def url(self) -> str:
        """Return the project's web URL."""
        return f"{GITHUB_BASE_URL}/{self.project_type.value}/{self.owner}/projects/{self.number}"

    @classmethod
    def parse_url(cls, url: str) -> ProjectId:
        """Parse ``https://github.com/(users|orgs)/<owner>/projects/<n>``."""
        segments = _github_path_segments(url, "project")
        if len(segments) < 4 or segments[2] != "projects":
            raise ValueError(f"Invalid project URL: {url!r}")
        kind, owner, _, number = segments[:4]
        try:
            project_type = ProjectType(kind)
        except ValueError:
            raise ValueError(
                f"Invalid project URL {url!r}: expected 'users' or 'orgs', got {kind!r}"
            ) from None
        if not number.isdigit():
            raise ValueError(f"Invalid project number in URL {url!r}: {number!r}")
        return cls(Owner(owner), ProjectNumber(int(number)), project_type)

    def __str__(self) -> str:
        return self.url()