"""Profiles that organise repositories, projects and branch groups, persisted as TOML."""

from __future__ import annotations

import copy
import sys
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from pathlib import Path

import toml

from .identifiers import (
    Branch,
    GroupName,
    ProfileName,
    ProjectId,
    RepositoryBranchPair,
    RepositoryId,
)

_INVALID_PROFILE_CHARS = frozenset('/\\:*?"<>|')
_MAX_PROFILE_NAME_LENGTH = 100


class ProfileServiceError(Exception):
    """Base class for profile service failures."""

    template = "{}"

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(self.template.format(detail))


class ProfileAlreadyExistsError(ProfileServiceError):
    template = "Profile '{}' already exists"


class ProfileNotFoundError(ProfileServiceError):
    template = "Profile '{}' not found"


class RepositoryAlreadyExistsError(ProfileServiceError):
    template = "Repository '{}' already exists in profile"


class RepositoryNotFoundError(ProfileServiceError):
    template = "Repository '{}' not found in profile"


class ProjectAlreadyExistsError(ProfileServiceError):
    template = "Project '{}' already exists in profile"


class ProjectNotFoundError(ProfileServiceError):
    template = "Project '{}' not found in profile"


class GroupAlreadyExistsError(ProfileServiceError):
    template = "Repository branch group '{}' already exists"


class GroupNotFoundError(ProfileServiceError):
    template = "Repository branch group '{}' not found"


class PairAlreadyExistsError(ProfileServiceError):
    template = "Repository branch pair '{}' already exists in group"


class PairNotFoundError(ProfileServiceError):
    template = "Repository branch pair '{}' not found in group"


class InvalidGroupNameError(ProfileServiceError):
    template = "Invalid group name: '{}'"


class InvalidProfileNameError(ProfileServiceError):
    template = "Invalid profile name: '{}'"


class ProfileIOError(ProfileServiceError):
    template = "IO error: {}"


class ProfileSerializationError(ProfileServiceError):
    template = "Serialization error: {}"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _generate_group_name() -> GroupName:
    return GroupName(f"{_now():%Y%m%d}-{uuid.uuid4().hex[:8]}")


def _as_profile_name(name) -> ProfileName:
    return ProfileName(name) if isinstance(name, str) else name


def _as_group_name(name) -> GroupName:
    return GroupName(name) if isinstance(name, str) else name


def _pair_from_text(text: str) -> RepositoryBranchPair:
    # Repository URLs never contain '@', so the first one separates the branch.
    repo_url, sep, branch = text.partition("@")
    if not sep or not branch:
        raise ValueError(f"Invalid stored branch pair: {text!r}")
    return RepositoryBranchPair(RepositoryId.parse_url(repo_url), Branch(branch))


@dataclass
class RepositoryBranchGroup:
    """A named collection of repository/branch pairs."""

    name: GroupName | None = None
    pairs: list = field(default_factory=list)
    description: str | None = None
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        if self.name is None:
            self.name = _generate_group_name()
        else:
            self.name = _as_group_name(self.name)
        self.pairs = list(self.pairs)
        if self.updated_at is None:
            self.updated_at = self.created_at

    def add_pair(self, pair: RepositoryBranchPair) -> None:
        """Add a pair unless it is already a member."""
        if pair not in self.pairs:
            self.pairs.append(pair)
            self.updated_at = _now()

    def remove_pair(self, pair: RepositoryBranchPair) -> None:
        """Remove a pair if it is a member."""
        if pair in self.pairs:
            self.pairs.remove(pair)
            self.updated_at = _now()

    def to_dict(self) -> dict:
        """Return a plain, TOML- and JSON-friendly representation."""
        data: dict = {"name": self.name.value}
        if self.description is not None:
            data["description"] = self.description
        data["pairs"] = [str(pair) for pair in self.pairs]
        data["created_at"] = self.created_at.isoformat()
        data["updated_at"] = self.updated_at.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: dict) -> RepositoryBranchGroup:
        """Build a group from the form produced by ``to_dict``."""
        created_at = datetime.fromisoformat(data["created_at"])
        return cls(
            name=GroupName(data["name"]),
            pairs=[_pair_from_text(text) for text in data.get("pairs", [])],
            description=data.get("description"),
            created_at=created_at,
            updated_at=datetime.fromisoformat(data.get("updated_at", data["created_at"])),
        )


@dataclass
class ProfileInfo:
    """A profile's repositories, projects and branch groups with timestamps."""

    name: ProfileName
    description: str | None = None
    repositories: list = field(default_factory=list)
    projects: list = field(default_factory=list)
    repository_branch_groups: list = field(default_factory=list)
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        self.name = _as_profile_name(self.name)
        if self.updated_at is None:
            self.updated_at = self.created_at

    def touch(self) -> None:
        """Mark the profile as modified now."""
        self.updated_at = _now()

    def to_dict(self) -> dict:
        """Return a plain, TOML- and JSON-friendly representation."""
        data: dict = {"name": self.name.value}
        if self.description is not None:
            data["description"] = self.description
        data["created_at"] = self.created_at.isoformat()
        data["updated_at"] = self.updated_at.isoformat()
        data["repositories"] = [repo.url() for repo in self.repositories]
        data["projects"] = [project.url() for project in self.projects]
        data["repository_branch_groups"] = [
            group.to_dict() for group in self.repository_branch_groups
        ]
        return data

    @classmethod
    def from_dict(cls, data: dict) -> ProfileInfo:
        """Build a profile from the form produced by ``to_dict``."""
        return cls(
            name=ProfileName(data["name"]),
            description=data.get("description"),
            repositories=[RepositoryId.parse_url(url) for url in data.get("repositories", [])],
            projects=[ProjectId.parse_url(url) for url in data.get("projects", [])],
            repository_branch_groups=[
                RepositoryBranchGroup.from_dict(group)
                for group in data.get("repository_branch_groups", [])
            ],
            created_at=datetime.fromisoformat(data["created_at"]),
            updated_at=datetime.fromisoformat(data.get("updated_at", data["created_at"])),
        )


class ProfileService:
    """Manages profiles held in memory and stored as one TOML file each."""

    def __init__(self, data_dir) -> None:
        self.data_dir = Path(data_dir)
        self._profiles: dict[ProfileName, ProfileInfo] = {}
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ProfileIOError(str(exc)) from exc
        self._load_all_profiles()
        if ProfileName() not in self._profiles:
            self.create_profile(ProfileName(), None)

    def create_profile(self, name, description=None) -> None:
        """Create and persist a new empty profile."""
        name = _as_profile_name(name)
        self._validate_profile_name(name)
        if name in self._profiles:
            raise ProfileAlreadyExistsError(str(name))
        profile = ProfileInfo(name, description)
        self._profiles[name] = profile
        self._save_profile(profile)

    def register_repository(self, profile_name, repository_id: RepositoryId) -> None:
        """Add a repository, creating the profile if needed."""
        profile_name = _as_profile_name(profile_name)
        profile = self._get_or_create_profile(profile_name)
        if repository_id in profile.repositories:
            raise RepositoryAlreadyExistsError(str(repository_id))
        profile.repositories.append(repository_id)
        self._touch_and_save(profile_name)

    def unregister_repository(self, profile_name, repository_id: RepositoryId) -> None:
        """Remove a repository from an existing profile."""
        profile_name = _as_profile_name(profile_name)
        profile = self._require(profile_name)
        if repository_id not in profile.repositories:
            raise RepositoryNotFoundError(str(repository_id))
        profile.repositories.remove(repository_id)
        self._touch_and_save(profile_name)

    def register_project(self, profile_name, project_id: ProjectId) -> None:
        """Add a project, creating the profile if needed."""
        profile_name = _as_profile_name(profile_name)
        profile = self._get_or_create_profile(profile_name)
        if project_id in profile.projects:
            raise ProjectAlreadyExistsError(str(project_id))
        profile.projects.append(project_id)
        self._touch_and_save(profile_name)

    def unregister_project(self, profile_name, project_id: ProjectId) -> None:
        """Remove a project from an existing profile."""
        profile_name = _as_profile_name(profile_name)
        profile = self._require(profile_name)
        if project_id not in profile.projects:
            raise ProjectNotFoundError(str(project_id))
        profile.projects.remove(project_id)
        self._touch_and_save(profile_name)

    def list_repositories(self, profile_name) -> list[RepositoryId]:
        """Return the repositories of a profile."""
        return list(self._require(_as_profile_name(profile_name)).repositories)

    def list_projects(self, profile_name) -> list[ProjectId]:
        """Return the projects of a profile."""
        return list(self._require(_as_profile_name(profile_name)).projects)

    def register_repository_branch_group(
        self, profile_name, group_name=None, pairs=(), description=None
    ) -> GroupName:
        """Add a branch group, generating its name if none is given; return the name."""
        profile_name = _as_profile_name(profile_name)
        profile = self._get_or_create_profile(profile_name)
        group = RepositoryBranchGroup(
            name=None if group_name is None else _as_group_name(group_name),
            pairs=list(pairs),
            description=description,
        )
        if self._find_group(profile, group.name) is not None:
            raise GroupAlreadyExistsError(str(group.name))
        profile.repository_branch_groups.append(group)
        self._touch_and_save(profile_name)
        return group.name

    def unregister_repository_branch_group(self, profile_name, group_name) -> RepositoryBranchGroup:
        """Remove a branch group and return it."""
        profile_name = _as_profile_name(profile_name)
        group_name = _as_group_name(group_name)
        profile = self._require(profile_name)
        group = self._find_group(profile, group_name)
        if group is None:
            raise GroupNotFoundError(str(group_name))
        profile.repository_branch_groups.remove(group)
        self._touch_and_save(profile_name)
        return group

    def add_pair_to_group(self, profile_name, group_name, pair: RepositoryBranchPair) -> None:
        """Add a repository/branch pair to an existing group."""
        profile_name = _as_profile_name(profile_name)
        group = self._require_group(profile_name, _as_group_name(group_name))
        if pair in group.pairs:
            raise PairAlreadyExistsError(str(pair))
        group.add_pair(pair)
        self._touch_and_save(profile_name)

    def remove_pair_from_group(self, profile_name, group_name, pair: RepositoryBranchPair) -> None:
        """Remove a repository/branch pair from an existing group."""
        profile_name = _as_profile_name(profile_name)
        group = self._require_group(profile_name, _as_group_name(group_name))
        if pair not in group.pairs:
            raise PairNotFoundError(str(pair))
        group.remove_pair(pair)
        self._touch_and_save(profile_name)

    def rename_repository_branch_group(self, profile_name, old_name, new_name) -> None:
        """Rename a group; fails if the old name is missing or the new one is taken."""
        profile_name = _as_profile_name(profile_name)
        old_name = _as_group_name(old_name)
        new_name = _as_group_name(new_name)
        profile = self._require(profile_name)
        group = self._find_group(profile, old_name)
        if group is None:
            raise InvalidGroupNameError(f"Group '{old_name}' not found")
        if self._find_group(profile, new_name) is not None:
            raise InvalidGroupNameError(f"Group '{new_name}' already exists")
        group.name = new_name
        group.updated_at = _now()
        self._touch_and_save(profile_name)

    def list_repository_branch_groups(self, profile_name) -> list[GroupName]:
        """Return the names of a profile's groups."""
        profile = self._require(_as_profile_name(profile_name))
        return [group.name for group in profile.repository_branch_groups]

    def get_repository_branch_group(self, profile_name, group_name) -> RepositoryBranchGroup:
        """Return a copy of one group."""
        group = self._require_group(_as_profile_name(profile_name), _as_group_name(group_name))
        return copy.deepcopy(group)

    def remove_groups_older_than(self, profile_name, days: int) -> list[GroupName]:
        """Remove groups created at least ``days`` days ago; return their names."""
        profile_name = _as_profile_name(profile_name)
        profile = self._require(profile_name)
        cutoff = _now() - timedelta(days=days)
        removed = [g for g in profile.repository_branch_groups if g.created_at <= cutoff]
        if removed:
            profile.repository_branch_groups = [
                g for g in profile.repository_branch_groups if g.created_at > cutoff
            ]
            self._touch_and_save(profile_name)
        return [group.name for group in removed]

    def list_profiles(self) -> list[ProfileName]:
        """Return every known profile name, sorted."""
        return sorted(self._profiles)

    def get_profile_info(self, profile_name) -> ProfileInfo:
        """Return the profile as stored on disk, or in memory if it has no file."""
        return self._load_profile(_as_profile_name(profile_name))

    def delete_profile(self, profile_name) -> None:
        """Delete a profile and its file; the default profile cannot be deleted."""
        profile_name = _as_profile_name(profile_name)
        if profile_name == ProfileName():
            raise InvalidProfileNameError("Cannot delete default profile")
        if self._profiles.pop(profile_name, None) is None:
            raise ProfileNotFoundError(str(profile_name))
        path = self._profile_path(profile_name)
        if path.exists():
            try:
                path.unlink()
            except OSError as exc:
                raise ProfileIOError(str(exc)) from exc

    def _require(self, profile_name: ProfileName) -> ProfileInfo:
        try:
            return self._profiles[profile_name]
        except KeyError:
            raise ProfileNotFoundError(str(profile_name)) from None

    def _require_group(self, profile_name: ProfileName, group_name: GroupName):
        group = self._find_group(self._require(profile_name), group_name)
        if group is None:
            raise GroupNotFoundError(str(group_name))
        return group

    @staticmethod
    def _find_group(profile: ProfileInfo, group_name: GroupName):
        return next(
            (g for g in profile.repository_branch_groups if g.name == group_name), None
        )

    def _get_or_create_profile(self, profile_name: ProfileName) -> ProfileInfo:
        if profile_name not in self._profiles:
            self.create_profile(profile_name, None)
        return self._profiles[profile_name]

    @staticmethod
    def _validate_profile_name(name: ProfileName) -> None:
        value = name.value
        if not value or len(value.encode("utf-8")) > _MAX_PROFILE_NAME_LENGTH:
            raise InvalidProfileNameError("Profile name must be 1-100 characters")
        if any(ch in _INVALID_PROFILE_CHARS for ch in value):
            raise InvalidProfileNameError("Profile name contains invalid characters")

    def _profile_path(self, profile_name: ProfileName) -> Path:
        return self.data_dir / f"{profile_name}.toml"

    def _save_profile(self, profile: ProfileInfo) -> None:
        try:
            content = toml.dumps(profile.to_dict())
        except (TypeError, ValueError) as exc:
            raise ProfileSerializationError(str(exc)) from exc
        try:
            self._profile_path(profile.name).write_text(content, encoding="utf-8")
        except OSError as exc:
            raise ProfileIOError(str(exc)) from exc

    def _load_profile(self, profile_name: ProfileName) -> ProfileInfo:
        path = self._profile_path(profile_name)
        if not path.exists():
            return copy.deepcopy(self._require(profile_name))
        try:
            content = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ProfileIOError(str(exc)) from exc
        try:
            return ProfileInfo.from_dict(toml.loads(content))
        except (toml.TomlDecodeError, KeyError, TypeError, ValueError) as exc:
            raise ProfileSerializationError(str(exc)) from exc

    def _load_all_profiles(self) -> None:
        if not self.data_dir.exists():
            return
        try:
            paths = sorted(self.data_dir.glob("*.toml"))
        except OSError as exc:
            raise ProfileIOError(str(exc)) from exc
        for path in paths:
            name = ProfileName(path.stem)
            try:
                self._profiles[name] = self._load_profile(name)
            except ProfileServiceError:
                continue

    def _touch_and_save(self, profile_name: ProfileName) -> None:
        profile = self._require(profile_name)
        profile.touch()
        self._save_profile(profile)


def default_profile_config_dir() -> Path:
    """Return the platform's default directory for profile files."""
    try:
        home = Path.home()
    except RuntimeError as exc:
        raise ProfileIOError("Unable to determine home directory") from exc
    if sys.platform == "darwin":
        return home / "Library" / "Application Support" / "github-insight" / "profiles"
    if sys.platform.startswith("win"):
        return home / "AppData" / "Roaming" / "github-insight" / "profiles"
    return home / ".local" / "share" / "github-insight" / "profiles"