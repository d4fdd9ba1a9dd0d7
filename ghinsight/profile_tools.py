"""Profile operations addressed by plain names and URLs, backed by a profile directory."""

from __future__ import annotations

from pathlib import Path

from .identifiers import (
    GroupName,
    ProfileName,
    ProjectId,
    RepositoryBranchPair,
    RepositoryId,
)
from .profile_service import (
    ProfileInfo,
    ProfileService,
    ProfileServiceError,
    RepositoryBranchGroup,
    default_profile_config_dir,
)


class ProfileToolError(Exception):
    """A profile operation failed; the message says which step and why."""


def _open_service(data_dir) -> ProfileService:
    """Open the profile service on ``data_dir`` or on the default directory."""
    if data_dir is None:
        try:
            data_dir = default_profile_config_dir()
        except ProfileServiceError as exc:
            raise ProfileToolError(f"Failed to get config directory: {exc}") from exc
    try:
        return ProfileService(Path(data_dir))
    except ProfileServiceError as exc:
        raise ProfileToolError(f"Failed to create profile service: {exc}") from exc


def _profile_name(name) -> ProfileName:
    return name if isinstance(name, ProfileName) else ProfileName(str(name))


def _group_name(name) -> GroupName:
    return name if isinstance(name, GroupName) else GroupName(str(name))


def _parse_pairs(specifiers, what: str) -> list[RepositoryBranchPair]:
    try:
        return RepositoryBranchPair.try_from_specifiers(list(specifiers))
    except (ValueError, TypeError) as exc:
        raise ProfileToolError(f"Failed to parse {what}: {exc}") from exc


def _fail(action: str, exc: Exception) -> ProfileToolError:
    return ProfileToolError(f"Failed to {action}: {exc}")


def create_profile(profile_name, description=None, data_dir=None) -> None:
    """Create a new, empty profile."""
    service = _open_service(data_dir)
    try:
        service.create_profile(_profile_name(profile_name), description)
    except ProfileServiceError as exc:
        raise _fail("create profile", exc) from exc


def list_profiles(data_dir=None) -> list[ProfileName]:
    """Return the names of all profiles."""
    return _open_service(data_dir).list_profiles()


def delete_profile(profile_name, data_dir=None) -> None:
    """Delete a profile other than the default one."""
    service = _open_service(data_dir)
    try:
        service.delete_profile(_profile_name(profile_name))
    except ProfileServiceError as exc:
        raise _fail("delete profile", exc) from exc


def register_repository(profile_name, repository_id: RepositoryId, data_dir=None) -> None:
    """Add a repository to a profile, creating the profile if needed."""
    service = _open_service(data_dir)
    try:
        service.register_repository(_profile_name(profile_name), repository_id)
    except ProfileServiceError as exc:
        raise _fail("register repository", exc) from exc


def unregister_repository(profile_name, repository_id: RepositoryId, data_dir=None) -> None:
    """Remove a repository from a profile."""
    service = _open_service(data_dir)
    try:
        service.unregister_repository(_profile_name(profile_name), repository_id)
    except ProfileServiceError as exc:
        raise _fail("unregister repository", exc) from exc


def list_repositories(profile_name, data_dir=None) -> list[str]:
    """Return the URLs of a profile's repositories."""
    service = _open_service(data_dir)
    try:
        repositories = service.list_repositories(_profile_name(profile_name))
    except ProfileServiceError as exc:
        raise _fail("list repositories", exc) from exc
    return [repository_id.url() for repository_id in repositories]


def register_project(profile_name, project_id: ProjectId, data_dir=None) -> None:
    """Add a project to a profile, creating the profile if needed."""
    service = _open_service(data_dir)
    try:
        service.register_project(_profile_name(profile_name), project_id)
    except ProfileServiceError as exc:
        raise _fail("register project", exc) from exc


def unregister_project(profile_name, project_id: ProjectId, data_dir=None) -> None:
    """Remove a project from a profile."""
    service = _open_service(data_dir)
    try:
        service.unregister_project(_profile_name(profile_name), project_id)
    except ProfileServiceError as exc:
        raise _fail("unregister project", exc) from exc


def list_projects(profile_name, data_dir=None) -> list[str]:
    """Return the URLs of a profile's projects."""
    service = _open_service(data_dir)
    try:
        projects = service.list_projects(_profile_name(profile_name))
    except ProfileServiceError as exc:
        raise _fail("list projects", exc) from exc
    return [project_id.url() for project_id in projects]


def get_profile_info(profile_name, data_dir=None) -> ProfileInfo:
    """Return a profile with its metadata."""
    service = _open_service(data_dir)
    try:
        return service.get_profile_info(_profile_name(profile_name))
    except ProfileServiceError as exc:
        raise _fail("get profile info", exc) from exc


def register_repository_branch_group(
    profile_name, group_name=None, pairs=(), description=None, data_dir=None
) -> str:
    """Register a group of ``repo_url@branch`` pairs; return the final group name."""
    service = _open_service(data_dir)
    parsed_pairs = _parse_pairs(pairs, "repository branch pairs")
    try:
        final_name = service.register_repository_branch_group(
            _profile_name(profile_name),
            None if group_name is None else _group_name(group_name),
            parsed_pairs,
            description,
        )
    except ProfileServiceError as exc:
        raise _fail("register repository branch group", exc) from exc
    return final_name.value


def unregister_repository_branch_group(
    profile_name, group_name, data_dir=None
) -> RepositoryBranchGroup:
    """Remove a group and return it."""
    service = _open_service(data_dir)
    try:
        return service.unregister_repository_branch_group(
            _profile_name(profile_name), _group_name(group_name)
        )
    except ProfileServiceError as exc:
        raise _fail("unregister repository branch group", exc) from exc


def add_branch_to_branch_group(
    profile_name, group_name, branch_specifiers, data_dir=None
) -> None:
    """Add each ``repo_url@branch`` specifier to an existing group, in order."""
    service = _open_service(data_dir)
    parsed = _parse_pairs(branch_specifiers, "branch specifiers")
    profile = _profile_name(profile_name)
    group = _group_name(group_name)
    for pair in parsed:
        try:
            service.add_pair_to_group(profile, group, pair)
        except ProfileServiceError as exc:
            raise _fail("add branch to group", exc) from exc


def remove_branch_from_branch_group(
    profile_name, group_name, branch_specifiers, data_dir=None
) -> None:
    """Remove each ``repo_url@branch`` specifier from a group, in order."""
    service = _open_service(data_dir)
    parsed = _parse_pairs(branch_specifiers, "branch specifiers")
    profile = _profile_name(profile_name)
    group = _group_name(group_name)
    for pair in parsed:
        try:
            service.remove_pair_from_group(profile, group, pair)
        except ProfileServiceError as exc:
            raise _fail("remove branch from group", exc) from exc


def rename_repository_branch_group(profile_name, old_name, new_name, data_dir=None) -> None:
    """Rename a group."""
    service = _open_service(data_dir)
    try:
        service.rename_repository_branch_group(
            _profile_name(profile_name), _group_name(old_name), _group_name(new_name)
        )
    except ProfileServiceError as exc:
        raise _fail("rename repository branch group", exc) from exc


def list_repository_branch_groups(profile_name, data_dir=None) -> list[GroupName]:
    """Return the names of a profile's groups."""
    service = _open_service(data_dir)
    try:
        return service.list_repository_branch_groups(_profile_name(profile_name))
    except ProfileServiceError as exc:
        raise _fail("list repository branch groups", exc) from exc


def get_repository_branch_group(profile_name, group_name, data_dir=None) -> RepositoryBranchGroup:
    """Return one group."""
    service = _open_service(data_dir)
    try:
        return service.get_repository_branch_group(
            _profile_name(profile_name), _group_name(group_name)
        )
    except ProfileServiceError as exc:
        raise _fail("get repository branch group", exc) from exc


def cleanup_repository_branch_groups(profile_name, days: int, data_dir=None) -> list[str]:
    """Remove groups older than ``days`` days; return the removed names."""
    service = _open_service(data_dir)
    try:
        removed = service.remove_groups_older_than(_profile_name(profile_name), days)
    except ProfileServiceError as exc:
        raise _fail("cleanup repository branch groups", exc) from exc
    return [name.value for name in removed]


def list_repository_branch_groups_with_details(
    profile_name, data_dir=None
) -> list[RepositoryBranchGroup]:
    """Return every group of a profile in full."""
    service = _open_service(data_dir)
    profile = _profile_name(profile_name)
    try:
        names = service.list_repository_branch_groups(profile)
    except ProfileServiceError as exc:
        raise _fail("list repository branch groups", exc) from exc
    groups = []
    for name in names:
        try:
            groups.append(service.get_repository_branch_group(profile, name))
        except ProfileServiceError as exc:
            raise _fail("get repository branch group", exc) from exc
    return groups