"""Tool entry points that wrap profile operations into text results."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from . import profile_tools
from .identifiers import ProfileName


@dataclass(frozen=True)
class ToolResult:
    """The text a tool hands back, and whether it reports an error."""

    text: str
    is_error: bool = False


def _to_json(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False)


def _success(text: str) -> ToolResult:
    return ToolResult(text=text, is_error=False)


def _current_profile(profile_name) -> ProfileName:
    if profile_name is None:
        return ProfileName()
    return profile_name if isinstance(profile_name, ProfileName) else ProfileName(str(profile_name))


def list_project_urls_in_current_profile(profile_name=None, data_dir=None) -> ToolResult:
    """Return the profile's project URLs as a JSON array."""
    urls = profile_tools.list_projects(_current_profile(profile_name), data_dir)
    return _success(_to_json(urls))


def list_repository_urls_in_current_profile(profile_name=None, data_dir=None) -> ToolResult:
    """Return the profile's repository URLs as a JSON array."""
    urls = profile_tools.list_repositories(_current_profile(profile_name), data_dir)
    return _success(_to_json(urls))


def register_repository_branch_group(
    profile_name, group_name=None, pairs=(), description=None, data_dir=None
) -> ToolResult:
    """Register a branch group; the result is the final group name as a JSON string."""
    final_name = profile_tools.register_repository_branch_group(
        profile_name, group_name, pairs, description, data_dir
    )
    return _success(_to_json(final_name))


def unregister_repository_branch_group(profile_name, group_name, data_dir=None) -> ToolResult:
    """Remove a branch group; the result is the removed group as JSON."""
    removed = profile_tools.unregister_repository_branch_group(profile_name, group_name, data_dir)
    return _success(_to_json(removed.to_dict()))


def add_branch_to_branch_group(
    profile_name, group_name, branch_specifiers, data_dir=None
) -> ToolResult:
    """Add ``repo_url@branch`` specifiers to a group."""
    profile_tools.add_branch_to_branch_group(
        profile_name, group_name, branch_specifiers, data_dir
    )
    return _success("Branches added successfully")


def remove_branch_from_branch_group(
    profile_name, group_name, branch_specifiers, data_dir=None
) -> ToolResult:
    """Remove ``repo_url@branch`` specifiers from a group."""
    profile_tools.remove_branch_from_branch_group(
        profile_name, group_name, branch_specifiers, data_dir
    )
    return _success("Branches removed successfully")


def rename_repository_branch_group(profile_name, old_name, new_name, data_dir=None) -> ToolResult:
    """Rename a branch group."""
    profile_tools.rename_repository_branch_group(profile_name, old_name, new_name, data_dir)
    return _success("Group renamed successfully")


def cleanup_repository_branch_groups(profile_name, days, data_dir=None) -> ToolResult:
    """Remove groups older than ``days`` days; the result lists removed names as JSON."""
    removed = profile_tools.cleanup_repository_branch_groups(profile_name, days, data_dir)
    return _success(_to_json(removed))