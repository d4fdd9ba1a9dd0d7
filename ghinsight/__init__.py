"""Profiles of GitHub repositories, projects and branch groups, with batch fetching through a supplied client."""

__version__ = "0.1.3"