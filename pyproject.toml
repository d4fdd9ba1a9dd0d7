[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ghinsight"
version = "0.1.3"
description = "Profiles of GitHub repositories, projects and branch groups, with batch fetching through a supplied GitHub client"
requires-python = ">=3.10"
dependencies = [
    "toml",
]
keywords = [
    "github",
    "issues",
    "pull-requests",
    "projects",
    "profiles",
    "branches",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Framework :: AsyncIO",
    "Topic :: Software Development :: Version Control :: Git",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[tool.hatch.build.targets.wheel]
packages = ["ghinsight"]

[tool.hatch.build.targets.sdist]
include = [
    "ghinsight",
    "tests",
    "pyproject.toml",
    "README.md",
]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
