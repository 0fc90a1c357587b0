[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "avtool"
version = "0.1.0"
description = "Helpers for stacked-branch Git workflows: a git command wrapper, a GitHub GraphQL client and small user-state utilities"
requires-python = ">=3.10"
dependencies = []
keywords = ["git", "github", "graphql", "stacked-prs", "rebase", "cherry-pick", "pull-request"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Version Control :: Git",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["avtool"]

[tool.hatch.build.targets.sdist]
include = ["avtool", "tests", "pyproject.toml"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
