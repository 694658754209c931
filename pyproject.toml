[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "minimint"
version = "0.1.0"
description = "Building blocks of a federated e-cash mint: consensus encoding, amounts, database batches, an in-memory database and module interfaces"
requires-python = ">=3.10"
dependencies = []
keywords = ["ecash", "federation", "consensus", "encoding", "database", "mint"]
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
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[tool.hatch.build.targets.wheel]
packages = ["minimint"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
