[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tinylsm"
version = "0.1.0"
description = "Building blocks of a small log-structured merge-tree key-value store with a Redis-style command layer"
requires-python = ">=3.11"
keywords = ["lsm", "key-value", "storage", "block", "lru-k", "cache", "merge-iterator", "redis", "resp"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Database :: Database Engines/Servers",
]
dependencies = [
    "tomli-w",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["tinylsm"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
