[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "lumber"
version = "0.1.0"
description = "Classify, compact and deduplicate raw log lines into canonical events using embeddings and a built-in taxonomy."
requires-python = ">=3.11"
dependencies = []
keywords = [
    "logging",
    "logs",
    "classification",
    "embeddings",
    "wordpiece",
    "compaction",
    "deduplication",
    "ndjson",
    "webhook",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Logging",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["lumber"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
warn_redundant_casts = true
