[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "newsgrouper"
version = "0.1.0"
description = "Groups incoming news items into stories by comparing text embeddings"
requires-python = ">=3.10"
keywords = ["news", "clustering", "embeddings", "aggregator", "grouping"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Text Processing :: Indexing",
]
dependencies = [
    "requests",
    "redis",
    "sqlalchemy",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
newsgrouper = "newsgrouper.app:main"

[tool.hatch.build.targets.wheel]
packages = ["newsgrouper"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
