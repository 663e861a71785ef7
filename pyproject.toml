[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sqlapi"
version = "0.1.0"
description = "Building blocks for a small SQL-over-HTTP server: a B+ tree id index, per-table locks, API error codes and minimal HTTP/1.1 request and response handling"
requires-python = ">=3.10"
dependencies = []
keywords = ["sql", "b+tree", "index", "http", "server", "locking"]
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
    "Topic :: Database :: Database Engines/Servers",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["sqlapi"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
