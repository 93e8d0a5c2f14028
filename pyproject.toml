[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "concurrentkit"
version = "0.1.0"
description = "Thread-safe containers: a LIFO stack, a FIFO queue, tagged linked-list nodes and fixed-size hash buckets with power-of-two bucket arrays."
requires-python = ">=3.10"
dependencies = []
keywords = ["concurrency", "thread-safe", "stack", "queue", "linked list", "hash bucket", "containers"]
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
    "Topic :: Software Development :: Libraries",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["concurrentkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
