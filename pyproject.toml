[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "timerd"
version = "0.1.0"
description = "Alarm timer scheduling with batching, wakeup handling and per-uid proxying"
requires-python = ">=3.10"
dependencies = []
keywords = ["timer", "alarm", "scheduler", "batching", "wakeup"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Operating System",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["timerd"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
