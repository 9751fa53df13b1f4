[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "lowprof"
version = "0.1.0"
description = "Low-overhead event profiler that writes Chrome trace JSON files"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "profiler",
    "tracing",
    "chrome-tracing",
    "trace-events",
    "instrumentation",
    "performance",
]
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
    "Topic :: Software Development :: Debuggers",
    "Topic :: System :: Benchmark",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
lowprof-example = "lowprof.example:main"

[tool.hatch.build.targets.wheel]
packages = ["lowprof"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]
