[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "archlab"
version = "0.1.0"
description = "Computer-systems lab tools: a cache simulator, blocked matrix transposes, bit-level integer and float routines, a segregated-list heap allocator and a small job-control shell"
requires-python = ">=3.10"
keywords = ["cache", "simulator", "transpose", "allocator", "malloc", "shell", "job-control", "bits", "education"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Education",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Education",
]
dependencies = []

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
archlab-csim = "archlab.cachesim:main"
archlab-tsh = "archlab.shell:main"

[tool.hatch.build.targets.wheel]
packages = ["archlab"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
