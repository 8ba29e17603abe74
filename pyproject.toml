[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "udformat"
version = "0.1.0"
description = "Read, write, inspect and validate files in the Untitled Data Format: datasets of typed, shaped, optionally compressed tables."
requires-python = ">=3.10"
dependencies = []
keywords = ["udf", "binary format", "dataset", "serialization", "compression", "npy"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: File Formats",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
udf = "udformat.cli.main:main"

[tool.hatch.build.targets.wheel]
packages = ["udformat"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
