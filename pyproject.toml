[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "fuzzcore"
version = "0.4.1"
description = "Core building blocks of a coverage-guided fuzzer: corpus scheduling, dictionaries, command lines and data-flow reports."
requires-python = ">=3.10"
dependencies = []
keywords = ["fuzzing", "fuzzer", "corpus", "testing", "coverage"]
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
    "Topic :: Software Development :: Testing",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["fuzzcore"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
