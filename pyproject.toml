[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tfdevtools"
version = "0.1.0"
description = "Developer workflow commands for Go repositories: formatting, linting, test summaries, coverage reports, tool installation and releases."
requires-python = ">=3.10"
dependencies = []
keywords = [
    "go",
    "gofmt",
    "go vet",
    "coverage",
    "asdf",
    "release",
    "semver",
    "developer tools",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Build Tools",
    "Topic :: Software Development :: Quality Assurance",
    "Topic :: Software Development :: Testing",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
tfdev-format = "tfdevtools.formatter:main"
tfdev-lint = "tfdevtools.lint:main"
tfdev-unit-test = "tfdevtools.testsummary:unit_main"
tfdev-functional-test = "tfdevtools.testsummary:functional_main"
tfdev-install-tools = "tfdevtools.tools:main"
tfdev-release = "tfdevtools.release:main"
tfdev-coverage = "tfdevtools.coverage:main"
tfdev-coverage-json = "tfdevtools.coverage_json:main"

[tool.hatch.build.targets.wheel]
packages = ["tfdevtools"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
