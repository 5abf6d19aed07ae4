# tfdevtools

Command-line helpers for the everyday chores of a Go repository. They
check and fix formatting, run `go vet`, and run tests with a pass/fail
summary. They also produce coverage reports, install the tools pinned in
`.tool-versions` through asdf, and cut a tagged release.

Run every command from the root of the repository it works on. The
commands call the usual tools (`go`, `gofmt`, `git`, `asdf`) found on
`PATH`. `tfdev-format` and `tfdev-lint` first source `~/.asdf/asdf.sh`
and copy its environment into their own. If that fails they print a
warning and carry on. `tfdev-release` only adds `~/.asdf/bin` and
`~/.asdf/shims` to `PATH`, and only when `asdf` is not already found.

Each command returns exit status 0 on success and 1 on an error.

## Installation

```
pip install tfdevtools
```

The package has no dependencies outside the standard library.

## Commands

### Formatting

```
tfdev-format --ignore=bin
```

The command asks `gofmt -l .` which files need formatting. It lists
them, leaving out anything inside the comma-separated directories given
to `--ignore`. If any file is left on the list, it runs `gofmt -w .` and
reports how many files it fixed.

### Linting

```
tfdev-lint --ignore=bin --skip-prefix=example.com/project/scripts
```

The command runs two checks and then prints a summary.

1. `gofmt -l .` reports every file that needs formatting, except files
   in an ignored directory.
2. `go vet` runs on every package from `go list ./...`. Packages that
   start with `--skip-prefix`, or lie in an ignored directory, are left
   out. It then runs on each `.go` file under `scripts/`.

The command sets `GOGC=off` while it runs. It exits with status 1 if
either check fails.

### Tests with a summary

```
tfdev-unit-test "./tests/unit/..."
tfdev-functional-test "./tests/functional/..."
```

`tfdev-unit-test` takes one argument, which may hold several test paths
separated by spaces. It does three things:

1. clears the Go test cache;
2. runs the tests verbosely;
3. runs them again with `go test -json` and prints how many tests
   passed, failed and were skipped.

`tfdev-functional-test` does these steps in order:

1. reads `VERSION`;
2. builds `./cmd/tftest` into `bin/tftest`, stamping the version into
   `<module>/cmd/tftest.Version`, where `<module>` comes from `go list -m`;
3. runs the tests with coverage of `./pkg/...` into
   `tmp/coverage/functional.out`;
4. prints the coverage per function;
5. prints the same pass/fail/skip summary.

Failing tests do not stop the summary from being printed.

### Coverage reports

```
tfdev-coverage scripts/coverage-groups.json
tfdev-coverage-json scripts/coverage-groups.json
```

The groups file is a JSON list of objects. It must hold at least one
group:

```json
[
  {
    "name": "Unit Tests",
    "emoji": "🧪",
    "outputFile": "unit.out",
    "testPath": "./tests/unit/...",
    "coverPkg": "./pkg/..."
  }
]
```

For each group, both commands do the following:

* run `go test -covermode=atomic` with a profile written to
  `tmp/coverage/<outputFile>`. `-coverpkg` is added only when `coverPkg`
  is set.
* write the `go tool cover -func` report beside the profile. Its name is
  `outputFile` with `.out` replaced by `-summary.log`.

Both commands then merge all profiles into `tmp/coverage/coverage.out`
and write its report to `tmp/coverage/coverage-summary.log`.

* `tfdev-coverage` shows the test output and each report as it goes. It
  ends with the total line of every group and a combined total. The
  merged profile uses the `atomic` mode header.
* `tfdev-coverage-json` runs quietly and uses the `set` mode header. It
  prints one JSON document with:
  * one entry per group, keyed by the lower-cased first word of the
    group's name. The entry holds `name`, `total` and `files`, a list of
    `{"file", "coverage"}` entries, or `null` when there were none.
  * a `combined_total`.

### Installing tools

```
tfdev-install-tools --asdf-version=v0.15.0
tfdev-install-tools --update
```

If `asdf` is not on `PATH`, the command clones asdf at the requested
version into `~/.asdf`. A version above v0.15.0 is replaced by v0.15.0,
with a warning. It then adds a plugin for each tool named in
`.tool-versions` and runs `asdf install` and `asdf reshim`.

With `--update`, or inside a dev container (`DEVCONTAINER=true`), the
command only makes sure the plugins exist and runs `asdf install` and
`asdf reshim`. It needs asdf to be installed already.

### Releasing

```
tfdev-release            # bump chosen from commit messages
tfdev-release minor      # or major / patch explicitly
```

The command reads `VERSION` (`vX.Y.Z` or `X.Y.Z`) and bumps it. It
writes the new version back as `vX.Y.Z`, commits it, creates an
annotated tag and pushes both.

Without an argument, the bump type comes from the commit subjects since
the last tag, or from all commits if there is no tag:

* a breaking marker such as `feat!:`, any `!:` or a leading
  `BREAKING CHANGE:` means major;
* a leading `feat:` or `feature:` means minor;
* anything else means patch.

If the new tag already exists, the release stops before anything is
written.

## Using the functions directly

The pieces behind the commands can be imported, for example:

```python
from tfdevtools.release import Version, determine_from_commits
from tfdevtools.testsummary import summarize_events

bump = determine_from_commits(["feat: add coverage report"])   # "minor"
print(Version.parse("v1.2.3").bump(bump).tag())                 # v1.3.0

with open("test-events.jsonl") as events:
    summary = summarize_events(events)
print(summary.render("Unit Test Summary"))
```

Other useful pieces:

* In `tfdevtools.tools`:
  * `compare_versions` compares dotted version strings.
  * `read_tool_plugins` returns the plugin names in `.tool-versions`.
* In `tfdevtools.coverage`:
  * `load_groups` reads a groups file into `CoverageGroup` objects.
  * `merge_coverage_profiles` merges the groups' profiles.
  * `total_line` picks out the total line of a report.
* In `tfdevtools.coverage_json`:
  * `parse_coverage_output` parses a `go tool cover -func` report into
    `FileCoverage` entries and a total.
  * `build_report` assembles the JSON report as a dictionary.
* In `tfdevtools.shell`:
  * `should_ignore_file` and `parse_ignore_list` handle the `--ignore`
    rules.

Errors from external tools are raised as `tfdevtools.shell.ToolError`.

## What the package does not do

The package holds no Go test framework and no `tftest` command of its
own. `tfdev-functional-test` builds that command from the repository it
is run in, so the repository must provide `./cmd/tftest`. The commands
do no formatting, vetting or testing themselves: they need the Go
toolchain, git and asdf on the machine.

## Development

```
pip install -e ".[test]"
pytest
```