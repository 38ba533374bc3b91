from __future__ import annotations

from pathlib import Path

import pytest

from reciperun.errors import SubprocessFailedError
from reciperun.runner import ProcessRunner
from reciperun.ui.console import Console

ORIGINAL_JUSTFILE = r"""# To use this file, install Just: cargo install just

frb_bin := "frb_codegen/target/debug/flutter_rust_bridge_codegen"
frb_pure := "frb_example/pure_dart"
frb_flutter := "frb_example/with_flutter"
line_length := "120"

default: gen-bridge lint

alias b := build
build:
    cd frb_codegen && cargo build

alias g := gen-bridge
gen-bridge: build
    {{frb_bin}} -r {{frb_pure}}/rust/src/api.rs \
                -d {{frb_pure}}/dart/lib/bridge_generated.dart
    {{frb_bin}} -r {{frb_flutter}}/rust/src/api.rs \
                -d {{frb_flutter}}/lib/bridge_generated.dart

alias l := lint
lint:
    dart format --fix -l {{line_length}} {{frb_pure}}/dart/lib/bridge_generated.dart
    dart format --fix -l {{line_length}} {{frb_flutter}}/lib/bridge_generated.dart

# vim:expandtab:tabstop=4:shiftwidth=4
"""


class FakeRunner(ProcessRunner):
    """Records every command; fails the ones listed in `fail` (argv prefix -> status)."""

    def __init__(self, fail: dict[tuple[str, ...], int] | None = None):
        self.fail = fail or {}
        self.calls: list[tuple[list[str], str | None]] = []

    def execute(self, argv, cwd=None) -> int:
        self.calls.append((list(argv), cwd))
        for prefix, status in self.fail.items():
            if tuple(argv[: len(prefix)]) == prefix:
                raise SubprocessFailedError(argv=tuple(argv), status=status)
        return 0


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def console() -> Console:
    return Console(debug=True)


@pytest.fixture
def bridge_workdir(tmp_path: Path) -> Path:
    (tmp_path / "frb_codegen").mkdir()
    return tmp_path


@pytest.fixture
def original_justfile(tmp_path: Path) -> Path:
    path = tmp_path / "justfile"
    path.write_text(ORIGINAL_JUSTFILE, encoding="utf-8")
    return path
