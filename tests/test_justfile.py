from __future__ import annotations

import pytest

from reciperun.bridge import bridge_book
from reciperun.errors import DuplicateRecipeError, JustfileSyntaxError
from reciperun.justfile import load_justfile, parse_justfile
from reciperun.model import Command

from conftest import ORIGINAL_JUSTFILE


def test_original_justfile_matches_builtin_book():
    parsed = parse_justfile(ORIGINAL_JUSTFILE)
    builtin = bridge_book()

    assert parsed.default_target() == "default"
    assert sorted(parsed.graph.names()) == sorted(builtin.graph.names())
    for name in builtin.graph.names():
        ours, theirs = parsed.graph.resolve(name), builtin.graph.resolve(name)
        assert ours.commands == theirs.commands, name
        assert ours.needs == theirs.needs, name
        assert ours.aliases == theirs.aliases, name
    for name in builtin.variables.names():
        assert parsed.variables.resolve(name) == builtin.variables.resolve(name)


def test_continuation_lines_are_joined():
    parsed = parse_justfile(ORIGINAL_JUSTFILE)
    first = parsed.graph.resolve("gen-bridge").commands[0]
    assert first.run == (
        "{{frb_bin}} -r {{frb_pure}}/rust/src/api.rs"
        " -d {{frb_pure}}/dart/lib/bridge_generated.dart"
    )


def test_first_recipe_is_default():
    parsed = parse_justfile("b:\n    echo b\n\ndefault:\n    echo d\n")
    assert parsed.default_target() == "b"


def test_doc_comment_and_quiet_prefix():
    parsed = parse_justfile(
        "# say hello\n"
        "hello:\n"
        "    @echo hi\n"
        "    echo loud\n"
        "\n"
        "@quiet:\n"
        "    echo shh\n"
    )
    hello = parsed.graph.resolve("hello")
    assert hello.doc == "say hello"
    assert hello.commands == (Command(run="echo hi", quiet=True), Command(run="echo loud"))
    assert parsed.graph.resolve("quiet").commands == (Command(run="echo shh", quiet=True),)


def test_blank_line_inside_recipe_body():
    parsed = parse_justfile("a:\n    echo 1\n\n    echo 2\nb:\n    echo 3\n")
    assert [c.run for c in parsed.graph.resolve("a").commands] == ["echo 1", "echo 2"]


def test_string_literals():
    parsed = parse_justfile("a := 'raw\\n'\nb := \"tab\\there\"\nr:\n    echo\n")
    assert parsed.variables.resolve("a") == "raw\\n"
    assert parsed.variables.resolve("b") == "tab\there"


def test_quoted_shell_operators_are_plain_arguments():
    parsed = parse_justfile("a:\n    echo 'hi > out' \"x | y\"\n")
    assert [c.run for c in parsed.graph.resolve("a").commands] == ["echo 'hi > out' \"x | y\""]


@pytest.mark.parametrize(
    "text, line",
    [
        ('set shell := ["bash", "-c"]\n', 1),
        ("build target:\n    echo {{target}}\n", 1),
        ("x := y\n", 1),
        ('x := "a"\nx := "b"\n', 2),
        ("alias q := nowhere\n", 1),
        ("    echo stray\n", 1),
        ("a:\n    echo \\\n", 2),
        ("a:\n    make && && make\n", 2),
        ("a:\n    echo ok\n    echo hi > out\n", 3),
        ("a:\n    cat log \\\n      | wc -l\n", 2),
        ('x := "bad \\q"\n', 1),
    ],
)
def test_syntax_errors_report_line(text, line):
    with pytest.raises(JustfileSyntaxError) as ei:
        parse_justfile(text, path="jf")
    assert ei.value.line == line
    assert str(ei.value).startswith(f"jf:{line}:")


def test_alias_collision_is_rejected():
    with pytest.raises(DuplicateRecipeError):
        parse_justfile("alias a := b\na:\n    echo a\nb:\n    echo b\n")


def test_load_justfile(original_justfile):
    loaded = load_justfile(original_justfile)
    assert loaded.graph.resolve("l").name == "lint"


def test_load_justfile_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_justfile(tmp_path / "justfile")
