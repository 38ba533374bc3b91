# justfile.py
"""
Reader for the small justfile subset reciperun understands:

    # doc comment for the next recipe
    name := "value"
    alias b := build
    build: dep1 dep2
        cd dir && tool {{name}} \
            --more-args
        @quiet-command

The first recipe in the file is the default one. Anything else (settings,
exports, recipe parameters, attributes, expressions) is rejected.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .dsl import RecipeBook, RecipeBookBuilder, sh
from .errors import JustfileSyntaxError, TemplateSyntaxError
from .model import Command

_NAME = r"[A-Za-z_][A-Za-z0-9_-]*"
_re_alias = re.compile(rf"^alias\s+({_NAME})\s*:=\s*({_NAME})\s*$")
_re_variable = re.compile(rf"^({_NAME})\s*:=\s*(.+?)\s*$")
_re_header = re.compile(rf"^(@?)({_NAME})\s*:(?!=)(.*)$")
_re_name = re.compile(rf"^{_NAME}$")

_UNSUPPORTED_KEYWORDS = ("set", "export", "import", "mod")
_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", '"': '"', "\\": "\\"}


@dataclass
class _RecipeDef:
    name: str
    needs: List[str]
    quiet: bool = False
    doc: Optional[str] = None
    body: List[Tuple[int, str]] = field(default_factory=list)
    aliases: List[str] = field(default_factory=list)


def _is_indented(line: str) -> bool:
    return line[:1] in (" ", "\t")


def _string_literal(raw: str, path: str, lineno: int) -> str:
    if len(raw) >= 2 and raw[0] == raw[-1] == "'":
        return raw[1:-1]
    if len(raw) >= 2 and raw[0] == raw[-1] == '"':
        out: list[str] = []
        body = raw[1:-1]
        i = 0
        while i < len(body):
            ch = body[i]
            if ch == "\\":
                nxt = body[i + 1] if i + 1 < len(body) else ""
                if nxt not in _ESCAPES:
                    raise JustfileSyntaxError(path, lineno, f"unknown escape sequence '\\{nxt}'")
                out.append(_ESCAPES[nxt])
                i += 2
                continue
            out.append(ch)
            i += 1
        return "".join(out)
    raise JustfileSyntaxError(path, lineno, f"expected a quoted string, got: {raw}")


def _join_continuations(body: List[Tuple[int, str]], path: str) -> List[Tuple[int, str]]:
    """Merge lines ending in a backslash with the line after them."""
    lines: List[Tuple[int, str]] = []
    pending: Optional[Tuple[int, str]] = None
    for lineno, text in body:
        if pending is not None:
            start, acc = pending
            text = f"{acc} {text.strip()}"
            lineno = start
        if text.endswith("\\"):
            pending = (lineno, text[:-1].rstrip())
            continue
        pending = None
        lines.append((lineno, text))
    if pending is not None:
        raise JustfileSyntaxError(path, pending[0], "line continuation at end of recipe")
    return lines


def _commands(definition: _RecipeDef, path: str) -> List[Command]:
    commands: List[Command] = []
    for lineno, text in _join_continuations(definition.body, path):
        text = text.strip()
        if text.startswith("#"):
            continue
        quiet = definition.quiet
        if text.startswith("@"):
            quiet = True
            text = text[1:].lstrip()
        if not text:
            continue
        try:
            commands.extend(sh(text, quiet=quiet))
        except TemplateSyntaxError as e:
            raise JustfileSyntaxError(path, lineno, e.message) from None
    return commands


def parse_justfile(text: str, path: str = "justfile") -> RecipeBook:
    variables: Dict[str, Tuple[int, str]] = {}
    aliases: List[Tuple[int, str, str]] = []
    recipes: List[_RecipeDef] = []

    doc: Optional[str] = None
    current: Optional[_RecipeDef] = None

    for lineno, line in enumerate(text.splitlines(), start=1):
        line = line.rstrip()

        if current is not None:
            if _is_indented(line):
                current.body.append((lineno, line))
                continue
            if not line:
                # blank lines do not end a recipe body by themselves
                continue
            current = None

        if not line:
            doc = None
            continue
        if _is_indented(line):
            raise JustfileSyntaxError(path, lineno, "unexpected indentation outside a recipe")
        if line.startswith("#"):
            doc = line[1:].strip() or None
            continue

        word = line.split()[0]
        if word in _UNSUPPORTED_KEYWORDS or line.startswith("["):
            raise JustfileSyntaxError(path, lineno, f"unsupported justfile syntax: {line}")

        m = _re_alias.match(line)
        if m:
            aliases.append((lineno, m.group(1), m.group(2)))
            doc = None
            continue

        m = _re_variable.match(line)
        if m:
            name = m.group(1)
            if name in variables:
                raise JustfileSyntaxError(path, lineno, f"variable '{name}' is defined more than once")
            variables[name] = (lineno, _string_literal(m.group(2), path, lineno))
            doc = None
            continue

        m = _re_header.match(line)
        if m:
            needs = m.group(3).split()
            for dep in needs:
                if not _re_name.match(dep):
                    raise JustfileSyntaxError(
                        path, lineno, f"unsupported dependency syntax '{dep}' in recipe '{m.group(2)}'"
                    )
            current = _RecipeDef(
                name=m.group(2),
                needs=needs,
                quiet=bool(m.group(1)),
                doc=doc,
            )
            recipes.append(current)
            doc = None
            continue

        raise JustfileSyntaxError(path, lineno, f"unsupported justfile syntax: {line}")

    by_name = {r.name: r for r in recipes}
    for lineno, alias, target in aliases:
        if target not in by_name:
            raise JustfileSyntaxError(path, lineno, f"alias '{alias}' refers to unknown recipe '{target}'")
        by_name[target].aliases.append(alias)

    builder = RecipeBookBuilder(source=path)
    for name, (_lineno, value) in variables.items():
        builder.define(name, value)
    for r in recipes:
        builder.add_recipe(
            r.name,
            aliases=r.aliases,
            dependencies=r.needs,
            commands=_commands(r, path),
            doc=r.doc,
        )
    if recipes:
        builder.default(recipes[0].name)
    return builder.build()


def load_justfile(path: str | Path) -> RecipeBook:
    p = Path(path).expanduser()
    if not p.exists():
        raise FileNotFoundError(f"Justfile not found: {p}")
    return parse_justfile(p.read_text(encoding="utf-8"), path=str(p))
