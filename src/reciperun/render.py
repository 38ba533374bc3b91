# render.py
"""
Command template rendering.

Templates use `{{name}}` placeholders (whitespace inside the braces is
allowed). `{{{{` renders a literal `{{`.
"""
from __future__ import annotations

import posixpath
import re
import shlex
from typing import List, Optional

from .errors import TemplateSyntaxError, UndefinedVariableError
from .model import Command, Variables

_ESCAPED_OPEN = "{{{{"
_PLACEHOLDER = re.compile(r"\{\{\s*([A-Za-z_][A-Za-z0-9_-]*)\s*\}\}")


def _tokenize(template: str, recipe: Optional[str]) -> list[tuple[bool, str]]:
    """
    Split a template into (is_placeholder, text) parts.

    Fails before anything is substituted, so a bad template never produces
    partial output.
    """
    parts: list[tuple[bool, str]] = []
    pos = 0
    literal: list[str] = []
    while pos < len(template):
        if template.startswith(_ESCAPED_OPEN, pos):
            literal.append("{{")
            pos += len(_ESCAPED_OPEN)
            continue
        if template.startswith("{{", pos):
            m = _PLACEHOLDER.match(template, pos)
            if m is None:
                raise TemplateSyntaxError(
                    template=template,
                    message=f"unterminated or malformed placeholder at column {pos + 1}",
                    recipe=recipe,
                )
            if literal:
                parts.append((False, "".join(literal)))
                literal = []
            parts.append((True, m.group(1)))
            pos = m.end()
            continue
        literal.append(template[pos])
        pos += 1
    if literal:
        parts.append((False, "".join(literal)))
    return parts


def placeholders(template: str) -> list[str]:
    """Variable names referenced by `template`, in order of appearance."""
    return [text for is_var, text in _tokenize(template, None) if is_var]


def render(template: str, variables: Variables, recipe: str | None = None) -> str:
    parts = _tokenize(template, recipe)

    # resolve everything first: all-or-nothing
    for is_var, name in parts:
        if is_var and name not in variables:
            raise UndefinedVariableError(name=name, template=template, recipe=recipe)

    return "".join(variables.resolve(text) if is_var else text for is_var, text in parts)


def render_argv(command: Command, variables: Variables, recipe: str | None = None) -> List[str]:
    """Render `command.run` and split it into an argument vector."""
    # operators are checked on the template, so variable values may hold them
    try:
        segments = _split_and(command.run)
    except TemplateSyntaxError as e:
        e.recipe = recipe
        raise
    if len(segments) > 1:
        raise TemplateSyntaxError(
            template=command.run,
            message="'&&' chain in a single command; build it with split_chain()",
            recipe=recipe,
        )
    line = render(command.run, variables, recipe)
    try:
        argv = shlex.split(line)
    except ValueError as e:
        raise TemplateSyntaxError(template=command.run, message=str(e), recipe=recipe) from None
    if not argv:
        raise TemplateSyntaxError(template=command.run, message="empty command", recipe=recipe)
    return argv


def render_cwd(command: Command, variables: Variables, recipe: str | None = None) -> str | None:
    if command.cwd is None:
        return None
    return render(command.cwd, variables, recipe)


# ---------------------------------------------------------------------
# `a && b` chains
# ---------------------------------------------------------------------

# shell control/redirect characters; commands run without a shell
_OPERATOR_CHARS = "|;<>&"


def _split_and(line: str) -> list[str]:
    """
    Split on `&&` outside of quotes.

    Any other unquoted shell operator (`|`, `||`, `;`, `>`, `<`, `&`, ...) is
    rejected: it would otherwise reach the program as a plain argument.
    """
    segments: list[str] = []
    buf: list[str] = []
    quote: str | None = None
    i = 0
    while i < len(line):
        ch = line[i]
        if quote:
            if ch == "\\" and quote == '"' and i + 1 < len(line):
                buf.append(line[i:i + 2])
                i += 2
                continue
            if ch == quote:
                quote = None
        elif ch in ("'", '"'):
            quote = ch
        elif ch == "\\" and i + 1 < len(line):
            buf.append(line[i:i + 2])
            i += 2
            continue
        elif line.startswith("&&", i):
            segments.append("".join(buf).strip())
            buf = []
            i += 2
            continue
        elif ch in _OPERATOR_CHARS:
            end = i
            while end < len(line) and line[end] in _OPERATOR_CHARS:
                end += 1
            raise TemplateSyntaxError(
                template=line,
                message=f"unsupported shell operator '{line[i:end]}' at column {i + 1} (quote it to pass it literally)",
            )
        buf.append(ch)
        i += 1
    segments.append("".join(buf).strip())
    return segments


def split_chain(line: str, *, cwd: str | None = None, quiet: bool = False) -> list[Command]:
    """
    Turn one command line into discrete Command records.

    `cd DIR && make` becomes two records: the `cd` itself, and `make` with
    `cwd=DIR`. A `cd` only affects the rest of its own line.
    """
    commands: list[Command] = []
    for segment in _split_and(line):
        if not segment:
            raise TemplateSyntaxError(template=line, message="empty command in '&&' chain")
        commands.append(Command(run=segment, cwd=cwd, quiet=quiet))
        # same word rules the executor's `cd` uses
        try:
            words = shlex.split(segment)
        except ValueError as e:
            raise TemplateSyntaxError(template=line, message=str(e)) from None
        if len(words) == 2 and words[0] == "cd":
            target = words[1]
            cwd = target if cwd is None else posixpath.join(cwd, target)
    return commands
