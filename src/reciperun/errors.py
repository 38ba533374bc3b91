# errors.py
from __future__ import annotations

import shlex
from dataclasses import dataclass, field
from typing import Optional, Tuple


class RecipeError(Exception):
    """Base class for every failure that aborts a run."""

    # process exit code used by the CLI
    exit_code: int = 2


@dataclass
class UnknownRecipeError(RecipeError):
    name: str
    known: Tuple[str, ...] = ()
    referenced_by: Optional[str] = None

    def __str__(self) -> str:
        if self.referenced_by:
            msg = f"Recipe '{self.referenced_by}' depends on unknown recipe '{self.name}'"
        else:
            msg = f"Unknown recipe '{self.name}'"
        if self.known:
            msg += f". Known recipes: {', '.join(self.known)}"
        return msg


@dataclass
class DuplicateRecipeError(RecipeError):
    name: str
    existing: str

    def __str__(self) -> str:
        if self.name == self.existing:
            return f"Recipe '{self.name}' is defined more than once"
        return f"Name '{self.name}' is already taken by recipe '{self.existing}'"


@dataclass
class DuplicateVariableError(RecipeError):
    name: str

    def __str__(self) -> str:
        return f"Variable '{self.name}' is defined more than once"


@dataclass
class RecipeBookError(RecipeError):
    """A recipe file or recipe book that cannot be used as it is written."""
    source: str
    message: str

    def __str__(self) -> str:
        return f"{self.source}: {self.message}"


@dataclass
class CyclicDependencyError(RecipeError):
    cycle: Tuple[str, ...]

    def __str__(self) -> str:
        return f"Recipe dependency cycle: {' -> '.join(self.cycle)}"


@dataclass
class UndefinedVariableError(RecipeError):
    name: str
    template: Optional[str] = None
    recipe: Optional[str] = None

    def __str__(self) -> str:
        lines = [f"Variable '{self.name}' is not defined"]
        if self.recipe:
            lines.append(f"recipe={self.recipe}")
        if self.template is not None:
            lines.append(f"template={self.template}")
        return "\n".join(lines)


@dataclass
class TemplateSyntaxError(RecipeError):
    template: str
    message: str
    recipe: Optional[str] = None

    def __str__(self) -> str:
        where = f" in recipe '{self.recipe}'" if self.recipe else ""
        return f"Bad command template{where}: {self.message}\ntemplate={self.template}"


@dataclass
class JustfileSyntaxError(RecipeError):
    path: str
    line: int
    message: str

    def __str__(self) -> str:
        return f"{self.path}:{self.line}: {self.message}"


@dataclass
class SubprocessFailedError(RecipeError):
    """
    A command exited nonzero or could not be started.

    Carries the exact argv so the operator can rerun it by hand.
    """
    argv: Tuple[str, ...]
    status: int
    recipe: Optional[str] = None
    reason: Optional[str] = field(default=None)

    def __post_init__(self) -> None:
        self.argv = tuple(self.argv)

    @property
    def exit_code(self) -> int:  # type: ignore[override]
        # statuses outside 1..255 cannot be passed through sys.exit unchanged
        if 0 < self.status < 256:
            return self.status
        return 1

    def __str__(self) -> str:
        prefix = f"[{self.recipe}] " if self.recipe else ""
        lines = [f"{prefix}command failed (exit={self.status}): {shlex.join(self.argv)}"]
        if self.reason:
            lines.append(f"reason={self.reason}")
        return "\n".join(lines)
