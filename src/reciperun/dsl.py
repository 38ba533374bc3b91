# src/reciperun/dsl.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from .dag import RecipeGraph
from .errors import RecipeBookError, UndefinedVariableError
from .model import Command, Recipe, Variables
from .render import placeholders, split_chain


# ---------------------------------------------------------------------
# Recipe book (variables + graph, built once at startup)
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class RecipeBook:
    variables: Variables
    graph: RecipeGraph
    default: Optional[str] = None
    source: str = "<builtin>"

    def default_target(self) -> str:
        if self.default is not None:
            return self.default
        if "default" in self.graph:
            return "default"
        names = self.graph.names()
        if not names:
            raise RecipeBookError(source=self.source, message="defines no recipes")
        return names[0]

    def check(self) -> None:
        """
        Validate the whole book without running anything.

        Raises the same errors a run would: unknown dependencies, cycles,
        templates naming undefined variables.
        """
        self.graph.validate()
        for r in self.graph:
            for cmd in r.commands:
                for text in (cmd.run, cmd.cwd):
                    if text is None:
                        continue
                    for name in placeholders(text):
                        if name not in self.variables:
                            raise UndefinedVariableError(name=name, template=text, recipe=r.name)


# ---------------------------------------------------------------------
# Command helper
# ---------------------------------------------------------------------

def sh(cmd: str, *, cwd: str | None = None, quiet: bool = False) -> List[Command]:
    """
    Create the command record(s) for one command line.

    `cd dir && tool` chains are split into one record per command.
    """
    return split_chain(cmd, cwd=cwd, quiet=quiet)


def _flatten(commands: Iterable[Any]) -> List[Command]:
    out: List[Command] = []
    for c in commands:
        if isinstance(c, Command):
            out.append(c)
        elif isinstance(c, str):
            out.extend(sh(c))
        else:
            out.extend(_flatten(c))
    return out


# ---------------------------------------------------------------------
# Functional recipe helper
# ---------------------------------------------------------------------

def recipe(
    name: str,
    *commands: Any,  # allow: recipe("x", "cmd", sh(...), Command(...))
    needs: Optional[List[str]] = None,
    aliases: Optional[List[str]] = None,
    alias: Optional[str] = None,
    doc: Optional[str] = None,
) -> Recipe:
    all_aliases = list(aliases or [])
    if alias is not None:
        all_aliases.append(alias)
    return Recipe(
        name=name,
        commands=tuple(_flatten(commands)),
        needs=tuple(needs or []),
        aliases=tuple(all_aliases),
        doc=doc,
    )


# ---------------------------------------------------------------------
# Builder API
# ---------------------------------------------------------------------

class RecipeBookBuilder:
    def __init__(self, source: str = "<builtin>"):
        self.source = source
        self._variables: list[tuple[str, Any]] = []
        self._recipes: list[Recipe] = []
        self._default: Optional[str] = None

    def define(self, name: str, value: Any):
        self._variables.append((name, value))
        return self

    def add_recipe(
        self,
        name: str,
        aliases: Iterable[str] = (),
        dependencies: Iterable[str] = (),
        commands: Iterable[Any] = (),
        doc: Optional[str] = None,
    ):
        self._recipes.append(
            recipe(name, *commands, needs=list(dependencies), aliases=list(aliases), doc=doc)
        )
        return self

    def add(self, *recipes: Recipe):
        self._recipes.extend(recipes)
        return self

    def default(self, name: str):
        self._default = name
        return self

    def build(self) -> RecipeBook:
        # graph construction rejects duplicate names/aliases eagerly
        graph = RecipeGraph(self._recipes)
        return RecipeBook(
            variables=Variables.build(self._variables),
            graph=graph,
            default=self._default,
            source=self.source,
        )


def book(
    *recipes: Recipe,
    variables: Optional[Dict[str, Any]] = None,
    default: Optional[str] = None,
    source: str = "<builtin>",
) -> RecipeBook:
    """
    Recipe book helper for recipe files.

        from reciperun import book, recipe

        def recipes():
            return book(
                recipe("build", "cargo build", alias="b"),
                variables={"out": "dist"},
            )
    """
    b = RecipeBookBuilder(source=source).add(*recipes)
    for name, value in (variables or {}).items():
        b.define(name, value)
    if default is not None:
        b.default(default)
    return b.build()
