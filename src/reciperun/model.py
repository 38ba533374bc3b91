# model.py
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional, Tuple

from .errors import DuplicateVariableError, UndefinedVariableError


@dataclass(frozen=True)
class Variables:
    """
    Named string values shared by every command template.

    Built once with `Variables.build(...)`; there is no way to change a value
    afterwards.
    """
    values: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def build(cls, pairs: Iterable[Tuple[str, Any]] | Mapping[str, Any] = ()) -> "Variables":
        items = pairs.items() if isinstance(pairs, Mapping) else pairs
        values: dict[str, str] = {}
        for name, value in items:
            if name in values:
                raise DuplicateVariableError(name=name)
            # force values to str, e.g. line_length = 120
            values[name] = str(value)
        return cls(values=MappingProxyType(values))

    def resolve(self, name: str) -> str:
        try:
            return self.values[name]
        except KeyError:
            raise UndefinedVariableError(name=name) from None

    def names(self) -> list[str]:
        return list(self.values)

    def __contains__(self, name: object) -> bool:
        return name in self.values

    def __len__(self) -> int:
        return len(self.values)


@dataclass(frozen=True)
class Command:
    """A single command line inside a recipe."""
    run: str
    cwd: str | None = None
    quiet: bool = False


@dataclass(frozen=True)
class Recipe:
    """
    A named unit of work: commands + dependencies + alternate names.

    `needs` keeps the declared order; the resolver visits dependencies in
    exactly that order.
    """
    name: str
    commands: Tuple[Command, ...] = ()
    needs: Tuple[str, ...] = ()
    aliases: Tuple[str, ...] = ()
    doc: Optional[str] = None

    def __post_init__(self) -> None:
        # accept lists from callers, store tuples
        object.__setattr__(self, "commands", tuple(self.commands))
        object.__setattr__(self, "needs", tuple(self.needs))
        object.__setattr__(self, "aliases", tuple(self.aliases))
