# runner.py
from __future__ import annotations

import enum
import runpy
import signal
import subprocess
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from .dsl import RecipeBook
from .errors import RecipeBookError, SubprocessFailedError
from .justfile import load_justfile
from .model import Command, Recipe
from .render import render_argv, render_cwd
from .ui.console import Console, get_console


# ----------------------------------------------------------------------
# Recipe loading (local file)
# ----------------------------------------------------------------------

def load_recipes(path: str | Path) -> RecipeBook:
    """
    Load a recipe book from a file.

    A `.py` file must define either:
      - recipes() -> RecipeBook
      - RECIPES = RecipeBook
    Any other file is read as a justfile.
    """
    rp = Path(path).expanduser().resolve()
    if not rp.exists():
        raise FileNotFoundError(f"Recipe file not found: {rp}")
    if rp.suffix != ".py":
        return load_justfile(rp)

    module_name = f"reciperun_recipes_{rp.stem}"
    globals_dict = runpy.run_path(str(rp), run_name=module_name)

    book = None
    if "recipes" in globals_dict and callable(globals_dict["recipes"]):
        book = globals_dict["recipes"]()
    elif "RECIPES" in globals_dict:
        book = globals_dict["RECIPES"]

    if not isinstance(book, RecipeBook):
        raise RecipeBookError(
            source=str(rp),
            message="recipe file must return/define a RecipeBook. "
            "Define recipes() -> RecipeBook or RECIPES = book(...).",
        )
    return book


# ----------------------------------------------------------------------
# Process runner
# ----------------------------------------------------------------------

class ProcessRunner:
    """Runs one external command, streaming its output straight to the terminal."""

    def execute(self, argv: Sequence[str], cwd: str | None = None) -> int:
        try:
            proc = subprocess.run(list(argv), cwd=cwd)
        except PermissionError as e:
            raise SubprocessFailedError(argv=tuple(argv), status=126, reason=str(e)) from e
        except OSError as e:
            # missing binary, missing cwd, ...
            raise SubprocessFailedError(argv=tuple(argv), status=127, reason=str(e)) from e

        status = proc.returncode
        if status < 0:
            # killed by signal N -> 128 + N, as a shell reports it
            try:
                reason = f"killed by {signal.Signals(-status).name}"
            except ValueError:
                reason = f"killed by signal {-status}"
            raise SubprocessFailedError(argv=tuple(argv), status=128 - status, reason=reason)
        if status != 0:
            raise SubprocessFailedError(argv=tuple(argv), status=status)
        return status


# ----------------------------------------------------------------------
# Executor
# ----------------------------------------------------------------------

class ExecutorState(enum.Enum):
    IDLE = "idle"
    RESOLVING = "resolving"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class Executor:
    """
    Runs a target recipe and everything it needs, one command at a time.

    Fail-fast: the first error stops the run and is re-raised unchanged.
    Commands that already ran are not undone.
    """

    def __init__(
        self,
        book: RecipeBook,
        runner: Optional[ProcessRunner] = None,
        *,
        workdir: str | Path | None = None,
        dry_run: bool = False,
        console: Optional[Console] = None,
    ):
        self.book = book
        self.runner = runner or ProcessRunner()
        self.workdir = Path(workdir) if workdir is not None else None
        self.dry_run = dry_run
        self.console = console or get_console()
        self.state = ExecutorState.IDLE
        # (recipe name, argv) of every command executed, in order
        self.history: List[Tuple[str, List[str]]] = []

    def plan(self, target: str | None = None) -> Tuple[Recipe, ...]:
        name = target if target is not None else self.book.default_target()
        return self.book.graph.dependency_order(name)

    def run(self, target: str | None = None) -> Dict[str, str]:
        self.state = ExecutorState.RESOLVING
        self.history = []
        try:
            plan = self.plan(target)
        except BaseException:
            self.state = ExecutorState.FAILED
            raise

        self.console.print_debug(f"plan: {[r.name for r in plan]}")
        self.state = ExecutorState.RUNNING
        results: Dict[str, str] = {}
        for recipe in plan:
            self.console.print_recipe_start(recipe.name)
            try:
                for command in recipe.commands:
                    self._run_command(recipe, command)
            except BaseException as e:
                self.state = ExecutorState.FAILED
                self.console.print_failure(recipe.name, str(e), getattr(e, "exit_code", None))
                raise
            results[recipe.name] = "skipped(dry-run)" if self.dry_run else "ok"

        self.state = ExecutorState.SUCCEEDED
        return results

    # ------------------------------------------------------------------

    def _resolve_cwd(self, rendered: str | None) -> str | None:
        if rendered is None:
            return str(self.workdir) if self.workdir is not None else None
        base = self.workdir if self.workdir is not None else Path(".")
        return str(base / rendered)

    def _run_command(self, recipe: Recipe, command: Command) -> None:
        variables = self.book.variables
        argv = render_argv(command, variables, recipe.name)
        rendered_cwd = render_cwd(command, variables, recipe.name)

        if not command.quiet or self.dry_run:
            self.console.print_command(argv, cwd=rendered_cwd)
        if self.dry_run:
            return

        self.history.append((recipe.name, argv))
        cwd = self._resolve_cwd(rendered_cwd)
        try:
            if argv[0] == "cd":
                self._change_dir(argv, cwd)
            else:
                self.runner.execute(argv, cwd=cwd)
        except SubprocessFailedError as e:
            if e.recipe is None:
                e.recipe = recipe.name
            raise

    def _change_dir(self, argv: List[str], cwd: str | None) -> None:
        """`cd DIR` only checks DIR exists; later commands on its line carry the cwd."""
        if len(argv) != 2:
            raise SubprocessFailedError(argv=tuple(argv), status=1, reason="cd: expected exactly one directory")
        target = Path(cwd or ".") / argv[1]
        if not target.is_dir():
            raise SubprocessFailedError(argv=tuple(argv), status=1, reason=f"cd: no such directory: {target}")


def run_recipes(
    book: RecipeBook,
    target: str | None = None,
    *,
    workdir: str | Path | None = None,
    dry_run: bool = False,
) -> Dict[str, str]:
    """Convenience wrapper: build an Executor with a real ProcessRunner and run `target`."""
    return Executor(book, ProcessRunner(), workdir=workdir, dry_run=dry_run).run(target)
