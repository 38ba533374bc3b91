# cli.py
from __future__ import annotations

import shlex
import sys
from pathlib import Path

import click

from reciperun.bridge import bridge_book
from reciperun.dsl import RecipeBook
from reciperun.errors import RecipeError
from reciperun.render import render, render_argv
from reciperun.runner import Executor, load_recipes
from reciperun.ui.console import Console, get_console, set_console

DEFAULT_RECIPE_FILES = ("reciperun_recipes.py", "justfile", "Justfile")


def find_recipe_file(directory: Path = Path(".")) -> Path | None:
    """
    Find the recipe file in `directory`.

    Returns:
        The first of DEFAULT_RECIPE_FILES that exists, or None
    """
    for name in DEFAULT_RECIPE_FILES:
        candidate = directory / name
        if candidate.is_file():
            return candidate
    return None


def discover_recipes(file_arg: str | None) -> RecipeBook:
    """
    Load recipes from --file, a recipe file in the current directory, or the
    built-in bridge recipes.

    Raises:
        SystemExit: If the --file path does not exist
    """
    console = get_console()

    if file_arg:
        path = Path(file_arg)
        if not path.exists():
            console.print_error(
                "Recipe file not found",
                f"Could not find recipe file: {file_arg}",
                suggestion="Create a recipe file or specify a different path:\n  reciperun --file justfile run",
            )
            sys.exit(2)
        return load_recipes(path)

    path = find_recipe_file()
    if path is None:
        console.print_debug("no recipe file found, using built-in bridge recipes")
        return bridge_book()
    console.print_debug(f"using recipe file: {path}")
    return load_recipes(path)


def _fail(ctx: click.Context, exc: BaseException) -> None:
    console = get_console()
    if isinstance(exc, KeyboardInterrupt):
        console.print_info("\nInterrupted by user")
        ctx.exit(130)
    console.print_exception(exc)
    code = exc.exit_code if isinstance(exc, RecipeError) else 1
    ctx.exit(code)


def _load(ctx: click.Context) -> RecipeBook:
    book = ctx.obj.get("book")
    if book is None:
        book = discover_recipes(ctx.obj.get("file"))
        ctx.obj["book"] = book
    return book


@click.group(invoke_without_command=True)
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug mode (show stack traces and detailed output)",
)
@click.option(
    "--file",
    "file_",
    default=None,
    help="Recipe file (.py or justfile); defaults to reciperun_recipes.py / justfile if present",
)
@click.pass_context
def cli(ctx, debug, file_):
    """reciperun: run named recipes and their dependencies, in order."""
    console = Console(debug=debug)
    set_console(console)
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug
    ctx.obj["file"] = file_
    if ctx.invoked_subcommand is None:
        ctx.invoke(run)


@cli.command()
@click.argument("target", required=False)
@click.option("--dry-run", is_flag=True, default=False, help="Print commands without running them")
@click.pass_context
def run(ctx, target, dry_run):
    """Run TARGET (a recipe name or alias; default recipe if omitted)."""
    console = get_console()
    try:
        book = _load(ctx)
        executor = Executor(book, dry_run=dry_run, console=console)
        name = target or book.default_target()
        plan = executor.plan(name)
        console.print_run_started(
            source=book.source,
            target=name,
            plan=[r.name for r in plan],
        )
        results = executor.run(name)
        console.print_results(results)
    except (Exception, KeyboardInterrupt) as e:
        _fail(ctx, e)


@cli.command("list")
@click.pass_context
def list_recipes(ctx):
    """List recipes with their aliases."""
    console = get_console()
    try:
        book = _load(ctx)
    except Exception as e:
        _fail(ctx, e)
        return
    rows = [(r.name, list(r.aliases), r.doc) for r in book.graph]
    console.print_recipe_list(rows)


@cli.command()
@click.argument("target", required=False)
@click.pass_context
def plan(ctx, target):
    """Show the execution plan for TARGET and the commands it would run."""
    console = get_console()
    try:
        book = _load(ctx)
        name = target or book.default_target()
        steps = []
        for r in book.graph.dependency_order(name):
            lines = []
            for cmd in r.commands:
                line = shlex.join(render_argv(cmd, book.variables, r.name))
                if cmd.cwd is not None:
                    line = f"({render(cmd.cwd, book.variables, r.name)}) {line}"
                lines.append(line)
            steps.append((r.name, lines))
    except Exception as e:
        _fail(ctx, e)
        return
    console.print_plan(steps)


@cli.command()
@click.pass_context
def check(ctx):
    """Validate every recipe: dependencies, cycles, variables."""
    console = get_console()
    try:
        book = _load(ctx)
        book.check()
    except Exception as e:
        _fail(ctx, e)
        return
    console.print_info(f"{book.source}: {len(book.graph)} recipe(s) OK")


def main():  # pragma: no cover
    cli()


if __name__ == "__main__":  # pragma: no cover
    main()
