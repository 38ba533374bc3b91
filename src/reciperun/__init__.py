from .dsl import sh, recipe, book, RecipeBook, RecipeBookBuilder
from .dag import RecipeGraph
from .model import Command, Recipe, Variables
from .runner import Executor, ExecutorState, ProcessRunner, load_recipes, run_recipes
from .errors import (
    RecipeError,
    UnknownRecipeError,
    DuplicateRecipeError,
    DuplicateVariableError,
    RecipeBookError,
    CyclicDependencyError,
    UndefinedVariableError,
    TemplateSyntaxError,
    JustfileSyntaxError,
    SubprocessFailedError,
)

__all__ = [
    "sh", "recipe", "book", "RecipeBook", "RecipeBookBuilder",
    "RecipeGraph", "Command", "Recipe", "Variables",
    "Executor", "ExecutorState", "ProcessRunner", "load_recipes", "run_recipes",
    "RecipeError", "UnknownRecipeError", "DuplicateRecipeError", "DuplicateVariableError",
    "RecipeBookError", "CyclicDependencyError",
    "UndefinedVariableError", "TemplateSyntaxError", "JustfileSyntaxError", "SubprocessFailedError",
]
