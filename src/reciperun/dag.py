# dag.py
from __future__ import annotations

from typing import Dict, Iterator, List, Optional, Tuple

from .errors import CyclicDependencyError, DuplicateRecipeError, UnknownRecipeError
from .model import Recipe


class RecipeGraph:
    """
    Recipes keyed by name, with aliases resolving to the same recipe.

    Requires:
      - recipe.name: str (unique across names and aliases)
      - recipe.needs: names/aliases of recipes that must run BEFORE it
    """

    def __init__(self, recipes: Optional[List[Recipe]] = None):
        self._recipes: Dict[str, Recipe] = {}
        # name or alias -> canonical name
        self._lookup: Dict[str, str] = {}
        for r in recipes or []:
            self.add_recipe(r)

    def add_recipe(self, recipe: Recipe) -> Recipe:
        keys = [recipe.name, *recipe.aliases]
        seen: set[str] = set()
        for key in keys:
            if key in self._lookup:
                raise DuplicateRecipeError(name=key, existing=self._lookup[key])
            if key in seen:
                raise DuplicateRecipeError(name=key, existing=recipe.name)
            seen.add(key)

        self._recipes[recipe.name] = recipe
        for key in keys:
            self._lookup[key] = recipe.name
        return recipe

    def resolve(self, name: str, referenced_by: str | None = None) -> Recipe:
        try:
            return self._recipes[self._lookup[name]]
        except KeyError:
            raise UnknownRecipeError(
                name=name,
                known=tuple(self.names()),
                referenced_by=referenced_by,
            ) from None

    def names(self) -> List[str]:
        """Canonical names in definition order."""
        return list(self._recipes)

    def __contains__(self, name: object) -> bool:
        return name in self._lookup

    def __iter__(self) -> Iterator[Recipe]:
        return iter(self._recipes.values())

    def __len__(self) -> int:
        return len(self._recipes)

    # ------------------------------------------------------------------
    # Ordering
    # ------------------------------------------------------------------

    def dependency_order(self, root: str) -> Tuple[Recipe, ...]:
        """
        Depth-first post-order over everything `root` needs, root last.

        Dependencies are visited in declared order, so the result is the same
        on every call. Each recipe appears once even when reachable through
        several paths.
        """
        ordered: List[Recipe] = []
        done: set[str] = set()
        # current DFS path, for cycle reporting
        path: List[str] = []
        on_path: set[str] = set()

        # (recipe, index of the next dependency to visit); no recursion
        start = self.resolve(root)
        stack: List[Tuple[Recipe, int]] = [(start, 0)]
        path.append(start.name)
        on_path.add(start.name)

        while stack:
            recipe, idx = stack[-1]
            if idx < len(recipe.needs):
                stack[-1] = (recipe, idx + 1)
                dep = self.resolve(recipe.needs[idx], referenced_by=recipe.name)
                if dep.name in done:
                    continue
                if dep.name in on_path:
                    begin = path.index(dep.name)
                    raise CyclicDependencyError(cycle=tuple(path[begin:] + [dep.name]))
                stack.append((dep, 0))
                path.append(dep.name)
                on_path.add(dep.name)
                continue

            stack.pop()
            path.pop()
            on_path.discard(recipe.name)
            done.add(recipe.name)
            ordered.append(recipe)

        return tuple(ordered)

    def validate(self) -> None:
        """Check every recipe's dependencies exist and no cycle exists anywhere."""
        checked: set[str] = set()
        for name in self.names():
            # a recipe already in some earlier order had its closure checked
            if name in checked:
                continue
            checked.update(r.name for r in self.dependency_order(name))
