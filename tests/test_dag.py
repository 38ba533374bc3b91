from __future__ import annotations

import pytest

from reciperun.bridge import bridge_book
from reciperun.dag import RecipeGraph
from reciperun.dsl import recipe
from reciperun.errors import CyclicDependencyError, DuplicateRecipeError, UnknownRecipeError


def names(plan):
    return [r.name for r in plan]


def graph(*recipes):
    return RecipeGraph(list(recipes))


def test_bridge_default_order():
    g = bridge_book().graph
    assert names(g.dependency_order("default")) == ["build", "gen-bridge", "lint", "default"]


def test_alias_resolves_to_same_recipe_and_plan():
    g = bridge_book().graph
    assert g.resolve("g") is g.resolve("gen-bridge")
    assert g.dependency_order("g") == g.dependency_order("gen-bridge")
    assert names(g.dependency_order("g")) == ["build", "gen-bridge"]


def test_dependency_order_is_repeatable():
    g = bridge_book().graph
    assert g.dependency_order("default") == g.dependency_order("default")


def test_diamond_runs_shared_dependency_once():
    g = graph(
        recipe("a", needs=["b", "c"]),
        recipe("b", needs=["d"]),
        recipe("c", needs=["d"]),
        recipe("d"),
    )
    assert names(g.dependency_order("a")) == ["d", "b", "c", "a"]


def test_declared_order_breaks_ties():
    g = graph(recipe("a", needs=["c", "b"]), recipe("b"), recipe("c"))
    assert names(g.dependency_order("a")) == ["c", "b", "a"]


def test_only_transitive_closure_is_planned():
    g = graph(recipe("a", needs=["b"]), recipe("b"), recipe("unrelated"))
    assert names(g.dependency_order("a")) == ["b", "a"]


def test_dependency_named_by_alias():
    g = graph(recipe("a", needs=["bb"]), recipe("b", alias="bb"))
    assert names(g.dependency_order("a")) == ["b", "a"]


def test_every_recipe_after_its_dependencies():
    g = graph(
        recipe("release", needs=["package", "docs"]),
        recipe("package", needs=["test", "build"]),
        recipe("test", needs=["build"]),
        recipe("docs", needs=["build"]),
        recipe("build"),
    )
    plan = names(g.dependency_order("release"))
    assert sorted(plan) == sorted(set(plan))
    for r in g:
        for dep in r.needs:
            assert plan.index(dep) < plan.index(r.name)


def test_cycle_is_reported():
    g = graph(recipe("a", needs=["b"]), recipe("b", needs=["a"]))
    with pytest.raises(CyclicDependencyError) as ei:
        g.dependency_order("a")
    assert ei.value.cycle == ("a", "b", "a")
    assert "a -> b -> a" in str(ei.value)


def test_self_dependency_is_a_cycle():
    g = graph(recipe("a", needs=["a"]))
    with pytest.raises(CyclicDependencyError) as ei:
        g.dependency_order("a")
    assert ei.value.cycle == ("a", "a")


def test_cycle_below_root():
    g = graph(recipe("top", needs=["x"]), recipe("x", needs=["y"]), recipe("y", needs=["x"]))
    with pytest.raises(CyclicDependencyError) as ei:
        g.dependency_order("top")
    assert ei.value.cycle == ("x", "y", "x")


def test_unknown_root():
    g = graph(recipe("a"))
    with pytest.raises(UnknownRecipeError) as ei:
        g.dependency_order("nope")
    assert ei.value.name == "nope"
    assert ei.value.known == ("a",)


def test_unknown_dependency_names_referrer():
    g = graph(recipe("a", needs=["ghost"]))
    with pytest.raises(UnknownRecipeError) as ei:
        g.dependency_order("a")
    assert ei.value.referenced_by == "a"


def test_duplicate_name_rejected():
    g = graph(recipe("a"))
    with pytest.raises(DuplicateRecipeError):
        g.add_recipe(recipe("a"))


def test_alias_colliding_with_name_rejected():
    g = graph(recipe("build"))
    with pytest.raises(DuplicateRecipeError) as ei:
        g.add_recipe(recipe("bundle", alias="build"))
    assert ei.value.existing == "build"


def test_alias_colliding_with_alias_rejected():
    g = graph(recipe("build", alias="b"))
    with pytest.raises(DuplicateRecipeError):
        g.add_recipe(recipe("bundle", alias="b"))


def test_rejected_recipe_leaves_graph_unchanged():
    g = graph(recipe("build", alias="b"))
    with pytest.raises(DuplicateRecipeError):
        g.add_recipe(recipe("bundle", aliases=["x", "b"]))
    assert "bundle" not in g
    assert "x" not in g
    assert len(g) == 1


def test_validate_finds_cycle_outside_default():
    g = graph(recipe("default"), recipe("x", needs=["y"]), recipe("y", needs=["x"]))
    g.dependency_order("default")
    with pytest.raises(CyclicDependencyError):
        g.validate()


def test_long_chain_orders_without_recursion_limit():
    depth = 5000
    recipes = [recipe(f"r{i}", needs=[f"r{i + 1}"]) for i in range(depth)]
    recipes.append(recipe(f"r{depth}"))
    g = graph(*recipes)
    plan = names(g.dependency_order("r0"))
    assert len(plan) == depth + 1
    assert plan[0] == f"r{depth}"
    assert plan[-1] == "r0"
    g.validate()


def test_long_chain_cycle_is_reported():
    depth = 3000
    recipes = [recipe(f"r{i}", needs=[f"r{i + 1}"]) for i in range(depth)]
    recipes.append(recipe(f"r{depth}", needs=["r10"]))
    with pytest.raises(CyclicDependencyError) as ei:
        graph(*recipes).dependency_order("r0")
    assert ei.value.cycle[0] == "r10"
    assert ei.value.cycle[-1] == "r10"
    assert len(ei.value.cycle) == depth - 10 + 2
