# bridge.py
# Built-in recipes: build the flutter_rust_bridge code generator, generate the
# Dart bindings for both examples, then format the generated files.
from __future__ import annotations

from .dsl import RecipeBook, RecipeBookBuilder

FRB_BIN = "frb_codegen/target/debug/flutter_rust_bridge_codegen"
FRB_PURE = "frb_example/pure_dart"
FRB_FLUTTER = "frb_example/with_flutter"
LINE_LENGTH = 120


def bridge_book() -> RecipeBook:
    return (
        RecipeBookBuilder(source="<builtin:bridge>")
        .define("frb_bin", FRB_BIN)
        .define("frb_pure", FRB_PURE)
        .define("frb_flutter", FRB_FLUTTER)
        .define("line_length", LINE_LENGTH)
        .add_recipe(
            "default",
            dependencies=["gen-bridge", "lint"],
        )
        .add_recipe(
            "build",
            aliases=["b"],
            commands=["cd frb_codegen && cargo build"],
            doc="Build the code generator",
        )
        .add_recipe(
            "gen-bridge",
            aliases=["g"],
            dependencies=["build"],
            commands=[
                "{{frb_bin}} -r {{frb_pure}}/rust/src/api.rs"
                " -d {{frb_pure}}/dart/lib/bridge_generated.dart",
                "{{frb_bin}} -r {{frb_flutter}}/rust/src/api.rs"
                " -d {{frb_flutter}}/lib/bridge_generated.dart",
            ],
            doc="Generate the Dart bindings for both examples",
        )
        .add_recipe(
            "lint",
            aliases=["l"],
            commands=[
                "dart format --fix -l {{line_length}} {{frb_pure}}/dart/lib/bridge_generated.dart",
                "dart format --fix -l {{line_length}} {{frb_flutter}}/lib/bridge_generated.dart",
            ],
            doc="Format the generated Dart files",
        )
        .build()
    )
