from reciperun.cli import main

main()
