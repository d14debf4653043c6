"""
This script demonstrates how to load a saved recipe from a JSON file
and watch the bot play one game.
"""
import argparse
import os

from evobots import BotKind, GameKind, Match, create_player, load_recipe_json

def main():
    parser = argparse.ArgumentParser(
        description="Load a saved recipe and play one game against another bot."
    )
    parser.add_argument(
        "recipe_file",
        type=str,
        help="Path to the recipe JSON file.",
        nargs='?',
        default="artifacts/naughts_circuit.json"
    )
    parser.add_argument("--bot", type=str, default="circuit", help="Kind of bot the recipe belongs to.")
    parser.add_argument("--opponent", type=str, default="random", help="Bot to play against.")
    parser.add_argument("--game", type=str, default="naughts", help="Game to play.")
    args = parser.parse_args()

    if not os.path.exists(args.recipe_file):
        print(f"Error: Recipe file not found at '{args.recipe_file}'")
        print("Please run 'python examples/train_naughts.py' first to generate it.")
        return

    # --- 1. Load the recipe ---
    print(f"Loading recipe from: {args.recipe_file}")
    recipe = load_recipe_json(args.recipe_file)

    # --- 2. Build both players ---
    game_cls = GameKind.parse(args.game).game_class
    x, o = game_cls.identities
    bot = create_player(BotKind.parse(args.bot), game_cls.info(), x, recipe)
    opponent = create_player(BotKind.parse(args.opponent), game_cls.info(), o)

    # --- 3. Play one game with the board printed after every move ---
    print(f"\n{bot.label} vs {opponent.label}\n")
    result = Match(game_cls(), [bot, opponent], verbose=True).run()
    print(f"\n{result.describe()}")

if __name__ == "__main__":
    main()
