import argparse
from datetime import datetime, timezone
from enum import Enum
import os
import random
import sys

from . import (
    BatchConfig,
    EvolutionConfig,
    Match,
    RecipeStore,
    create_player,
    evaluate_batch,
    load_recipe_json,
    plot_history,
    run_evolution,
    save_recipe_json,
    setup_logger,
    visualize_circuit,
)
from .errors import ConfigError, EvobotsError
from .players import BotKind


class RunMode(Enum):
    SINGLE = "single"
    BATCH = "batch"
    GENETIC = "genetic"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Play and evolve bots for two-player board games.")
    parser.add_argument("bot1", type=str, help="First bot (circuit, network, random, oracle).")
    parser.add_argument("bot2", type=str, help="Second bot (circuit, network, random, oracle).")
    parser.add_argument("--game", type=str, default="naughts", help="Game to play (naughts, connect4).")
    parser.add_argument("--batch", type=int, default=None, help="Play N matches per evaluation.")
    parser.add_argument(
        "--magic",
        action="store_true",
        help="Play every line the oracle bot offers instead of a fixed batch.",
    )
    parser.add_argument("--genetic", type=int, default=None, help="Evolve for N generations.")
    parser.add_argument("--samples", type=int, default=None, help="Mutated children per survivor.")
    parser.add_argument("--keep", type=int, default=None, help="Survivors kept per generation.")
    parser.add_argument("--wild", type=int, default=None, help="Fresh random samples per generation.")
    parser.add_argument("--recipe", type=str, default=None, help="JSON file holding a starting recipe.")
    parser.add_argument("--botid", type=str, default=None, help="Load the starting recipe from the bot store.")
    parser.add_argument("--botdb", action="store_true", help="Use the bot store in the output directory.")
    parser.add_argument("--workers", type=int, default=6, help="Worker processes for evaluation.")
    parser.add_argument("--seed", type=int, default=None, help="Random seed.")
    parser.add_argument("--output-dir", type=str, default="artifacts", help="Where recipes and plots go.")
    parser.add_argument("--log-dir", type=str, default="log", help="Directory for log files.")
    parser.add_argument("--log-level", type=str, default="INFO", help="Console log level.")
    parser.add_argument("--plot", action="store_true", help="Save score curves after evolving.")
    return parser


def validate_args(args: argparse.Namespace) -> RunMode:
    """Rejects inconsistent option combinations and returns the run mode."""
    batch_mode = args.batch is not None and args.batch > 1
    genetic_mode = args.genetic is not None and args.genetic > 0

    if not batch_mode and not args.magic:
        for flag, value in (("genetic", args.genetic), ("samples", args.samples),
                            ("keep", args.keep), ("wild", args.wild)):
            if value is not None:
                raise ConfigError(f"Option --{flag} requires --batch")

    if not genetic_mode:
        for flag, value in (("samples", args.samples), ("keep", args.keep), ("wild", args.wild)):
            if value is not None:
                raise ConfigError(f"Option --{flag} requires --genetic")

    if args.magic and args.batch is not None:
        raise ConfigError("Cannot specify --batch with --magic")
    if args.botid is not None and not args.botdb:
        raise ConfigError("Option --botid requires --botdb")
    if args.botid is not None and args.recipe is not None:
        raise ConfigError("Cannot specify both --recipe and --botid")

    if genetic_mode:
        return RunMode.GENETIC
    if batch_mode or args.magic:
        return RunMode.BATCH
    return RunMode.SINGLE


def build_batch_config(args: argparse.Namespace) -> BatchConfig:
    batch = BatchConfig(
        game=args.game,
        bot_names=(args.bot1, args.bot2),
        batch_size=args.batch if args.batch is not None else 1,
        exhaustive=args.magic,
    )
    batch.validate()
    if (args.recipe is not None or args.botid is not None) and _genetic_slot(batch) is None:
        raise ConfigError("Options --recipe and --botid need a genetic bot (circuit or network)")
    return batch


def build_evolution_config(args: argparse.Namespace, batch: BatchConfig) -> EvolutionConfig:
    cfg = EvolutionConfig(batch=batch, num_generations=args.genetic, workers=args.workers, random_seed=args.seed)
    if args.samples is not None:
        cfg.num_samples = args.samples
    if args.keep is not None:
        cfg.keep_samples = args.keep
    if args.wild is not None:
        cfg.wild_samples = args.wild
    cfg.scores_path = os.path.join(args.output_dir, "scores.jsonl")
    cfg.validate()
    return cfg


def _genetic_slot(batch: BatchConfig):
    for i, kind in enumerate(batch.bot_kinds):
        if kind.is_genetic:
            return i
    return None


def run_single(batch: BatchConfig, recipes, rng: random.Random) -> None:
    game_cls = batch.game_kind.game_class
    players = [
        create_player(kind, game_cls.info(), game_cls.identities[i], recipes[i], rng)
        for i, kind in enumerate(batch.bot_kinds)
    ]
    print(f"{players[0].label} vs {players[1].label}")
    result = Match(game_cls(), players, verbose=True).run()
    print(result.describe())


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        mode = validate_args(args)
        batch = build_batch_config(args)
        cfg = build_evolution_config(args, batch) if mode is RunMode.GENETIC else None
    except ConfigError as e:
        parser.error(str(e))

    setup_logger(args.log_dir, args.log_level)
    try:
        run(args, mode, batch, cfg)
    except EvobotsError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)


def run(args: argparse.Namespace, mode: RunMode, batch: BatchConfig, cfg) -> None:
    store = RecipeStore(os.path.join(args.output_dir, "botdb.json")) if args.botdb else None
    recipe = None
    if args.recipe is not None:
        recipe = load_recipe_json(args.recipe)
    elif args.botid is not None:
        recipe = store.load(args.botid)

    slot = _genetic_slot(batch)
    recipes = [None, None]
    if recipe is not None and slot is not None:
        recipes[slot] = recipe

    if mode is RunMode.SINGLE:
        run_single(batch, recipes, random.Random(args.seed))
        return

    if mode is RunMode.BATCH:
        record = evaluate_batch(batch, recipes, random.Random(args.seed))
        print(record.summary())
        return

    print(f"Evolving {batch.bot_names[slot]} on {batch.game} for {cfg.num_generations} generations")
    print(f"Samples: {cfg.num_samples}, keep: {cfg.keep_samples}, wild: {cfg.wild_samples}, workers: {cfg.workers}")

    survivors, history = run_evolution(cfg, seed_recipe=recipe, store=store)
    if not survivors:
        print("\nNo sample passed the score threshold.")
        return

    best = survivors[0]
    print(f"\nBest score: {best.score:.4f} (generation {best.generation})")
    save_recipe_json(
        best.recipe,
        os.path.join(args.output_dir, "best_recipe.json"),
        meta={
            "created_utc": datetime.now(timezone.utc).isoformat(),
            "game": batch.game,
            "bots": list(batch.bot_names),
            "score": best.score,
            "generation": best.generation,
            "generations": cfg.num_generations,
        },
    )

    if args.plot:
        plot_history(history, save_path=os.path.join(args.output_dir, "score_history.png"), show=False)
        if batch.bot_kinds[slot] is BotKind.CIRCUIT:
            genome = BotKind.CIRCUIT.load_genome(best.recipe)
            visualize_circuit(genome, os.path.join(args.output_dir, "best_circuit.png"),
                              title=f"Best circuit ({best.score:.3f})")


if __name__ == "__main__":
    main()
