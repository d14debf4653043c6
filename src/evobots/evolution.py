from __future__ import annotations
from dataclasses import dataclass
import math
import random
from typing import List, Optional, Sequence, Tuple

from loguru import logger

from .config import EvolutionConfig
from .errors import InvariantError
from .fitness import EvaluationOutcome, EvaluationTask, dispatch
from .game import GameInfo
from .history import EvolutionHistory
from .persistence import RecipeStore, ScoreLog
from .players import BotKind


@dataclass
class PopulationMember:
    recipe: str
    score: float
    generation: int = 0


def ranking_key(member: PopulationMember):
    # Recipe text breaks score ties, so arrival order never decides a rank.
    return (-member.score, member.recipe)


# =========================
# Sample generation
# =========================
def resolve_genetic_index(kinds: Sequence[BotKind]) -> int:
    if kinds[0].is_genetic:
        if kinds[1].is_genetic:
            logger.warning(
                f"Both bots are genetic. Only the first bot ({kinds[0].value}) will evolve"
            )
        return 0
    if not kinds[1].is_genetic:
        raise InvariantError("Neither bot is a genetic bot")
    return 1


def mutate_recipe(kind: BotKind, recipe: str, rng: random.Random) -> str:
    genome = kind.load_genome(recipe)
    if genome.serialize() != recipe:
        raise InvariantError("Copied sample is not identical to its parent")
    genome.mutate(rng)
    child = genome.serialize()
    if child == recipe:
        logger.warning("Sample did not mutate")
    return child


def generate_original_samples(kind: BotKind, game_info: GameInfo, count: int, rng: random.Random) -> List[str]:
    return [kind.new_genome(game_info, rng).serialize() for _ in range(count)]


def generate_samples(kind: BotKind, parents: Sequence[str], num_samples: int, rng: random.Random) -> List[str]:
    """``num_samples`` mutated children for every parent recipe."""
    samples = []
    for parent in parents:
        for _ in range(num_samples):
            samples.append(mutate_recipe(kind, parent, rng))
    return samples


# =========================
# Selection
# =========================
def select_survivors(
    passed: Sequence[PopulationMember],
    previous: Sequence[PopulationMember],
    keep_samples: int,
) -> List[PopulationMember]:
    """
    Tops the passing pool up with the previous survivors (best first) while it
    is smaller than ``keep_samples``, then keeps the best ``keep_samples``.
    A recipe holds at most one slot, at its best score.
    """
    pool = []
    recipes = set()
    for member in sorted(passed, key=ranking_key):
        if member.recipe not in recipes:
            pool.append(member)
            recipes.add(member.recipe)
    for member in sorted(previous, key=ranking_key):
        if len(pool) >= keep_samples:
            break
        if member.recipe not in recipes:
            pool.append(member)
            recipes.add(member.recipe)
    pool.sort(key=ranking_key)
    return pool[:keep_samples]


def raise_threshold(threshold: float, best_score: float, smoothing: float = 0.2) -> float:
    """Moves the threshold a fraction of the way toward the best score, never down."""
    if best_score <= threshold:
        return threshold
    return threshold + smoothing * (best_score - threshold)


# =========================
# Main Evolution Loop
# =========================
def run_evolution(
    cfg: EvolutionConfig,
    seed_recipe: Optional[str] = None,
    store: Optional[RecipeStore] = None,
) -> Tuple[List[PopulationMember], EvolutionHistory]:
    cfg.validate()
    rng = random.Random(cfg.random_seed)
    batch = cfg.batch
    game_info = batch.game_kind.game_class.info()
    kinds = batch.bot_kinds
    genetic_index = resolve_genetic_index(kinds)
    genetic_kind = kinds[genetic_index]
    other_index = 1 - genetic_index
    other_kind = kinds[other_index]

    # The opponent stays fixed for the whole run.
    opponent_recipe = None
    if other_kind.is_genetic:
        opponent_recipe = other_kind.new_genome(game_info, rng).serialize()

    score_log = ScoreLog(cfg.scores_path) if cfg.scores_path else None
    survivors: List[PopulationMember] = []
    score_threshold = cfg.initial_threshold
    history = EvolutionHistory()

    logger.info(
        f"Evolving {genetic_kind.value} against {other_kind.value} on {batch.game} "
        f"({'exhaustive' if batch.exhaustive else f'batch of {batch.batch_size}'})"
    )

    for gen in range(cfg.num_generations):
        logger.info("--------------------------")
        logger.info(f"Generation {gen}:")

        if survivors:
            candidates = generate_samples(genetic_kind, [m.recipe for m in survivors], cfg.num_samples, rng)
        elif seed_recipe is not None:
            seed = genetic_kind.load_genome(seed_recipe).serialize()
            candidates = [seed] + generate_samples(genetic_kind, [seed], cfg.num_samples, rng)
        else:
            candidates = generate_original_samples(genetic_kind, game_info, cfg.num_samples, rng)
        if cfg.wild_samples > 0:
            candidates += generate_original_samples(genetic_kind, game_info, cfg.wild_samples, rng)

        tasks = []
        for index, recipe in enumerate(candidates):
            recipes = [None, None]
            recipes[genetic_index] = recipe
            recipes[other_index] = opponent_recipe
            tasks.append(EvaluationTask(index, batch, tuple(recipes), genetic_index, rng.getrandbits(32)))

        outcomes: List[EvaluationOutcome] = dispatch(tasks, cfg.workers)
        passed = []
        for outcome in sorted(outcomes, key=lambda o: o.index):
            win = "*" if outcome.score > score_threshold else ""
            logger.debug(f"Completed batch for sample {outcome.index} :: score = {outcome.score:.3f} {win}")
            if outcome.score > score_threshold:
                passed.append(PopulationMember(outcome.recipe, outcome.score, gen))

        scores = [o.score for o in outcomes]
        history.generations.append(gen)
        history.gen_best.append(max(scores) if scores else math.nan)
        history.avg.append(math.fsum(scores) / len(scores) if scores else math.nan)
        history.passed.append(len(passed))

        if not passed:
            logger.info(f"Generation {gen} :: No improvement - will generate more samples")
            logger.info(f"Current best score: {score_threshold:.3f}")
            history.best_survivor.append(survivors[0].score if survivors else math.nan)
            history.threshold.append(score_threshold)
            continue

        survivors = select_survivors(passed, survivors, cfg.keep_samples)
        best = survivors[0]
        previous_threshold = score_threshold
        score_threshold = raise_threshold(score_threshold, best.score, cfg.threshold_smoothing)

        if best.score > previous_threshold:
            if score_log is not None:
                score_log.append(gen, best.score, best.recipe)
            if store is not None:
                store.save(genetic_kind.value, best.recipe, best.score)

        logger.info(f"Generation {gen} highest scores: {[round(m.score, 3) for m in survivors]}")
        logger.info(f"Score threshold: {previous_threshold:.3f} -> {score_threshold:.3f}")
        history.best_survivor.append(best.score)
        history.threshold.append(score_threshold)

    return survivors, history
