from __future__ import annotations
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass, field
import math
import random
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from loguru import logger

from .config import BatchConfig
from .errors import InvariantError
from .game import MatchResult
from .match import Match
from .players import create_player


@dataclass
class FitnessRecord:
    """Aggregate of many match results. Sums use fsum so order never matters."""
    identities: Tuple[str, str] = ("X", "O")
    mean_scores: Dict[str, float] = field(default_factory=dict)
    wins: Dict[str, int] = field(default_factory=dict)
    draws: int = 0
    disqualifications: int = 0
    num_matches: int = 0

    @classmethod
    def from_results(cls, identities: Sequence[str], results: Iterable[MatchResult]) -> "FitnessRecord":
        results = list(results)
        record = cls(identities=(identities[0], identities[1]), num_matches=len(results))
        for identity in identities:
            total = math.fsum(r.scores[identity] for r in results)
            record.mean_scores[identity] = total / len(results) if results else 0.0
            record.wins[identity] = sum(1 for r in results if r.is_win and r.winner == identity)
        record.draws = sum(1 for r in results if r.is_tie)
        record.disqualifications = sum(1 for r in results if r.disqualified is not None)
        return record

    def score(self, identity: str) -> float:
        return self.mean_scores[identity]

    def summary(self) -> str:
        a, b = self.identities
        return (
            f"{self.num_matches} matches :: {a} wins {self.wins[a]} ({self.mean_scores[a]:.3f}) | "
            f"{b} wins {self.wins[b]} ({self.mean_scores[b]:.3f}) | draws {self.draws}"
        )


def evaluate_batch(
    batch: BatchConfig,
    recipes: Sequence[Optional[str]] = (None, None),
    rng: Optional[random.Random] = None,
) -> FitnessRecord:
    """
    Plays one batch and aggregates it. Players are rebuilt from their recipes
    before every match, so no state leaks from one match into the next.
    Genetic bots without a recipe get one random genome for the whole batch.
    """
    rng = rng or random.Random()
    game_cls = batch.game_kind.game_class
    kinds = batch.bot_kinds
    identities = game_cls.identities
    recipes = list(recipes)
    for i, kind in enumerate(kinds):
        if kind.is_genetic and recipes[i] is None:
            recipes[i] = kind.new_genome(game_cls.info(), rng).serialize()

    def new_match() -> Match:
        players = [
            create_player(kinds[i], game_cls.info(), identities[i], recipes[i], rng)
            for i in range(2)
        ]
        return Match(game_cls(), players)

    if batch.exhaustive:
        results = new_match().run_exhaustive()
    else:
        results = [new_match().run() for _ in range(batch.batch_size)]
    return FitnessRecord.from_results(identities, results)


# =========================
# Candidate dispatch
# =========================
@dataclass(frozen=True)
class EvaluationTask:
    """One candidate genome to score; plain data so it can cross processes."""
    index: int
    batch: BatchConfig
    recipes: Tuple[Optional[str], Optional[str]]
    genetic_index: int
    seed: int

    @property
    def recipe(self) -> str:
        return self.recipes[self.genetic_index]


@dataclass
class EvaluationOutcome:
    index: int
    recipe: str
    score: float
    record: FitnessRecord


def evaluate_task(task: EvaluationTask) -> EvaluationOutcome:
    record = evaluate_batch(task.batch, task.recipes, random.Random(task.seed))
    identity = task.batch.game_kind.game_class.identities[task.genetic_index]
    return EvaluationOutcome(task.index, task.recipe, record.score(identity), record)


def dispatch(tasks: Sequence[EvaluationTask], workers: int = 1) -> List[EvaluationOutcome]:
    """
    Scores every task and returns the outcomes in completion order. A task
    that fails is logged and dropped; broken invariants stop the run.
    """
    outcomes: List[EvaluationOutcome] = []
    if workers <= 1 or len(tasks) <= 1:
        for task in tasks:
            try:
                outcomes.append(evaluate_task(task))
            except InvariantError:
                raise
            except Exception as e:
                logger.error(f"Evaluation of sample {task.index} failed: {e!r}")
        return outcomes

    with ProcessPoolExecutor(max_workers=workers) as executor:
        futures = {executor.submit(evaluate_task, task): task for task in tasks}
        for future in as_completed(futures):
            task = futures[future]
            try:
                outcomes.append(future.result())
            except InvariantError:
                raise
            except Exception as e:
                logger.error(f"Evaluation of sample {task.index} failed in worker: {e!r}")
    return outcomes
