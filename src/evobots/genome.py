from __future__ import annotations
from abc import ABC, abstractmethod
import json
import math
import random
from typing import Any, Dict, List, Optional, Sequence, Union

from loguru import logger

from .errors import InvariantError, RecipeError
from .game import GameInfo

Recipe = Union[str, Dict[str, Any], None]


def logistic(x: float) -> float:
    return 1.0 / (1.0 + math.exp(-x))


def canonical_json(data: Any) -> str:
    """Stable text form of a recipe dict; equal genomes give equal strings."""
    return json.dumps(data, sort_keys=True, separators=(",", ":"))


def best_legal_move(ranks: Sequence[float], legal_moves: Sequence[int]) -> int:
    """
    The legal move with the highest rank; ties go to the lowest move index.
    Move indexes beyond the rank vector rank as 0.
    """
    if not legal_moves:
        raise InvariantError("decide() called with no legal moves")
    best_move = None
    best_rank = 0.0
    for move in sorted(legal_moves):
        rank = ranks[move] if 0 <= move < len(ranks) else 0
        if best_move is None or rank > best_rank:
            best_move = move
            best_rank = rank
    return best_move


class Genome(ABC):
    """
    A mutable decision function from a game's input vector to a move.
    Subclasses register themselves under ``kind`` so that recipes can be
    turned back into the right genome type.
    """
    kind: str = ""
    _registry: Dict[str, type] = {}

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        if cls.kind:
            Genome._registry[cls.kind] = cls

    @classmethod
    @abstractmethod
    def random(cls, game_info: GameInfo, rng: Optional[random.Random] = None) -> "Genome":
        ...

    @classmethod
    @abstractmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Genome":
        """Build from a recipe dict. Raises RecipeError on malformed input."""
        ...

    @abstractmethod
    def to_dict(self) -> Dict[str, Any]:
        ...

    @abstractmethod
    def decide(self, inputs: Sequence[float], legal_moves: Sequence[int]) -> int:
        ...

    @abstractmethod
    def mutate(self, rng: Optional[random.Random] = None) -> None:
        ...

    @abstractmethod
    def arity(self) -> tuple:
        """Shape that mutation must never change."""
        ...

    def serialize(self) -> str:
        return canonical_json(self.to_dict())

    def copy(self) -> "Genome":
        return type(self).from_dict(self.to_dict())

    @classmethod
    def deserialize(cls, recipe: Recipe) -> "Genome":
        """
        Rebuild a genome from ``serialize()`` output or its dict form.
        A missing or malformed recipe gives the empty genome of ``cls``
        (logged); broken structural invariants still raise InvariantError.
        """
        try:
            data = _recipe_dict(recipe)
            kind = data.get("kind", cls.kind)
            if not isinstance(kind, str):
                raise RecipeError(f"Genome kind must be a string, got {type(kind).__name__}")
            target = Genome._registry.get(kind)
            if target is None:
                raise RecipeError(f"Unknown genome kind: {kind!r}")
            if cls.kind and target is not cls:
                raise RecipeError(f"Expected a {cls.kind} recipe, got {kind!r}")
            return target.from_dict(data)
        except RecipeError as e:
            logger.warning(f"Invalid recipe, using empty genome: {e}")
            if not cls.kind:
                raise InvariantError("No genome kind to fall back to") from e
            return cls.empty()

    @classmethod
    def empty(cls) -> "Genome":
        return cls.from_dict({"kind": cls.kind})


def _recipe_dict(recipe: Recipe) -> Dict[str, Any]:
    if recipe is None or recipe == "":
        raise RecipeError("Recipe is empty")
    if isinstance(recipe, str):
        try:
            recipe = json.loads(recipe)
        except json.JSONDecodeError as e:
            raise RecipeError(f"Recipe is not valid JSON: {e}") from e
    if not isinstance(recipe, dict):
        raise RecipeError(f"Recipe must be an object, got {type(recipe).__name__}")
    return recipe


def check_inputs(inputs: Sequence[float], expected: int) -> None:
    if len(inputs) != expected:
        raise InvariantError(f"Expected {expected} inputs, got {len(inputs)}")


def sample_indexes(rng: random.Random, upper: int, count: int) -> List[int]:
    """``count`` distinct indexes from ``range(upper)``, fewer if not enough exist."""
    return rng.sample(range(upper), min(count, upper))
