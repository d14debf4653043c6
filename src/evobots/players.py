from __future__ import annotations
from abc import ABC, abstractmethod
from enum import Enum
import random
from typing import List, Optional, Sequence, Type

from .circuit import CircuitGenome
from .errors import ConfigError
from .game import GameInfo
from .genome import Genome, Recipe
from .network import NetworkGenome


class Player(ABC):
    """A decision source for one side of a match."""
    name: str = "Player"
    is_genetic: bool = False
    is_oracle: bool = False

    def __init__(self, identity: str = "X"):
        self.identity = identity

    @abstractmethod
    def decide(self, inputs: Sequence[float], legal_moves: Sequence[int]) -> int:
        ...

    def decide_all(self, inputs: Sequence[float], legal_moves: Sequence[int]) -> List[int]:
        """Moves to branch on in exhaustive play; ordinary players pick one."""
        return [self.decide(inputs, legal_moves)]

    def snapshot(self) -> Optional[str]:
        """Serialized state needed to rebuild this player, if any."""
        return None

    @property
    def label(self) -> str:
        return f"{self.name} {self.identity}"


class GenomePlayer(Player):
    is_genetic = True

    def __init__(self, genome: Genome, identity: str = "X"):
        super().__init__(identity)
        self.genome = genome
        self.name = f"{type(genome).__name__}Bot"

    def decide(self, inputs: Sequence[float], legal_moves: Sequence[int]) -> int:
        return self.genome.decide(inputs, legal_moves)

    def snapshot(self) -> Optional[str]:
        return self.genome.serialize()


class RandomPlayer(Player):
    name = "RandomBot"

    def __init__(self, identity: str = "X", rng: Optional[random.Random] = None):
        super().__init__(identity)
        self.rng = rng or random.Random()

    def decide(self, inputs: Sequence[float], legal_moves: Sequence[int]) -> int:
        return self.rng.choice(list(legal_moves))


class OraclePlayer(Player):
    """Explores every legal move when the match runs exhaustively."""
    name = "OmniBot"
    is_oracle = True

    def decide(self, inputs: Sequence[float], legal_moves: Sequence[int]) -> int:
        return min(legal_moves)

    def decide_all(self, inputs: Sequence[float], legal_moves: Sequence[int]) -> List[int]:
        return sorted(legal_moves)


# =========================
# Bot registry
# =========================
class BotKind(Enum):
    CIRCUIT = "circuit"
    NETWORK = "network"
    RANDOM = "random"
    ORACLE = "oracle"

    @classmethod
    def parse(cls, name: str) -> "BotKind":
        try:
            return cls(name.lower())
        except ValueError:
            choices = ", ".join(k.value for k in cls)
            raise ConfigError(f"Unknown bot: {name!r} (choose from {choices})") from None

    @property
    def genome_class(self) -> Optional[Type[Genome]]:
        return {BotKind.CIRCUIT: CircuitGenome, BotKind.NETWORK: NetworkGenome}.get(self)

    @property
    def is_genetic(self) -> bool:
        return self.genome_class is not None

    def new_genome(self, game_info: GameInfo, rng: Optional[random.Random] = None) -> Genome:
        if self.genome_class is None:
            raise ConfigError(f"Bot {self.value!r} has no genome")
        return self.genome_class.random(game_info, rng)

    def load_genome(self, recipe: Recipe) -> Genome:
        if self.genome_class is None:
            raise ConfigError(f"Bot {self.value!r} has no genome")
        return self.genome_class.deserialize(recipe)


def create_player(
    kind: BotKind,
    game_info: GameInfo,
    identity: str,
    recipe: Recipe = None,
    rng: Optional[random.Random] = None,
) -> Player:
    """
    Builds a player. Genetic kinds are rebuilt from ``recipe`` when one is
    given, otherwise they get a fresh random genome.
    """
    if kind.is_genetic:
        genome = kind.load_genome(recipe) if recipe is not None else kind.new_genome(game_info, rng)
        return GenomePlayer(genome, identity)
    if kind is BotKind.RANDOM:
        return RandomPlayer(identity, rng)
    return OraclePlayer(identity)
