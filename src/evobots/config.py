from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional, Tuple

from .errors import ConfigError
from .games import GameKind
from .players import BotKind


# =========================
# Configuration Parameters
# =========================
@dataclass
class BatchConfig:
    """What one fitness evaluation plays: which game, which bots, how often."""
    game: str = "naughts"
    bot_names: Tuple[str, str] = ("circuit", "random")
    batch_size: int = 1
    exhaustive: bool = False

    @property
    def game_kind(self) -> GameKind:
        return GameKind.parse(self.game)

    @property
    def bot_kinds(self) -> Tuple[BotKind, BotKind]:
        return BotKind.parse(self.bot_names[0]), BotKind.parse(self.bot_names[1])

    def validate(self) -> None:
        GameKind.parse(self.game)
        kinds = self.bot_kinds
        if self.exhaustive:
            oracles = sum(1 for k in kinds if k is BotKind.ORACLE)
            if oracles != 1:
                raise ConfigError("Exhaustive mode needs exactly one 'oracle' bot")
        elif self.batch_size < 1:
            raise ConfigError(f"Batch size must be at least 1, got {self.batch_size}")


@dataclass
class EvolutionConfig:
    num_generations: int = 10
    num_samples: int = 10
    keep_samples: int = 3
    wild_samples: int = 0
    workers: int = 6
    random_seed: Optional[int] = 7
    initial_threshold: float = -999.0
    threshold_smoothing: float = 0.2
    scores_path: Optional[str] = None
    batch: BatchConfig = field(default_factory=BatchConfig)

    def validate(self) -> None:
        self.batch.validate()
        if self.num_samples < 1:
            raise ConfigError("Evolution needs at least one sample per generation")
        if self.keep_samples < 1:
            raise ConfigError("Evolution needs to keep at least one survivor")
        if not 0.0 < self.threshold_smoothing <= 1.0:
            raise ConfigError(f"threshold_smoothing must be in (0, 1], got {self.threshold_smoothing}")
        if not any(k.is_genetic for k in self.batch.bot_kinds):
            raise ConfigError("Neither bot is a genetic bot")
