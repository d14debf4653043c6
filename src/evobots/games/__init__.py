"""Reference board games implementing the evobots game contract."""
from __future__ import annotations
from enum import Enum
from typing import Type

from ..errors import ConfigError
from ..game import Game
from .connect4 import Connect4Game
from .naughts import NaughtsGame


class GameKind(Enum):
    NAUGHTS = "naughts"
    CONNECT4 = "connect4"

    @classmethod
    def parse(cls, name: str) -> "GameKind":
        try:
            return cls(name.lower())
        except ValueError:
            choices = ", ".join(k.value for k in cls)
            raise ConfigError(f"Unknown game: {name!r} (choose from {choices})") from None

    @property
    def game_class(self) -> Type[Game]:
        return _GAME_CLASSES[self]

    def create(self) -> Game:
        return self.game_class()


_GAME_CLASSES = {
    GameKind.NAUGHTS: NaughtsGame,
    GameKind.CONNECT4: Connect4Game,
}

__all__ = ["GameKind", "NaughtsGame", "Connect4Game"]
