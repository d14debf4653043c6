from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

# =========================
# Scoring constants
# =========================
WIN_MULTIPLIER = 1.0
LOSS_MULTIPLIER = -10.0
DRAW_MULTIPLIER = 0.0
DISQUALIFIED_SCORE = -999.0


@dataclass(frozen=True)
class GameInfo:
    """Input/output sizes a genome must be built for."""
    input_count: int
    output_count: int


class Outcome(Enum):
    WIN = "win"
    TIE = "tie"


@dataclass
class MatchResult:
    """Outcome of one finished match."""
    scores: Dict[str, float] = field(default_factory=dict)
    outcome: Outcome = Outcome.TIE
    winner: Optional[str] = None
    disqualified: Optional[str] = None
    num_turns: Tuple[int, int] = (0, 0)

    @property
    def is_tie(self) -> bool:
        return self.outcome is Outcome.TIE

    @property
    def is_win(self) -> bool:
        return self.outcome is Outcome.WIN

    def score(self, identity: str) -> float:
        return self.scores[identity]

    def describe(self) -> str:
        scores = ", ".join(f"{k}={v:.1f}" for k, v in self.scores.items())
        if self.disqualified is not None:
            return f"{self.disqualified} disqualified ({scores})"
        if self.is_tie:
            return f"Draw ({scores})"
        return f"{self.winner} wins ({scores})"


class Game(ABC):
    """
    Abstract base class for a two-player board game.
    The match simulator only talks to a game through this contract; board
    rules (win lines, gravity, adjacency) live entirely in the subclass.
    """
    identities: Tuple[str, str] = ("X", "O")
    input_count: int = 0
    output_count: int = 0
    score_base: float = 10.0

    @classmethod
    def info(cls) -> GameInfo:
        return GameInfo(cls.input_count, cls.output_count)

    @abstractmethod
    def get_inputs(self, identity: str) -> Tuple[List[float], List[int]]:
        """
        Returns the input vector seen by ``identity`` and the sorted list of
        legal moves. The list must not be empty while the game is running.
        """
        ...

    @abstractmethod
    def apply_move(self, identity: str, move: int) -> None:
        """Places ``identity``'s piece for a move already checked to be legal."""
        ...

    @abstractmethod
    def winner(self) -> Optional[str]:
        """The identity that has won, or None."""
        ...

    @abstractmethod
    def is_ended(self) -> bool:
        ...

    @abstractmethod
    def to_dict(self) -> Dict:
        ...

    @abstractmethod
    def from_dict(self, data: Dict) -> None:
        ...

    def render(self) -> str:
        """Optional: a printable picture of the board."""
        return ""

    def calculate_score(self, num_turns: int, outcome: int) -> float:
        """
        Fewer turns to win scores higher; a loss costs ten times as much.
        ``outcome`` is 1 for a win, -1 for a loss and 0 for a draw.
        """
        if outcome > 0:
            multiplier = WIN_MULTIPLIER
        elif outcome < 0:
            multiplier = LOSS_MULTIPLIER
        else:
            multiplier = DRAW_MULTIPLIER
        return (self.score_base - num_turns) * multiplier

    def result(self, num_turns: Sequence[int]) -> MatchResult:
        """Scores a finished game from the per-side turn counts."""
        winner = self.winner()
        result = MatchResult(num_turns=(num_turns[0], num_turns[1]))
        if winner is None:
            result.outcome = Outcome.TIE
        else:
            result.outcome = Outcome.WIN
            result.winner = winner
        for i, identity in enumerate(self.identities):
            if winner is None:
                outcome = 0
            else:
                outcome = 1 if identity == winner else -1
            result.scores[identity] = self.calculate_score(num_turns[i], outcome)
        return result

    def disqualify(self, identity: str, num_turns: Sequence[int]) -> MatchResult:
        """Result for a match cut short by an illegal move from ``identity``."""
        other = self.identities[1] if identity == self.identities[0] else self.identities[0]
        result = MatchResult(
            scores={i: 0.0 for i in self.identities},
            outcome=Outcome.WIN,
            winner=other,
            disqualified=identity,
            num_turns=(num_turns[0], num_turns[1]),
        )
        result.scores[identity] = DISQUALIFIED_SCORE
        return result
