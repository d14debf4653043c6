from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence

from loguru import logger

from .errors import ConfigError, InvariantError
from .game import Game, MatchResult
from .players import Player


class MatchStatus(Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    ENDED = "ended"


@dataclass
class MatchState:
    """Everything needed to resume a match: board, turn counts, side to move."""
    board: Dict = field(default_factory=dict)
    num_turns: List[int] = field(default_factory=lambda: [0, 0])
    current_index: int = 0
    disqualified: Optional[str] = None


class Match:
    """
    Alternates turns between two players over one game.

    ``run`` plays a single line. ``run_exhaustive`` lets the oracle side branch
    on every move it offers and plays each branch to the end, depth first.
    """

    def __init__(self, game: Game, players: Sequence[Player], verbose: bool = False):
        if len(players) != 2:
            raise ConfigError(f"A match needs exactly two players, got {len(players)}")
        self.game = game
        self.players = list(players)
        self.verbose = verbose
        self.status = MatchStatus.NOT_STARTED
        self.num_turns = [0, 0]
        self.current_index = 0
        self.disqualified: Optional[str] = None

    @property
    def current_identity(self) -> str:
        return self.game.identities[self.current_index]

    def start(self) -> None:
        self.num_turns = [0, 0]
        self.current_index = 0
        self.disqualified = None
        self.status = MatchStatus.IN_PROGRESS
        if self.game.is_ended():
            self.status = MatchStatus.ENDED

    # ----- snapshot / restore -----
    def snapshot(self) -> MatchState:
        return MatchState(
            board=self.game.to_dict(),
            num_turns=list(self.num_turns),
            current_index=self.current_index,
            disqualified=self.disqualified,
        )

    def restore(self, state: MatchState) -> None:
        self.game.from_dict(state.board)
        self.num_turns = list(state.num_turns)
        self.current_index = state.current_index
        self.disqualified = state.disqualified
        ended = state.disqualified is not None or self.game.is_ended()
        self.status = MatchStatus.ENDED if ended else MatchStatus.IN_PROGRESS

    # ----- turns -----
    def _prepare_turn(self):
        if self.status is not MatchStatus.IN_PROGRESS:
            raise InvariantError(f"Cannot take a turn in a match that is {self.status.value}")
        identity = self.current_identity
        inputs, legal_moves = self.game.get_inputs(identity)
        if len(inputs) != self.game.input_count:
            raise InvariantError(
                f"Incorrect number of inputs from get_inputs(): expected {self.game.input_count}, got {len(inputs)}"
            )
        if not legal_moves:
            raise InvariantError(f"No legal moves for {identity} in a running match")
        self.num_turns[self.current_index] += 1
        return identity, inputs, legal_moves

    def _play(self, identity: str, move: int, legal_moves: Sequence[int]) -> None:
        if move not in legal_moves:
            logger.debug(f"{identity} played illegal move {move} (legal: {list(legal_moves)}); disqualified")
            self.disqualified = identity
            self.status = MatchStatus.ENDED
            return
        self.game.apply_move(identity, move)
        self.current_index = (self.current_index + 1) % 2
        if self.game.is_ended():
            self.status = MatchStatus.ENDED

    def do_turn(self) -> None:
        identity, inputs, legal_moves = self._prepare_turn()
        move = self.players[self.current_index].decide(inputs, legal_moves)
        self._play(identity, move, legal_moves)
        if self.verbose:
            print(f"{identity} plays {move}")
            print(self.game.render())

    def result(self) -> MatchResult:
        if self.status is not MatchStatus.ENDED:
            raise InvariantError("Match has not ended")
        if self.disqualified is not None:
            return self.game.disqualify(self.disqualified, self.num_turns)
        return self.game.result(self.num_turns)

    def run(self) -> MatchResult:
        self.start()
        while self.status is MatchStatus.IN_PROGRESS:
            self.do_turn()
        return self.result()

    def run_exhaustive(self) -> List[MatchResult]:
        """
        Plays every branch the oracle side offers. Each oracle turn forks one
        independent snapshot per returned move; every branch that ends adds
        one result.
        """
        oracles = [i for i, p in enumerate(self.players) if p.is_oracle]
        if len(oracles) != 1:
            raise ConfigError(f"Exhaustive play needs exactly one oracle player, found {len(oracles)}")

        self.start()
        results: List[MatchResult] = []
        stack = [self.snapshot()]
        while stack:
            state = stack.pop()
            self.restore(state)
            if self.status is MatchStatus.ENDED:
                results.append(self.result())
                continue

            identity, inputs, legal_moves = self._prepare_turn()
            player = self.players[self.current_index]
            moves = player.decide_all(inputs, legal_moves)
            if not moves:
                raise InvariantError(f"{player.label} offered no moves")
            turn_state = self.snapshot()
            for move in moves:
                self.restore(turn_state)
                self._play(identity, move, legal_moves)
                stack.append(self.snapshot())
        return results
