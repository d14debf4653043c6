from __future__ import annotations
from typing import Dict, List, Optional, Tuple

from ..game import Game

EMPTY = "-"
WIN_LINES = ((0, 1, 2), (3, 4, 5), (6, 7, 8), (0, 3, 6), (1, 4, 7), (2, 5, 8), (0, 4, 8), (2, 4, 6))


class NaughtsGame(Game):
    """
    Naughts and crosses on a 3x3 board, stored as 9 characters read left to
    right, top to bottom:

         0 | 1 | 2
        -----------
         3 | 4 | 5
        -----------
         6 | 7 | 8
    """
    identities = ("X", "O")
    input_count = 18
    output_count = 9
    score_base = 10.0

    def __init__(self, board: str = EMPTY * 9):
        self.board = board

    def getat(self, pos: int) -> str:
        return self.board[pos]

    def setat(self, pos: int, identity: str) -> None:
        self.board = self.board[:pos] + identity + self.board[pos + 1:]

    def possible_moves(self) -> List[int]:
        return [i for i, c in enumerate(self.board) if c == EMPTY]

    def get_inputs(self, identity: str) -> Tuple[List[float], List[int]]:
        own = [1.0 if c == identity else 0.0 for c in self.board]
        other = [0.0 if c in (identity, EMPTY) else 1.0 for c in self.board]
        return own + other, self.possible_moves()

    def apply_move(self, identity: str, move: int) -> None:
        self.setat(move, identity)

    def winner(self) -> Optional[str]:
        for a, b, c in WIN_LINES:
            if self.board[a] != EMPTY and self.board[a] == self.board[b] == self.board[c]:
                return self.board[a]
        return None

    def is_ended(self) -> bool:
        return self.winner() is not None or EMPTY not in self.board

    def to_dict(self) -> Dict:
        return {"data": self.board}

    def from_dict(self, data: Dict) -> None:
        self.board = str(data.get("data", EMPTY * 9))

    def render(self) -> str:
        rows = []
        for r in range(3):
            cells = [" " if c == EMPTY else c for c in self.board[r * 3:r * 3 + 3]]
            rows.append(f" {cells[0]} | {cells[1]} | {cells[2]} ")
        return "\n-----------\n".join(rows)
