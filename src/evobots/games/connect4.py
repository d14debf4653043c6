from __future__ import annotations
from typing import Dict, List, Optional, Tuple

from ..game import Game

WIDTH = 7
HEIGHT = 7
EMPTY = " "
# right, up, up-left, up-right
DIRECTIONS = ((1, 0), (0, 1), (-1, 1), (1, 1))


class Connect4Game(Game):
    """
    Four in a row on a 7x7 board with gravity. Cells are stored row by row
    from the bottom row upwards; a move is a column number.
    """
    identities = ("X", "O")
    input_count = WIDTH * HEIGHT * 2
    output_count = WIDTH
    score_base = 25.0

    def __init__(self, data: str = EMPTY * (WIDTH * HEIGHT)):
        self.data = data

    @staticmethod
    def index(col: int, row: int) -> int:
        return row * WIDTH + col

    def getat(self, col: int, row: int) -> str:
        return self.data[self.index(col, row)]

    def drop(self, col: int, identity: str) -> None:
        for row in range(HEIGHT):
            if self.getat(col, row) == EMPTY:
                pos = self.index(col, row)
                self.data = self.data[:pos] + identity + self.data[pos + 1:]
                return
        raise ValueError(f"Column {col} is full")

    def possible_moves(self) -> List[int]:
        return [col for col in range(WIDTH) if self.getat(col, HEIGHT - 1) == EMPTY]

    def get_inputs(self, identity: str) -> Tuple[List[float], List[int]]:
        own = [1.0 if c == identity else 0.0 for c in self.data]
        other = [0.0 if c in (identity, EMPTY) else 1.0 for c in self.data]
        return own + other, self.possible_moves()

    def apply_move(self, identity: str, move: int) -> None:
        self.drop(move, identity)

    def winner(self) -> Optional[str]:
        for row in range(HEIGHT):
            for col in range(WIDTH):
                c = self.getat(col, row)
                if c == EMPTY:
                    continue
                for dx, dy in DIRECTIONS:
                    end_col, end_row = col + 3 * dx, row + 3 * dy
                    if not (0 <= end_col < WIDTH and end_row < HEIGHT):
                        continue
                    if all(self.getat(col + k * dx, row + k * dy) == c for k in range(1, 4)):
                        return c
        return None

    def is_ended(self) -> bool:
        return self.winner() is not None or EMPTY not in self.data

    def to_dict(self) -> Dict:
        return {"data": self.data}

    def from_dict(self, data: Dict) -> None:
        self.data = str(data.get("data", EMPTY * (WIDTH * HEIGHT)))

    def render(self) -> str:
        divider = "-" * 27
        lines = []
        for row in reversed(range(HEIGHT)):
            cells = " | ".join(self.getat(col, row) for col in range(WIDTH))
            lines.append(f"| {cells} |")
            lines.append(f"|{divider}|" if row > 0 else f"\\{divider}/")
        return "\n".join(lines)
