"""Pure rules for a 3x3 tic-tac-toe board: wins, draws and move legality."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

Marker = str  # "X" or "O"
Cell = Optional[Marker]  # None for empty
Board = List[Cell]
Line = Tuple[int, int, int]

BOARD_SIZE = 3
CELL_COUNT = BOARD_SIZE * BOARD_SIZE
MARKERS: Tuple[Marker, Marker] = ("X", "O")

IN_PROGRESS = "in_progress"
WIN = "win"
DRAW = "draw"

# Rows, then columns, then diagonals.
WINNING_LINES: Tuple[Line, ...] = (
    (0, 1, 2),
    (3, 4, 5),
    (6, 7, 8),
    (0, 3, 6),
    (1, 4, 7),
    (2, 5, 8),
    (0, 4, 8),
    (2, 4, 6),
)
CORNERS: Tuple[int, ...] = (0, 2, 6, 8)
CENTER = 4


@dataclass(frozen=True)
class GameResult:
    """Outcome of a board: still running, won along ``line``, or drawn."""

    status: str = IN_PROGRESS
    winner: Optional[Marker] = None
    line: Optional[Line] = None

    @classmethod
    def in_progress(cls) -> "GameResult":
        return cls()

    @classmethod
    def win(cls, marker: Marker, line: Line) -> "GameResult":
        return cls(status=WIN, winner=marker, line=line)

    @classmethod
    def draw(cls) -> "GameResult":
        return cls(status=DRAW)

    @property
    def is_over(self) -> bool:
        return self.status != IN_PROGRESS


def empty_board() -> Board:
    return [None] * CELL_COUNT


def other(marker: Marker) -> Marker:
    return "O" if marker == "X" else "X"


def empty_cells(board: Sequence[Cell]) -> List[int]:
    return [i for i, c in enumerate(board) if c is None]


def winning_line(board: Sequence[Cell]) -> Optional[Line]:
    """First fully marked line in scan order, or None."""
    for line in WINNING_LINES:
        a, b, c = line
        v = board[a]
        if v is not None and v == board[b] == board[c]:
            return line
    return None


def winner(board: Sequence[Cell]) -> Optional[Marker]:
    line = winning_line(board)
    return board[line[0]] if line else None


def is_draw(board: Sequence[Cell]) -> bool:
    return winning_line(board) is None and all(c is not None for c in board)


def evaluate(board: Sequence[Cell]) -> GameResult:
    """Compute the result of ``board`` from scratch.

    A completed line wins even on a full board; otherwise a full board is a
    draw and anything else is still in progress.
    """
    line = winning_line(board)
    if line is not None:
        return GameResult.win(board[line[0]], line)  # type: ignore[arg-type]
    if all(c is not None for c in board):
        return GameResult.draw()
    return GameResult.in_progress()


def is_legal_move(board: Sequence[Cell], index: object) -> bool:
    # bool is an int subclass; True must not address cell 1
    if not isinstance(index, int) or isinstance(index, bool):
        return False
    return 0 <= index < CELL_COUNT and board[index] is None
