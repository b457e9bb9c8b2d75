"""Rule-based computer opponent: win, block, center, corner, then anything."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Protocol, Sequence
import random

from .rules import CENTER, CORNERS, Board, Cell, Marker, empty_cells, other, winner


class RandomSource(Protocol):
    def choice(self, seq: Sequence[int]) -> int: ...


def _completing_cell(board: Sequence[Cell], player: Marker) -> Optional[int]:
    """Lowest empty index that would complete a line for ``player``."""
    for idx in empty_cells(board):
        trial: Board = list(board)
        trial[idx] = player
        if winner(trial) == player:
            return idx
    return None


def choose_move(
    board: Sequence[Cell], player: Marker, rng: Optional[RandomSource] = None
) -> Optional[int]:
    """Pick a cell for ``player`` or return None when the board is full.

    Tiers are tried in order and each one looks at every empty cell:

    1. a cell that wins immediately (lowest index first)
    2. a cell that blocks an immediate opponent win (lowest index first)
    3. the center
    4. a random free corner
    5. a random free cell
    """
    rng = rng if rng is not None else random

    move = _completing_cell(board, player)
    if move is not None:
        return move
    move = _completing_cell(board, other(player))
    if move is not None:
        return move

    if board[CENTER] is None:
        return CENTER

    corners = [i for i in CORNERS if board[i] is None]
    if corners:
        return rng.choice(corners)

    empties = empty_cells(board)
    if empties:
        return rng.choice(empties)
    return None


@dataclass
class HeuristicAI:
    """Computer player bound to one marker.

    ``rng`` only matters for the corner and fallback tiers; pass a seeded
    ``random.Random`` to make those picks reproducible.
    """

    player: Marker = "O"
    rng: RandomSource = field(default_factory=random.Random, repr=False)

    def choose(self, board: Sequence[Cell]) -> Optional[int]:
        return choose_move(board, self.player, self.rng)
