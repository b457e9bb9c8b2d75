"""Session state for one tic-tac-toe game and its turn sequencing."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple
import logging
import threading

from .ai import HeuristicAI
from .rules import (
    Board,
    Cell,
    GameResult,
    Marker,
    empty_board,
    evaluate,
    is_legal_move,
    other,
)

logger = logging.getLogger(__name__)

TWO_PLAYER = "2p"
VS_COMPUTER = "cpu"
MODES: Tuple[str, ...] = (TWO_PLAYER, VS_COMPUTER)

HUMAN = "human"
COMPUTER = "computer"
COMPUTER_MARKER: Marker = "O"


@dataclass(frozen=True)
class GameSnapshot:
    """Consistent copy of a session for rendering."""

    board: Tuple[Cell, ...]
    current_player: Marker
    turn_owner: str
    mode: str
    result: GameResult
    computer_pending: bool
    generation: int


@dataclass
class TicTacToeGame:
    """Mutable game session.

    All mutations go through ``play``, ``reset`` and ``set_mode``; each one
    recomputes ``result`` from the full board before returning it. In
    ``VS_COMPUTER`` mode the computer plays O: after the human's move it is
    applied inline when ``think_delay`` is zero, otherwise on a timer that a
    reset cancels.
    """

    mode: str = TWO_PLAYER
    think_delay: float = 0.0
    ai: HeuristicAI = field(default_factory=HeuristicAI)

    board: Board = field(default_factory=empty_board, init=False)
    current_player: Marker = field(default="X", init=False)
    result: GameResult = field(default_factory=GameResult.in_progress, init=False)
    # Bumped on every reset; pending computer moves carry the value they saw.
    generation: int = field(default=0, init=False)

    _timer: Optional[threading.Timer] = field(default=None, init=False, repr=False)
    _lock: threading.RLock = field(
        default_factory=threading.RLock, init=False, repr=False
    )

    def __post_init__(self) -> None:
        self._check_mode(self.mode)
        if self.ai.player != COMPUTER_MARKER:
            raise ValueError(
                f"The computer always plays {COMPUTER_MARKER}, "
                f"got an AI for {self.ai.player!r}."
            )

    # ---- state ----

    @property
    def turn_owner(self) -> str:
        if self.mode == VS_COMPUTER and self.current_player == COMPUTER_MARKER:
            return COMPUTER
        return HUMAN

    def current_turn_owner(self) -> str:
        return self.turn_owner

    @property
    def computer_pending(self) -> bool:
        return self._timer is not None

    def snapshot(self) -> GameSnapshot:
        with self._lock:
            return GameSnapshot(
                board=tuple(self.board),
                current_player=self.current_player,
                turn_owner=self.turn_owner,
                mode=self.mode,
                result=self.result,
                computer_pending=self.computer_pending,
                generation=self.generation,
            )

    # ---- transitions ----

    def reset(self, mode: Optional[str] = None) -> GameResult:
        """Start a fresh game, optionally switching mode."""
        if mode is not None:
            self._check_mode(mode)
        with self._lock:
            self._cancel_pending()
            self.generation += 1
            if mode is not None:
                self.mode = mode
            self.board = empty_board()
            self.current_player = "X"
            self.result = evaluate(self.board)
            logger.info(
                "New game (mode=%s, generation=%d)", self.mode, self.generation
            )
            return self.result

    def set_mode(self, mode: str) -> GameResult:
        return self.reset(mode)

    def play(self, index: int) -> GameResult:
        """Play a human move at ``index``.

        Illegal moves, moves after the game ended and moves while the
        computer owns the turn leave the session untouched.
        """
        with self._lock:
            self.submit(index)
            return self.result

    def submit(self, index: int) -> Tuple[bool, GameSnapshot]:
        """Like ``play``, but report whether the move landed.

        The outcome and the snapshot are taken under one lock acquisition,
        so concurrent callers never both see the same cell accepted.
        """
        with self._lock:
            accepted = False
            if self.turn_owner == COMPUTER:
                logger.debug("Ignored move %r: computer to play", index)
            elif self._place(index):
                accepted = True
                self._after_move()
            return accepted, self.snapshot()

    # ---- helpers ----

    def _place(self, index: int) -> bool:
        if self.result.is_over:
            logger.debug("Ignored move %r: game is over", index)
            return False
        if not is_legal_move(self.board, index):
            logger.debug("Ignored move %r: illegal on this board", index)
            return False

        player = self.current_player
        self.board[index] = player
        self.result = evaluate(self.board)
        if not self.result.is_over:
            self.current_player = other(player)
        logger.debug("%s played %d -> %s", player, index, self.result.status)
        return True

    def _after_move(self) -> None:
        if self.result.is_over or self.turn_owner != COMPUTER:
            return
        if self.think_delay <= 0:
            self._computer_turn(self.generation)
            return
        timer = threading.Timer(
            self.think_delay, self._computer_turn, args=(self.generation,)
        )
        timer.daemon = True
        self._timer = timer
        timer.start()

    def _computer_turn(self, generation: int) -> None:
        with self._lock:
            if generation != self.generation:
                logger.debug(
                    "Discarded computer move scheduled for generation %d "
                    "(current %d)",
                    generation,
                    self.generation,
                )
                return
            self._timer = None
            if self.result.is_over or self.turn_owner != COMPUTER:
                return
            move = self.ai.choose(self.board)
            if move is not None:
                self._place(move)

    def _cancel_pending(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    @staticmethod
    def _check_mode(mode: str) -> None:
        if mode not in MODES:
            raise ValueError(
                f"Unsupported mode {mode!r}. Choose one of {', '.join(MODES)}."
            )
