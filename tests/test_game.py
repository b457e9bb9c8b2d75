"""Unit tests for the game session controller."""

import threading
import time

import pytest

from tictactoe.ai import HeuristicAI
from tictactoe.game import (
    COMPUTER,
    HUMAN,
    TWO_PLAYER,
    VS_COMPUTER,
    TicTacToeGame,
)
from tictactoe.rules import DRAW, IN_PROGRESS, WIN, GameResult


class FirstChoice:
    def choice(self, seq):
        return seq[0]


def _cpu_game(think_delay=0.0):
    return TicTacToeGame(
        mode=VS_COMPUTER, think_delay=think_delay, ai=HeuristicAI(rng=FirstChoice())
    )


def _filled(game):
    return sum(1 for c in game.board if c is not None)


def test_initial_state():
    game = TicTacToeGame()
    assert game.board == [None] * 9
    assert game.current_player == "X"
    assert game.mode == TWO_PLAYER
    assert game.result == GameResult.in_progress()
    assert game.turn_owner == HUMAN


def test_two_player_turns_alternate():
    game = TicTacToeGame()
    assert game.play(0).status == IN_PROGRESS
    assert game.current_player == "O"
    game.play(4)
    assert game.current_player == "X"
    assert game.board[0] == "X"
    assert game.board[4] == "O"
    assert game.current_turn_owner() == HUMAN


def test_top_row_win_then_moves_are_ignored():
    game = TicTacToeGame()
    for index in (0, 4, 1, 5):
        game.play(index)
    result = game.play(2)
    assert result == GameResult.win("X", (0, 1, 2))
    assert game.current_player == "X"

    before = list(game.board)
    assert game.play(3) == result
    assert game.board == before


def test_draw_stops_play():
    game = TicTacToeGame()
    # X O X / X O O / O X X
    for index in (0, 1, 2, 4, 3, 5, 7, 6, 8):
        game.play(index)
    assert game.result.status == DRAW
    assert game.board == ["X", "O", "X", "X", "O", "O", "O", "X", "X"]


def test_illegal_moves_are_noops():
    game = TicTacToeGame()
    game.play(4)
    before = list(game.board)
    for index in (4, -1, 9, 100):
        assert game.play(index).status == IN_PROGRESS
        assert game.board == before
        assert game.current_player == "O"


def test_reset_restores_fresh_game_and_keeps_mode():
    game = _cpu_game()
    game.play(0)
    generation = game.generation
    result = game.reset()
    assert result == GameResult.in_progress()
    assert game.board == [None] * 9
    assert game.current_player == "X"
    assert game.mode == VS_COMPUTER
    assert game.generation == generation + 1


def test_reset_after_win_with_new_mode():
    game = TicTacToeGame()
    for index in (0, 3, 1, 4, 2):
        game.play(index)
    assert game.result.status == WIN
    game.reset(VS_COMPUTER)
    assert game.mode == VS_COMPUTER
    assert game.result.status == IN_PROGRESS
    assert game.board == [None] * 9


def test_set_mode_restarts_game():
    game = TicTacToeGame()
    game.play(0)
    game.set_mode(VS_COMPUTER)
    assert game.board == [None] * 9
    assert game.mode == VS_COMPUTER
    assert game.current_player == "X"


def test_unknown_mode_rejected():
    with pytest.raises(ValueError):
        TicTacToeGame(mode="online")
    game = TicTacToeGame()
    with pytest.raises(ValueError):
        game.set_mode("online")
    assert game.mode == TWO_PLAYER


def test_computer_replies_inline_without_delay():
    game = _cpu_game()
    game.play(0)
    assert _filled(game) == 2
    assert game.board[4] == "O"
    assert game.current_player == "X"
    assert game.turn_owner == HUMAN
    assert not game.computer_pending


def test_computer_blocks_and_wins():
    game = _cpu_game()
    game.play(0)  # O takes center
    game.play(1)  # O blocks at 2
    assert game.board[2] == "O"
    game.play(8)  # O completes 2-4-6
    assert game.result == GameResult.win("O", (2, 4, 6))


def test_human_cannot_move_during_computer_turn():
    game = _cpu_game(think_delay=60.0)
    game.play(0)
    assert game.turn_owner == COMPUTER
    assert game.computer_pending
    game.play(1)
    assert game.board[1] is None
    assert _filled(game) == 1
    game.reset()


def test_delayed_computer_move_is_applied():
    game = _cpu_game(think_delay=0.2)
    game.play(0)
    assert _filled(game) == 1

    deadline = time.monotonic() + 5.0
    while game.computer_pending and time.monotonic() < deadline:
        time.sleep(0.01)

    assert not game.computer_pending
    assert _filled(game) == 2
    assert game.board[4] == "O"
    assert game.turn_owner == HUMAN


def test_reset_cancels_pending_computer_move():
    game = _cpu_game(think_delay=60.0)
    game.play(0)
    stale_generation = game.generation
    game.reset()
    assert not game.computer_pending
    game.play(8)
    assert game.turn_owner == COMPUTER

    # A callback that already fired for the old game must not touch this one.
    game._computer_turn(stale_generation)
    assert game.board == [None] * 8 + ["X"]
    assert game.computer_pending
    game.reset()


def test_snapshot_is_consistent_copy():
    game = TicTacToeGame()
    game.play(0)
    snap = game.snapshot()
    game.play(1)
    assert snap.board == ("X",) + (None,) * 8
    assert snap.current_player == "O"
    assert snap.result.status == IN_PROGRESS
    assert snap.mode == TWO_PLAYER


def test_fired_timer_after_reset_leaves_new_game_alone():
    game = _cpu_game(think_delay=0.05)
    with game._lock:
        game.play(0)
        # The timer fires here and blocks on the session lock.
        time.sleep(0.3)
        game.reset()
    time.sleep(0.3)

    assert game.board == [None] * 9
    assert game.current_player == "X"
    assert not game.computer_pending


def test_submit_reports_whether_move_landed():
    game = TicTacToeGame()
    accepted, snap = game.submit(0)
    assert accepted is True
    assert snap.board[0] == "X"

    accepted, snap = game.submit(0)
    assert accepted is False
    assert snap.current_player == "O"

    for index in (-1, 9, True):
        assert game.submit(index)[0] is False


def test_submit_rejected_during_computer_turn():
    game = _cpu_game(think_delay=60.0)
    assert game.submit(0)[0] is True
    accepted, snap = game.submit(1)
    assert accepted is False
    assert snap.turn_owner == COMPUTER
    assert snap.computer_pending
    game.reset()


def test_concurrent_moves_on_same_cell_accept_once():
    game = TicTacToeGame()
    barrier = threading.Barrier(4)
    outcomes = []

    def worker():
        barrier.wait()
        outcomes.append(game.submit(0)[0])

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sorted(outcomes) == [False, False, False, True]
    assert _filled(game) == 1
    assert game.board[0] == "X"


def test_ai_for_wrong_marker_rejected():
    ai = HeuristicAI(player="X")
    with pytest.raises(ValueError):
        TicTacToeGame(mode=VS_COMPUTER, ai=ai)
    assert ai.player == "X"
