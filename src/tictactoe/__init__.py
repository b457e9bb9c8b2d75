"""Tic-tac-toe package exposing the rules, the computer player, and the web application."""

from .ai import HeuristicAI, choose_move
from .game import TicTacToeGame
from .rules import GameResult, evaluate, is_legal_move
from .ui import app

__all__ = [
    "GameResult",
    "HeuristicAI",
    "TicTacToeGame",
    "app",
    "choose_move",
    "evaluate",
    "is_legal_move",
]
