"""FastAPI-powered browser UI for playing tic-tac-toe."""

from __future__ import annotations

import logging
import os
import uuid
from typing import Dict, Optional, Tuple

from fastapi import FastAPI, HTTPException
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, Field, field_validator

from .ai import HeuristicAI
from .game import (
    COMPUTER,
    MODES,
    TWO_PLAYER,
    VS_COMPUTER,
    GameSnapshot,
    TicTacToeGame,
)
from .rules import DRAW, WIN

logger = logging.getLogger(__name__)

SESSIONS: Dict[str, TicTacToeGame] = {}
app = FastAPI(title="Tic Tac Toe", description="Tic tac toe played in the browser")

AI_THINK_DELAY: float = float(os.environ.get("TICTACTOE_THINK_DELAY", "0.4"))


def _validate_mode(value: Optional[str]) -> Optional[str]:
    if value is not None and value not in MODES:
        raise ValueError(
            f"Unsupported mode {value!r}. Choose one of {', '.join(MODES)}."
        )
    return value


class NewGameRequest(BaseModel):
    """Request payload for starting a new game."""

    mode: str = Field(default=TWO_PLAYER, description="'2p' or 'cpu'")

    @field_validator("mode")
    @classmethod
    def ensure_supported_mode(cls, value: str) -> str:
        return _validate_mode(value)  # type: ignore[return-value]


class ResetRequest(BaseModel):
    """Reset payload; omitting ``mode`` keeps the current one."""

    mode: Optional[str] = None

    @field_validator("mode")
    @classmethod
    def ensure_supported_mode(cls, value: Optional[str]) -> Optional[str]:
        return _validate_mode(value)


class ModeRequest(BaseModel):
    mode: str

    @field_validator("mode")
    @classmethod
    def ensure_supported_mode(cls, value: str) -> str:
        return _validate_mode(value)  # type: ignore[return-value]


class MoveRequest(BaseModel):
    """Cell to play. Out-of-range cells are game no-ops; booleans are rejected."""

    index: int = Field(strict=True)


def _create_session(mode: str) -> Tuple[str, TicTacToeGame]:
    game = TicTacToeGame(mode=mode, think_delay=AI_THINK_DELAY, ai=HeuristicAI())
    session_id = uuid.uuid4().hex
    SESSIONS[session_id] = game
    logger.info("Created session %s (mode=%s)", session_id, mode)
    return session_id, game


def _get_session(game_id: str) -> TicTacToeGame:
    try:
        return SESSIONS[game_id]
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Game not found") from exc


def status_text(state: GameSnapshot) -> str:
    """Human-readable status line shown above the board."""
    result = state.result
    cpu = state.mode == VS_COMPUTER
    if result.status == WIN:
        if cpu and result.winner == "O":
            return "Computer Wins! \U0001F60E"
        name = "Player 1" if result.winner == "X" else "Player 2"
        return f"{name} Wins! \U0001F389"
    if result.status == DRAW:
        return "It's a Draw. \U0001F91D"
    if state.turn_owner == COMPUTER:
        return "Computer's Turn"
    if cpu:
        prefix = "Your Turn"
    else:
        prefix = "Player 1's Turn" if state.current_player == "X" else "Player 2's Turn"
    return f"{prefix} ({state.current_player})"


def _serialize_session(game_id: str, game: TicTacToeGame) -> Dict[str, object]:
    return _serialize_state(game_id, game.snapshot())


def _serialize_state(game_id: str, state: GameSnapshot) -> Dict[str, object]:
    result = state.result
    return {
        "id": game_id,
        "board": [c or "" for c in state.board],
        "currentPlayer": state.current_player,
        "turnOwner": state.turn_owner,
        "mode": state.mode,
        "status": result.status,
        "winner": result.winner,
        "winningLine": list(result.line) if result.line else [],
        "computerPending": state.computer_pending,
        "statusText": status_text(state),
    }


@app.post("/api/game")
def create_game(request: NewGameRequest) -> Dict[str, object]:
    game_id, game = _create_session(request.mode)
    return _serialize_session(game_id, game)


@app.get("/api/game/{game_id}")
def get_game(game_id: str) -> Dict[str, object]:
    game = _get_session(game_id)
    return _serialize_session(game_id, game)


@app.post("/api/game/{game_id}/move")
def make_move(game_id: str, request: MoveRequest) -> Dict[str, object]:
    game = _get_session(game_id)
    accepted, snapshot = game.submit(request.index)
    state = _serialize_state(game_id, snapshot)
    state["accepted"] = accepted
    return state


@app.post("/api/game/{game_id}/reset")
def reset_game(game_id: str, request: ResetRequest) -> Dict[str, object]:
    game = _get_session(game_id)
    game.reset(request.mode)
    return _serialize_session(game_id, game)


@app.post("/api/game/{game_id}/mode")
def change_mode(game_id: str, request: ModeRequest) -> Dict[str, object]:
    game = _get_session(game_id)
    game.set_mode(request.mode)
    return _serialize_session(game_id, game)


@app.get("/", response_class=HTMLResponse)
def index() -> str:
    return HTML_PAGE


HTML_PAGE = """<!DOCTYPE html>
<html lang=\"en\">
  <head>
    <meta charset=\"utf-8\" />
    <meta name=\"viewport\" content=\"width=device-width, initial-scale=1\" />
    <title>Tic Tac Toe</title>
    <style>
      :root {
        color-scheme: light;
        font-family: system-ui, -apple-system, BlinkMacSystemFont, \"Segoe UI\", sans-serif;
      }
      * {
        box-sizing: border-box;
      }
      body {
        margin: 0;
        min-height: 100vh;
        display: flex;
        flex-direction: column;
        background: #f7f9fc;
        color: #1c2434;
      }
      .navbar {
        display: flex;
        align-items: center;
        justify-content: space-between;
        padding: 0.9rem 1.5rem;
        background: #ffffff;
        box-shadow: 0 2px 8px rgba(28, 36, 52, 0.08);
      }
      .navbar-title {
        font-size: 1.3rem;
        font-weight: 700;
        letter-spacing: 0.04em;
      }
      .navbar-actions {
        display: flex;
        gap: 0.6rem;
      }
      .nav-select,
      .nav-btn {
        font: inherit;
        padding: 0.4rem 0.8rem;
        border-radius: 8px;
        border: 1px solid #c9d2e3;
        background: #ffffff;
        cursor: pointer;
      }
      .nav-btn:hover {
        background: #eef2fa;
      }
      .game-container {
        flex: 1;
        display: flex;
        flex-direction: column;
        align-items: center;
        justify-content: center;
        gap: 1.25rem;
        padding: 2rem 1rem;
      }
      .status-bar {
        font-size: 1.2rem;
        font-weight: 600;
        min-height: 1.6rem;
      }
      .board {
        display: grid;
        grid-template-columns: repeat(3, 5.5rem);
        grid-template-rows: repeat(3, 5.5rem);
        gap: 0.5rem;
      }
      .board.thinking {
        opacity: 0.75;
      }
      .square {
        font: inherit;
        font-size: 2.4rem;
        font-weight: 700;
        border: none;
        border-radius: 12px;
        background: #ffffff;
        box-shadow: 0 2px 6px rgba(28, 36, 52, 0.12);
        cursor: pointer;
        color: #2b4a8b;
      }
      .square:disabled {
        cursor: default;
      }
      .square.o {
        color: #b5453a;
      }
      .square.highlight {
        background: #ffe28a;
      }
      .footer-bar {
        text-align: center;
        padding: 0.8rem;
        font-size: 0.85rem;
        color: rgba(28, 36, 52, 0.6);
      }
    </style>
  </head>
  <body>
    <nav class=\"navbar\">
      <div class=\"navbar-title\">Tic Tac Toe</div>
      <div class=\"navbar-actions\">
        <select id=\"mode\" class=\"nav-select\" aria-label=\"Choose game mode\">
          <option value=\"2p\">2 Players</option>
          <option value=\"cpu\">Vs Computer</option>
        </select>
        <button id=\"reset\" class=\"nav-btn\" aria-label=\"Reset game\">Reset</button>
      </div>
    </nav>
    <div class=\"game-container\">
      <div id=\"status\" class=\"status-bar\" role=\"status\">Setting up your game…</div>
      <div id=\"board\" class=\"board\" role=\"grid\" aria-label=\"Tic Tac Toe board\"></div>
    </div>
    <footer class=\"footer-bar\">Tic Tac Toe &mdash; Minimal Demo</footer>
    <script>
      const modeEl = document.getElementById('mode');
      const resetButton = document.getElementById('reset');
      const statusEl = document.getElementById('status');
      const boardEl = document.getElementById('board');
      const POLL_INTERVAL_MS = 150;

      let gameId = null;
      let gameState = null;
      let pollHandle = null;
      let isRequestPending = false;

      async function request(url, body) {
        const options = body === undefined
          ? {}
          : {
              method: 'POST',
              headers: { 'Content-Type': 'application/json' },
              body: JSON.stringify(body),
            };
        const response = await fetch(url, options);
        if (!response.ok) {
          throw new Error(`Request failed (${response.status})`);
        }
        return response.json();
      }

      function cellDisabled(index) {
        if (!gameState) return true;
        return (
          gameState.board[index] !== '' ||
          gameState.status !== 'in_progress' ||
          gameState.turnOwner === 'computer'
        );
      }

      function renderBoard() {
        boardEl.innerHTML = '';
        boardEl.classList.toggle('thinking', !!gameState?.computerPending);
        for (let index = 0; index < 9; index += 1) {
          const value = gameState ? gameState.board[index] : '';
          const square = document.createElement('button');
          square.className = 'square';
          if (value === 'O') square.classList.add('o');
          if (gameState?.winningLine.includes(index)) square.classList.add('highlight');
          square.textContent = value;
          square.disabled = cellDisabled(index);
          square.setAttribute('aria-label', value ? `Cell ${value}` : 'Empty cell');
          square.addEventListener('click', () => sendMove(index));
          boardEl.appendChild(square);
        }
      }

      function setState(data) {
        gameId = data.id;
        gameState = data;
        modeEl.value = data.mode;
        statusEl.textContent = data.statusText;
        renderBoard();
        if (data.computerPending) {
          ensurePolling();
        }
      }

      function ensurePolling() {
        if (pollHandle === null) {
          pollHandle = setTimeout(pollState, POLL_INTERVAL_MS);
        }
      }

      async function pollState() {
        pollHandle = null;
        if (!gameId) return;
        try {
          setState(await request(`/api/game/${gameId}`));
        } catch (error) {
          console.error('Polling failed', error);
          ensurePolling();
        }
      }

      async function run(action) {
        if (isRequestPending) return;
        isRequestPending = true;
        try {
          setState(await action());
        } catch (error) {
          statusEl.textContent = error.message || 'Network error. Please try again.';
        } finally {
          isRequestPending = false;
        }
      }

      function sendMove(index) {
        if (!gameId || cellDisabled(index)) return;
        run(() => request(`/api/game/${gameId}/move`, { index }));
      }

      function startGame() {
        run(() => request('/api/game', { mode: modeEl.value }));
      }

      resetButton.addEventListener('click', () => {
        if (!gameId) return startGame();
        run(() => request(`/api/game/${gameId}/reset`, {}));
      });

      modeEl.addEventListener('change', () => {
        if (!gameId) return startGame();
        run(() => request(`/api/game/${gameId}/mode`, { mode: modeEl.value }));
      });

      renderBoard();
      startGame();
    </script>
  </body>
</html>
"""
