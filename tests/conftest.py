"""Shared pytest fixtures used across the test suite."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from knightsbridge.core.notation.fen import position_from_fen
from knightsbridge.core.position import Position
from knightsbridge.core.state import STARTING_FEN, GameState
from knightsbridge.core.transition import apply_move

Pair = tuple[Position, GameState]


def play_uci(moves: str, fen: str = STARTING_FEN) -> Pair:
    """Apply space-separated UCI moves from *fen* and return the final pair."""
    position, state = position_from_fen(fen)
    for text in moves.split():
        promotion = text[4:] or None
        result = apply_move(text[:2], text[2:4], position, state, promotion)
        position, state = result.position, result.state
    return position, state


@pytest.fixture
def start() -> Pair:
    """Standard starting position and fresh state."""
    return position_from_fen(STARTING_FEN)


@pytest.fixture
def line() -> Callable[..., Pair]:
    """Factory: play a UCI move list, e.g. ``line("e2e4 e7e5")``."""
    return play_uci
