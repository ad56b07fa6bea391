"""Canonical position keys and history replay for repetition counting.

Two positions are "the same" under FIDE rules when the same pieces stand on
the same squares, the same side is to move, the castling rights are equal
and the same en passant captures are possible. :class:`PositionKey` captures
exactly that, so it can be counted directly in a :class:`collections.Counter`.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from functools import lru_cache

from knightsbridge.core.enums import CastlingRights, Color, MoveFlag
from knightsbridge.core.move import Move
from knightsbridge.core.move_generator import MoveGenerator
from knightsbridge.core.notation.fen import position_from_fen
from knightsbridge.core.piece import Piece
from knightsbridge.core.position import Position
from knightsbridge.core.state import GameState
from knightsbridge.core.transition import play
from knightsbridge.core.types import Square

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PositionKey:
    """Hashable identity of a position for repetition purposes."""

    placement: tuple[Piece | None, ...]
    side_to_move: Color
    castling: CastlingRights
    en_passant: Square | None


def position_key(position: Position, state: GameState) -> PositionKey:
    """Key for *position* with *state*'s side to move and rights.

    The en passant square only counts when a legal en passant capture
    actually exists.
    """
    ep = state.en_passant
    if ep is not None:
        gen = MoveGenerator(position, state.castling, ep)
        legal = gen.legal_moves(state.current_player)
        if not any(m.flag == MoveFlag.EN_PASSANT for m in legal):
            ep = None
    return PositionKey(
        placement=position.placement(),
        side_to_move=state.current_player,
        castling=state.castling,
        en_passant=ep,
    )


def replay_keys(start_fen: str, history: tuple[Move, ...]) -> list[PositionKey]:
    """Keys of every position from *start_fen* through *history*, in order.

    Stops early (with a warning) if the history does not match the board.
    """
    position, state = position_from_fen(start_fen)
    keys = [position_key(position, state)]
    for ply, move in enumerate(history, start=1):
        if position[move.from_sq] != move.piece:
            _LOGGER.warning(
                "History diverges from board at ply %d (%s); counting stops there",
                ply,
                move,
            )
            break
        position, state = play(position, state, move)
        keys.append(position_key(position, state))
    return keys


@lru_cache(maxsize=256)
def _key_counts(
    start_fen: str, history: tuple[Move, ...]
) -> tuple[tuple[PositionKey, int], ...]:
    return tuple(Counter(replay_keys(start_fen, history)).items())


def max_repetitions(state: GameState) -> int:
    """Highest number of times any single position has occurred."""
    counts = _key_counts(state.start_fen, state.move_history)
    return max((count for _, count in counts), default=0)


def occurrences(position: Position, state: GameState) -> int:
    """How many times the current position has occurred in the game."""
    key = position_key(position, state)
    for seen, count in _key_counts(state.start_fen, state.move_history):
        if seen == key:
            return count
    return 1
