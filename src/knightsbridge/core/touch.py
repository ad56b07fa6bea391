"""Touch-move queries for board UIs."""

from __future__ import annotations

from dataclasses import dataclass

from knightsbridge.core.move_generator import MoveGenerator
from knightsbridge.core.position import Position
from knightsbridge.core.state import GameState
from knightsbridge.core.types import Square, coerce_square


@dataclass(frozen=True, slots=True)
class TouchMoveResult:
    """Answer to "I touched this piece, may it go there?".

    ``must_move`` is set once a playable piece of the side to move was
    touched and it has at least one legal move. ``legal_moves`` lists its
    legal destinations in generation order.
    """

    valid: bool
    must_move: bool
    legal_moves: tuple[Square, ...] = ()


def validate_touch_move(
    piece_sq: object,
    target_sq: object,
    position: Position,
    state: GameState,
) -> TouchMoveResult:
    origin = coerce_square(piece_sq)
    target = coerce_square(target_sq)
    if origin is None:
        return TouchMoveResult(valid=False, must_move=False)

    piece = position[origin]
    if piece is None or piece.color != state.current_player:
        return TouchMoveResult(valid=False, must_move=False)

    gen = MoveGenerator.for_state(position, state)
    destinations = tuple(dict.fromkeys(m.to_sq for m in gen.legal_moves_from(origin)))
    return TouchMoveResult(
        valid=target is not None and target in destinations,
        must_move=bool(destinations),
        legal_moves=destinations,
    )
