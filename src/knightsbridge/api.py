"""Functional facade used by transport, persistence and UI collaborators.

Every function is pure: it takes a :class:`Position` / :class:`GameState`
pair and returns new values. Squares may be passed as indices (0-63) or
labels such as ``"e4"``, and sides as :class:`Color` or ``"white"`` /
``"black"``; anything else is treated as "not a square" or "no side".
"""

from __future__ import annotations

from knightsbridge.core.config import DEFAULT_CONFIG, RulesConfig
from knightsbridge.core.enums import coerce_color
from knightsbridge.core.move import Move
from knightsbridge.core.move_generator import MoveGenerator
from knightsbridge.core.notation.san import move_notation
from knightsbridge.core.position import Position
from knightsbridge.core.rules import Outcome, Rules
from knightsbridge.core.state import GameState
from knightsbridge.core.touch import validate_touch_move
from knightsbridge.core.transition import MoveResult, PromotionChoice
from knightsbridge.core.transition import apply_move as _apply_move
from knightsbridge.core.types import coerce_square

__all__ = [
    "initial_position",
    "initial_game_state",
    "legal_moves",
    "is_legal_move",
    "apply_move",
    "get_game_result",
    "is_square_attacked",
    "is_in_check",
    "move_notation",
    "validate_touch_move",
]


def initial_position() -> Position:
    return Position.initial()


def initial_game_state() -> GameState:
    return GameState.initial()


def legal_moves(position: Position, color: object, state: GameState) -> list[Move]:
    """Legal moves for *color*; en passant only applies to the side to move.

    An unknown color has no moves.
    """
    side = coerce_color(color)
    if side is None:
        return []
    return MoveGenerator.for_state(position, state, side).legal_moves(side)


def is_legal_move(
    from_sq: object,
    to_sq: object,
    position: Position,
    color: object,
    state: GameState,
) -> bool:
    origin = coerce_square(from_sq)
    target = coerce_square(to_sq)
    if origin is None or target is None:
        return False
    return any(
        m.from_sq == origin and m.to_sq == target
        for m in legal_moves(position, color, state)
    )


def apply_move(
    from_sq: object,
    to_sq: object,
    position: Position,
    state: GameState,
    promotion: PromotionChoice | None = None,
    *,
    touched: object = None,
    config: RulesConfig = DEFAULT_CONFIG,
) -> MoveResult:
    """Play a move for the side to move; raises ``IllegalMove`` when refused."""
    return _apply_move(
        from_sq,
        to_sq,
        position,
        state,
        promotion,
        touched=touched,
        config=config,
    )


def get_game_result(
    position: Position,
    color: object,
    state: GameState,
    config: RulesConfig = DEFAULT_CONFIG,
) -> Outcome:
    """Result with *color* to move; an unknown color raises ``ValueError``."""
    side = coerce_color(color)
    if side is None:
        raise ValueError(f"Not a side: {color!r}")
    return Rules.game_result(position, side, state, config)


def is_square_attacked(square: object, position: Position, by_color: object) -> bool:
    sq = coerce_square(square)
    side = coerce_color(by_color)
    if sq is None or side is None:
        return False
    return MoveGenerator(position).is_square_attacked(sq, side)


def is_in_check(position: Position, color: object) -> bool:
    side = coerce_color(color)
    if side is None:
        return False
    return Rules.is_in_check(position, side)
