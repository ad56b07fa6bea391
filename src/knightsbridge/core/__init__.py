"""Core rules layer — pure chess logic with zero external dependencies.

Quick start::

    from knightsbridge.core import Position, GameState, apply_move

    result = apply_move("e2", "e4", Position.initial(), GameState.initial())
    print(result.state.current_player)   # black
"""

from knightsbridge.core.config import DEFAULT_CONFIG, RulesConfig
from knightsbridge.core.enums import (
    CastlingRights,
    Color,
    GameEndCause,
    MoveFlag,
    PieceType,
)
from knightsbridge.core.errors import IllegalMove, KnightsbridgeError
from knightsbridge.core.move import Move
from knightsbridge.core.move_generator import MoveGenerator
from knightsbridge.core.notation import (
    STARTING_FEN,
    move_notation,
    parse_san,
    pgn_movetext,
    position_from_fen,
    position_to_fen,
)
from knightsbridge.core.piece import Piece
from knightsbridge.core.position import Position
from knightsbridge.core.repetition import PositionKey, position_key
from knightsbridge.core.rules import Outcome, Rules
from knightsbridge.core.state import GameState
from knightsbridge.core.touch import TouchMoveResult, validate_touch_move
from knightsbridge.core.transition import MoveResult, apply_move, play
from knightsbridge.core.types import (
    Square,
    file_of,
    make_square,
    parse_square,
    rank_of,
    square_name,
)

__all__ = [
    # Enums / flags
    "CastlingRights",
    "Color",
    "GameEndCause",
    "MoveFlag",
    "PieceType",
    # Types / helpers
    "Square",
    "file_of",
    "make_square",
    "parse_square",
    "rank_of",
    "square_name",
    # Domain objects
    "GameState",
    "Move",
    "MoveGenerator",
    "MoveResult",
    "Outcome",
    "Piece",
    "Position",
    "PositionKey",
    "Rules",
    "TouchMoveResult",
    # Transitions / queries
    "apply_move",
    "play",
    "position_key",
    "validate_touch_move",
    # Errors / config
    "DEFAULT_CONFIG",
    "IllegalMove",
    "KnightsbridgeError",
    "RulesConfig",
    # Notation
    "STARTING_FEN",
    "move_notation",
    "parse_san",
    "pgn_movetext",
    "position_from_fen",
    "position_to_fen",
]
