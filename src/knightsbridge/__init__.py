"""Knightsbridge — FIDE chess rules engine.

Pure functions over immutable ``(Position, GameState)`` pairs::

    import knightsbridge as kb

    position, state = kb.initial_position(), kb.initial_game_state()
    result = kb.apply_move("e2", "e4", position, state)
    outcome = kb.get_game_result(result.position, kb.Color.BLACK, result.state)
"""

from knightsbridge.api import (
    apply_move,
    get_game_result,
    initial_game_state,
    initial_position,
    is_in_check,
    is_legal_move,
    is_square_attacked,
    legal_moves,
    move_notation,
    validate_touch_move,
)
from knightsbridge.core import (
    DEFAULT_CONFIG,
    STARTING_FEN,
    CastlingRights,
    Color,
    GameEndCause,
    GameState,
    IllegalMove,
    KnightsbridgeError,
    Move,
    MoveFlag,
    MoveResult,
    Outcome,
    Piece,
    PieceType,
    Position,
    PositionKey,
    RulesConfig,
    Square,
    TouchMoveResult,
    parse_san,
    pgn_movetext,
    position_from_fen,
    position_to_fen,
)
from knightsbridge.replay import ReplayResult, position_hash, replay_game
from knightsbridge.serde import dumps, loads, restore, snapshot

__all__ = [
    # Facade
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
    # Value types
    "CastlingRights",
    "Color",
    "GameEndCause",
    "GameState",
    "Move",
    "MoveFlag",
    "MoveResult",
    "Outcome",
    "Piece",
    "PieceType",
    "Position",
    "PositionKey",
    "Square",
    "TouchMoveResult",
    # Errors / config
    "DEFAULT_CONFIG",
    "IllegalMove",
    "KnightsbridgeError",
    "RulesConfig",
    # Notation
    "STARTING_FEN",
    "parse_san",
    "pgn_movetext",
    "position_from_fen",
    "position_to_fen",
    # Replay / persistence
    "ReplayResult",
    "position_hash",
    "replay_game",
    "dumps",
    "loads",
    "restore",
    "snapshot",
]
