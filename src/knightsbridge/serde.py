"""Snapshot (de)serialization for persistence and transport.

Snapshots are plain JSON-compatible dicts keyed by square labels, so they
can be stored or sent as-is and restored losslessly::

    {
        "board": {"e1": "K", "e8": "k", ...},
        "state": {
            "castling": "KQkq",
            "en_passant": null,
            "halfmove_clock": 0,
            "fullmove_number": 1,
            "current_player": "white",
            "start_fen": "...",
            "move_history": [{"from": "e2", "to": "e4", "piece": "P", ...}],
        },
    }
"""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from typing import Any

from knightsbridge.core.enums import Color, MoveFlag, PieceType
from knightsbridge.core.move import Move
from knightsbridge.core.move_generator import MoveGenerator
from knightsbridge.core.notation.fen import (
    castling_from_fen,
    castling_to_fen,
    position_from_fen,
)
from knightsbridge.core.piece import Piece
from knightsbridge.core.position import Position
from knightsbridge.core.state import GameState
from knightsbridge.core.transition import play
from knightsbridge.core.types import Square, parse_square, square_name

_LOGGER = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1

_COLOR_NAMES: dict[str, Color] = {str(c): c for c in Color}
_FLAG_NAMES: dict[str, MoveFlag] = {f.name.lower(): f for f in MoveFlag}
_PROMOTION_NAMES: dict[str, PieceType] = {
    "q": PieceType.QUEEN,
    "r": PieceType.ROOK,
    "b": PieceType.BISHOP,
    "n": PieceType.KNIGHT,
}
_PROMOTION_CHARS: dict[PieceType, str] = {v: k for k, v in _PROMOTION_NAMES.items()}


# ── Moves ───────────────────────────────────────────────────────────────────


def move_to_dict(move: Move) -> dict[str, Any]:
    return {
        "from": square_name(move.from_sq),
        "to": square_name(move.to_sq),
        "piece": str(move.piece),
        "captured": str(move.captured) if move.captured is not None else None,
        "flag": move.flag.name.lower(),
        "promotion": (
            _PROMOTION_CHARS[move.promotion] if move.promotion is not None else None
        ),
    }


def dict_to_move(data: dict[str, Any]) -> Move:
    try:
        flag = _FLAG_NAMES[data.get("flag", "normal")]
        promo = data.get("promotion")
        captured = data.get("captured")
        return Move(
            from_sq=parse_square(data["from"]),
            to_sq=parse_square(data["to"]),
            piece=Piece.from_char(data["piece"]),
            captured=Piece.from_char(captured) if captured is not None else None,
            flag=flag,
            promotion=_PROMOTION_NAMES[promo] if promo is not None else None,
        )
    except (KeyError, TypeError, AttributeError) as exc:
        raise ValueError(f"Malformed move record: {data!r}") from exc


# ── Position / state ────────────────────────────────────────────────────────


def position_to_dict(position: Position) -> dict[str, str]:
    return {square_name(sq): str(piece) for sq, piece in position.items()}


def dict_to_position(data: dict[str, str]) -> Position:
    if not isinstance(data, dict):
        raise ValueError(f"Malformed board record: {data!r}")
    pieces: dict[Square, Piece] = {}
    for label, char in data.items():
        if not isinstance(label, str) or not isinstance(char, str):
            raise ValueError(f"Malformed board entry: {label!r}: {char!r}")
        pieces[parse_square(label)] = Piece.from_char(char)
    return Position(pieces)


def state_to_dict(state: GameState) -> dict[str, Any]:
    return {
        "castling": castling_to_fen(state.castling),
        "en_passant": (
            square_name(state.en_passant) if state.en_passant is not None else None
        ),
        "halfmove_clock": state.halfmove_clock,
        "fullmove_number": state.fullmove_number,
        "current_player": str(state.current_player),
        "start_fen": state.start_fen,
        "move_history": [move_to_dict(m) for m in state.move_history],
    }


def dict_to_state(data: dict[str, Any]) -> GameState:
    try:
        ep = data.get("en_passant")
        halfmove = int(data["halfmove_clock"])
        fullmove = int(data["fullmove_number"])
        state = GameState(
            castling=castling_from_fen(data["castling"]),
            en_passant=parse_square(ep) if ep is not None else None,
            halfmove_clock=halfmove,
            fullmove_number=fullmove,
            move_history=tuple(dict_to_move(m) for m in data.get("move_history", ())),
            current_player=_COLOR_NAMES[data["current_player"]],
            start_fen=data["start_fen"],
        )
    except (KeyError, TypeError, AttributeError) as exc:
        raise ValueError(f"Malformed game state record: {exc}") from exc
    if halfmove < 0 or fullmove < 1:
        raise ValueError("Malformed game state record: negative move counters")
    return state


def _check_history(position: Position, state: GameState) -> None:
    """Replay the history move by move and require it to end on the pair.

    Every record must be a legal move in the replayed position, and the
    rule fields of *state* must equal the ones the replay produces.
    """
    board, replay_state = position_from_fen(state.start_fen)
    for ply, move in enumerate(state.move_history, start=1):
        mover = replay_state.current_player
        legal = MoveGenerator.for_state(board, replay_state).legal_moves(mover)
        if move not in legal:
            raise ValueError(f"Move history has an illegal move at ply {ply}: {move}")
        board, replay_state = play(board, replay_state, move)
    if board != position:
        raise ValueError("Move history does not lead to the stored position")
    if replace(replay_state, start_fen=state.start_fen) != state:
        raise ValueError("Game state does not match its move history")


# ── Snapshots ───────────────────────────────────────────────────────────────


def snapshot(position: Position, state: GameState) -> dict[str, Any]:
    """JSON-compatible snapshot of a position/state pair."""
    return {
        "version": SNAPSHOT_VERSION,
        "board": position_to_dict(position),
        "state": state_to_dict(state),
    }


def restore(data: dict[str, Any]) -> tuple[Position, GameState]:
    """Rebuild the pair stored by :func:`snapshot`.

    Raises ``ValueError`` when the snapshot is malformed or its move history
    is inconsistent with the stored board.
    """
    try:
        if not isinstance(data, dict):
            raise ValueError(f"Snapshot must be a mapping, got {type(data).__name__}")
        version = data.get("version", SNAPSHOT_VERSION)
        if version != SNAPSHOT_VERSION:
            raise ValueError(f"Unsupported snapshot version: {version!r}")
        if "board" not in data or "state" not in data:
            raise ValueError("Snapshot needs 'board' and 'state' entries")
        position = dict_to_position(data["board"])
        state = dict_to_state(data["state"])
        _check_history(position, state)
    except ValueError as exc:
        _LOGGER.warning("Rejected snapshot: %s", exc)
        raise
    return position, state


def dumps(position: Position, state: GameState) -> str:
    return json.dumps(snapshot(position, state), sort_keys=True)


def loads(text: str) -> tuple[Position, GameState]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        _LOGGER.warning("Rejected snapshot: invalid JSON (%s)", exc)
        raise ValueError(f"Snapshot is not valid JSON: {exc}") from exc
    return restore(data)
