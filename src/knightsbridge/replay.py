"""Server-side game validation: replay a stored move list from scratch."""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from knightsbridge.core.config import DEFAULT_CONFIG, RulesConfig
from knightsbridge.core.enums import Color
from knightsbridge.core.errors import IllegalMove
from knightsbridge.core.notation.fen import (
    castling_to_fen,
    placement_to_fen,
    position_from_fen,
)
from knightsbridge.core.position import Position
from knightsbridge.core.repetition import position_key
from knightsbridge.core.rules import Outcome, Rules
from knightsbridge.core.state import STARTING_FEN, GameState
from knightsbridge.core.transition import apply_move
from knightsbridge.core.types import square_name

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ReplayResult:
    """Final position, state and outcome after a successful replay."""

    position: Position
    state: GameState
    outcome: Outcome


def _split_move(entry: Any) -> tuple[object, object, object]:
    """Normalise a stored move into ``(from, to, promotion)``.

    Accepts UCI text (``"e7e8q"``), ``(from, to[, promotion])`` sequences
    and mappings with ``from``/``to`` (or ``from_square``/``to_square``) keys.
    """
    if isinstance(entry, str):
        text = entry.strip().lower()
        if len(text) not in (4, 5):
            return None, None, None
        return text[:2], text[2:4], text[4:] or None
    if isinstance(entry, Mapping):
        return (
            entry.get("from", entry.get("from_square")),
            entry.get("to", entry.get("to_square")),
            entry.get("promotion"),
        )
    if isinstance(entry, (tuple, list)) and len(entry) in (2, 3):
        promotion = entry[2] if len(entry) == 3 else None
        return entry[0], entry[1], promotion
    return None, None, None


def replay_game(
    moves: Iterable[Any],
    start_fen: str = STARTING_FEN,
    *,
    config: RulesConfig = DEFAULT_CONFIG,
) -> ReplayResult:
    """Replay *moves* from *start_fen*, checking every one for legality.

    Raises :class:`IllegalMove` carrying the 1-based ply of the first
    rejected move, including any move played after the game has ended.
    An invalid *start_fen* raises ``ValueError``.
    """
    position, state = position_from_fen(start_fen)
    outcome = Rules.game_result(position, state.current_player, state, config)

    for ply, entry in enumerate(moves, start=1):
        if outcome.over:
            _LOGGER.warning("Replay rejected ply %d: game already over", ply)
            raise IllegalMove(f"game is already over ({outcome.cause})", ply=ply)
        from_sq, to_sq, promotion = _split_move(entry)
        try:
            result = apply_move(
                from_sq, to_sq, position, state, promotion, config=config
            )
        except IllegalMove as exc:
            _LOGGER.warning("Replay rejected ply %d (%r): %s", ply, entry, exc.reason)
            raise IllegalMove(exc.reason, exc.from_sq, exc.to_sq, ply=ply) from exc
        position, state = result.position, result.state
        outcome = Rules.game_result(position, state.current_player, state, config)

    return ReplayResult(position, state, outcome)


def position_hash(position: Position, state: GameState) -> bytes:
    """SHA-256 digest of the repetition key of the current position.

    Positions that count as "the same" for repetition hash identically.
    """
    key = position_key(position, state)
    ep = square_name(key.en_passant) if key.en_passant is not None else "-"
    side = "w" if key.side_to_move == Color.WHITE else "b"
    canonical = (
        f"{placement_to_fen(position)} {side} {castling_to_fen(key.castling)} {ep}"
    )
    return hashlib.sha256(canonical.encode(), usedforsecurity=False).digest()
