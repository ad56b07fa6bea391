"""PGN movetext export."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from knightsbridge.core.enums import Color
from knightsbridge.core.notation.fen import position_from_fen
from knightsbridge.core.notation.san import move_notation
from knightsbridge.core.state import GameState
from knightsbridge.core.transition import play

if TYPE_CHECKING:
    from knightsbridge.core.rules import Outcome

_LOGGER = logging.getLogger(__name__)


def pgn_result_token(outcome: Outcome | None) -> str:
    """Convert an :class:`Outcome` to a PGN result token."""
    if outcome is None:
        return "*"
    return outcome.result_token


def history_sans(state: GameState) -> list[str]:
    """SAN of every move in *state*'s history, replayed from its start FEN."""
    position, replay_state = position_from_fen(state.start_fen)
    sans: list[str] = []
    for ply, move in enumerate(state.move_history, start=1):
        if position[move.from_sq] != move.piece:
            _LOGGER.warning(
                "History diverges from board at ply %d (%s); notation truncated",
                ply,
                move,
            )
            break
        sans.append(move_notation(move, position, replay_state))
        position, replay_state = play(position, replay_state, move)
    return sans


def pgn_movetext_from_sans(
    sans: list[str],
    result_token: str,
    *,
    first_mover: Color = Color.WHITE,
    first_number: int = 1,
) -> str:
    """Build PGN movetext from SAN moves and a result token."""
    parts: list[str] = []
    offset = 1 if first_mover == Color.BLACK else 0
    for idx, san in enumerate(sans):
        ply = idx + offset
        number = first_number + ply // 2
        if ply % 2 == 0:
            parts.append(f"{number}.")
        elif idx == 0:
            parts.append(f"{number}...")
        parts.append(san)
    parts.append(result_token)
    return " ".join(parts)


def pgn_movetext(state: GameState, outcome: Outcome | None = None) -> str:
    """Numbered SAN movetext for the game so far, ending in a result token."""
    _, start_state = position_from_fen(state.start_fen)
    return pgn_movetext_from_sans(
        history_sans(state),
        pgn_result_token(outcome),
        first_mover=start_state.current_player,
        first_number=start_state.fullmove_number,
    )
