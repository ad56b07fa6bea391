"""Notation package: FEN / SAN / PGN parsing and serialization."""

from knightsbridge.core.notation.fen import (
    castling_from_fen,
    castling_to_fen,
    placement_to_fen,
    position_from_fen,
    position_to_fen,
)
from knightsbridge.core.notation.pgn import (
    history_sans,
    pgn_movetext,
    pgn_movetext_from_sans,
    pgn_result_token,
)
from knightsbridge.core.notation.san import move_notation, parse_san
from knightsbridge.core.state import STARTING_FEN

__all__ = [
    "STARTING_FEN",
    "position_from_fen",
    "position_to_fen",
    "placement_to_fen",
    "castling_from_fen",
    "castling_to_fen",
    "move_notation",
    "parse_san",
    "history_sans",
    "pgn_result_token",
    "pgn_movetext_from_sans",
    "pgn_movetext",
]
