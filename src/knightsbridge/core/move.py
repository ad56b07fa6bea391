"""Move value object."""

from __future__ import annotations

from dataclasses import dataclass

from knightsbridge.core.enums import MoveFlag, PieceType
from knightsbridge.core.piece import Piece
from knightsbridge.core.types import Square, file_of, make_square, rank_of, square_name

_PROMO_CHARS: dict[PieceType, str] = {
    PieceType.KNIGHT: "n",
    PieceType.BISHOP: "b",
    PieceType.ROOK: "r",
    PieceType.QUEEN: "q",
}


@dataclass(frozen=True, slots=True)
class Move:
    """Immutable record of a single move as played.

    ``captured`` is the piece removed from the board, which for en passant
    sits on a different square than ``to_sq``.
    """

    from_sq: Square
    to_sq: Square
    piece: Piece
    captured: Piece | None = None
    flag: MoveFlag = MoveFlag.NORMAL
    promotion: PieceType | None = None

    # ── Classification ───────────────────────────────────────────────────

    @property
    def is_castle(self) -> bool:
        return self.flag in (MoveFlag.CASTLE_KINGSIDE, MoveFlag.CASTLE_QUEENSIDE)

    @property
    def is_en_passant(self) -> bool:
        return self.flag == MoveFlag.EN_PASSANT

    @property
    def is_promotion(self) -> bool:
        return self.flag == MoveFlag.PROMOTION

    @property
    def is_capture(self) -> bool:
        return self.captured is not None

    @property
    def capture_square(self) -> Square | None:
        """Square the captured piece stood on."""
        if self.captured is None:
            return None
        if self.flag == MoveFlag.EN_PASSANT:
            return make_square(file_of(self.to_sq), rank_of(self.from_sq))
        return self.to_sq

    # ── Display ──────────────────────────────────────────────────────────

    def __str__(self) -> str:
        base = f"{square_name(self.from_sq)}{square_name(self.to_sq)}"
        if self.promotion is not None:
            base += _PROMO_CHARS.get(self.promotion, "")
        return base

    @property
    def uci(self) -> str:
        """UCI long-algebraic notation."""
        return str(self)
