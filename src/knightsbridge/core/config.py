"""Rule configuration."""

from __future__ import annotations

from dataclasses import dataclass

from knightsbridge.core.enums import PROMOTION_TYPES, PieceType


@dataclass(slots=True, frozen=True)
class RulesConfig:
    """Tunable rule parameters. Defaults follow the FIDE Laws of Chess."""

    # Piece a pawn becomes when the caller names none.
    default_promotion: PieceType = PieceType.QUEEN
    # Half-moves without capture or pawn move before the draw (50 moves).
    fifty_move_halfmoves: int = 100
    # Occurrences of one position that end the game.
    repetition_count: int = 3

    def __post_init__(self) -> None:
        if self.default_promotion not in PROMOTION_TYPES:
            raise ValueError(
                f"default_promotion must be one of {PROMOTION_TYPES}, "
                f"got {self.default_promotion!r}"
            )
        if self.fifty_move_halfmoves < 1:
            raise ValueError("fifty_move_halfmoves must be positive")
        if self.repetition_count < 2:
            raise ValueError("repetition_count must be at least 2")


DEFAULT_CONFIG = RulesConfig()
