"""Game state value - everything about a game except piece placement."""

from __future__ import annotations

from dataclasses import dataclass, field

from knightsbridge.core.enums import CastlingRights, Color
from knightsbridge.core.move import Move
from knightsbridge.core.types import Square

STARTING_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"


@dataclass(frozen=True, slots=True)
class GameState:
    """Auxiliary rule state paired with a :class:`Position`.

    Instances are never modified; each applied move yields a new one.
    ``move_history`` is replayed from ``start_fen`` for repetition checks.
    """

    castling: CastlingRights = CastlingRights.ALL
    en_passant: Square | None = None
    halfmove_clock: int = 0
    fullmove_number: int = 1
    move_history: tuple[Move, ...] = field(default=())
    current_player: Color = Color.WHITE
    start_fen: str = STARTING_FEN

    @classmethod
    def initial(cls) -> GameState:
        """State of a fresh game from the standard setup."""
        return cls()

    # ── Query helpers ────────────────────────────────────────────────────

    @property
    def ply_count(self) -> int:
        """Number of half-moves played."""
        return len(self.move_history)

    @property
    def last_move(self) -> Move | None:
        return self.move_history[-1] if self.move_history else None

    def has_castling_right(self, right: CastlingRights) -> bool:
        return bool(self.castling & right)
