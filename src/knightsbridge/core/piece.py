"""Piece value object."""

from __future__ import annotations

from dataclasses import dataclass

from knightsbridge.core.enums import Color, PieceType

# White letters; black pieces use the lowercase form.
_LETTERS: dict[PieceType, str] = {
    PieceType.PAWN: "P",
    PieceType.KNIGHT: "N",
    PieceType.BISHOP: "B",
    PieceType.ROOK: "R",
    PieceType.QUEEN: "Q",
    PieceType.KING: "K",
}
_TYPES_BY_LETTER: dict[str, PieceType] = {v: k for k, v in _LETTERS.items()}
_TYPES_BY_NAME: dict[str, PieceType] = {pt.name.lower(): pt for pt in PieceType}
_COLORS_BY_NAME: dict[str, Color] = {str(c): c for c in Color}


@dataclass(frozen=True, slots=True)
class Piece:
    """Immutable (color, piece type) pair."""

    color: Color
    piece_type: PieceType

    def __str__(self) -> str:
        """FEN letter (uppercase = white, lowercase = black)."""
        letter = _LETTERS[self.piece_type]
        return letter if self.color == Color.WHITE else letter.lower()

    @property
    def name(self) -> str:
        """Client-facing label such as ``"white-knight"``."""
        return f"{self.color}-{self.piece_type.name.lower()}"

    @classmethod
    def from_char(cls, char: str) -> Piece:
        """Piece for a FEN letter, e.g. 'n' is a black knight."""
        ptype = _TYPES_BY_LETTER.get(char.upper()) if len(char) == 1 else None
        if ptype is None:
            raise ValueError(f"Invalid piece character: {char!r}")
        return cls(Color.WHITE if char.isupper() else Color.BLACK, ptype)

    @classmethod
    def from_name(cls, name: str) -> Piece:
        """Inverse of :attr:`name`."""
        color_name, _, type_name = name.partition("-")
        try:
            return cls(_COLORS_BY_NAME[color_name], _TYPES_BY_NAME[type_name])
        except KeyError:
            raise ValueError(f"Invalid piece name: {name!r}") from None
