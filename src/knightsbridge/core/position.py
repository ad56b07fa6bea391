"""Position - piece placement on an 8x8 board."""

from __future__ import annotations

from collections.abc import Iterator, Mapping

from knightsbridge.core.enums import Color, PieceType
from knightsbridge.core.piece import Piece
from knightsbridge.core.types import Square, is_valid_square, make_square

_PIECE_TYPE_COUNT = 6
_COLOR_COUNT = 2

_BACK_RANK: tuple[PieceType, ...] = (
    PieceType.ROOK,
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.QUEEN,
    PieceType.KING,
    PieceType.BISHOP,
    PieceType.KNIGHT,
    PieceType.ROOK,
)


class Position:
    """Immutable 64-square placement with per-color piece indexes.

    A position never changes after construction; :meth:`with_changes`
    returns a new instance. Lookups of squares that are not on the board
    report an empty square instead of failing.
    """

    __slots__ = ("_squares", "_piece_bitboards", "_color_bitboards", "_king_squares")

    def __init__(self, pieces: Mapping[Square, Piece] | None = None) -> None:
        self._squares: list[Piece | None] = [None] * 64
        # [color][piece_type-1] -> bitboard of occupied squares.
        self._piece_bitboards: list[list[int]] = [
            [0] * _PIECE_TYPE_COUNT for _ in range(_COLOR_COUNT)
        ]
        # [color] -> bitboard of all occupied squares for that color.
        self._color_bitboards: list[int] = [0] * _COLOR_COUNT
        # [color] -> king square cache (None if king missing).
        self._king_squares: list[Square | None] = [None] * _COLOR_COUNT
        if pieces:
            for sq, piece in pieces.items():
                if not is_valid_square(sq):
                    raise ValueError(f"Square out of range: {sq!r}")
                self._place(sq, piece)

    @staticmethod
    def _piece_type_index(piece_type: PieceType) -> int:
        return int(piece_type) - 1

    @staticmethod
    def _squares_from_bitboard(bitboard: int) -> list[Square]:
        squares: list[Square] = []
        while bitboard:
            lsb = bitboard & -bitboard
            squares.append(lsb.bit_length() - 1)
            bitboard ^= lsb
        return squares

    def _place(self, sq: Square, piece: Piece | None) -> None:
        old_piece = self._squares[sq]
        if old_piece == piece:
            return

        mask = 1 << sq

        if old_piece is not None:
            old_color_idx = int(old_piece.color)
            old_piece_idx = self._piece_type_index(old_piece.piece_type)
            self._piece_bitboards[old_color_idx][old_piece_idx] &= ~mask
            self._color_bitboards[old_color_idx] &= ~mask
            if (
                old_piece.piece_type == PieceType.KING
                and self._king_squares[old_color_idx] == sq
            ):
                self._king_squares[old_color_idx] = None

        self._squares[sq] = piece

        if piece is None:
            return

        color_idx = int(piece.color)
        piece_idx = self._piece_type_index(piece.piece_type)
        self._piece_bitboards[color_idx][piece_idx] |= mask
        self._color_bitboards[color_idx] |= mask
        if piece.piece_type == PieceType.KING:
            self._king_squares[color_idx] = sq

    # -- Element access -----------------------------------------------------

    def __getitem__(self, sq: Square) -> Piece | None:
        if not is_valid_square(sq):
            return None
        return self._squares[sq]

    def piece_at(self, sq: Square) -> Piece | None:
        """Occupant of *sq*, ``None`` when empty or off the board."""
        return self[sq]

    def color_at(self, sq: Square) -> Color | None:
        piece = self[sq]
        return piece.color if piece is not None else None

    def is_empty(self, sq: Square) -> bool:
        return self[sq] is None

    def items(self) -> Iterator[tuple[Square, Piece]]:
        """Occupied squares in ascending order with their pieces."""
        for sq, piece in enumerate(self._squares):
            if piece is not None:
                yield sq, piece

    # -- Query helpers ------------------------------------------------------

    def pieces(self, color: Color, piece_type: PieceType) -> list[Square]:
        """Squares occupied by *color*'s *piece_type*."""
        bitboard = self._piece_bitboards[int(color)][self._piece_type_index(piece_type)]
        return self._squares_from_bitboard(bitboard)

    def pieces_bitboard(self, color: Color, piece_type: PieceType) -> int:
        """Bitboard of squares occupied by *color*'s *piece_type*."""
        return self._piece_bitboards[int(color)][self._piece_type_index(piece_type)]

    def has_piece(self, color: Color, piece_type: PieceType) -> bool:
        """Whether *color* has at least one piece of *piece_type*."""
        return bool(self.pieces_bitboard(color, piece_type))

    def all_pieces_bitboard(self, color: Color) -> int:
        """Bitboard of all squares occupied by *color*."""
        return self._color_bitboards[int(color)]

    def all_pieces(self, color: Color) -> list[Square]:
        """All squares occupied by *color*."""
        return self._squares_from_bitboard(self.all_pieces_bitboard(color))

    def occupied_count(self) -> int:
        return (self._color_bitboards[0] | self._color_bitboards[1]).bit_count()

    def king_square(self, color: Color) -> Square | None:
        """Square of *color*'s king, ``None`` if it has none."""
        return self._king_squares[int(color)]

    # -- Derivation ---------------------------------------------------------

    def with_changes(self, changes: Mapping[Square, Piece | None]) -> Position:
        """New position with *changes* applied in insertion order."""
        pos = Position.__new__(Position)
        pos._squares = self._squares.copy()
        pos._piece_bitboards = [row.copy() for row in self._piece_bitboards]
        pos._color_bitboards = self._color_bitboards.copy()
        pos._king_squares = self._king_squares.copy()
        for sq, piece in changes.items():
            if not is_valid_square(sq):
                raise ValueError(f"Square out of range: {sq!r}")
            pos._place(sq, piece)
        return pos

    def placement(self) -> tuple[Piece | None, ...]:
        """Immutable 64-tuple of occupants, a1 first."""
        return tuple(self._squares)

    # -- Factory ------------------------------------------------------------

    @classmethod
    def initial(cls) -> Position:
        """Standard starting position."""
        pieces: dict[Square, Piece] = {}
        for f in range(8):
            pieces[make_square(f, 1)] = Piece(Color.WHITE, PieceType.PAWN)
            pieces[make_square(f, 6)] = Piece(Color.BLACK, PieceType.PAWN)
        for f, pt in enumerate(_BACK_RANK):
            pieces[make_square(f, 0)] = Piece(Color.WHITE, pt)
            pieces[make_square(f, 7)] = Piece(Color.BLACK, pt)
        return cls(pieces)

    # -- Dunder helpers -----------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Position):
            return NotImplemented
        return self._squares == other._squares

    def __hash__(self) -> int:
        return hash(tuple(self._squares))

    def __repr__(self) -> str:
        rows: list[str] = []
        for rank in range(7, -1, -1):
            row = []
            for file in range(8):
                p = self._squares[make_square(file, rank)]
                row.append(str(p) if p else ".")
            rows.append(f"{rank + 1} {' '.join(row)}")
        rows.append("  a b c d e f g h")
        return "\n".join(rows)
