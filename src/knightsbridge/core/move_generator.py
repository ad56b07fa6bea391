"""Pseudo-legal and legal move generation + attack detection."""

from __future__ import annotations

from functools import lru_cache
from typing import TYPE_CHECKING

from knightsbridge.core.enums import (
    PROMOTION_TYPES,
    CastlingRights,
    Color,
    MoveFlag,
    PieceType,
)
from knightsbridge.core.move import Move
from knightsbridge.core.piece import Piece
from knightsbridge.core.types import Square, file_of, make_square, rank_of

if TYPE_CHECKING:
    from knightsbridge.core.position import Position
    from knightsbridge.core.state import GameState


KNIGHT_OFFSETS: tuple[tuple[int, int], ...] = (
    (-2, -1),
    (-2, 1),
    (-1, -2),
    (-1, 2),
    (1, -2),
    (1, 2),
    (2, -1),
    (2, 1),
)

KING_OFFSETS: tuple[tuple[int, int], ...] = (
    (-1, -1),
    (-1, 0),
    (-1, 1),
    (0, -1),
    (0, 1),
    (1, -1),
    (1, 0),
    (1, 1),
)

BISHOP_DIRS: tuple[tuple[int, int], ...] = ((-1, -1), (-1, 1), (1, -1), (1, 1))
ROOK_DIRS: tuple[tuple[int, int], ...] = ((-1, 0), (1, 0), (0, -1), (0, 1))
QUEEN_DIRS: tuple[tuple[int, int], ...] = BISHOP_DIRS + ROOK_DIRS

# Castling needs the king on its home square and the rook on the corner
# guarded by each right.
_KING_HOME: dict[Color, Square] = {Color.WHITE: 4, Color.BLACK: 60}
_CASTLE_ROOK_HOME: dict[CastlingRights, Square] = {
    CastlingRights.WHITE_KINGSIDE: 7,
    CastlingRights.WHITE_QUEENSIDE: 0,
    CastlingRights.BLACK_KINGSIDE: 63,
    CastlingRights.BLACK_QUEENSIDE: 56,
}
# Rook (from, to) when the king lands on the given square.
CASTLE_ROOK_SLIDES: dict[Square, tuple[Square, Square]] = {
    6: (7, 5),
    2: (0, 3),
    62: (63, 61),
    58: (56, 59),
}


# -- Precomputed lookup tables ---------------------------------------------


def _build_targets(
    offsets: tuple[tuple[int, int], ...],
) -> tuple[tuple[Square, ...], ...]:
    targets: list[tuple[Square, ...]] = []
    for sq in range(64):
        file_idx = sq & 7
        rank_idx = sq >> 3
        moves: list[Square] = []
        for df, dr in offsets:
            af = file_idx + df
            ar = rank_idx + dr
            if 0 <= af < 8 and 0 <= ar < 8:
                moves.append(make_square(af, ar))
        targets.append(tuple(moves))
    return tuple(targets)


def _build_attack_masks(targets: tuple[tuple[Square, ...], ...]) -> tuple[int, ...]:
    masks: list[int] = [0] * 64
    for sq in range(64):
        mask = 0
        for to_sq in targets[sq]:
            mask |= 1 << to_sq
        masks[sq] = mask
    return tuple(masks)


def _build_pawn_attacker_masks() -> tuple[tuple[int, ...], tuple[int, ...]]:
    """[color][sq] -> squares from which a pawn of *color* attacks *sq*."""
    white_masks: list[int] = [0] * 64
    black_masks: list[int] = [0] * 64

    for sq in range(64):
        file_idx = sq & 7
        rank_idx = sq >> 3

        white_mask = 0
        if rank_idx > 0:
            if file_idx > 0:
                white_mask |= 1 << make_square(file_idx - 1, rank_idx - 1)
            if file_idx < 7:
                white_mask |= 1 << make_square(file_idx + 1, rank_idx - 1)

        black_mask = 0
        if rank_idx < 7:
            if file_idx > 0:
                black_mask |= 1 << make_square(file_idx - 1, rank_idx + 1)
            if file_idx < 7:
                black_mask |= 1 << make_square(file_idx + 1, rank_idx + 1)

        white_masks[sq] = white_mask
        black_masks[sq] = black_mask

    return (tuple(white_masks), tuple(black_masks))


def _build_rays(
    directions: tuple[tuple[int, int], ...],
) -> tuple[tuple[tuple[Square, ...], ...], ...]:
    rays_per_square: list[tuple[tuple[Square, ...], ...]] = []
    for sq in range(64):
        file_idx = sq & 7
        rank_idx = sq >> 3
        square_rays: list[tuple[Square, ...]] = []
        for df, dr in directions:
            af = file_idx + df
            ar = rank_idx + dr
            ray: list[Square] = []
            while 0 <= af < 8 and 0 <= ar < 8:
                ray.append(make_square(af, ar))
                af += df
                ar += dr
            square_rays.append(tuple(ray))
        rays_per_square.append(tuple(square_rays))
    return tuple(rays_per_square)


_KNIGHT_TARGETS = _build_targets(KNIGHT_OFFSETS)
_KING_TARGETS = _build_targets(KING_OFFSETS)
_KNIGHT_ATTACK_MASKS = _build_attack_masks(_KNIGHT_TARGETS)
_KING_ATTACK_MASKS = _build_attack_masks(_KING_TARGETS)
_PAWN_ATTACKER_MASKS = _build_pawn_attacker_masks()

_BISHOP_RAYS = _build_rays(BISHOP_DIRS)
_ROOK_RAYS = _build_rays(ROOK_DIRS)
_QUEEN_RAYS = _build_rays(QUEEN_DIRS)


# -- Board simulation -------------------------------------------------------


def position_after(position: Position, move: Move) -> Position:
    """Placement after *move*, including rook slides and en passant removal."""
    changes: dict[Square, Piece | None] = {move.from_sq: None}

    if move.flag == MoveFlag.EN_PASSANT:
        changes[make_square(file_of(move.to_sq), rank_of(move.from_sq))] = None

    placed = move.piece
    if move.flag == MoveFlag.PROMOTION and move.promotion is not None:
        placed = Piece(move.piece.color, move.promotion)
    changes[move.to_sq] = placed

    if move.is_castle:
        rook_from, rook_to = CASTLE_ROOK_SLIDES[move.to_sq]
        changes[rook_to] = position[rook_from]
        changes[rook_from] = None

    return position.with_changes(changes)


class MoveGenerator:
    """Generates moves for a :class:`Position` under given castling/ep state.

    The generator never mutates the position: legality is checked on
    scratch copies produced by :func:`position_after`.
    """

    __slots__ = ("_pos", "_castling", "_en_passant")

    def __init__(
        self,
        position: Position,
        castling: CastlingRights = CastlingRights.NONE,
        en_passant: Square | None = None,
    ) -> None:
        self._pos = position
        self._castling = castling
        self._en_passant = en_passant

    @classmethod
    def for_state(
        cls, position: Position, state: GameState, color: Color | None = None
    ) -> MoveGenerator:
        """Generator seen from *color* (default: the side to move).

        The en passant target only ever belongs to the side to move.
        """
        if color is None or color == state.current_player:
            return cls(position, state.castling, state.en_passant)
        return cls(position, state.castling, None)

    # -- Public API ---------------------------------------------------------

    def legal_moves(self, color: Color) -> list[Move]:
        """All strictly legal moves for *color*."""
        return list(
            _legal_moves_cached(self._pos, color, self._castling, self._en_passant)
        )

    def legal_moves_from(self, sq: Square) -> list[Move]:
        piece = self._pos[sq]
        if piece is None:
            return []
        return [m for m in self.legal_moves(piece.color) if m.from_sq == sq]

    def filter_legal(self, moves: list[Move], color: Color) -> list[Move]:
        """Drop moves that would leave *color*'s king attacked."""
        if self._pos.king_square(color) is None:
            return []
        opponent = color.opposite
        legal: list[Move] = []
        for move in moves:
            after = position_after(self._pos, move)
            king_sq = after.king_square(color)
            if king_sq is None:
                continue
            if not MoveGenerator(after).is_square_attacked(king_sq, opponent):
                legal.append(move)
        return legal

    def pseudo_legal_moves(self, color: Color) -> list[Move]:
        """All pseudo-legal moves (may leave own king in check)."""
        moves: list[Move] = []
        board = self._pos

        for sq in board.pieces(color, PieceType.PAWN):
            self._gen_pawn(sq, color, moves)
        for sq in board.pieces(color, PieceType.KNIGHT):
            self._gen_knight(sq, color, moves)
        for sq in board.pieces(color, PieceType.BISHOP):
            self._gen_sliding(sq, color, _BISHOP_RAYS[sq], moves)
        for sq in board.pieces(color, PieceType.ROOK):
            self._gen_sliding(sq, color, _ROOK_RAYS[sq], moves)
        for sq in board.pieces(color, PieceType.QUEEN):
            self._gen_sliding(sq, color, _QUEEN_RAYS[sq], moves)
        for sq in board.pieces(color, PieceType.KING):
            self._gen_king(sq, color, moves)

        return moves

    def pseudo_legal_moves_from(self, sq: Square) -> list[Move]:
        """Pseudo-legal moves of the piece on *sq* (empty if none)."""
        piece = self._pos[sq]
        if piece is None:
            return []
        moves: list[Move] = []
        color = piece.color
        match piece.piece_type:
            case PieceType.PAWN:
                self._gen_pawn(sq, color, moves)
            case PieceType.KNIGHT:
                self._gen_knight(sq, color, moves)
            case PieceType.BISHOP:
                self._gen_sliding(sq, color, _BISHOP_RAYS[sq], moves)
            case PieceType.ROOK:
                self._gen_sliding(sq, color, _ROOK_RAYS[sq], moves)
            case PieceType.QUEEN:
                self._gen_sliding(sq, color, _QUEEN_RAYS[sq], moves)
            case PieceType.KING:
                self._gen_king(sq, color, moves)
        return moves

    def destinations(self, sq: Square) -> list[Square]:
        """Pseudo-legal destination squares of the piece on *sq*."""
        seen: list[Square] = []
        for move in self.pseudo_legal_moves_from(sq):
            if move.to_sq not in seen:
                seen.append(move.to_sq)
        return seen

    # -- Attack detection (public) -----------------------------------------

    def is_in_check(self, color: Color) -> bool:
        """Is *color*'s king attacked by the opponent? False without a king."""
        king_sq = self._pos.king_square(color)
        if king_sq is None:
            return False
        return self.is_square_attacked(king_sq, color.opposite)

    def is_square_attacked(self, sq: Square, by_color: Color) -> bool:
        """Is *sq* attacked by any piece of *by_color*?

        Pawns attack their diagonals whether or not anything stands there.
        """
        board = self._pos
        by_idx = int(by_color)

        if (
            board.pieces_bitboard(by_color, PieceType.PAWN)
            & _PAWN_ATTACKER_MASKS[by_idx][sq]
        ):
            return True

        if board.pieces_bitboard(by_color, PieceType.KNIGHT) & _KNIGHT_ATTACK_MASKS[sq]:
            return True

        if board.pieces_bitboard(by_color, PieceType.KING) & _KING_ATTACK_MASKS[sq]:
            return True

        if board.has_piece(by_color, PieceType.BISHOP) or board.has_piece(
            by_color, PieceType.QUEEN
        ):
            for ray in _BISHOP_RAYS[sq]:
                for to_sq in ray:
                    piece = board[to_sq]
                    if piece is None:
                        continue
                    if piece.color == by_color and piece.piece_type in (
                        PieceType.BISHOP,
                        PieceType.QUEEN,
                    ):
                        return True
                    break

        if board.has_piece(by_color, PieceType.ROOK) or board.has_piece(
            by_color, PieceType.QUEEN
        ):
            for ray in _ROOK_RAYS[sq]:
                for to_sq in ray:
                    piece = board[to_sq]
                    if piece is None:
                        continue
                    if piece.color == by_color and piece.piece_type in (
                        PieceType.ROOK,
                        PieceType.QUEEN,
                    ):
                        return True
                    break

        return False

    # -- Piece-specific generators (private) -------------------------------

    def _gen_pawn(self, sq: Square, color: Color, moves: list[Move]) -> None:
        board = self._pos
        pawn = board[sq]
        assert pawn is not None
        file_idx = file_of(sq)
        rank_idx = rank_of(sq)
        forward = 1 if color == Color.WHITE else -1
        start_rank = 1 if color == Color.WHITE else 6
        last_rank = 7 if color == Color.WHITE else 0
        ep_rank = 5 if color == Color.WHITE else 2

        next_rank = rank_idx + forward
        if not 0 <= next_rank < 8:
            return
        promotes = next_rank == last_rank

        one_step = make_square(file_idx, next_rank)
        if board.is_empty(one_step):
            if promotes:
                for pt in PROMOTION_TYPES:
                    moves.append(Move(sq, one_step, pawn, None, MoveFlag.PROMOTION, pt))
            else:
                moves.append(Move(sq, one_step, pawn))
                if rank_idx == start_rank:
                    two_step = make_square(file_idx, rank_idx + 2 * forward)
                    if board.is_empty(two_step):
                        moves.append(
                            Move(sq, two_step, pawn, None, MoveFlag.DOUBLE_PAWN)
                        )

        for df in (-1, 1):
            cap_file = file_idx + df
            if not 0 <= cap_file < 8:
                continue
            cap_sq = make_square(cap_file, next_rank)
            target = board[cap_sq]
            if target is not None:
                if target.color == color:
                    continue
                if promotes:
                    for pt in PROMOTION_TYPES:
                        moves.append(
                            Move(sq, cap_sq, pawn, target, MoveFlag.PROMOTION, pt)
                        )
                else:
                    moves.append(Move(sq, cap_sq, pawn, target))
            elif cap_sq == self._en_passant and next_rank == ep_rank:
                passed = board[make_square(cap_file, rank_idx)]
                if (
                    passed is not None
                    and passed.color != color
                    and passed.piece_type == PieceType.PAWN
                ):
                    moves.append(Move(sq, cap_sq, pawn, passed, MoveFlag.EN_PASSANT))

    def _gen_knight(self, sq: Square, color: Color, moves: list[Move]) -> None:
        board = self._pos
        knight = board[sq]
        assert knight is not None
        for to_sq in _KNIGHT_TARGETS[sq]:
            target = board[to_sq]
            if target is None or target.color != color:
                moves.append(Move(sq, to_sq, knight, target))

    def _gen_sliding(
        self,
        sq: Square,
        color: Color,
        rays: tuple[tuple[Square, ...], ...],
        moves: list[Move],
    ) -> None:
        board = self._pos
        slider = board[sq]
        assert slider is not None
        for ray in rays:
            for to_sq in ray:
                target = board[to_sq]
                if target is None:
                    moves.append(Move(sq, to_sq, slider))
                    continue
                if target.color != color:
                    moves.append(Move(sq, to_sq, slider, target))
                break

    def _gen_king(self, sq: Square, color: Color, moves: list[Move]) -> None:
        board = self._pos
        king = board[sq]
        assert king is not None
        for to_sq in _KING_TARGETS[sq]:
            target = board[to_sq]
            if target is None or target.color != color:
                moves.append(Move(sq, to_sq, king, target))

        if sq == _KING_HOME[color] and self._castling & CastlingRights.both(color):
            self._gen_castling(sq, king, moves)

    def _gen_castling(self, king_sq: Square, king: Piece, moves: list[Move]) -> None:
        color = king.color
        if self.is_in_check(color):
            return

        board = self._pos
        opponent = color.opposite
        own_rook = Piece(color, PieceType.ROOK)

        ks = CastlingRights.kingside(color)
        if self._castling & ks and board[_CASTLE_ROOK_HOME[ks]] == own_rook:
            f_sq = king_sq + 1
            g_sq = king_sq + 2
            if (
                board.is_empty(f_sq)
                and board.is_empty(g_sq)
                and not self.is_square_attacked(f_sq, opponent)
                and not self.is_square_attacked(g_sq, opponent)
            ):
                moves.append(Move(king_sq, g_sq, king, None, MoveFlag.CASTLE_KINGSIDE))

        qs = CastlingRights.queenside(color)
        if self._castling & qs and board[_CASTLE_ROOK_HOME[qs]] == own_rook:
            d_sq = king_sq - 1
            c_sq = king_sq - 2
            b_sq = king_sq - 3
            if (
                board.is_empty(b_sq)
                and board.is_empty(c_sq)
                and board.is_empty(d_sq)
                and not self.is_square_attacked(c_sq, opponent)
                and not self.is_square_attacked(d_sq, opponent)
            ):
                moves.append(Move(king_sq, c_sq, king, None, MoveFlag.CASTLE_QUEENSIDE))


@lru_cache(maxsize=4096)
def _legal_moves_cached(
    position: Position,
    color: Color,
    castling: CastlingRights,
    en_passant: Square | None,
) -> tuple[Move, ...]:
    gen = MoveGenerator(position, castling, en_passant)
    return tuple(gen.filter_legal(gen.pseudo_legal_moves(color), color))
