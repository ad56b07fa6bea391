"""SAN (Standard Algebraic Notation) rendering and parsing."""

from __future__ import annotations

from knightsbridge.core.enums import MoveFlag, PieceType
from knightsbridge.core.errors import IllegalMove
from knightsbridge.core.move import Move
from knightsbridge.core.move_generator import MoveGenerator
from knightsbridge.core.position import Position
from knightsbridge.core.state import GameState
from knightsbridge.core.transition import play
from knightsbridge.core.types import (
    FILE_NAMES,
    RANK_NAMES,
    file_of,
    parse_square,
    rank_of,
    square_name,
)

_SAN_PIECE: dict[PieceType, str] = {
    PieceType.KNIGHT: "N",
    PieceType.BISHOP: "B",
    PieceType.ROOK: "R",
    PieceType.QUEEN: "Q",
    PieceType.KING: "K",
}
_SAN_PIECE_REV: dict[str, PieceType] = {v: k for k, v in _SAN_PIECE.items()}


def _disambiguation(move: Move, legal: list[Move]) -> str:
    rivals = [
        m
        for m in legal
        if m.to_sq == move.to_sq
        and m.from_sq != move.from_sq
        and m.piece == move.piece
    ]
    if not rivals:
        return ""
    if not any(file_of(m.from_sq) == file_of(move.from_sq) for m in rivals):
        return FILE_NAMES[file_of(move.from_sq)]
    if not any(rank_of(m.from_sq) == rank_of(move.from_sq) for m in rivals):
        return RANK_NAMES[rank_of(move.from_sq)]
    return square_name(move.from_sq)


def move_notation(move: Move, position: Position, state: GameState) -> str:
    """Render a legal *move* as SAN, given the position before it is played."""
    if move.flag == MoveFlag.CASTLE_KINGSIDE:
        san = "O-O"
    elif move.flag == MoveFlag.CASTLE_QUEENSIDE:
        san = "O-O-O"
    else:
        san = ""
        if move.piece.piece_type == PieceType.PAWN:
            if move.is_capture:
                san += FILE_NAMES[file_of(move.from_sq)]
        else:
            san += _SAN_PIECE[move.piece.piece_type]
            gen = MoveGenerator.for_state(position, state, move.piece.color)
            san += _disambiguation(move, gen.legal_moves(move.piece.color))

        if move.is_capture:
            san += "x"

        san += square_name(move.to_sq)

        if move.promotion is not None:
            san += "=" + _SAN_PIECE[move.promotion]

    # Check / checkmate suffix
    after_position, after_state = play(position, state, move)
    opponent = after_state.current_player
    gen_after = MoveGenerator.for_state(after_position, after_state)
    if gen_after.is_in_check(opponent):
        san += "+" if gen_after.legal_moves(opponent) else "#"

    return san


def parse_san(san: str, position: Position, state: GameState) -> Move:
    """Find the legal move for the side to move that *san* describes."""
    mover = state.current_player
    legal = MoveGenerator.for_state(position, state, mover).legal_moves(mover)

    clean = san.strip().rstrip("+#!?")

    if clean in ("O-O", "0-0", "O-O-O", "0-0-0"):
        flag = (
            MoveFlag.CASTLE_KINGSIDE if len(clean) == 3 else MoveFlag.CASTLE_QUEENSIDE
        )
        for m in legal:
            if m.flag == flag:
                return m
        raise IllegalMove(f"castling {clean} is not legal here")

    promotion: PieceType | None = None
    if "=" in clean:
        clean, _, promo_text = clean.partition("=")
        promotion = _SAN_PIECE_REV.get(promo_text.upper())
        if promotion is None or promotion == PieceType.KING:
            raise IllegalMove(f"invalid promotion in {san!r}")

    if len(clean) < 2:
        raise IllegalMove(f"unreadable move {san!r}")
    try:
        to_sq = parse_square(clean[-2:])
    except ValueError:
        raise IllegalMove(f"unreadable move {san!r}") from None
    clean = clean[:-2]

    if clean.endswith("x"):
        clean = clean[:-1]

    if clean and clean[0] in _SAN_PIECE_REV:
        piece_type = _SAN_PIECE_REV[clean[0]]
        clean = clean[1:]
    else:
        piece_type = PieceType.PAWN

    from_file: int | None = None
    from_rank: int | None = None
    for ch in clean:
        if ch in FILE_NAMES:
            from_file = FILE_NAMES.index(ch)
        elif ch in RANK_NAMES:
            from_rank = RANK_NAMES.index(ch)
        else:
            raise IllegalMove(f"unreadable move {san!r}")

    candidates: list[Move] = []
    for m in legal:
        if m.piece.piece_type != piece_type or m.to_sq != to_sq:
            continue
        if m.promotion != promotion:
            continue
        if from_file is not None and file_of(m.from_sq) != from_file:
            continue
        if from_rank is not None and rank_of(m.from_sq) != from_rank:
            continue
        candidates.append(m)

    if len(candidates) == 1:
        return candidates[0]
    if not candidates:
        raise IllegalMove(f"{san!r} is not legal in this position")
    raise IllegalMove(f"{san!r} is ambiguous")
