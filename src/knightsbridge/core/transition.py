"""State transition: apply a legal move to a (Position, GameState) pair."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import TypeAlias

from knightsbridge.core.config import DEFAULT_CONFIG, RulesConfig
from knightsbridge.core.enums import (
    PROMOTION_TYPES,
    CastlingRights,
    Color,
    MoveFlag,
    PieceType,
)
from knightsbridge.core.errors import IllegalMove
from knightsbridge.core.move import Move
from knightsbridge.core.move_generator import MoveGenerator, position_after
from knightsbridge.core.piece import Piece
from knightsbridge.core.position import Position
from knightsbridge.core.state import GameState
from knightsbridge.core.types import (
    Square,
    coerce_square,
    file_of,
    make_square,
    rank_of,
    square_name,
)

_LOGGER = logging.getLogger(__name__)

PromotionChoice: TypeAlias = "PieceType | Piece | str"

_PROMOTION_NAMES: dict[str, PieceType] = {
    "q": PieceType.QUEEN,
    "queen": PieceType.QUEEN,
    "r": PieceType.ROOK,
    "rook": PieceType.ROOK,
    "b": PieceType.BISHOP,
    "bishop": PieceType.BISHOP,
    "n": PieceType.KNIGHT,
    "knight": PieceType.KNIGHT,
}

_ROOK_CORNERS: dict[Square, CastlingRights] = {
    make_square(0, 0): CastlingRights.WHITE_QUEENSIDE,
    make_square(7, 0): CastlingRights.WHITE_KINGSIDE,
    make_square(0, 7): CastlingRights.BLACK_QUEENSIDE,
    make_square(7, 7): CastlingRights.BLACK_KINGSIDE,
}


@dataclass(frozen=True, slots=True)
class MoveResult:
    """Outcome of a successful :func:`apply_move`."""

    position: Position
    state: GameState
    move: Move

    @property
    def captured(self) -> Piece | None:
        return self.move.captured


# ── Move resolution ─────────────────────────────────────────────────────────


def _promotion_type(choice: PromotionChoice, mover: Color) -> PieceType:
    if isinstance(choice, Piece):
        if choice.color != mover:
            raise IllegalMove(f"promotion piece {choice} is not {mover}")
        ptype = choice.piece_type
    elif isinstance(choice, PieceType):
        ptype = choice
    elif isinstance(choice, str) and choice.strip().lower() in _PROMOTION_NAMES:
        ptype = _PROMOTION_NAMES[choice.strip().lower()]
    else:
        raise IllegalMove(f"invalid promotion choice {choice!r}")
    if ptype not in PROMOTION_TYPES:
        raise IllegalMove(f"cannot promote to {ptype.name.lower()}")
    return ptype


def resolve_move(
    from_sq: object,
    to_sq: object,
    position: Position,
    state: GameState,
    promotion: PromotionChoice | None = None,
    *,
    touched: object = None,
    config: RulesConfig = DEFAULT_CONFIG,
) -> Move:
    """Find the legal :class:`Move` matching the request or raise IllegalMove."""
    origin = coerce_square(from_sq)
    target = coerce_square(to_sq)
    if origin is None or target is None:
        raise IllegalMove(f"not a square pair: {from_sq!r} -> {to_sq!r}")

    piece = position[origin]
    if piece is None:
        raise IllegalMove("no piece on the origin square", origin, target)
    mover = state.current_player
    if piece.color != mover:
        raise IllegalMove(f"it is {mover}'s turn", origin, target)

    gen = MoveGenerator.for_state(position, state, mover)
    legal = gen.legal_moves(mover)

    if touched is not None:
        touched_sq = coerce_square(touched)
        touched_piece = position[touched_sq] if touched_sq is not None else None
        if (
            touched_sq != origin
            and touched_piece is not None
            and touched_piece.color == mover
            and any(m.from_sq == touched_sq for m in legal)
        ):
            raise IllegalMove(
                f"touch-move: the piece on {square_name(touched_sq)} must be moved",
                origin,
                target,
            )

    candidates = [m for m in legal if m.from_sq == origin and m.to_sq == target]
    if not candidates:
        raise IllegalMove("move is not legal in this position", origin, target)

    if candidates[0].flag != MoveFlag.PROMOTION:
        if promotion is not None:
            raise IllegalMove(
                "promotion given for a non-promoting move", origin, target
            )
        return candidates[0]

    wanted = (
        config.default_promotion
        if promotion is None
        else _promotion_type(promotion, mover)
    )
    for move in candidates:
        if move.promotion == wanted:
            return move
    raise IllegalMove(f"cannot promote to {wanted.name.lower()}", origin, target)


# ── Transition ──────────────────────────────────────────────────────────────


def _castling_after(castling: CastlingRights, move: Move) -> CastlingRights:
    if move.piece.piece_type == PieceType.KING:
        castling &= ~CastlingRights.both(move.piece.color)
    for sq in (move.from_sq, move.to_sq):
        if sq in _ROOK_CORNERS:
            castling &= ~_ROOK_CORNERS[sq]
    return castling


def play(
    position: Position, state: GameState, move: Move
) -> tuple[Position, GameState]:
    """Apply an already-verified *move* without re-checking legality."""
    next_position = position_after(position, move)

    en_passant: Square | None = None
    if move.flag == MoveFlag.DOUBLE_PAWN:
        en_passant = make_square(
            file_of(move.from_sq),
            (rank_of(move.from_sq) + rank_of(move.to_sq)) // 2,
        )

    if move.piece.piece_type == PieceType.PAWN or move.captured is not None:
        halfmove_clock = 0
    else:
        halfmove_clock = state.halfmove_clock + 1

    fullmove_number = state.fullmove_number
    if move.piece.color == Color.BLACK:
        fullmove_number += 1

    next_state = replace(
        state,
        castling=_castling_after(state.castling, move),
        en_passant=en_passant,
        halfmove_clock=halfmove_clock,
        fullmove_number=fullmove_number,
        move_history=state.move_history + (move,),
        current_player=move.piece.color.opposite,
    )
    return next_position, next_state


def apply_move(
    from_sq: object,
    to_sq: object,
    position: Position,
    state: GameState,
    promotion: PromotionChoice | None = None,
    *,
    touched: object = None,
    config: RulesConfig = DEFAULT_CONFIG,
) -> MoveResult:
    """Play *from_sq* → *to_sq* for the side to move.

    *promotion* picks the piece a pawn becomes on its last rank; when it is
    ``None`` the configured default (queen) is used. *touched* names a piece
    the player touched first (touch-move rule). Raises :class:`IllegalMove`
    and leaves the inputs untouched when the request is not legal.
    """
    try:
        move = resolve_move(
            from_sq,
            to_sq,
            position,
            state,
            promotion,
            touched=touched,
            config=config,
        )
    except IllegalMove as exc:
        _LOGGER.debug("Rejected move %r -> %r: %s", from_sq, to_sq, exc.reason)
        raise
    next_position, next_state = play(position, state, move)
    return MoveResult(next_position, next_state, move)
