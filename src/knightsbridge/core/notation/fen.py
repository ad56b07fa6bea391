"""FEN parsing and serialization."""

from __future__ import annotations

from knightsbridge.core.enums import CastlingRights, Color
from knightsbridge.core.piece import Piece
from knightsbridge.core.position import Position
from knightsbridge.core.state import GameState
from knightsbridge.core.types import (
    Square,
    make_square,
    parse_square,
    rank_of,
    square_name,
)

_CASTLING_CHARS: dict[str, CastlingRights] = {
    "K": CastlingRights.WHITE_KINGSIDE,
    "Q": CastlingRights.WHITE_QUEENSIDE,
    "k": CastlingRights.BLACK_KINGSIDE,
    "q": CastlingRights.BLACK_QUEENSIDE,
}


def castling_from_fen(text: str) -> CastlingRights:
    """Parse the FEN castling field (``"KQkq"``, ``"-"``, ...)."""
    castling = CastlingRights.NONE
    if text == "-":
        return castling
    seen: set[str] = set()
    for ch in text:
        right = _CASTLING_CHARS.get(ch)
        if right is None or ch in seen:
            raise ValueError(f"Invalid FEN castling field: {text!r}")
        seen.add(ch)
        castling |= right
    if not seen:
        raise ValueError(f"Invalid FEN castling field: {text!r}")
    return castling


def castling_to_fen(castling: CastlingRights) -> str:
    text = "".join(ch for ch, right in _CASTLING_CHARS.items() if castling & right)
    return text or "-"


def position_from_fen(fen: str) -> tuple[Position, GameState]:
    """Parse a FEN string into a placement and a fresh game state.

    The returned state has an empty history and records *fen* as its
    starting point, so repetition counting starts from here.
    """
    parts = fen.split()
    if not (4 <= len(parts) <= 6):
        raise ValueError(f"Invalid FEN (need 4-6 fields): {fen!r}")

    placement, side_part, castling_part, ep_part = parts[:4]

    # 1. Piece placement
    ranks = placement.split("/")
    if len(ranks) != 8:
        raise ValueError(f"Invalid FEN board (must contain 8 ranks): {fen!r}")
    pieces: dict[Square, Piece] = {}
    for rank_idx, rank_text in enumerate(ranks):
        rank = 7 - rank_idx
        file = 0
        for ch in rank_text:
            if ch.isdigit():
                step = int(ch)
                if not (1 <= step <= 8):
                    raise ValueError(f"Invalid FEN digit {ch!r}: {fen!r}")
                file += step
            else:
                if file >= 8:
                    raise ValueError(f"Invalid FEN rank width: {fen!r}")
                pieces[make_square(file, rank)] = Piece.from_char(ch)
                file += 1
            if file > 8:
                raise ValueError(f"Invalid FEN rank width: {fen!r}")
        if file != 8:
            raise ValueError(f"Invalid FEN rank width: {fen!r}")

    # 2. Side to move
    if side_part == "w":
        side = Color.WHITE
    elif side_part == "b":
        side = Color.BLACK
    else:
        raise ValueError(f"Invalid FEN side-to-move field: {side_part!r}")

    # 3. Castling
    castling = castling_from_fen(castling_part)

    # 4. En passant
    ep: Square | None = None
    if ep_part != "-":
        ep = parse_square(ep_part)
        expected_ep_rank = 5 if side == Color.WHITE else 2
        if rank_of(ep) != expected_ep_rank:
            raise ValueError(
                f"Invalid FEN en-passant square for side-to-move: {ep_part!r}"
            )

    # 5–6. Clocks (optional)
    try:
        halfmove = int(parts[4]) if len(parts) > 4 else 0
        fullmove = int(parts[5]) if len(parts) > 5 else 1
    except ValueError:
        raise ValueError(f"Invalid FEN move counters: {fen!r}") from None
    if halfmove < 0:
        raise ValueError(f"Invalid FEN halfmove clock: {parts[4]!r}")
    if fullmove < 1:
        raise ValueError(f"Invalid FEN fullmove number: {parts[5]!r}")

    state = GameState(
        castling=castling,
        en_passant=ep,
        halfmove_clock=halfmove,
        fullmove_number=fullmove,
        current_player=side,
        start_fen=" ".join(parts),
    )
    return Position(pieces), state


def placement_to_fen(position: Position) -> str:
    """First FEN field: piece placement only."""
    rows: list[str] = []
    for rank in range(7, -1, -1):
        empty = 0
        row = ""
        for file in range(8):
            piece = position[make_square(file, rank)]
            if piece is None:
                empty += 1
            else:
                if empty:
                    row += str(empty)
                    empty = 0
                row += str(piece)
        if empty:
            row += str(empty)
        rows.append(row)
    return "/".join(rows)


def position_to_fen(position: Position, state: GameState) -> str:
    """Serialise a placement + game state to FEN."""
    side_str = "w" if state.current_player == Color.WHITE else "b"

    castling_str = castling_to_fen(state.castling)

    ep_str = square_name(state.en_passant) if state.en_passant is not None else "-"

    return (
        f"{placement_to_fen(position)} {side_str} {castling_str} {ep_str} "
        f"{state.halfmove_clock} {state.fullmove_number}"
    )
