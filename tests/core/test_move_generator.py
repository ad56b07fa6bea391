"""Perft counts and targeted move-generation cases.

Reference values: https://www.chessprogramming.org/Perft_Results
"""

import pytest

from knightsbridge.core.enums import CastlingRights, Color, MoveFlag, PieceType
from knightsbridge.core.move import Move
from knightsbridge.core.move_generator import MoveGenerator
from knightsbridge.core.notation.fen import position_from_fen
from knightsbridge.core.piece import Piece
from knightsbridge.core.position import Position
from knightsbridge.core.state import STARTING_FEN, GameState
from knightsbridge.core.transition import play
from knightsbridge.core.types import (
    A1,
    B8,
    C8,
    D2,
    D5,
    D6,
    E1,
    E2,
    E4,
    E5,
    E8,
    F1,
    G1,
    G8,
    H8,
)


def perft(position: Position, state: GameState, depth: int) -> int:
    """Count leaf nodes at *depth* by replaying each legal move."""
    moves = MoveGenerator.for_state(position, state).legal_moves(
        state.current_player
    )
    if depth == 1:
        return len(moves)
    nodes = 0
    for move in moves:
        nodes += perft(*play(position, state, move), depth - 1)
    return nodes


def legal_from_fen(fen: str) -> list[Move]:
    position, state = position_from_fen(fen)
    return MoveGenerator.for_state(position, state).legal_moves(state.current_player)


# ── Starting position ────────────────────────────────────────────────────────


class TestPerftStarting:
    def test_depth_1(self) -> None:
        assert perft(*position_from_fen(STARTING_FEN), 1) == 20

    def test_depth_2(self) -> None:
        assert perft(*position_from_fen(STARTING_FEN), 2) == 400

    def test_depth_3(self) -> None:
        assert perft(*position_from_fen(STARTING_FEN), 3) == 8_902

    @pytest.mark.slow
    def test_depth_4(self) -> None:
        assert perft(*position_from_fen(STARTING_FEN), 4) == 197_281


# ── Kiwipete (rich in tactics: castling, ep, promotions) ─────────────────────

KIWIPETE = "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1"


class TestPerftKiwipete:
    def test_depth_1(self) -> None:
        assert perft(*position_from_fen(KIWIPETE), 1) == 48

    def test_depth_2(self) -> None:
        assert perft(*position_from_fen(KIWIPETE), 2) == 2_039

    @pytest.mark.slow
    def test_depth_3(self) -> None:
        assert perft(*position_from_fen(KIWIPETE), 3) == 97_862


# ── Position 3: en-passant + promotion edge cases ───────────────────────────

POS3 = "8/2p5/3p4/KP5r/1R3p1k/8/4P1P1/8 w - - 0 1"


class TestPerftPos3:
    def test_depth_1(self) -> None:
        assert perft(*position_from_fen(POS3), 1) == 14

    def test_depth_2(self) -> None:
        assert perft(*position_from_fen(POS3), 2) == 191

    def test_depth_3(self) -> None:
        assert perft(*position_from_fen(POS3), 3) == 2_812

    @pytest.mark.slow
    def test_depth_4(self) -> None:
        assert perft(*position_from_fen(POS3), 4) == 43_238


# ── Position 4: mirrored, many promotions ────────────────────────────────────

POS4 = "r3k2r/Pppp1ppp/1b3nbN/nP6/BBP1P3/q4N2/Pp1P2PP/R2Q1RK1 w kq - 0 1"


class TestPerftPos4:
    def test_depth_1(self) -> None:
        assert perft(*position_from_fen(POS4), 1) == 6

    def test_depth_2(self) -> None:
        assert perft(*position_from_fen(POS4), 2) == 264

    def test_depth_3(self) -> None:
        assert perft(*position_from_fen(POS4), 3) == 9_467


# ── Position 5 ───────────────────────────────────────────────────────────────

POS5 = "rnbq1k1r/pp1Pbppp/2p5/8/2B5/8/PPP1NnPP/RNBQK2R w KQ - 1 8"


class TestPerftPos5:
    def test_depth_1(self) -> None:
        assert perft(*position_from_fen(POS5), 1) == 44

    def test_depth_2(self) -> None:
        assert perft(*position_from_fen(POS5), 2) == 1_486

    @pytest.mark.slow
    def test_depth_3(self) -> None:
        assert perft(*position_from_fen(POS5), 3) == 62_379


# ── Rule scenarios ───────────────────────────────────────────────────────────


class TestStartingMoves:
    def test_twenty_moves_for_white(self) -> None:
        moves = legal_from_fen(STARTING_FEN)
        assert len(moves) == 20
        assert {m.piece.piece_type for m in moves} == {
            PieceType.PAWN,
            PieceType.KNIGHT,
        }

    def test_double_push_flag(self) -> None:
        moves = legal_from_fen(STARTING_FEN)
        double = [m for m in moves if m.from_sq == E2 and m.to_sq == E4]
        assert len(double) == 1
        assert double[0].flag == MoveFlag.DOUBLE_PAWN

    def test_destinations(self) -> None:
        gen = MoveGenerator(Position.initial())
        assert sorted(gen.destinations(G1)) == [21, 23]  # f3, h3
        assert gen.destinations(E1) == []
        assert gen.destinations(E4) == []


class TestCastling:
    @staticmethod
    def _castles(fen: str) -> set[MoveFlag]:
        return {m.flag for m in legal_from_fen(fen) if m.is_castle}

    def test_kingside_when_clear_and_safe(self) -> None:
        assert self._castles("4k2r/8/8/8/8/8/8/4K3 b k - 0 1") == {
            MoveFlag.CASTLE_KINGSIDE
        }

    def test_path_blocked(self) -> None:
        assert self._castles("4kb1r/8/8/8/8/8/8/4K3 b k - 0 1") == set()

    def test_transit_square_attacked(self) -> None:
        # Rook on f1 covers f8.
        assert self._castles("4k2r/8/8/8/8/8/8/4KR2 b k - 0 1") == set()

    def test_destination_attacked(self) -> None:
        assert self._castles("4k2r/8/8/8/8/8/6R1/K7 b k - 0 1") == set()

    def test_not_out_of_check(self) -> None:
        assert self._castles("4k2r/8/8/8/8/8/4R3/K7 b k - 0 1") == set()

    def test_attacked_rook_does_not_matter(self) -> None:
        assert self._castles("4k2r/8/8/8/8/8/7R/K7 b k - 0 1") == {
            MoveFlag.CASTLE_KINGSIDE
        }

    def test_queenside_b_file_may_be_attacked(self) -> None:
        assert self._castles("r3k3/8/8/8/8/8/1R6/4K3 b q - 0 1") == {
            MoveFlag.CASTLE_QUEENSIDE
        }

    def test_queenside_b_file_must_be_empty(self) -> None:
        assert self._castles("rn2k3/8/8/8/8/8/8/4K3 b q - 0 1") == set()

    def test_no_rights(self) -> None:
        assert self._castles("r3k2r/8/8/8/8/8/8/4K3 b - - 0 1") == set()

    def test_rights_without_rook(self) -> None:
        assert self._castles("4k3/8/8/8/8/8/8/4K3 b k - 0 1") == set()

    def test_rook_captured_in_place(self) -> None:
        position, state = position_from_fen("4k2r/8/8/8/8/8/8/B3K3 w k - 0 1")
        bishop = Piece(Color.WHITE, PieceType.BISHOP)
        capture = next(
            m
            for m in MoveGenerator.for_state(position, state).legal_moves(Color.WHITE)
            if m.from_sq == A1 and m.to_sq == H8
        )
        assert capture.piece == bishop
        position, state = play(position, state, capture)
        assert not state.castling & CastlingRights.BLACK_KINGSIDE
        black = MoveGenerator.for_state(position, state).legal_moves(Color.BLACK)
        assert not any(m.is_castle for m in black)

    def test_castling_moves_the_rook(self) -> None:
        position, state = position_from_fen("r3k3/8/8/8/8/8/8/4K3 b q - 0 1")
        castle = next(
            m
            for m in MoveGenerator.for_state(position, state).legal_moves(Color.BLACK)
            if m.is_castle
        )
        after, _ = play(position, state, castle)
        assert after[C8] == Piece(Color.BLACK, PieceType.KING)
        assert after[59] == Piece(Color.BLACK, PieceType.ROOK)  # d8
        assert after[E8] is None
        assert after[56] is None  # a8
        assert after[B8] is None


class TestEnPassant:
    def test_available_immediately(self, line) -> None:
        position, state = line("e2e4 a7a6 e4e5 d7d5")
        assert state.en_passant == D6
        moves = MoveGenerator.for_state(position, state).legal_moves(Color.WHITE)
        ep = [m for m in moves if m.flag == MoveFlag.EN_PASSANT]
        assert len(ep) == 1
        assert ep[0].from_sq == E5
        assert ep[0].to_sq == D6
        assert ep[0].captured == Piece(Color.BLACK, PieceType.PAWN)
        assert ep[0].capture_square == D5

    def test_capture_removes_passed_pawn(self, line) -> None:
        position, _ = line("e2e4 a7a6 e4e5 d7d5 e5d6")
        assert position[D6] == Piece(Color.WHITE, PieceType.PAWN)
        assert position[D5] is None
        assert position[E5] is None

    def test_expires_after_one_move(self, line) -> None:
        position, state = line("e2e4 a7a6 e4e5 d7d5 g1f3 a6a5")
        assert state.en_passant is None
        moves = MoveGenerator.for_state(position, state).legal_moves(Color.WHITE)
        assert not any(m.flag == MoveFlag.EN_PASSANT for m in moves)

    def test_target_ignored_for_the_other_side(self, line) -> None:
        position, state = line("e2e4 a7a6 e4e5 d7d5")
        gen = MoveGenerator.for_state(position, state, Color.BLACK)
        assert not any(
            m.flag == MoveFlag.EN_PASSANT for m in gen.legal_moves(Color.BLACK)
        )

    def test_en_passant_exposing_king_is_illegal(self) -> None:
        # Both pawns leave the fifth rank and uncover the rook on h5.
        moves = legal_from_fen("8/8/8/K2pP2r/8/8/8/7k w - d6 0 1")
        assert not any(m.flag == MoveFlag.EN_PASSANT for m in moves)


class TestLegality:
    @pytest.mark.parametrize("fen", [STARTING_FEN, KIWIPETE, POS3, POS4, POS5])
    def test_no_move_leaves_own_king_attacked(self, fen: str) -> None:
        position, state = position_from_fen(fen)
        mover = state.current_player
        for move in MoveGenerator.for_state(position, state).legal_moves(mover):
            after, _ = play(position, state, move)
            assert not MoveGenerator(after).is_in_check(mover), move

    def test_pinned_piece_cannot_move(self) -> None:
        moves = legal_from_fen("4k3/4r3/8/8/8/8/4B3/4K3 w - - 0 1")
        assert not any(m.from_sq == E2 for m in moves)

    def test_king_cannot_step_into_check(self) -> None:
        moves = legal_from_fen("4k3/8/8/8/8/8/3r4/4K3 w - - 0 1")
        # d1, e2 and f2 are covered by the rook; it stands unprotected.
        assert {m.to_sq for m in moves} == {D2, F1}
        assert all(m.piece.piece_type == PieceType.KING for m in moves)

    def test_side_without_king_has_no_moves(self) -> None:
        assert legal_from_fen("4k3/8/8/8/8/8/4P3/8 w - - 0 1") == []

    def test_promotion_generates_four_moves(self) -> None:
        moves = legal_from_fen("4k3/P7/8/8/8/8/8/4K3 w - - 0 1")
        promos = [m for m in moves if m.is_promotion]
        assert {m.promotion for m in promos} == {
            PieceType.QUEEN,
            PieceType.ROOK,
            PieceType.BISHOP,
            PieceType.KNIGHT,
        }


class TestAttacks:
    def test_pawn_attacks_empty_diagonal(self) -> None:
        position, _ = position_from_fen("4k3/8/8/8/8/8/4P3/4K3 w - - 0 1")
        gen = MoveGenerator(position)
        assert gen.is_square_attacked(19, Color.WHITE)  # d3
        assert gen.is_square_attacked(21, Color.WHITE)  # f3
        assert not gen.is_square_attacked(20, Color.WHITE)  # e3, a push

    def test_slider_blocked(self) -> None:
        position, _ = position_from_fen("4k3/8/8/8/8/8/4P3/4R1K1 w - - 0 1")
        gen = MoveGenerator(position)
        assert not gen.is_square_attacked(E8, Color.WHITE)

    def test_in_check(self) -> None:
        position, _ = position_from_fen("4k3/8/8/8/8/8/8/4R1K1 b - - 0 1")
        gen = MoveGenerator(position)
        assert gen.is_in_check(Color.BLACK)
        assert not gen.is_in_check(Color.WHITE)

    def test_g8_covered_by_knight(self) -> None:
        position, _ = position_from_fen("4k3/8/5N2/8/8/8/8/4K3 w - - 0 1")
        assert MoveGenerator(position).is_square_attacked(G8, Color.WHITE)
