"""High-level chess rules: check, checkmate, stalemate, draw detection."""

from __future__ import annotations

from dataclasses import dataclass

from knightsbridge.core.config import DEFAULT_CONFIG, RulesConfig
from knightsbridge.core.enums import Color, GameEndCause, PieceType
from knightsbridge.core.move_generator import MoveGenerator
from knightsbridge.core.position import Position
from knightsbridge.core.repetition import max_repetitions
from knightsbridge.core.state import GameState
from knightsbridge.core.types import is_light_square


@dataclass(frozen=True, slots=True)
class Outcome:
    """Tagged game result: ongoing, or over with a cause and maybe a winner."""

    over: bool = False
    cause: GameEndCause | None = None
    winner: Color | None = None

    @classmethod
    def ongoing(cls) -> Outcome:
        return cls()

    @classmethod
    def checkmate(cls, winner: Color) -> Outcome:
        return cls(True, GameEndCause.CHECKMATE, winner)

    @classmethod
    def draw(cls, cause: GameEndCause) -> Outcome:
        return cls(True, cause, None)

    @property
    def is_draw(self) -> bool:
        return self.over and self.winner is None

    @property
    def result_token(self) -> str:
        """PGN result token: ``1-0``, ``0-1``, ``1/2-1/2`` or ``*``."""
        if not self.over:
            return "*"
        if self.winner == Color.WHITE:
            return "1-0"
        if self.winner == Color.BLACK:
            return "0-1"
        return "1/2-1/2"


class Rules:
    """Static rule-checker over a (:class:`Position`, :class:`GameState`) pair.

    Every draw condition ends the game automatically: the engine has no
    notion of a player claim.
    """

    @staticmethod
    def is_in_check(position: Position, color: Color) -> bool:
        return MoveGenerator(position).is_in_check(color)

    @staticmethod
    def has_legal_moves(position: Position, color: Color, state: GameState) -> bool:
        return bool(MoveGenerator.for_state(position, state, color).legal_moves(color))

    @staticmethod
    def is_checkmate(position: Position, color: Color, state: GameState) -> bool:
        if not Rules.is_in_check(position, color):
            return False
        return not Rules.has_legal_moves(position, color, state)

    @staticmethod
    def is_stalemate(position: Position, color: Color, state: GameState) -> bool:
        if Rules.is_in_check(position, color):
            return False
        return not Rules.has_legal_moves(position, color, state)

    @staticmethod
    def is_insufficient_material(position: Position) -> bool:
        """K vs K, K+B vs K, K+N vs K, K+B vs K+B (same-colour bishops).

        Other dead positions (two knights, blocked pawn chains) are left
        to play on.
        """
        total = position.occupied_count()

        # K vs K
        if total == 2:
            return True

        # K+minor vs K
        if total == 3:
            return any(
                position.has_piece(color, ptype)
                for color in Color
                for ptype in (PieceType.KNIGHT, PieceType.BISHOP)
            )

        # K+B vs K+B with same-colour bishops
        if total == 4:
            white_bishops = position.pieces(Color.WHITE, PieceType.BISHOP)
            black_bishops = position.pieces(Color.BLACK, PieceType.BISHOP)
            if len(white_bishops) == 1 and len(black_bishops) == 1:
                return is_light_square(white_bishops[0]) == is_light_square(
                    black_bishops[0]
                )

        return False

    @staticmethod
    def is_fifty_move_rule(
        state: GameState, config: RulesConfig = DEFAULT_CONFIG
    ) -> bool:
        return state.halfmove_clock >= config.fifty_move_halfmoves

    @staticmethod
    def is_threefold_repetition(
        state: GameState, config: RulesConfig = DEFAULT_CONFIG
    ) -> bool:
        return max_repetitions(state) >= config.repetition_count

    @staticmethod
    def game_result(
        position: Position,
        color: Color,
        state: GameState,
        config: RulesConfig = DEFAULT_CONFIG,
    ) -> Outcome:
        """Determine the result with *color* to move.

        Checkmate and stalemate take precedence over the counting draws.
        """
        if not Rules.has_legal_moves(position, color, state):
            if Rules.is_in_check(position, color):
                return Outcome.checkmate(color.opposite)
            return Outcome.draw(GameEndCause.STALEMATE)

        if Rules.is_fifty_move_rule(state, config):
            return Outcome.draw(GameEndCause.FIFTY_MOVE)

        if Rules.is_insufficient_material(position):
            return Outcome.draw(GameEndCause.INSUFFICIENT_MATERIAL)

        if Rules.is_threefold_repetition(state, config):
            return Outcome.draw(GameEndCause.THREEFOLD_REPETITION)

        return Outcome.ongoing()
