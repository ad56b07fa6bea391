"""Tests for JSON snapshots of position/state pairs."""

import json
import logging

import pytest

from knightsbridge.core.enums import Color, MoveFlag, PieceType
from knightsbridge.core.state import STARTING_FEN
from knightsbridge.core.transition import apply_move
from knightsbridge.serde import (
    SNAPSHOT_VERSION,
    dict_to_move,
    dumps,
    loads,
    move_to_dict,
    restore,
    snapshot,
)

PROMOTION_FEN = "8/P7/8/8/8/7k/8/4K3 w - - 0 1"


class TestSnapshotShape:
    def test_starting_snapshot(self, start) -> None:
        data = snapshot(*start)
        assert data["version"] == SNAPSHOT_VERSION
        assert data["board"]["e1"] == "K"
        assert data["board"]["d8"] == "q"
        assert len(data["board"]) == 32
        assert data["state"]["current_player"] == "white"
        assert data["state"]["castling"] == "KQkq"
        assert data["state"]["move_history"] == []

    def test_move_record(self, line) -> None:
        _, state = line("e2e4")
        assert move_to_dict(state.move_history[0]) == {
            "from": "e2",
            "to": "e4",
            "piece": "P",
            "captured": None,
            "flag": "double_pawn",
            "promotion": None,
        }

    def test_promotion_record(self, line) -> None:
        _, state = line("a7a8n", PROMOTION_FEN)
        record = move_to_dict(state.move_history[0])
        assert record["flag"] == "promotion"
        assert record["promotion"] == "n"
        assert dict_to_move(record) == state.move_history[0]

    def test_malformed_move_record(self) -> None:
        with pytest.raises(ValueError):
            dict_to_move({"from": "e2", "to": "e4"})

    def test_json_is_plain(self, line) -> None:
        text = dumps(*line("e2e4 e7e5"))
        data = json.loads(text)
        assert data["state"]["en_passant"] is None
        assert data["state"]["fullmove_number"] == 2


class TestRoundTrip:
    def test_start(self, start) -> None:
        assert restore(snapshot(*start)) == start

    def test_after_en_passant_and_castling(self, line) -> None:
        pair = line("e2e4 a7a6 e4e5 d7d5 e5d6 g8f6 g1f3 a6a5 f1e2 a5a4 e1g1")
        position, state = restore(snapshot(*pair))
        assert (position, state) == pair
        assert state.move_history[4].flag == MoveFlag.EN_PASSANT
        assert state.move_history[-1].flag == MoveFlag.CASTLE_KINGSIDE

    def test_custom_start_and_promotion(self, line) -> None:
        pair = line("a7a8q h3g4", PROMOTION_FEN)
        position, state = loads(dumps(*pair))
        assert (position, state) == pair
        assert state.start_fen == PROMOTION_FEN
        assert state.move_history[0].promotion == PieceType.QUEEN

    def test_pending_en_passant_target(self, line) -> None:
        pair = line("e2e4")
        _, state = loads(dumps(*pair))
        assert state.en_passant == pair[1].en_passant
        assert state.current_player == Color.BLACK


class TestRejection:
    def test_unknown_version(self, start) -> None:
        data = snapshot(*start)
        data["version"] = SNAPSHOT_VERSION + 1
        with pytest.raises(ValueError, match="version"):
            restore(data)

    def test_not_a_mapping(self) -> None:
        with pytest.raises(ValueError):
            restore(["board", "state"])

    def test_missing_state(self, start) -> None:
        data = snapshot(*start)
        del data["state"]
        with pytest.raises(ValueError):
            restore(data)

    def test_bad_piece_letter(self, start) -> None:
        data = snapshot(*start)
        data["board"]["e1"] = "X"
        with pytest.raises(ValueError):
            restore(data)

    def test_bad_square_label(self, start) -> None:
        data = snapshot(*start)
        data["board"]["z9"] = "Q"
        with pytest.raises(ValueError):
            restore(data)

    def test_negative_clock(self, start) -> None:
        data = snapshot(*start)
        data["state"]["halfmove_clock"] = -1
        with pytest.raises(ValueError):
            restore(data)

    def test_board_disagrees_with_history(self, line) -> None:
        data = snapshot(*line("e2e4"))
        del data["board"]["e4"]
        data["board"]["e3"] = "P"
        with pytest.raises(ValueError, match="stored position"):
            restore(data)

    def test_history_disagrees_with_start(self, line) -> None:
        data = snapshot(*line("e2e4"))
        data["state"]["move_history"][0]["piece"] = "N"
        with pytest.raises(ValueError, match="ply 1"):
            restore(data)

    def test_side_to_move_disagrees_with_history(self, line) -> None:
        data = snapshot(*line("e2e4"))
        data["state"]["current_player"] = "white"
        with pytest.raises(ValueError):
            restore(data)

    def test_invalid_json(self) -> None:
        with pytest.raises(ValueError, match="JSON"):
            loads("{not json")

    def test_rejection_is_logged(self, start, caplog) -> None:
        data = snapshot(*start)
        data["version"] = 99
        with caplog.at_level(logging.WARNING, logger="knightsbridge.serde"):
            with pytest.raises(ValueError):
                restore(data)
        assert "Rejected snapshot" in caplog.text

    def test_start_fen_is_validated(self, start) -> None:
        data = snapshot(*start)
        data["state"]["start_fen"] = STARTING_FEN.replace("w", "x")
        with pytest.raises(ValueError):
            restore(data)

    def test_wrong_flag_in_history(self, line) -> None:
        data = snapshot(*line("e2e4"))
        data["state"]["move_history"][0]["flag"] = "castle_kingside"
        with pytest.raises(ValueError, match="illegal move at ply 1"):
            restore(data)

    def test_history_move_through_own_pieces(self, start) -> None:
        data = snapshot(*start)
        del data["board"]["d1"]
        data["board"]["d7"] = "Q"
        data["state"]["current_player"] = "black"
        data["state"]["move_history"] = [
            {
                "from": "d1",
                "to": "d7",
                "piece": "Q",
                "captured": "p",
                "flag": "normal",
                "promotion": None,
            }
        ]
        with pytest.raises(ValueError, match="illegal move at ply 1"):
            restore(data)

    def test_castling_rights_cannot_be_regranted(self, line) -> None:
        # Kings walked out and back, so both sides lost their rights.
        data = snapshot(*line("e2e4 e7e5 e1e2 e8e7 e2e1 e7e8"))
        assert data["state"]["castling"] == "-"
        data["state"]["castling"] = "KQkq"
        with pytest.raises(ValueError, match="does not match its move history"):
            restore(data)

    def test_en_passant_target_must_match_history(self, line) -> None:
        data = snapshot(*line("e2e4"))
        data["state"]["en_passant"] = None
        with pytest.raises(ValueError, match="does not match its move history"):
            restore(data)

    def test_invented_en_passant_target(self, line) -> None:
        data = snapshot(*line("e2e4 e7e5 g1f3"))
        data["state"]["en_passant"] = "e6"
        with pytest.raises(ValueError):
            restore(data)

    def test_clocks_must_match_history(self, line) -> None:
        data = snapshot(*line("g1f3 g8f6"))
        data["state"]["halfmove_clock"] = 0
        with pytest.raises(ValueError):
            restore(data)
        data["state"]["halfmove_clock"] = 2
        data["state"]["fullmove_number"] = 7
        with pytest.raises(ValueError):
            restore(data)


def test_restored_pair_keeps_playing(line) -> None:
    position, state = loads(dumps(*line("e2e4 e7e5")))
    result = apply_move("g1", "f3", position, state)
    assert result.state.move_history[:2] == state.move_history
    assert result.state.current_player == Color.BLACK
