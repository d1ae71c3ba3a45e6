import logging

from src.common import logging_utils
from src.common.logging_utils import format_addr, hexdump, log_packet


def test_hexdump_play_card():
    assert hexdump(bytes([2, 20])) == "02 14"


def test_hexdump_game_start_is_not_cut():
    raw = bytes([1]) + bytes(range(26))
    out = hexdump(raw)
    assert "..." not in out
    assert len(out.split()) == 27


def test_hexdump_cuts_long_input():
    assert hexdump(bytes(40), max_len=4) == "00 00 00 00 ... (+36 bytes)"


def test_format_addr():
    assert format_addr(("127.0.0.1", 5000)) == "127.0.0.1:5000"
    assert format_addr(None) == "-"
    assert format_addr("") == "-"


def test_log_packet_line(caplog, monkeypatch):
    monkeypatch.setattr(logging_utils, "LOG_HEX", True)
    logger = logging.getLogger("test.packets")
    with caplog.at_level(logging.DEBUG, logger="test.packets"):
        log_packet(logger, "OUT", ("p1", 1), bytes([3, 0]), parsed="PlayResult(WIN)", note="result")
    assert caplog.messages == [
        "[OUT] p1:1 len=2 | result | parsed=PlayResult(WIN) | hex=03 00"
    ]


def test_log_packet_skipped_when_level_disabled(caplog):
    logger = logging.getLogger("test.quiet")
    with caplog.at_level(logging.INFO, logger="test.quiet"):
        log_packet(logger, "IN", None, bytes([0, 0]))
    assert caplog.messages == []
