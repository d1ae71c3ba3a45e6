import pytest
from hypothesis import given, settings, strategies as st

from src.common.cards import Card
from src.common.constants import GAME_START_LEN, HAND_SIZE, NUM_CARDS_TOTAL
from src.common.errors import (
    MalformedWantGame,
    ProtocolError,
    TruncatedInput,
    UnknownTag,
    ValueOutOfRange,
)
from src.common.protocol import (
    GameStart,
    PlayCard,
    PlayResult,
    RoundResult,
    WantGame,
    decode,
    decode_message,
    encode,
    message_length,
)


hands = st.permutations(list(range(NUM_CARDS_TOTAL))).map(
    lambda values: tuple(Card(v) for v in values[:HAND_SIZE])
)


# ------------------------------
# Encoding layout
# ------------------------------

def test_want_game_is_two_zero_bytes():
    assert encode(WantGame()) == b"\x00\x00"


@settings(deadline=None, max_examples=50)
@given(hand=hands)
def test_game_start_layout(hand):
    raw = encode(GameStart(hand))
    assert len(raw) == GAME_START_LEN
    assert raw[0] == 1
    assert list(raw[1:]) == [c.value for c in hand]


def test_play_card_and_result_layout():
    assert encode(PlayCard(Card(51))) == bytes([2, 51])
    assert encode(PlayResult(RoundResult.WIN)) == bytes([3, 0])
    assert encode(PlayResult(RoundResult.DRAW)) == bytes([3, 1])
    assert encode(PlayResult(RoundResult.LOSE)) == bytes([3, 2])


def test_game_start_rejects_short_hand():
    with pytest.raises(ValueError):
        GameStart(tuple(Card(v) for v in range(10)))


def test_encode_rejects_non_message():
    with pytest.raises(TypeError):
        encode("hello")


# ------------------------------
# Round trips
# ------------------------------

@settings(deadline=None, max_examples=50)
@given(hand=hands)
def test_game_start_round_trip_keeps_exact_cards(hand):
    msg, rest = decode_message(encode(GameStart(hand)))
    assert rest == b""
    assert isinstance(msg, GameStart)
    assert [c.value for c in msg.hand] == [c.value for c in hand]


@pytest.mark.parametrize("value", range(NUM_CARDS_TOTAL))
def test_play_card_round_trip(value):
    msg, _ = decode_message(encode(PlayCard(Card(value))))
    assert isinstance(msg, PlayCard)
    assert msg.card.value == value


@pytest.mark.parametrize("result", list(RoundResult))
def test_play_result_round_trip(result):
    msg, _ = decode_message(encode(PlayResult(result)))
    assert msg == PlayResult(result)


def test_decode_message_leaves_following_bytes():
    raw = encode(PlayCard(Card(3))) + encode(WantGame())
    first, rest = decode_message(raw)
    assert first.card.value == 3
    second, rest = decode_message(rest)
    assert second == WantGame()
    assert rest == b""


# ------------------------------
# Decode errors
# ------------------------------

@pytest.mark.parametrize("tag", [4, 5, 0x7f, 0xff])
def test_unknown_tag(tag):
    with pytest.raises(UnknownTag) as info:
        decode(tag, b"\x00" * 30)
    assert info.value.tag == tag


def test_message_length_per_tag():
    assert [message_length(t) for t in range(4)] == [2, 27, 2, 2]
    with pytest.raises(UnknownTag):
        message_length(4)


@pytest.mark.parametrize("padding", [1, 2, 0xff])
def test_want_game_padding_is_checked(padding):
    with pytest.raises(MalformedWantGame) as info:
        decode(0, bytes([padding]))
    assert info.value.padding == padding


@pytest.mark.parametrize(
    "tag, rest",
    [(0, b""), (1, bytes(range(25))), (2, b""), (3, b"")],
)
def test_truncated_input(tag, rest):
    with pytest.raises(TruncatedInput) as info:
        decode(tag, rest)
    assert info.value.expected == message_length(tag)


def test_truncated_empty_buffer():
    with pytest.raises(TruncatedInput):
        decode_message(b"")


@settings(deadline=None, max_examples=50)
@given(value=st.integers(min_value=NUM_CARDS_TOTAL, max_value=255))
def test_play_card_out_of_range(value):
    with pytest.raises(ValueOutOfRange) as info:
        decode(2, bytes([value]))
    assert info.value.value == value
    assert info.value.maximum == NUM_CARDS_TOTAL - 1


def test_game_start_with_bad_card_is_rejected():
    payload = bytearray(range(26))
    payload[13] = 52
    with pytest.raises(ValueOutOfRange):
        decode(1, bytes(payload))


@pytest.mark.parametrize("code", [3, 4, 0xff])
def test_play_result_out_of_range(code):
    with pytest.raises(ValueOutOfRange):
        decode(3, bytes([code]))


def test_decode_errors_are_protocol_errors():
    for tag, rest in [(9, b"\x00"), (0, b"\x01"), (2, b"\x40"), (3, b"")]:
        with pytest.raises(ProtocolError):
            decode(tag, rest)


# ------------------------------
# RoundResult
# ------------------------------

def test_round_result_from_comparison():
    assert RoundResult.from_comparison(Card(12), Card(0)) is RoundResult.WIN
    assert RoundResult.from_comparison(Card(0), Card(12)) is RoundResult.LOSE
    # Two of Clubs vs Two of Spades
    assert RoundResult.from_comparison(Card(0), Card(39)) is RoundResult.DRAW
