# src/common/protocol.py

import enum
from dataclasses import dataclass
from typing import Sequence, Tuple, Union

from .cards import Card, Hand
from .constants import (
    TAG_WANT_GAME, TAG_GAME_START, TAG_PLAY_CARD, TAG_PLAY_RESULT,
    MESSAGE_LEN, HAND_SIZE,
    RESULT_WIN, RESULT_DRAW, RESULT_LOSE, VALID_RESULTS,
)
from .errors import (
    CardValueTooBig,
    MalformedWantGame,
    ProtocolError,
    TruncatedInput,
    UnknownTag,
    ValueOutOfRange,
)
from .logging_utils import get_logger

_log = get_logger("protocol")


def _require(condition: bool, exc: ProtocolError) -> None:
    if not condition:
        _log.warning(f"ProtocolError: {exc}")
        raise exc


# -------------------------
# Messages
# -------------------------
class RoundResult(enum.IntEnum):
    """Outcome of a round, relative to the player receiving it."""

    WIN = RESULT_WIN
    DRAW = RESULT_DRAW
    LOSE = RESULT_LOSE

    @classmethod
    def from_comparison(cls, mine: Card, theirs: Card) -> "RoundResult":
        if mine > theirs:
            return cls.WIN
        if mine < theirs:
            return cls.LOSE
        return cls.DRAW


@dataclass(frozen=True)
class WantGame:
    pass


@dataclass(frozen=True)
class GameStart:
    hand: Hand

    def __post_init__(self) -> None:
        if len(self.hand) != HAND_SIZE:
            raise ValueError(f"GameStart needs {HAND_SIZE} cards, got {len(self.hand)}")


@dataclass(frozen=True)
class PlayCard:
    card: Card


@dataclass(frozen=True)
class PlayResult:
    result: RoundResult


Message = Union[WantGame, GameStart, PlayCard, PlayResult]


def message_length(tag: int) -> int:
    """Total wire length (tag included) of a message with this tag."""
    _require(tag in MESSAGE_LEN, UnknownTag(tag))
    return MESSAGE_LEN[tag]


# -------------------------
# Encoding
#
# WantGame:   tag(1)=0 pad(1)=0          = 2 bytes
# GameStart:  tag(1)=1 cards(26)         = 27 bytes
# PlayCard:   tag(1)=2 card(1)           = 2 bytes
# PlayResult: tag(1)=3 result(1)         = 2 bytes
# -------------------------
def encode(msg: Message) -> bytes:
    if isinstance(msg, WantGame):
        return bytes([TAG_WANT_GAME, 0])
    if isinstance(msg, GameStart):
        return bytes([TAG_GAME_START]) + bytes(c.value for c in msg.hand)
    if isinstance(msg, PlayCard):
        return bytes([TAG_PLAY_CARD, msg.card.value])
    if isinstance(msg, PlayResult):
        return bytes([TAG_PLAY_RESULT, int(msg.result)])
    raise TypeError(f"Not a message: {msg!r}")


# -------------------------
# Decoding
# -------------------------
def _card_from_byte(b: int) -> Card:
    try:
        return Card.from_value(b)
    except CardValueTooBig as e:
        exc = ValueOutOfRange("card value", e.value, e.maximum)
        _log.warning(f"ProtocolError: {exc}")
        raise exc from e


def _parse_hand(raw: Sequence[int]) -> Hand:
    return tuple(_card_from_byte(b) for b in raw)


def decode(tag: int, rest: bytes) -> Message:
    """
    Decode one message from its tag byte and the bytes that follow it.

    `rest` must hold at least the payload the tag calls for; any extra bytes
    are left for the caller (they belong to the next message).
    """
    total = message_length(tag)
    need = total - 1
    _require(len(rest) >= need, TruncatedInput(tag, total, len(rest) + 1))
    payload = rest[:need]

    if tag == TAG_WANT_GAME:
        _require(payload[0] == 0, MalformedWantGame(payload[0]))
        return WantGame()

    if tag == TAG_GAME_START:
        return GameStart(hand=_parse_hand(payload))

    if tag == TAG_PLAY_CARD:
        return PlayCard(card=_card_from_byte(payload[0]))

    # TAG_PLAY_RESULT
    code = payload[0]
    _require(
        code in VALID_RESULTS,
        ValueOutOfRange("result code", code, RESULT_LOSE),
    )
    return PlayResult(result=RoundResult(code))


def decode_message(data: bytes) -> Tuple[Message, bytes]:
    """Decode the first message in `data`. Returns (message, leftover bytes)."""
    _require(len(data) > 0, TruncatedInput(-1, 1, 0))
    tag = data[0]
    msg = decode(tag, data[1:])
    return msg, data[message_length(tag):]


def describe(msg: Message) -> str:
    if isinstance(msg, GameStart):
        return f"GameStart([{', '.join(str(c.value) for c in msg.hand)}])"
    if isinstance(msg, PlayCard):
        return f"PlayCard({msg.card.value}: {msg.card})"
    if isinstance(msg, PlayResult):
        return f"PlayResult({msg.result.name})"
    return type(msg).__name__

