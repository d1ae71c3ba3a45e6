# src/client/gameplay.py

import socket
from typing import Any, Iterator, Optional, Tuple

from src.common.cards import Card, Hand
from src.common.errors import UnexpectedMessage
from src.common.logging_utils import get_logger
from src.common.protocol import (
    GameStart,
    PlayCard,
    PlayResult,
    RoundResult,
    WantGame,
    describe,
)
from src.common.transport import deadline_after, read_message, send_message

log = get_logger("client.gameplay")


def join_game(
    sock: socket.socket,
    server_addr: Optional[Tuple[Any, ...]] = None,
    timeout: Optional[float] = None,
) -> Hand:
    """Send WantGame and wait for our hand. The wait covers pairing too, so no timeout by default."""
    send_message(sock, WantGame(), timeout=timeout, addr=server_addr, logger=log)
    msg = read_message(sock, deadline_after(timeout), addr=server_addr, logger=log)
    if not isinstance(msg, GameStart):
        raise UnexpectedMessage("GameStart", describe(msg))
    return msg.hand


def play_card(
    sock: socket.socket,
    card: Card,
    server_addr: Optional[Tuple[Any, ...]] = None,
    timeout: Optional[float] = None,
) -> RoundResult:
    send_message(sock, PlayCard(card=card), timeout=timeout, addr=server_addr, logger=log)
    msg = read_message(sock, deadline_after(timeout), addr=server_addr, logger=log)
    if not isinstance(msg, PlayResult):
        raise UnexpectedMessage("PlayResult", describe(msg))
    return msg.result


def play_hand(
    sock: socket.socket,
    hand: Hand,
    server_addr: Optional[Tuple[Any, ...]] = None,
    timeout: Optional[float] = None,
) -> Iterator[Tuple[Card, RoundResult]]:
    """Play the hand front to back, yielding (card, result) per round."""
    for card in hand:
        yield card, play_card(sock, card, server_addr, timeout)
