# src/common/transport.py

import logging
import socket
import time
from typing import Any, Optional, Tuple

from .errors import PeerIOError, PeerTimeout
from .logging_utils import get_logger, log_packet
from .protocol import Message, decode, describe, encode, message_length

_log = get_logger("transport")


def deadline_after(timeout: Optional[float]) -> Optional[float]:
    """Absolute monotonic deadline `timeout` seconds from now (None = no limit)."""
    if timeout is None:
        return None
    return time.monotonic() + timeout


def _remaining(deadline: Optional[float]) -> Optional[float]:
    if deadline is None:
        return None
    left = deadline - time.monotonic()
    if left <= 0:
        raise PeerTimeout("timed out waiting for data")
    return left


def recv_exact(sock: socket.socket, n: int, deadline: Optional[float] = None) -> bytes:
    chunks = []
    remaining = n
    while remaining > 0:
        sock.settimeout(_remaining(deadline))
        try:
            data = sock.recv(remaining)
        except socket.timeout as e:
            raise PeerTimeout("timed out waiting for data") from e
        except OSError as e:
            raise PeerIOError(f"receive failed: {e}") from e
        if not data:
            raise PeerIOError("peer disconnected while receiving data")
        chunks.append(data)
        remaining -= len(data)
    return b"".join(chunks)


def read_message(
    sock: socket.socket,
    deadline: Optional[float] = None,
    addr: Optional[Tuple[Any, ...]] = None,
    logger: logging.Logger = _log,
) -> Message:
    """Read exactly one message: the tag byte, then the payload that tag calls for."""
    head = recv_exact(sock, 1, deadline)
    tag = head[0]
    rest = recv_exact(sock, message_length(tag) - 1, deadline)
    msg = decode(tag, rest)
    log_packet(logger, "IN", addr, head + rest, parsed=describe(msg))
    return msg


def send_message(
    sock: socket.socket,
    msg: Message,
    timeout: Optional[float] = None,
    addr: Optional[Tuple[Any, ...]] = None,
    logger: logging.Logger = _log,
) -> None:
    raw = encode(msg)
    sock.settimeout(timeout)
    try:
        sock.sendall(raw)
    except socket.timeout as e:
        raise PeerTimeout("timed out sending data") from e
    except OSError as e:
        raise PeerIOError(f"send failed: {e}") from e
    log_packet(logger, "OUT", addr, raw, parsed=describe(msg))
