# src/common/logging_utils.py

import logging
import os
from typing import Any, Optional, Tuple

# Environment switches:
#   LOG_LEVEL=DEBUG / INFO / WARNING / ERROR
#   LOG_HEX=1 to include hexdumps in logs
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_HEX = os.getenv("LOG_HEX", "0") == "1"


def setup_logging(level: str = LOG_LEVEL) -> None:
    """Call once at program start (client/main.py and server/main.py)."""
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s.%(msecs)03d [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def hexdump(data: bytes, max_len: int = 32) -> str:
    """
    Space-separated hex of a wire message, e.g. PlayCard(20) -> "02 14".
    A GameStart fits whole under the default limit; longer input is cut
    and the number of hidden bytes is appended.
    """
    shown = data[:max_len]
    hex_part = " ".join(f"{b:02x}" for b in shown)
    if len(data) > max_len:
        hex_part += f" ... (+{len(data) - max_len} bytes)"
    return hex_part


def format_addr(addr: Optional[Tuple[Any, ...]]) -> str:
    if not addr:
        return "-"
    if isinstance(addr, tuple) and len(addr) >= 2:
        return f"{addr[0]}:{addr[1]}"
    return str(addr)


def log_packet(
    logger: logging.Logger,
    direction: str,               # "IN" / "OUT"
    addr: Optional[Tuple[Any, ...]],
    raw: bytes,
    parsed: Optional[Any] = None,
    note: str = "",
    level: int = logging.DEBUG,
) -> None:
    """
    Unified packet log.
    addr: peer address if known, else None.
    parsed: decoded message or summary string.
    """
    if not logger.isEnabledFor(level):
        return

    base = f"[{direction}] {format_addr(addr)} len={len(raw)}"
    if note:
        base += f" | {note}"

    if parsed is not None:
        base += f" | parsed={parsed}"

    if LOG_HEX:
        base += f" | hex={hexdump(raw)}"

    logger.log(level, base)
