# src/common/errors.py

from typing import Optional


class WarError(Exception):
    """Base exception for the project."""
    pass


class CardValueTooBig(WarError, ValueError):
    """Raised when a Card is built from a value outside [0, 52)."""

    def __init__(self, value: int, maximum: int) -> None:
        self.value = value
        self.maximum = maximum
        super().__init__(f"Card's value was {value}, the maximum is {maximum}")


# -------------------------
# Protocol violations
# -------------------------
class ProtocolError(WarError, ValueError):
    """Raised when a message is malformed or not allowed in the current state."""
    pass


class UnknownTag(ProtocolError):
    def __init__(self, tag: int) -> None:
        self.tag = tag
        super().__init__(f"Unknown message tag: {tag}")


class TruncatedInput(ProtocolError):
    def __init__(self, tag: int, expected: int, got: int) -> None:
        self.tag = tag
        self.expected = expected
        self.got = got
        super().__init__(f"Truncated message with tag {tag}: expected {expected} bytes, got {got}")


class ValueOutOfRange(ProtocolError):
    def __init__(self, what: str, value: int, maximum: int) -> None:
        self.what = what
        self.value = value
        self.maximum = maximum
        super().__init__(f"{what} out of range: {value} (maximum {maximum})")


class MalformedWantGame(ProtocolError):
    def __init__(self, padding: int) -> None:
        self.padding = padding
        super().__init__(f"WantGame padding must be 0, got {padding}")


class UnexpectedMessage(ProtocolError):
    def __init__(self, expected: str, got: object) -> None:
        self.expected = expected
        self.got = got
        super().__init__(f"Expected {expected}, got {got}")


class CardMismatch(ProtocolError):
    def __init__(self, expected: object, got: object) -> None:
        self.expected = expected
        self.got = got
        super().__init__(f"Played card {got!r} is not the front of the hand ({expected!r})")


# -------------------------
# I/O failures
# -------------------------
class PeerIOError(WarError, ConnectionError):
    """Raised when reading from or writing to a peer fails."""

    def __init__(self, msg: str, player: Optional[int] = None) -> None:
        self.player = player
        if player is not None:
            msg = f"player {player}: {msg}"
        super().__init__(msg)


class PeerTimeout(PeerIOError):
    """Raised when a peer does not deliver a full message before the deadline."""
    pass
