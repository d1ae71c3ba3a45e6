# src/server/session.py

import enum
import random
import socket
from collections import deque
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from typing import Any, Callable, Deque, List, Optional, Tuple

from src.common.cards import Card, Deck
from src.common.constants import DEFAULT_STEP_TIMEOUT, HAND_SIZE
from src.common.errors import (
    CardMismatch,
    PeerIOError,
    PeerTimeout,
    ProtocolError,
    UnexpectedMessage,
    WarError,
)
from src.common.logging_utils import format_addr, get_logger
from src.common.protocol import (
    GameStart,
    Message,
    PlayCard,
    PlayResult,
    RoundResult,
    WantGame,
    describe,
)
from src.common.transport import deadline_after, read_message, send_message

log = get_logger("server.session")

# extra time given to the reader threads past their own deadline
_JOIN_GRACE = 1.0



class SessionState(enum.Enum):
    AWAITING_READY = "awaiting_ready"
    DEALING = "dealing"
    ROUND_IN_PROGRESS = "round_in_progress"
    RESOLVING = "resolving"
    FINISHED = "finished"
    ABORTED = "aborted"


def resolve_round(card_one: Card, card_two: Card) -> Tuple[RoundResult, RoundResult]:
    """Results for (player one, player two). Rank decides, suit never does."""
    return (
        RoundResult.from_comparison(card_one, card_two),
        RoundResult.from_comparison(card_two, card_one),
    )


class Player:
    def __init__(self, index: int, conn: socket.socket, addr: Optional[Tuple[Any, ...]] = None) -> None:
        self.index = index
        self.conn = conn
        self.addr = addr
        self.hand: Deque[Card] = deque()
        self.wins = 0
        self.draws = 0
        self.losses = 0

    def record(self, result: RoundResult) -> None:
        if result is RoundResult.WIN:
            self.wins += 1
        elif result is RoundResult.LOSE:
            self.losses += 1
        else:
            self.draws += 1

    def __repr__(self) -> str:
        return f"player {self.index} ({format_addr(self.addr)})"


# raises ProtocolError when a decoded message is not acceptable for the current step
MessageCheck = Callable[[Player, Message], None]


class GameSession:
    """
    One game of War between two already-connected peers.

    `run()` drives the whole game and returns FINISHED or ABORTED. Both
    connections are closed when it returns, whatever the outcome.
    """

    def __init__(
        self,
        conn_one: socket.socket,
        conn_two: socket.socket,
        rng: random.Random,
        step_timeout: Optional[float] = DEFAULT_STEP_TIMEOUT,
        addr_one: Optional[Tuple[Any, ...]] = None,
        addr_two: Optional[Tuple[Any, ...]] = None,
    ) -> None:
        self.players: List[Player] = [Player(1, conn_one, addr_one), Player(2, conn_two, addr_two)]
        self.rng = rng
        self.step_timeout = step_timeout
        self.state = SessionState.AWAITING_READY
        self.rounds_played = 0
        self.abort_reason: Optional[str] = None
        self._pool = ThreadPoolExecutor(max_workers=2, thread_name_prefix="war-read")

    @property
    def name(self) -> str:
        one, two = self.players
        return f"game[{format_addr(one.addr)} vs {format_addr(two.addr)}]"

    def run(self) -> SessionState:
        log.info(f"{self.name} started")
        try:
            self._handshake()
            self._deal()
            while self.rounds_played < HAND_SIZE:
                self._play_round()
            self.state = SessionState.FINISHED
            one, two = self.players
            log.info(
                f"{self.name} finished after {self.rounds_played} rounds: "
                f"player 1 won {one.wins}, player 2 won {two.wins}, draws {one.draws}"
            )
        except (WarError, OSError) as e:
            log.warning(f"{self.name} aborted while {self.state.value} (round {self.rounds_played + 1}): {e}")
            self.state = SessionState.ABORTED
            self.abort_reason = str(e)
        finally:
            # readers must be gone before the sockets are closed
            self._shutdown_streams()
            self._pool.shutdown(wait=True, cancel_futures=True)
            self._close()
        return self.state

    # -------------------------
    # Steps
    # -------------------------
    def _handshake(self) -> None:
        self.state = SessionState.AWAITING_READY
        self._read_both(self._check_want_game)
        log.debug(f"{self.name} both players want a game")

    def _deal(self) -> None:
        self.state = SessionState.DEALING
        hands = Deck.fresh_shuffled(self.rng).deal_two()
        for player, hand in zip(self.players, hands):
            player.hand = deque(hand)
            self._send(player, GameStart(hand=hand))
        log.info(f"{self.name} dealt {HAND_SIZE} cards to each player")

    def _play_round(self) -> None:
        self.state = SessionState.ROUND_IN_PROGRESS
        played = [msg.card for msg in self._read_both(self._check_play_card)]
        for player in self.players:
            player.hand.popleft()

        self.state = SessionState.RESOLVING
        results = resolve_round(played[0], played[1])
        for player, result in zip(self.players, results):
            self._send(player, PlayResult(result=result))
            player.record(result)
        self.rounds_played += 1
        log.debug(
            f"{self.name} round {self.rounds_played}: "
            f"{played[0]} vs {played[1]} -> {results[0].name}/{results[1].name}"
        )

    # -------------------------
    # Message checks (run on the reader threads)
    # -------------------------
    def _check_want_game(self, player: Player, msg: Message) -> None:
        if not isinstance(msg, WantGame):
            raise UnexpectedMessage("WantGame", f"{describe(msg)} from {player}")

    def _check_play_card(self, player: Player, msg: Message) -> None:
        if not isinstance(msg, PlayCard):
            raise UnexpectedMessage("PlayCard", f"{describe(msg)} from {player}")
        front = player.hand[0]
        # identity, not rank: Card equality ignores suit
        if msg.card.value != front.value:
            raise CardMismatch(front, msg.card)

    # -------------------------
    # I/O
    # -------------------------
    def _read_one(self, player: Player, deadline: Optional[float], check: MessageCheck) -> Message:
        try:
            msg = read_message(player.conn, deadline, addr=player.addr, logger=log)
            check(player, msg)
            return msg
        except PeerIOError as e:
            raise type(e)(str(e), player=player.index) from e
        except ProtocolError as e:
            log.warning(f"{self.name} protocol violation by {player}: {e}")
            raise

    def _read_both(self, check: MessageCheck) -> Tuple[Message, Message]:
        """
        Read and check one message from each player at the same time.

        Both reads share one deadline. The first failure wins, whether it is
        an I/O error or a message `check` rejects: the streams are shut down
        so the other read returns at once, and the error is raised.
        """
        deadline = deadline_after(self.step_timeout)
        futures = [self._pool.submit(self._read_one, p, deadline, check) for p in self.players]
        limit = None if self.step_timeout is None else self.step_timeout + _JOIN_GRACE
        done, pending = wait(futures, timeout=limit, return_when=FIRST_EXCEPTION)

        for fut in futures:
            if fut in done and fut.exception() is not None:
                self._shutdown_streams()
                raise fut.exception()
        if pending:
            self._shutdown_streams()
            stalled = [p.index for p, f in zip(self.players, futures) if f in pending]
            raise PeerTimeout("timed out waiting for data", player=stalled[0])
        return futures[0].result(), futures[1].result()

    def _send(self, player: Player, msg: Message) -> None:
        try:
            send_message(player.conn, msg, timeout=self.step_timeout, addr=player.addr, logger=log)
        except PeerIOError as e:
            raise type(e)(str(e), player=player.index) from e

    def _shutdown_streams(self) -> None:
        for player in self.players:
            try:
                player.conn.shutdown(socket.SHUT_RDWR)
            except OSError:
                # already disconnected
                pass

    def _close(self) -> None:
        for player in self.players:
            player.conn.close()
