import random
import socket
import threading
from typing import List

import pytest

from src.common.cards import Deck
from src.common.transport import deadline_after, read_message
from src.server.session import GameSession

SEED = 1234


class SessionRunner:
    """Runs a GameSession on a thread, wired to two socketpairs."""

    def __init__(self, step_timeout: float = 2.0, seed: int = SEED) -> None:
        self.server_one, self.client_one = socket.socketpair()
        self.server_two, self.client_two = socket.socketpair()
        for c in (self.client_one, self.client_two):
            c.settimeout(5.0)
        self.session = GameSession(
            self.server_one,
            self.server_two,
            random.Random(seed),
            step_timeout=step_timeout,
            addr_one=("p1", 1),
            addr_two=("p2", 2),
        )
        self.expected_hands = Deck.fresh_shuffled(random.Random(seed)).deal_two()
        self.outcome = None
        self._thread = threading.Thread(target=self._run, daemon=True)

    def _run(self) -> None:
        self.outcome = self.session.run()

    def start(self) -> "SessionRunner":
        self._thread.start()
        return self

    def join(self, timeout: float = 10.0):
        self._thread.join(timeout)
        assert not self._thread.is_alive(), "session did not terminate"
        return self.outcome

    @property
    def clients(self) -> List[socket.socket]:
        return [self.client_one, self.client_two]

    def read(self, client: socket.socket):
        return read_message(client, deadline_after(5.0))

    def close(self) -> None:
        for c in self.clients:
            c.close()


@pytest.fixture
def runner():
    runners = []

    def make(**kwargs) -> SessionRunner:
        r = SessionRunner(**kwargs)
        runners.append(r)
        return r.start()

    yield make
    for r in runners:
        r.close()
