# src/server/main.py
import argparse
import os
import random
import socket
import threading
from typing import Any, Optional, Tuple

from src.common.constants import DEFAULT_STEP_TIMEOUT
from src.common.logging_utils import format_addr, get_logger, setup_logging
from src.server.session import GameSession


log = get_logger("server.main")

_ACCEPT_POLL = 0.5


def _create_tcp_listener(host: str, port: int) -> socket.socket:
    """Port 0 lets the OS pick a free port."""
    s = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    s.bind((host, port))
    s.listen()
    return s


def _still_connected(conn: socket.socket) -> bool:
    """Peek without consuming. An orderly close reads as b"" right away."""
    conn.setblocking(False)
    try:
        data = conn.recv(1, socket.MSG_PEEK)
    except BlockingIOError:
        return True
    except OSError:
        return False
    finally:
        conn.setblocking(True)
    return data != b""


def _run_session(session: GameSession) -> None:
    try:
        session.run()
    except Exception:
        log.exception(f"{session.name} crashed")


def start_session(
    first: Tuple[socket.socket, Any],
    second: Tuple[socket.socket, Any],
    rng: random.Random,
    step_timeout: Optional[float],
) -> threading.Thread:
    (conn_one, addr_one), (conn_two, addr_two) = first, second
    session = GameSession(
        conn_one, conn_two, rng,
        step_timeout=step_timeout,
        addr_one=addr_one,
        addr_two=addr_two,
    )
    t = threading.Thread(target=_run_session, args=(session,), daemon=True)
    t.start()
    return t


def serve(
    listener: socket.socket,
    rng: random.Random,
    step_timeout: Optional[float] = DEFAULT_STEP_TIMEOUT,
    stop_event: Optional[threading.Event] = None,
) -> None:
    """
    Accept connections, pairing every two into a game.
    Returns when stop_event is set or the listener is closed.
    """
    if stop_event is None:
        stop_event = threading.Event()
    listener.settimeout(_ACCEPT_POLL)
    waiting: Optional[Tuple[socket.socket, Any]] = None
    try:
        while not stop_event.is_set():
            try:
                conn, addr = listener.accept()
            except socket.timeout:
                continue
            except OSError as e:
                log.info(f"Listener closed: {e}")
                break
            log.info(f"Client connected: {format_addr(addr)}")
            if waiting is not None and not _still_connected(waiting[0]):
                log.info(f"Waiting client {format_addr(waiting[1])} left before a partner arrived")
                waiting[0].close()
                waiting = None
            if waiting is None:
                waiting = (conn, addr)
                continue
            start_session(waiting, (conn, addr), rng, step_timeout)
            waiting = None
    finally:
        if waiting is not None:
            log.info(f"Dropping unpaired client {format_addr(waiting[1])}")
            waiting[0].close()


def _default_timeout() -> float:
    return float(os.getenv("WAR_STEP_TIMEOUT", DEFAULT_STEP_TIMEOUT))


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Two-player War card game server")
    parser.add_argument("host", help="address to bind, e.g. 0.0.0.0")
    parser.add_argument("port", type=int, help="port to bind (0 lets the OS pick one)")
    parser.add_argument(
        "--timeout",
        type=float,
        default=_default_timeout(),
        help="seconds to wait for each player's message (env WAR_STEP_TIMEOUT)",
    )
    return parser.parse_args(argv)


def main(argv=None) -> None:
    args = parse_args(argv)
    setup_logging()

    tcp_listener = _create_tcp_listener(args.host, args.port)
    host, port = tcp_listener.getsockname()[:2]
    print(f"Listening on {host}:{port}")
    log.info(f"Per-step timeout {args.timeout}s")

    # SystemRandom draws from os.urandom and is safe to share across sessions
    rng = random.SystemRandom()
    try:
        serve(tcp_listener, rng, step_timeout=args.timeout)
    except KeyboardInterrupt:
        log.info("Shutting down...")
    finally:
        tcp_listener.close()


if __name__ == "__main__":
    main()
