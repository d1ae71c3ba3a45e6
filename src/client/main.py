# src/client/main.py

import argparse
import socket

from src.client.gameplay import join_game, play_hand
from src.common.errors import WarError
from src.common.logging_utils import get_logger, setup_logging
from src.common.protocol import RoundResult


log = get_logger("client.main")


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="War card game client")
    parser.add_argument("host", help="server address")
    parser.add_argument("port", type=int, help="server port")
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="seconds to wait for each round result (default: wait forever)",
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging()
    server_addr = (args.host, args.port)

    tally = {r: 0 for r in RoundResult}
    try:
        with socket.create_connection(server_addr) as s:
            log.info("Connected to server via TCP")
            print("Waiting for an opponent...")
            hand = join_game(s, server_addr)
            print(f"Game started, you hold {len(hand)} cards")

            for i, (card, result) in enumerate(play_hand(s, hand, server_addr, args.timeout), start=1):
                tally[result] += 1
                print(f"Round {i}: played {card} -> {result.name.capitalize()}")
    except (WarError, OSError) as e:
        log.error(f"Game ended early: {e}")
        return 1

    print(
        f"===== GAME OVER =====  W={tally[RoundResult.WIN]} "
        f"D={tally[RoundResult.DRAW]} L={tally[RoundResult.LOSE]}"
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
