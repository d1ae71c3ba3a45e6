# src/common/constants.py

# Cards
NUM_CARDS_IN_SUIT = 13
NUM_SUITS = 4
NUM_CARDS_TOTAL = NUM_CARDS_IN_SUIT * NUM_SUITS   # 52
HAND_SIZE = NUM_CARDS_TOTAL // 2                  # 26

RANK_NAMES = [
    "Two", "Three", "Four", "Five", "Six", "Seven", "Eight",
    "Nine", "Ten", "Jack", "Queen", "King", "Ace",
]
SUIT_NAMES = ["Clubs", "Diamonds", "Hearts", "Spades"]

# Message tags (first byte of every message)
TAG_WANT_GAME = 0
TAG_GAME_START = 1
TAG_PLAY_CARD = 2
TAG_PLAY_RESULT = 3

# Message lengths (bytes, tag included)
WANT_GAME_LEN = 2
GAME_START_LEN = 1 + HAND_SIZE   # 27
PLAY_CARD_LEN = 2
PLAY_RESULT_LEN = 2

MESSAGE_LEN = {
    TAG_WANT_GAME: WANT_GAME_LEN,
    TAG_GAME_START: GAME_START_LEN,
    TAG_PLAY_CARD: PLAY_CARD_LEN,
    TAG_PLAY_RESULT: PLAY_RESULT_LEN,
}

# Round result codes
RESULT_WIN = 0x0
RESULT_DRAW = 0x1
RESULT_LOSE = 0x2

VALID_RESULTS = {RESULT_WIN, RESULT_DRAW, RESULT_LOSE}

# Networking defaults
DEFAULT_STEP_TIMEOUT = 30.0   # seconds per handshake / round read
