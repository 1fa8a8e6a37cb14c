# belief_connect4/constants.py

# --- Board Dimensions ---
ROWS = 6
COLS = 7
MAX_MOVES = ROWS * COLS
WIN_LENGTH = 4

# Visibility mask: one bit per cell packed into 6 bytes
MASK_BYTES = 6

# --- Cell Contents ---
EMPTY = 0
ENGINE = 1
OPPONENT = 2

# --- Scoring System ---
SCORE_WIN = 10000
SCORE_THREE = 1000
SCORE_TWO = 300

# Row 0 = bottom rank
POSITIONAL_SCORE = (
    (1, 2, 3, 5, 3, 2, 1),
    (2, 4, 6, 8, 6, 4, 2),
    (5, 8, 11, 13, 11, 8, 5),
    (5, 8, 11, 13, 11, 8, 5),
    (4, 6, 8, 10, 8, 6, 4),
    (3, 4, 5, 7, 5, 4, 3),
)

# --- Optimization ---
# Search center columns first
PREFERRED_ORDER = [3, 2, 4, 1, 5, 0, 6]
