"""
Visibility masks and percept keys.

A visibility mask is a bytearray of 6 bytes holding one bit per board cell:
cell (row, col) maps to bit `row*7 + col`, stored in byte `(row*7 + col) // 8`
at position `(row*7 + col) % 8`. A set bit means the engine knows what the
cell holds.

Visibility of a column follows the exposure rule: walking down from the top,
a cell is visible once the column is full or once an opponent disc has been
seen at or above it. When the game is over the whole board is revealed.

The percept key is the 7-character label under which observationally
equivalent successors are merged:
- chars 0..5: low 7 bits of each mask byte
- char 6: the six high bits packed together (bit i = high bit of byte i)
"""

from belief_connect4.constants import ROWS, COLS, MASK_BYTES, OPPONENT


def new_mask():
    return bytearray(MASK_BYTES)


def _bit(row, col):
    pos = row * COLS + col
    return pos // 8, pos % 8


def is_visible(mask, row, col):
    index, pos = _bit(row, col)
    return (mask[index] >> pos) & 1 == 1


def set_visible(mask, row, col, value):
    index, pos = _bit(row, col)
    if value:
        mask[index] |= (1 << pos)
    else:
        mask[index] &= ~(1 << pos) & 0xFF


def reveal_all(mask):
    for row in range(ROWS):
        for col in range(COLS):
            set_visible(mask, row, col, True)


def update_column_visibility(mask, state, column):
    """
    Recompute visibility after a disc was dropped into `column` of `state`.

    Only the played column changes, unless the game just ended, in which case
    every cell becomes visible.
    """
    if state.is_game_over():
        reveal_all(mask)
        return mask

    visible = state.is_full(column)
    set_visible(mask, ROWS - 1, column, visible)
    for row in range(ROWS - 2, -1, -1):
        visible = visible or state.content(row, column) == OPPONENT
        set_visible(mask, row, column, visible)
    return mask


def observe(state):
    """Visibility mask of a concrete position, recomputed from scratch."""
    mask = new_mask()
    if state.is_game_over():
        reveal_all(mask)
        return mask
    for column in range(COLS):
        update_column_visibility(mask, state, column)
    return mask


def percept_key(mask):
    """Encode a 6-byte mask as the 7-character percept key."""
    chars = []
    high = 0
    for i, value in enumerate(mask):
        chars.append(chr(value & 0x7F))
        high |= ((value >> 7) & 1) << i
    chars.append(chr(high))
    return ''.join(chars)


def decode_percept_key(key):
    """Rebuild the 6 mask bytes from a percept key."""
    if len(key) != MASK_BYTES + 1:
        raise ValueError(f"Percept key must have {MASK_BYTES + 1} characters, got {len(key)}")
    high = ord(key[MASK_BYTES])
    return bytearray(
        (ord(key[i]) & 0x7F) | (((high >> i) & 1) << 7)
        for i in range(MASK_BYTES)
    )


def render_mask(mask):
    """Rows of 0/1 characters, top rank first."""
    return '\n'.join(
        ''.join('1' if is_visible(mask, row, col) else '0' for col in range(COLS))
        for row in range(ROWS - 1, -1, -1)
    )
