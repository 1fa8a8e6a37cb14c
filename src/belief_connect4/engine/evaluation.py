"""
Static evaluation of belief states.

Scores are from the engine's point of view and summed over the members of a
belief state (members are not weighted by their probability).

Non-terminal score per member:
- engine disc: positional bonus + horizontal and vertical line scores
- opponent disc: minus positional bonus, minus its (negative) horizontal line
  score

Line score of a 4-cell window starting at a disc: 0 if the window leaves the
board or holds an enemy disc, else 1000 for three discs with an open end,
300 for two with an open end, otherwise discs * open ends. The sign follows
the owner of the window.
"""

from belief_connect4.constants import (
    ROWS, COLS, WIN_LENGTH, EMPTY, ENGINE, OPPONENT,
    POSITIONAL_SCORE, SCORE_WIN, SCORE_THREE, SCORE_TWO,
)


def is_within_bounds(row, col):
    return 0 <= row < ROWS and 0 <= col < COLS


def evaluate_terminal_state(belief_state):
    """+SCORE_WIN per finished member won by the engine, -SCORE_WIN per member lost."""
    total = 0.0
    for state in belief_state:
        if state.is_game_over():
            winner = state.winner()
            if winner == ENGINE:
                total += SCORE_WIN
            elif winner == OPPONENT:
                total -= SCORE_WIN
    return total


def evaluate_non_terminal_state(belief_state):
    total = 0.0
    for state in belief_state:
        for row in range(ROWS):
            for col in range(COLS):
                content = state.content(row, col)
                if content == ENGINE:
                    total += evaluate_line(state, row, col, 0, 1, ENGINE)
                    total += evaluate_line(state, row, col, 1, 0, ENGINE)
                    total += POSITIONAL_SCORE[row][col]
                elif content == OPPONENT:
                    total -= evaluate_line(state, row, col, 0, 1, OPPONENT)
                    total -= POSITIONAL_SCORE[row][col]
    return total


def evaluate_line(state, row, col, delta_row, delta_col, player):
    """
    Score the window of WIN_LENGTH cells starting at (row, col) along (delta_row, delta_col).

    Args:
        state: GameState to read
        row, col: First cell of the window
        delta_row, delta_col: Direction of the window
        player: Owner of the window (ENGINE scores positive, OPPONENT negative)

    Returns:
        Signed line score
    """
    count = 0
    for i in range(WIN_LENGTH):
        r = row + i * delta_row
        c = col + i * delta_col
        if not is_within_bounds(r, c):
            return 0
        content = state.content(r, c)
        if content == player:
            count += 1
        elif content != EMPTY:
            return 0  # blocked line

    before_row, before_col = row - delta_row, col - delta_col
    after_row, after_col = row + WIN_LENGTH * delta_row, col + WIN_LENGTH * delta_col
    open_start = is_within_bounds(before_row, before_col) and state.content(before_row, before_col) == EMPTY
    open_end = is_within_bounds(after_row, after_col) and state.content(after_row, after_col) == EMPTY
    open_ends = int(open_start) + int(open_end)

    sign = 1 if player == ENGINE else -1
    if count == 3 and open_ends > 0:
        return sign * SCORE_THREE
    if count == 2 and open_ends > 0:
        return sign * SCORE_TWO
    return sign * count * open_ends
