"""
Probabilistic opponent model for hidden Connect Four.

The engine cannot see the opponent's policy, so it assumes a rational but
imperfect player:
1. If the opponent can win, it does
2. Otherwise it spreads probability over moves that do not hand the engine
   an immediate win, weighted by a positional heuristic
3. If every move loses at once, it picks among the least damaging ones
"""

from belief_connect4.constants import ROWS, COLS, EMPTY, ENGINE, OPPONENT
from belief_connect4.game.random_selector import RandomSelector


class ProbabilisticOpponent:
    """
    Opponent move model shared by belief prediction and the match runner.

    Both use `candidate_columns`, so a sampled opponent move is always one the
    engine's belief update has accounted for.
    """

    def __init__(self, center_weight=1.0, line_weight=0.5):
        self.center_weight = center_weight
        self.line_weight = line_weight

    def heuristic_value(self, state, column):
        """
        Strictly positive attractiveness of a column for the side to move.

        Args:
            state: Position before the move
            column: Playable column

        Returns:
            Center preference plus a bonus per own disc the move would join
        """
        center = COLS // 2
        value = self.center_weight / (1.0 + abs(column - center))

        row = self._landing_row(state, column)
        if row is None:
            return value

        player = OPPONENT if state.turn() else ENGINE
        for dr, dc in ((0, 1), (1, 0), (1, 1), (1, -1)):
            run = 0
            for sign in (1, -1):
                r, c = row + sign * dr, column + sign * dc
                while 0 <= r < ROWS and 0 <= c < COLS and state.content(r, c) == player:
                    run += 1
                    r += sign * dr
                    c += sign * dc
            value += self.line_weight * run

        return value

    def candidate_columns(self, state):
        """
        Columns the opponent may play from `state` and their weights.

        Returns:
            (columns, selector) where selector.probability(i) is the chance of
            columns[i]
        """
        selector = RandomSelector()
        columns = []
        least_losing = []
        min_game_over = None

        for column in range(COLS):
            if state.is_full(column):
                continue

            after = state.copy()
            after.put_piece(column)
            if after.is_game_over():
                # Winning (or board-filling) move: nothing else matters
                selector = RandomSelector()
                selector.add(1.0)
                return [column], selector

            nbr_game_over = 0
            for reply in range(COLS):
                if not after.is_full(reply):
                    probe = after.copy()
                    probe.put_piece(reply)
                    if probe.is_game_over():
                        nbr_game_over += 1

            if nbr_game_over == 0:
                selector.add(self.heuristic_value(state, column))
                columns.append(column)
            elif min_game_over is None or nbr_game_over < min_game_over:
                min_game_over = nbr_game_over
                least_losing = [column]
            elif nbr_game_over == min_game_over:
                least_losing.append(column)

        if not columns:
            selector = RandomSelector()
            for column in least_losing:
                columns.append(column)
                selector.add(1.0)

        return columns, selector

    def choose_column(self, state, rng=None):
        """Sample the opponent's move from the candidate distribution."""
        columns, selector = self.candidate_columns(state)
        if not columns:
            raise ValueError("No valid moves available")
        return columns[selector.select(rng)]

    @staticmethod
    def _landing_row(state, column):
        for row in range(ROWS):
            if state.content(row, column) == EMPTY:
                return row
        return None
