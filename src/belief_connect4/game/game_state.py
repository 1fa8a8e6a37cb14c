import numpy as np

from belief_connect4.constants import ROWS, COLS, WIN_LENGTH, EMPTY, ENGINE, OPPONENT


class GameState:
    """
    One concrete Connect Four position with a turn flag and a probability weight.

    Board: 6 rows x 7 columns, row 0 is the bottom rank (discs land on the
    lowest empty row). Cells hold EMPTY (0), ENGINE (1) or OPPONENT (2).
    Turn: False when the engine is to move, True when the opponent is.

    Identity and ordering use the board and the turn only; the weight is
    carried along so that belief states can accumulate it.
    """

    def __init__(self, board=None, turn=False, proba=1.0):
        """
        Args:
            board: Optional (rows, cols) array of cell values, row 0 = bottom
            turn: True if the opponent is to move
            proba: Nonnegative probability weight
        """
        if board is None:
            self.board = np.zeros((ROWS, COLS), dtype=np.int8)
            self._winner = EMPTY
        else:
            self.board = np.array(board, dtype=np.int8)
            if self.board.shape != (ROWS, COLS):
                raise ValueError(f"Board must have shape {(ROWS, COLS)}, got {self.board.shape}")
            self._winner = self._scan_winner()
        self._turn = bool(turn)
        self._proba = float(proba)

    @classmethod
    def from_moves(cls, moves, engine_starts=True, proba=1.0):
        """
        Build a position by playing a sequence of columns from the empty board.

        Args:
            moves: Iterable of column indices, alternating sides
            engine_starts: True if the first move is the engine's
            proba: Weight of the resulting state
        """
        state = cls(turn=not engine_starts, proba=proba)
        for column in moves:
            state.put_piece(column)
        return state

    def __repr__(self):
        return f"GameState(played={self.pieces_played()}, turn={self._turn}, proba={self._proba:.6f})"

    def __str__(self):
        symbols = {EMPTY: '.', ENGINE: 'X', OPPONENT: 'O'}
        lines = []
        for row in range(ROWS - 1, -1, -1):
            lines.append(''.join(symbols[int(v)] for v in self.board[row]))
        lines.append(f"turn={'opponent' if self._turn else 'engine'} proba={self._proba:.6f}")
        return '\n'.join(lines)

    # ------------------------------------------------------------------
    # Board queries
    # ------------------------------------------------------------------

    def content(self, row, col):
        return int(self.board[row, col])

    def is_full(self, column=None):
        """Column full when a column is given, otherwise whole board full."""
        if column is None:
            return bool(np.all(self.board[ROWS - 1] != EMPTY))
        return bool(self.board[ROWS - 1, column] != EMPTY)

    def is_game_over(self):
        return self._winner != EMPTY or self.is_full()

    def winner(self):
        """ENGINE or OPPONENT if someone connected four, EMPTY otherwise."""
        return self._winner

    def turn(self):
        return self._turn

    def pieces_played(self):
        return int(np.count_nonzero(self.board))

    # ------------------------------------------------------------------
    # Moves
    # ------------------------------------------------------------------

    def put_piece(self, column):
        """
        Drop the piece of the side to move into a column and pass the turn.

        Raises:
            ValueError: if the column is out of range or full
        """
        if column < 0 or column >= COLS:
            raise ValueError(f"Column {column} out of range")

        player = OPPONENT if self._turn else ENGINE
        for row in range(ROWS):
            if self.board[row, column] == EMPTY:
                self.board[row, column] = player
                if self._winner == EMPTY and self._connects(row, column, player):
                    self._winner = player
                self._turn = not self._turn
                return row

        raise ValueError(f"Column {column} is full")

    def change_turn(self):
        self._turn = not self._turn

    def copy(self):
        clone = GameState.__new__(GameState)
        clone.board = self.board.copy()
        clone._winner = self._winner
        clone._turn = self._turn
        clone._proba = self._proba
        return clone

    # ------------------------------------------------------------------
    # Probability weight
    # ------------------------------------------------------------------

    def proba(self):
        return self._proba

    def set_proba(self, proba):
        self._proba = float(proba)

    def add_proba(self, proba):
        self._proba += proba

    def mult_proba(self, factor):
        self._proba *= factor

    # ------------------------------------------------------------------
    # Total order on (board, turn)
    # ------------------------------------------------------------------

    def key(self):
        return (self.board.tobytes(), self._turn)

    def compare_to(self, other):
        mine, theirs = self.key(), other.key()
        if mine == theirs:
            return 0
        return -1 if mine < theirs else 1

    def __lt__(self, other):
        return self.key() < other.key()

    def __eq__(self, other):
        if not isinstance(other, GameState):
            return NotImplemented
        return self.key() == other.key()

    def __hash__(self):
        return hash(self.key())

    # ------------------------------------------------------------------
    # Win detection
    # ------------------------------------------------------------------

    def _connects(self, row, column, player):
        """Check whether the disc at (row, column) completes four in a row."""
        for dr, dc in ((0, 1), (1, 0), (1, 1), (1, -1)):
            count = 1
            r, c = row + dr, column + dc
            while 0 <= r < ROWS and 0 <= c < COLS and self.board[r, c] == player:
                count += 1
                r += dr
                c += dc
            r, c = row - dr, column - dc
            while 0 <= r < ROWS and 0 <= c < COLS and self.board[r, c] == player:
                count += 1
                r -= dr
                c -= dc
            if count >= WIN_LENGTH:
                return True
        return False

    def _scan_winner(self):
        for row in range(ROWS):
            for col in range(COLS):
                player = self.board[row, col]
                if player != EMPTY and self._connects(row, col, player):
                    return int(player)
        return EMPTY
