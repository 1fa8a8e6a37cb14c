"""
Belief states for hidden Connect Four.

A belief state is the set of concrete positions the engine cannot tell apart,
each weighted by how likely it is, together with the visibility mask they all
share and the number of plies played so far.

Two expansions produce successors:
- put_piece_player: the engine's own move, deterministic, weights unchanged
- predict: the opponent's move, stochastic, weights scaled by the opponent
  model's probability for each reply

Successors are grouped by percept key (see `percept`): positions that would
look identical to the engine end up in the same successor belief state, and
a position reached twice has its weights summed.

Belief states carry a total order (played, mask bytes, size, members,
normalized weights within a tolerance) so that they can key the explored set
even after their weights have been rescaled.
"""
from bisect import bisect_left

from belief_connect4.config import SEARCH_CONFIG
from belief_connect4.constants import COLS
from belief_connect4.engine import percept
from belief_connect4.engine.results import Results
from belief_connect4.game.opponent import ProbabilisticOpponent
from belief_connect4.game.random_selector import RandomSelector


COMPARE_TOLERANCE = SEARCH_CONFIG['compare_tolerance']
PROBA_THRESHOLD = SEARCH_CONFIG['proba_threshold']

_DEFAULT_OPPONENT = ProbabilisticOpponent()


class BeliefState:
    """
    Ordered set of GameStates sharing one visibility mask and one ply count.

    Members are kept sorted under GameState's total order; adding a position
    that is already present adds its weight to the existing member.
    """

    def __init__(self, visibility=None, played=0):
        """
        Args:
            visibility: Optional 6-byte mask (copied), all hidden by default
            played: Plies played since the start of the game
        """
        self._states = []
        self.visibility = bytearray(visibility) if visibility is not None else percept.new_mask()
        self.played = played

    # ------------------------------------------------------------------
    # Set operations
    # ------------------------------------------------------------------

    def set_states(self, belief_state):
        """Take over the members, mask and ply count of another belief state."""
        self._states = belief_state._states
        self.visibility = bytearray(belief_state.visibility)
        self.played = belief_state.played

    def contains(self, state):
        index = bisect_left(self._states, state)
        return index < len(self._states) and self._states[index] == state

    def size(self):
        return len(self._states)

    def __len__(self):
        return len(self._states)

    def __iter__(self):
        return iter(self._states)

    def add(self, state):
        index = bisect_left(self._states, state)
        if index < len(self._states) and self._states[index] == state:
            self._states[index].add_proba(state.proba())
        else:
            self._states.insert(index, state)

    def restart(self):
        self._states = []
        self.visibility = percept.new_mask()
        self.played = 0

    def copy(self):
        """Deep copy: members are copied so weights can be changed independently."""
        clone = BeliefState(self.visibility, self.played)
        clone._states = [state.copy() for state in self._states]
        return clone

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_moves(self):
        """Columns that are not full, or an empty list once the game is over."""
        if self.is_game_over():
            return []
        state = self._states[0]
        return [column for column in range(COLS) if not state.is_full(column)]

    def turn(self):
        """True if the opponent is to move."""
        return self._states[0].turn()

    def is_game_over(self):
        """True when every member is finished (the board is then fully revealed)."""
        return all(state.is_game_over() for state in self._states)

    def is_full(self):
        return self._states[0].is_full()

    def is_visible(self, row, column):
        return percept.is_visible(self.visibility, row, column)

    def set_visible(self, row, column, value):
        percept.set_visible(self.visibility, row, column, value)

    def percept_key(self):
        return percept.percept_key(self.visibility)

    def proba_sum(self):
        return sum(state.proba() for state in self._states)

    def normalized_probas(self):
        """Member weights divided by their sum (uniform when the sum is zero)."""
        if not self._states:
            return []
        total = self.proba_sum()
        if total <= 0:
            return [1.0 / len(self._states)] * len(self._states)
        return [state.proba() / total for state in self._states]

    def prune(self, threshold=PROBA_THRESHOLD):
        """
        Drop members whose normalized weight is below `threshold`.

        The survivors are rescaled so the total weight is unchanged. A belief
        state is never pruned empty.
        """
        total = self.proba_sum()
        if total <= 0 or threshold <= 0:
            return 0

        kept = [state for state in self._states if state.proba() / total >= threshold]
        dropped = len(self._states) - len(kept)
        if dropped == 0 or not kept:
            return 0

        kept_total = sum(state.proba() for state in kept)
        for state in kept:
            state.mult_proba(total / kept_total)
        self._states = kept
        return dropped

    # ------------------------------------------------------------------
    # Expansions
    # ------------------------------------------------------------------

    def predict(self, opponent=None, proba_threshold=PROBA_THRESHOLD):
        """
        Possible results of the opponent's move.

        Each member is expanded with the opponent model's candidate columns;
        child weights are scaled by the probability of the reply.

        Args:
            opponent: Opponent model (ProbabilisticOpponent by default)
            proba_threshold: Members of a successor whose normalized weight
                falls below this are dropped (0 disables pruning)

        Returns:
            Results keyed by percept, or None if it is the engine's turn
        """
        if not self._states or not self.turn():
            return None

        opponent = opponent if opponent is not None else _DEFAULT_OPPONENT
        results = Results()
        for state in self._states:
            columns, selector = opponent.candidate_columns(state)
            for index, column in enumerate(columns):
                child = state.copy()
                child.put_piece(column)
                mask = percept.update_column_visibility(bytearray(self.visibility), child, column)
                child.mult_proba(selector.probability(index))
                self._collect(results, child, mask)

        if proba_threshold:
            for belief_state in results:
                belief_state.prune(proba_threshold)
        return results

    def put_piece_player(self, column):
        """
        Results of the engine dropping a disc into `column` in every member.

        Returns:
            Results keyed by percept, or None if it is the opponent's turn
        """
        if not self._states or self.turn():
            return None

        results = Results()
        for state in self._states:
            child = state.copy()
            child.put_piece(column)
            mask = percept.update_column_visibility(bytearray(self.visibility), child, column)
            self._collect(results, child, mask)
        return results

    def _collect(self, results, state, mask):
        key = percept.percept_key(mask)
        belief_state = results.get(key)
        if belief_state is None:
            belief_state = BeliefState(mask, self.played + 1)
            results.put(key, belief_state)
        belief_state.add(state)

    @staticmethod
    def filter(results, state):
        """
        Keep the successor matching what was actually observed.

        Args:
            results: Output of predict or put_piece_player
            state: The position that really occurred

        Returns:
            The matching belief state, with weights renormalized to sum to 1

        Raises:
            ValueError: if the observed percept is not among the results
        """
        key = percept.percept_key(percept.observe(state))
        belief_state = results.get(key)
        if belief_state is None:
            raise ValueError(f"Observed percept {key!r} is not among the predicted results")

        selector = RandomSelector()
        for member in belief_state:
            selector.add(member.proba())
        for index, member in enumerate(belief_state):
            member.set_proba(selector.probability(index))
        return belief_state

    # ------------------------------------------------------------------
    # Total order
    # ------------------------------------------------------------------

    def compare_to(self, other, tolerance=COMPARE_TOLERANCE):
        if self.played != other.played:
            return 1 if self.played > other.played else -1
        for mine, theirs in zip(self.visibility, other.visibility):
            if mine != theirs:
                return 1 if mine > theirs else -1
        if len(self._states) != len(other._states):
            return 1 if len(self._states) > len(other._states) else -1
        for mine, theirs in zip(self._states, other._states):
            comp = mine.compare_to(theirs)
            if comp != 0:
                return comp
        for mine, theirs in zip(self.normalized_probas(), other.normalized_probas()):
            if abs(mine - theirs) > tolerance:
                return 1 if mine > theirs else -1
        return 0

    def __lt__(self, other):
        return self.compare_to(other) < 0

    def __eq__(self, other):
        if not isinstance(other, BeliefState):
            return NotImplemented
        return self.compare_to(other) == 0

    def __hash__(self):
        # Weights are compared with a tolerance, so they stay out of the hash
        return hash((self.played, bytes(self.visibility), tuple(state.key() for state in self._states)))

    def __repr__(self):
        return f"BeliefState(size={len(self._states)}, played={self.played}, percept={self.percept_key()!r})"

    def __str__(self):
        lines = [f"BeliefState: size = {len(self._states)} played = {self.played}"]
        lines.append(percept.render_mask(self.visibility))
        for state in self._states:
            lines.append(str(state))
        return '\n'.join(lines)
