"""
AND/OR search engine over belief states.

The engine cannot see the whole board, so it searches over belief states
rather than positions. Engine moves are OR nodes (the engine picks the best
successor) and opponent moves are AND nodes (the opponent picks the worst
successor for the engine).

Key features:
- Alpha-beta pruning on both node types
- Fixed depth limit, static evaluation at the leaves
- Cycle guard: a canonical belief state may appear once per descent
- Explored set keyed by canonical belief states, shared across games
- One-ply shortcuts before searching: immediate win, then immediate threat


Algorithm overview:

    def and_or_search(belief, depth, alpha, beta, path):
        canonical = normalize_and_round(belief)
        if canonical in path:
            return -infinity
        if canonical in cache:
            return cache[canonical]
        if all members finished:
            return terminal_score(belief)
        if depth == 0:
            return heuristic_score(belief)

        if opponent to move:                     # AND node
            for child in predict(belief):
                score = min(score, and_or_search(child, depth-1, ...))
                beta = min(beta, score)
                if beta <= alpha: break
        else:                                    # OR node
            for move, child in put_piece_player(belief):
                score = max(score, and_or_search(child, depth-1, ...))
                alpha = max(alpha, score)
                if alpha >= beta: break

        cache[canonical] = round(score, 4)
        return score
"""

from dataclasses import dataclass, field
from typing import Optional

from belief_connect4.config import SEARCH_CONFIG
from belief_connect4.constants import ENGINE, PREFERRED_ORDER
from belief_connect4.engine.explored_set import ExploredSet, SHARED_CACHE
from belief_connect4.engine.evaluation import evaluate_terminal_state, evaluate_non_terminal_state
from belief_connect4.game.opponent import ProbabilisticOpponent


@dataclass
class SearchResult:
    """Result of a move search."""
    best_move: int
    score: float
    reason: str  # 'win', 'block', 'search', 'fallback' or 'none'
    move_scores: dict = field(default_factory=dict)
    nodes_searched: int = 0
    cache_stats: dict = field(default_factory=dict)


SCORE_INF = float('inf')


class AndOrSearchEngine:
    """
    Move selection for the engine in hidden Connect Four.

    Uses the process-wide explored set unless another one is given; pass a
    fresh ExploredSet to isolate a search (tests, parallel hosts).
    """

    def __init__(
        self,
        opponent: Optional[ProbabilisticOpponent] = None,
        cache: Optional[ExploredSet] = None,
        depth: int = SEARCH_CONFIG['depth'],
        threat_threshold: float = SEARCH_CONFIG['threat_threshold'],
        proba_threshold: float = SEARCH_CONFIG['proba_threshold'],
        canonical_digits: int = SEARCH_CONFIG['canonical_digits'],
        score_digits: int = SEARCH_CONFIG['score_digits'],
        verbose: bool = SEARCH_CONFIG['verbose'],
    ):
        """
        Initialize the engine.

        Args:
            opponent: Opponent model used to expand AND nodes
            cache: Explored set (defaults to SHARED_CACHE)
            depth: Plies searched below each root move
            threat_threshold: Block a column when the opponent wins there with
                probability above this
            proba_threshold: Pruning threshold passed to BeliefState.predict
            canonical_digits: Rounding of normalized weights in cache keys
            score_digits: Rounding of cached scores
            verbose: Print the decision for each move
        """
        self.opponent = opponent if opponent is not None else ProbabilisticOpponent()
        self.cache = cache if cache is not None else SHARED_CACHE
        self.depth = depth
        self.threat_threshold = threat_threshold
        self.proba_threshold = proba_threshold
        self.canonical_digits = canonical_digits
        self.score_digits = score_digits
        self.verbose = verbose

        # Search statistics
        self.nodes_searched = 0

    def find_next_move(self, belief_state) -> int:
        """
        Column to play from `belief_state` (engine to move), or -1 if none.
        """
        return self.search(belief_state).best_move

    def search(self, belief_state) -> SearchResult:
        """
        Main search entry point.

        Strategy:
        - Play an immediate win if one exists
        - Block the most likely immediate opponent win
        - Otherwise score every move (center first) with AND/OR search

        Returns:
            SearchResult with best move, score, how it was chosen and statistics
        """
        self.nodes_searched = 0
        available_moves = belief_state.get_moves()

        if not available_moves:
            if self.verbose:
                print("no available moves. returning -1.")
            return self._result(-1, 0.0, 'none')

        win_move = self.find_immediate_win(belief_state)
        if win_move != -1:
            if self.verbose:
                print(f"winning move at column {win_move}")
            return self._result(win_move, SCORE_INF, 'win')

        threat_move = self.find_immediate_threat(belief_state)
        if threat_move != -1:
            if self.verbose:
                print(f"blocking immediate threat at column {threat_move}")
            return self._result(threat_move, 0.0, 'block')

        prioritized_moves = [column for column in PREFERRED_ORDER if column in available_moves]

        best_move = -1
        best_score = -SCORE_INF
        move_scores = {}

        for move in prioritized_moves:
            results = belief_state.put_piece_player(move)
            if results is None or results.is_empty():
                continue

            move_score = -SCORE_INF
            for next_state in results:
                score = self.and_or_search(next_state, self.depth, -SCORE_INF, SCORE_INF, set())
                move_score = max(move_score, score)
            move_scores[move] = move_score

            if move_score > best_score:
                best_score = move_score
                best_move = move

        if best_score == -SCORE_INF:
            if self.verbose:
                print(f"no beneficial move found, falling back to column {available_moves[0]}")
            return self._result(available_moves[0], best_score, 'fallback', move_scores)

        if self.verbose:
            print(f"selected move: {best_move} with score: {best_score}")
        return self._result(best_move, best_score, 'search', move_scores)

    def and_or_search(self, belief_state, depth, alpha, beta, path) -> float:
        """
        AND/OR alpha-beta search.

        Args:
            belief_state: Node to evaluate
            depth: Remaining depth
            alpha: Best score the engine is assured of so far
            beta: Best score the opponent is assured of so far
            path: Canonical belief states on the current descent

        Returns:
            Score from the engine's perspective
        """
        self.nodes_searched += 1

        canonical = self.canonicalize(belief_state)
        if canonical in path:
            return -SCORE_INF

        cached_score = self.cache.get(canonical)
        if cached_score is not None:
            return cached_score

        # Base cases
        if belief_state.is_game_over():
            return evaluate_terminal_state(belief_state)
        if depth == 0:
            return evaluate_non_terminal_state(belief_state)

        path.add(canonical)
        try:
            if belief_state.turn():
                best_score = self._search_and_node(belief_state, depth, alpha, beta, path)
            else:
                best_score = self._search_or_node(belief_state, depth, alpha, beta, path)
        finally:
            path.discard(canonical)

        best_score = round(best_score, self.score_digits)
        self.cache.put(canonical, best_score)
        return best_score

    def _search_and_node(self, belief_state, depth, alpha, beta, path):
        """Opponent to move: worst case over the predicted percepts."""
        best_score = SCORE_INF
        results = belief_state.predict(self.opponent, self.proba_threshold)
        if results is None:
            return best_score

        for next_state in results:
            score = self.and_or_search(next_state, depth - 1, alpha, beta, path)
            best_score = min(best_score, score)
            beta = min(beta, score)
            if beta <= alpha:
                break
        return best_score

    def _search_or_node(self, belief_state, depth, alpha, beta, path):
        """Engine to move: best case over every (move, percept) pair."""
        best_score = -SCORE_INF
        for move in belief_state.get_moves():
            results = belief_state.put_piece_player(move)
            if results is None:
                continue

            for next_state in results:
                score = self.and_or_search(next_state, depth - 1, alpha, beta, path)
                best_score = max(best_score, score)
                alpha = max(alpha, score)
                if alpha >= beta:
                    break
            if alpha >= beta:
                break
        return best_score

    def canonicalize(self, belief_state):
        """
        Copy of `belief_state` with weights normalized to sum to 1 and rounded.

        A zero-weight belief state is treated as uniform.
        """
        canonical = belief_state.copy()
        for state, proba in zip(canonical, canonical.normalized_probas()):
            state.set_proba(round(proba, self.canonical_digits))
        return canonical

    def find_immediate_win(self, belief_state) -> int:
        """First column whose result includes a finished belief state won by the engine."""
        for move in belief_state.get_moves():
            results = belief_state.copy().put_piece_player(move)
            if results is None:
                continue

            for next_state in results:
                if next_state.is_game_over() and any(state.winner() == ENGINE for state in next_state):
                    return move
        return -1

    def find_immediate_threat(self, belief_state) -> int:
        """
        Column where the opponent would most likely win on its next drop.

        Each member is probed by letting the opponent play every legal column;
        a column's threat probability is the fraction of members in which that
        drop ends the game.

        Returns:
            Column with the highest probability above the threshold, else -1
        """
        threat_counts = {}
        total_states = 0
        moves = belief_state.get_moves()

        for state in belief_state:
            total_states += 1
            for move in moves:
                if state.is_full(move):
                    continue
                simulated = state.copy()
                # put_piece drops the piece of the side to move
                simulated.change_turn()
                simulated.put_piece(move)
                simulated.change_turn()
                if simulated.is_game_over():
                    threat_counts[move] = threat_counts.get(move, 0) + 1

        most_probable_threat = -1
        highest_probability = 0.0
        for move in sorted(threat_counts):
            probability = threat_counts[move] / total_states
            if self.verbose:
                print(f"Move: {move}, Threat probability: {probability}")
            if probability > self.threat_threshold and probability > highest_probability:
                most_probable_threat = move
                highest_probability = probability

        return most_probable_threat

    def _result(self, best_move, score, reason, move_scores=None):
        return SearchResult(
            best_move=best_move,
            score=score,
            reason=reason,
            move_scores=move_scores or {},
            nodes_searched=self.nodes_searched,
            cache_stats=self.cache.get_stats(),
        )

    def clear_cache(self):
        """Clear the explored set."""
        self.cache.clear()

    def get_stats(self) -> dict:
        """Get search statistics."""
        return {
            'nodes_searched': self.nodes_searched,
            'cache_stats': self.cache.get_stats(),
        }
