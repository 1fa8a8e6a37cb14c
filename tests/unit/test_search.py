"""
Unit tests for evaluation and the AND/OR search engine.

Tests verify:
1. Line and positional evaluation
2. Engine plays immediate wins and blocks immediate threats
3. Full board yields no move
4. Canonicalization, cycle guard and explored-set reuse
"""

import numpy as np
import pytest
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent / 'src'))

from belief_connect4.constants import ENGINE, OPPONENT, SCORE_WIN, SCORE_TWO
from belief_connect4.engine.belief_state import BeliefState
from belief_connect4.engine.evaluation import (
    evaluate_line,
    evaluate_terminal_state,
    evaluate_non_terminal_state,
)
from belief_connect4.engine.explored_set import ExploredSet
from belief_connect4.engine.search import AndOrSearchEngine, SCORE_INF
from belief_connect4.game.game_state import GameState


def belief_of(*states):
    belief_state = BeliefState(played=states[0].pieces_played())
    for state in states:
        belief_state.add(state)
    return belief_state


def board_from_rows(rows):
    """Board from rows listed bottom first (missing rows are empty)."""
    board = np.zeros((6, 7), dtype=np.int8)
    for row, values in enumerate(rows):
        board[row] = values
    return board


def drawn_full_board():
    pattern = [0, 0, 1, 1, 0, 0, 1]
    return np.array([
        [ENGINE if (pattern[col] ^ (row % 2)) == 0 else OPPONENT for col in range(7)]
        for row in range(6)
    ])


def make_engine(depth=2):
    return AndOrSearchEngine(cache=ExploredSet(), depth=depth)


class TestEvaluation:
    """Test static evaluation."""

    def test_open_two(self):
        state = GameState(board_from_rows([[0, 1, 1, 0, 0, 0, 0]]))
        assert evaluate_line(state, 0, 1, 0, 1, ENGINE) == SCORE_TWO

    def test_opponent_line_is_negative(self):
        state = GameState(board_from_rows([[0, 2, 2, 0, 0, 0, 0]]))
        assert evaluate_line(state, 0, 1, 0, 1, OPPONENT) == -SCORE_TWO

    def test_opponent_three_total(self):
        """Opponent discs subtract their signed line score and their positional bonus."""
        state = GameState(board_from_rows([[0, 2, 2, 2, 0, 0, 0]]))
        # Lines: -(-1000) - (-300) - 0; positional: -(2 + 3 + 5)
        assert evaluate_non_terminal_state(belief_of(state)) == 1290

    def test_blocked_and_out_of_bounds(self):
        state = GameState(board_from_rows([[0, 1, 2, 0, 0, 0, 0]]))
        assert evaluate_line(state, 0, 1, 0, 1, ENGINE) == 0
        assert evaluate_line(state, 0, 5, 0, 1, ENGINE) == 0

    def test_single_disc(self):
        """One disc, one open end: count * open ends."""
        state = GameState.from_moves([3])
        assert evaluate_line(state, 0, 3, 0, 1, ENGINE) == 1
        assert evaluate_line(state, 0, 3, 1, 0, ENGINE) == 1

    def test_non_terminal_single_disc(self):
        """Center disc: positional 5 + horizontal 1 + vertical 1."""
        assert evaluate_non_terminal_state(belief_of(GameState.from_moves([3]))) == 7
        assert evaluate_non_terminal_state(belief_of(GameState())) == 0

    def test_non_terminal_sums_members(self):
        belief_state = belief_of(GameState.from_moves([3]), GameState.from_moves([0]))
        single_center = evaluate_non_terminal_state(belief_of(GameState.from_moves([3])))
        single_edge = evaluate_non_terminal_state(belief_of(GameState.from_moves([0])))
        assert evaluate_non_terminal_state(belief_state) == single_center + single_edge

    def test_terminal(self):
        won = GameState.from_moves([0, 0, 1, 1, 2, 2, 3])
        lost = GameState.from_moves([0, 1, 0, 1, 2, 1, 6, 1])
        assert evaluate_terminal_state(belief_of(won)) == SCORE_WIN
        assert evaluate_terminal_state(belief_of(lost)) == -SCORE_WIN
        assert evaluate_terminal_state(belief_of(GameState(drawn_full_board()))) == 0


class TestShortcuts:
    """Test immediate win and threat detection."""

    def test_immediate_win(self):
        """Three engine discs on the bottom rank: column 3 wins before any search."""
        board = board_from_rows([
            [1, 1, 1, 0, 0, 0, 2],
            [2, 2, 0, 0, 0, 0, 0],
        ])
        belief_state = belief_of(GameState(board))
        engine = make_engine()

        assert engine.find_immediate_win(belief_state) == 3
        result = engine.search(belief_state)
        assert result.best_move == 3
        assert result.reason == 'win'
        assert result.nodes_searched == 0

    def test_immediate_threat(self):
        """Opponent three on the bottom rank: the engine blocks one end."""
        board = board_from_rows([
            [0, 2, 2, 2, 0, 0, 1],
            [0, 1, 1, 0, 0, 0, 0],
        ])
        belief_state = belief_of(GameState(board))
        engine = make_engine()

        assert engine.find_immediate_win(belief_state) == -1
        assert engine.find_immediate_threat(belief_state) in (0, 4)
        result = engine.search(belief_state)
        assert result.best_move in (0, 4)
        assert result.reason == 'block'

    def test_threat_probability_threshold(self):
        """A threat present in one member out of four is not blocked; one out of two is."""
        threatened = GameState(board_from_rows([[0, 2, 2, 2, 0, 0, 1], [0, 1, 1, 0, 0, 0, 0]]))
        quiet = [
            GameState(board_from_rows([[0, 2, 2, 0, 0, 2, 1], [0, 1, 1, 0, 0, 0, 0]])),
            GameState(board_from_rows([[2, 2, 0, 0, 0, 2, 1], [1, 1, 0, 0, 0, 0, 0]])),
            GameState(board_from_rows([[1, 0, 2, 2, 0, 0, 2], [0, 0, 1, 1, 0, 0, 0]])),
        ]
        engine = make_engine()

        assert engine.find_immediate_threat(belief_of(threatened, *quiet)) == -1
        assert engine.find_immediate_threat(belief_of(threatened, quiet[0])) == 0

    def test_full_board_has_no_move(self):
        belief_state = belief_of(GameState(drawn_full_board()))
        engine = make_engine()

        assert belief_state.get_moves() == []
        assert engine.find_next_move(belief_state) == -1
        assert engine.search(belief_state).reason == 'none'


class TestAndOrSearch:
    """Test the AND/OR search itself."""

    def test_empty_board_prefers_center(self):
        """With static evaluation of each root move, the center scores highest."""
        engine = make_engine(depth=0)
        result = engine.search(belief_of(GameState()))
        assert result.best_move == 3
        assert result.reason == 'search'
        assert sorted(result.move_scores) == list(range(7))
        assert result.move_scores[3] == 7
        assert engine.find_next_move(belief_of(GameState())) == 3

    def test_empty_board_center_at_default_depth(self):
        """Full-depth search from the empty board opens in the center."""
        engine = AndOrSearchEngine(cache=ExploredSet())
        assert engine.depth == 6
        assert engine.find_next_move(belief_of(GameState())) == 3

    def test_canonicalize_normalizes_and_rounds(self):
        engine = make_engine()
        belief_state = belief_of(GameState.from_moves([3], proba=2.0), GameState.from_moves([4], proba=1.0))
        canonical = engine.canonicalize(belief_state)

        probas = [state.proba() for state in canonical]
        assert sorted(probas) == [0.333333, 0.666667]
        # Original untouched
        assert belief_state.proba_sum() == pytest.approx(3.0)

    def test_canonicalize_zero_weight_is_uniform(self):
        engine = make_engine()
        belief_state = belief_of(GameState.from_moves([3], proba=0.0), GameState.from_moves([4], proba=0.0))
        canonical = engine.canonicalize(belief_state)
        assert [state.proba() for state in canonical] == [0.5, 0.5]

    def test_cycle_guard(self):
        """A state already on the descent path scores -inf and the path is left unchanged."""
        engine = make_engine()
        belief_state = belief_of(GameState.from_moves([3]))
        path = {engine.canonicalize(belief_state)}

        assert engine.and_or_search(belief_state, 2, -SCORE_INF, SCORE_INF, path) == -SCORE_INF
        assert len(path) == 1

    def test_path_is_restored(self):
        engine = make_engine()
        path = set()
        engine.and_or_search(belief_of(GameState.from_moves([3])), 2, -SCORE_INF, SCORE_INF, path)
        assert path == set()

    def test_repeated_search_served_by_cache(self):
        """Second call on the same canonical state returns the cached, identical score."""
        engine = make_engine(depth=2)
        belief_state = belief_of(GameState.from_moves([3]))

        first = engine.and_or_search(belief_state, 2, -SCORE_INF, SCORE_INF, set())
        hits_before = engine.cache.hits
        nodes_before = engine.nodes_searched

        second = engine.and_or_search(belief_state, 2, -SCORE_INF, SCORE_INF, set())
        assert second == first
        assert engine.cache.hits == hits_before + 1
        assert engine.nodes_searched == nodes_before + 1

    def test_deterministic_across_caches(self):
        belief_state = belief_of(GameState.from_moves([3]))
        first = make_engine().and_or_search(belief_state, 2, -SCORE_INF, SCORE_INF, set())
        second = make_engine().and_or_search(belief_state.copy(), 2, -SCORE_INF, SCORE_INF, set())
        assert first == second
        assert first == round(first, 4)

    def test_cached_score_rescaled(self):
        """A proportional belief state reuses the entry scaled by the weight ratio."""
        engine = make_engine()
        belief_state = belief_of(GameState.from_moves([3]))
        score = engine.and_or_search(belief_state, 1, -SCORE_INF, SCORE_INF, set())

        key = engine.canonicalize(belief_state)
        assert engine.cache.get(key) == pytest.approx(score)

        heavier = engine.canonicalize(belief_state)
        next(iter(heavier)).set_proba(2.0)
        assert engine.cache.get(heavier) == pytest.approx(score * 2.0)

    def test_terminal_and_leaf_not_cached(self):
        engine = make_engine()
        engine.and_or_search(belief_of(GameState.from_moves([3])), 0, -SCORE_INF, SCORE_INF, set())
        won = belief_of(GameState.from_moves([0, 0, 1, 1, 2, 2, 3]))
        assert engine.and_or_search(won, 3, -SCORE_INF, SCORE_INF, set()) == SCORE_WIN
        assert len(engine.cache) == 0

    def test_stats(self):
        engine = make_engine(depth=1)
        engine.search(belief_of(GameState()))
        stats = engine.get_stats()
        assert stats['nodes_searched'] > 0
        assert stats['cache_stats']['stores'] > 0
