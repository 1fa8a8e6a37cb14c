#!/usr/bin/env python3
"""
Play hidden Connect Four: the search engine against the probabilistic opponent.

The host keeps the true position and feeds the engine only what it may see:
after every move the engine's belief state is expanded (put_piece_player for
its own moves, predict for the opponent's) and then filtered with the percept
of the real position.
"""
import argparse
from dataclasses import dataclass, field

import numpy as np
from tqdm import tqdm

from belief_connect4.config import MATCH_CONFIG
from belief_connect4.constants import ENGINE, OPPONENT
from belief_connect4.engine.belief_state import BeliefState
from belief_connect4.engine.search import AndOrSearchEngine
from belief_connect4.game.game_state import GameState


@dataclass
class MatchRecord:
    """Outcome of one game."""
    winner: int  # ENGINE, OPPONENT, or EMPTY for a draw
    moves: list = field(default_factory=list)
    max_belief_size: int = 1

    @property
    def plies(self):
        return len(self.moves)


class HiddenConnectFourMatch:
    """
    One game between an AndOrSearchEngine and a ProbabilisticOpponent.

    The opponent samples its moves from the same model the belief update
    predicts with, so the true position always stays inside the belief state.
    """

    def __init__(self, engine, opponent=None, engine_starts=True, rng=None):
        self.engine = engine
        self.opponent = opponent if opponent is not None else engine.opponent
        self.engine_starts = engine_starts
        self.rng = rng if rng is not None else np.random.default_rng()
        self.reset()

    def reset(self):
        self.state = GameState(turn=not self.engine_starts)
        self.belief = BeliefState()
        self.belief.add(self.state.copy())
        self.moves = []
        self.max_belief_size = 1

    def engine_move(self):
        column = self.engine.find_next_move(self.belief)
        if column == -1:
            raise ValueError("Engine found no move on a board that is not finished")
        results = self.belief.put_piece_player(column)
        self.state.put_piece(column)
        self._observe(results, column)
        return column

    def opponent_move(self):
        column = self.opponent.choose_column(self.state, self.rng)
        # Exact tracking: no pruning, so the real position cannot be dropped
        results = self.belief.predict(self.opponent, proba_threshold=0)
        self.state.put_piece(column)
        self._observe(results, column)
        return column

    def _observe(self, results, column):
        self.belief = BeliefState.filter(results, self.state)
        self.moves.append(column)
        self.max_belief_size = max(self.max_belief_size, len(self.belief))

    def play(self) -> MatchRecord:
        """Play until the true position is finished."""
        while not self.state.is_game_over():
            if self.state.turn():
                self.opponent_move()
            else:
                self.engine_move()

        return MatchRecord(
            winner=self.state.winner(),
            moves=list(self.moves),
            max_belief_size=self.max_belief_size,
        )


def run_series(
    num_games=MATCH_CONFIG['num_games'],
    depth=MATCH_CONFIG['depth'],
    engine_starts=MATCH_CONFIG['engine_starts'],
    seed=MATCH_CONFIG['seed'],
    verbose=False,
    engine=None,
):
    """
    Play several games and count the outcomes.

    Returns:
        Dictionary with engine_wins, opponent_wins, draws and the game records
    """
    rng = np.random.default_rng(seed)
    if engine is None:
        engine = AndOrSearchEngine(depth=depth, verbose=verbose)

    summary = {'engine_wins': 0, 'opponent_wins': 0, 'draws': 0, 'records': []}
    for _ in tqdm(range(num_games), desc="Games", disable=num_games <= 1):
        record = HiddenConnectFourMatch(engine, engine_starts=engine_starts, rng=rng).play()
        if record.winner == ENGINE:
            summary['engine_wins'] += 1
        elif record.winner == OPPONENT:
            summary['opponent_wins'] += 1
        else:
            summary['draws'] += 1
        summary['records'].append(record)

    return summary


def main(argv=None):
    parser = argparse.ArgumentParser(description="Hidden Connect Four: AND/OR engine vs probabilistic opponent")
    parser.add_argument('--games', type=int, default=MATCH_CONFIG['num_games'], help="Number of games")
    parser.add_argument('--depth', type=int, default=MATCH_CONFIG['depth'], help="Search depth below each root move")
    parser.add_argument('--seed', type=int, default=MATCH_CONFIG['seed'], help="Random seed for the opponent")
    parser.add_argument('--opponent-first', action='store_true', help="Let the opponent move first")
    parser.add_argument('--verbose', action='store_true', help="Print every engine decision")
    args = parser.parse_args(argv)

    print("=" * 60)
    print("Hidden Connect Four - AND/OR engine vs probabilistic opponent")
    print("=" * 60)
    print(f"Games: {args.games}  Depth: {args.depth}  Engine starts: {not args.opponent_first}")

    summary = run_series(
        num_games=args.games,
        depth=args.depth,
        engine_starts=not args.opponent_first,
        seed=args.seed,
        verbose=args.verbose,
    )

    records = summary['records']
    avg_plies = sum(r.plies for r in records) / len(records) if records else 0.0
    max_belief = max((r.max_belief_size for r in records), default=0)

    print("\n" + "=" * 60)
    print(f"Engine wins:   {summary['engine_wins']}")
    print(f"Opponent wins: {summary['opponent_wins']}")
    print(f"Draws:         {summary['draws']}")
    print(f"Average plies: {avg_plies:.1f}  Largest belief state: {max_belief}")
    print("=" * 60)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
