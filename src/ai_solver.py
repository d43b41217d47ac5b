# ai_solver.py
# Adversarial search that recommends the next move for a 2048 board.

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional
import logging
import math
import sys

from game_core import Board, Direction, Grid

logger = logging.getLogger(__name__)

DEFAULT_HINT_DEPTH = 5
WIN_SCORE = sys.maxsize
ALPHA_FLOOR = -sys.maxsize - 1
SPAWN_VALUES = (2, 4)


class Player(Enum):
    """Which ply is being searched."""
    MOVER = 1    # picks a direction, maximizes
    SPAWNER = 2  # places a tile, minimizes


@dataclass(frozen=True)
class SearchResult:
    """Value of a searched position and, on mover plies, the move that gets it."""
    score: int
    direction: Optional[Direction] = None


# --- Heuristics ---

def heuristic_score(actual_score: int, number_of_empty_cells: int, clustering_score: int) -> int:
    """
    Estimates the worth of a position from the real score, the free space and
    how clustered the tiles are.
    Args:
        actual_score (int): The score of the game so far.
        number_of_empty_cells (int): Empty cells on the board.
        clustering_score (int): Output of calculate_clustering_score.
    Returns:
        int: The heuristic value, never below min(actual_score, 1).
    """
    floor = min(actual_score, 1)
    if actual_score <= 0:
        return floor
    score = int(actual_score + math.log(actual_score) * number_of_empty_cells - clustering_score)
    return max(score, floor)


def calculate_clustering_score(grid: Grid) -> int:
    """
    Measures how much each tile differs from its populated neighbours.
    For every non-empty cell the absolute differences to the non-empty cells
    of its 8-cell neighbourhood are averaged (integer division); the averages
    are summed over the board. A cell without populated neighbours adds 0.
    Args:
        grid (Grid): The board snapshot.
    Returns:
        int: The clustering score; higher means harder to merge.
    """
    size = len(grid)
    clustering_score = 0
    offsets = (-1, 0, 1)

    for row in range(size):
        for col in range(size):
            value = grid[row][col]
            if value == 0:
                continue

            neighbours = 0
            total = 0
            for d_row in offsets:
                x = row + d_row
                if x < 0 or x >= size:
                    continue
                for d_col in offsets:
                    y = col + d_col
                    if (d_row == 0 and d_col == 0) or y < 0 or y >= size:
                        continue
                    if grid[x][y] > 0:
                        neighbours += 1
                        total += abs(value - grid[x][y])

            if neighbours:
                clustering_score += total // neighbours

    return clustering_score


def _evaluate(board: Board) -> int:
    return heuristic_score(board.get_score(), board.get_number_of_empty_cells(),
                           calculate_clustering_score(board.get_board_array()))


# --- Search ---

def _legal_children(board: Board):
    """Yields (direction, board after move) for every direction that changes the board."""
    grid = board.get_board_array()
    for direction in Direction:
        child = board.clone()
        points = child.move(direction)
        if points == 0 and Board.is_equal(grid, child.get_board_array()):
            continue
        yield direction, child


def _spawn_children(board: Board):
    """Yields the board after every possible spawn, cell by cell, 2 before 4."""
    size = board.size
    for cell_id in board.get_empty_cell_ids():
        row, col = cell_id // size, cell_id % size
        for value in SPAWN_VALUES:
            child = board.clone()
            child.set_empty_cell(row, col, value)
            yield child


class _NodeCounter:
    def __init__(self):
        self.nodes = 0


def alphabeta(board: Board, depth: int, alpha: int, beta: int, player: Player,
              counter: Optional[_NodeCounter] = None) -> SearchResult:
    """
    Alpha-beta search over alternating mover and spawner plies.
    Args:
        board (Board): Position to search. It is never modified.
        depth (int): Remaining plies.
        alpha (int): Best score the mover is already assured of.
        beta (int): Best score the spawner is already assured of.
        player (Player): Whose ply this is.
    Returns:
        SearchResult: The position's value and, for the mover, the best direction.
    """
    if counter is not None:
        counter.nodes += 1

    if board.is_game_terminated():
        return SearchResult(WIN_SCORE if board.has_won() else min(board.get_score(), 1))
    if depth == 0:
        return SearchResult(_evaluate(board))

    if player == Player.MOVER:
        best_direction = None
        for direction, child in _legal_children(board):
            current = alphabeta(child, depth - 1, alpha, beta, Player.SPAWNER, counter)
            if current.score > alpha:
                alpha = current.score
                best_direction = direction
            if beta <= alpha:
                break  # beta cutoff
        return SearchResult(alpha, best_direction)

    if not board.get_empty_cell_ids():
        return SearchResult(0)
    for child in _spawn_children(board):
        current = alphabeta(child, depth - 1, alpha, beta, Player.MOVER, counter)
        if current.score < beta:
            beta = current.score
        if beta <= alpha:
            break  # alpha cutoff
    return SearchResult(beta)


def minimax(board: Board, depth: int, player: Player,
            counter: Optional[_NodeCounter] = None) -> SearchResult:
    """Exhaustive minimax over the same game tree, without pruning."""
    if counter is not None:
        counter.nodes += 1

    if depth == 0 or board.is_game_terminated():
        return SearchResult(_evaluate(board))

    if player == Player.MOVER:
        best_score = ALPHA_FLOOR
        best_direction = None
        for direction, child in _legal_children(board):
            current = minimax(child, depth - 1, Player.SPAWNER, counter)
            if current.score > best_score:
                best_score = current.score
                best_direction = direction
        return SearchResult(best_score, best_direction)

    if not board.get_empty_cell_ids():
        return SearchResult(0)
    best_score = WIN_SCORE
    for child in _spawn_children(board):
        current = minimax(child, depth - 1, Player.MOVER, counter)
        best_score = min(best_score, current.score)
    return SearchResult(best_score)


def legal_directions(board: Board) -> List[Direction]:
    """Directions, in enum order, whose move changes the board."""
    return [direction for direction, _ in _legal_children(board)]


def find_best_move(board: Board, depth: int = DEFAULT_HINT_DEPTH,
                   pruning: bool = True) -> Optional[Direction]:
    """
    Recommends a move for the board without modifying it.
    Args:
        board (Board): The position to play from.
        depth (int): Number of plies (mover and spawner alternate) to search.
        pruning (bool): Use alpha-beta pruning (default) or plain minimax.
    Returns:
        Optional[Direction]: The best direction found. When the search does not
                             settle on one, the first legal direction; None
                             when no direction changes the board.
    Raises:
        ValueError: If depth is negative.
    """
    if not isinstance(depth, int) or depth < 0:
        raise ValueError("Search depth must be a non-negative integer.")

    counter = _NodeCounter()
    if pruning:
        result = alphabeta(board, depth, ALPHA_FLOOR, WIN_SCORE, Player.MOVER, counter)
    else:
        result = minimax(board, depth, Player.MOVER, counter)

    direction = result.direction
    if direction is None:
        candidates = legal_directions(board)
        direction = candidates[0] if candidates else None

    logger.debug("Searched %d nodes at depth %d: %s (score %d)",
                 counter.nodes, depth, direction, result.score)
    return direction
