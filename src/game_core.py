# game_core.py
# Board state machine for the 2048 game: sliding, merging, scoring, spawning
# and terminal-state detection.

from enum import Enum
from typing import List, Optional, Tuple
import copy
import logging
import random

logger = logging.getLogger(__name__)

BOARD_SIZE = 4
WIN_TILE = 2048
FOUR_TILE_PROBABILITY = 0.1

Grid = List[List[int]]


class Direction(Enum):
    """Represents the possible move directions, in search order."""
    UP = 0
    RIGHT = 1
    DOWN = 2
    LEFT = 3

    @property
    def description(self) -> str:
        return self.name.capitalize()

    def __str__(self) -> str:
        return self.description


_ACTION_STATUS_DESCRIPTIONS = {
    "CONTINUE": "Successful move",
    "INVALID_MOVE": "Invalid move!",
    "WIN": "You won, the game ended!",
    "LOSE": "No more moves, the game ended!",
}


class ActionStatus(Enum):
    """Represents the state of the game after a move was applied."""
    CONTINUE = 0
    INVALID_MOVE = 1
    WIN = 2
    LOSE = 3

    @property
    def description(self) -> str:
        return _ACTION_STATUS_DESCRIPTIONS[self.name]

    def __str__(self) -> str:
        return self.description


# --- Line Manipulation (Core Move Logic Helpers) ---

def _compress_line(line: List[int]) -> List[int]:
    """Moves all non-zero tiles of a line to the start, keeping their order."""
    compressed = [value for value in line if value != 0]
    return compressed + [0] * (len(line) - len(compressed))


def _merge_line(line: List[int]) -> Tuple[List[int], int]:
    """
    Merges adjacent identical numbers in a compressed line, moving left.
    A tile takes part in at most one merge, and merges are resolved from
    index 0 inward, so [2, 2, 2, 0] becomes [4, 0, 2, 0].
    Args:
        line (List[int]): A line already compressed towards index 0.
    Returns:
        Tuple[List[int], int]: Merged line (not re-compressed) and points scored.
    """
    merged = list(line)
    points = 0
    idx = 0
    while idx < len(merged) - 1:
        if merged[idx] != 0 and merged[idx] == merged[idx + 1]:
            merged[idx] *= 2
            merged[idx + 1] = 0
            points += merged[idx]
            idx += 2
        else:
            idx += 1
    return merged, points


def slide_line_left(line: List[int]) -> Tuple[List[int], int]:
    """
    Applies compress, merge, then compress again to a single line, moving left.
    Args:
        line (List[int]): The line to process.
    Returns:
        Tuple[List[int], int]: The processed line and the points scored by merges.
    """
    merged, points = _merge_line(_compress_line(line))
    return _compress_line(merged), points


# --- Board Transformations ---

def transpose_grid(grid: Grid) -> Grid:
    """Returns a new grid with rows and columns swapped."""
    return [list(column) for column in zip(*grid)]


def reverse_rows(grid: Grid) -> Grid:
    """Returns a new grid with every row reversed."""
    return [row[::-1] for row in grid]


def _slide_grid_left(grid: Grid) -> Tuple[Grid, int]:
    processed = []
    points = 0
    for row in grid:
        new_row, row_points = slide_line_left(row)
        processed.append(new_row)
        points += row_points
    return processed, points


def slide_grid(grid: Grid, direction: Direction) -> Tuple[Grid, int]:
    """
    Slides and merges a whole grid in the given direction.
    Every direction is expressed as a leftward slide of a reversed and/or
    transposed view of the grid.
    Args:
        grid (Grid): The grid to slide. It is not modified.
        direction (Direction): The direction of the move.
    Returns:
        Tuple[Grid, int]: The new grid and the points scored.
    Raises:
        ValueError: If an invalid direction is specified.
    """
    if direction == Direction.LEFT:
        return _slide_grid_left(grid)
    if direction == Direction.RIGHT:
        processed, points = _slide_grid_left(reverse_rows(grid))
        return reverse_rows(processed), points
    if direction == Direction.UP:
        processed, points = _slide_grid_left(transpose_grid(grid))
        return transpose_grid(processed), points
    if direction == Direction.DOWN:
        processed, points = _slide_grid_left(reverse_rows(transpose_grid(grid)))
        return transpose_grid(reverse_rows(processed)), points
    raise ValueError(f"Invalid direction specified: {direction!r}")


def _is_valid_tile(value: int) -> bool:
    return value == 0 or (value >= 2 and value & (value - 1) == 0)


class Board:
    """
    The authoritative 2048 board: owns the grid and the score.

    Only `action` is meant to be called on a board used for real play.
    `move` and `set_empty_cell` exist for search, which always works on
    copies produced by `clone`.
    """

    def __init__(self, size: int = BOARD_SIZE, win_tile: int = WIN_TILE,
                 rng: Optional[random.Random] = None):
        """
        Creates an empty board seeded with two random tiles.
        Args:
            size (int): The dimension N of the N x N board. Default is 4.
            win_tile (int): Tile value that wins the game. Default is 2048.
            rng (random.Random): Source of randomness for spawns.
        Raises:
            ValueError: If size or win_tile are invalid.
        """
        if not isinstance(size, int) or size < 2:
            raise ValueError("Board size must be an integer of at least 2.")
        if not isinstance(win_tile, int) or win_tile < 4 or not _is_valid_tile(win_tile):
            raise ValueError("Win tile must be a power of two of at least 4.")

        self._size = size
        self._win_tile = win_tile
        self._rng = rng if rng is not None else random.Random()
        self._grid: Grid = [[0] * size for _ in range(size)]
        self._score = 0

        self._add_random_tile()
        self._add_random_tile()

    @classmethod
    def from_grid(cls, grid: Grid, score: int = 0, win_tile: int = WIN_TILE,
                  rng: Optional[random.Random] = None) -> "Board":
        """
        Rebuilds a board from a grid snapshot without spawning any tile.
        Args:
            grid (Grid): An N x N matrix of 0 or powers of two >= 2.
            score (int): The score accumulated so far.
            win_tile (int): Tile value that wins the game.
            rng (random.Random): Source of randomness for later spawns.
        Returns:
            Board: A board holding a copy of the grid.
        Raises:
            ValueError: If the grid is not square, holds invalid tiles, or
                        the score is negative.
        """
        if not grid or not all(len(row) == len(grid) for row in grid):
            raise ValueError("Board must be a non-empty square matrix.")
        if len(grid) < 2:
            raise ValueError("Board size must be an integer of at least 2.")
        if not isinstance(win_tile, int) or win_tile < 4 or not _is_valid_tile(win_tile):
            raise ValueError("Win tile must be a power of two of at least 4.")
        for row in grid:
            for value in row:
                if not isinstance(value, int) or not _is_valid_tile(value):
                    raise ValueError(f"Invalid tile value on board: {value!r}")
        if not isinstance(score, int) or score < 0:
            raise ValueError("Score must be a non-negative integer.")

        board = cls.__new__(cls)
        board._size = len(grid)
        board._win_tile = win_tile
        board._rng = rng if rng is not None else random.Random()
        board._grid = [list(row) for row in grid]
        board._score = score
        return board

    # --- Observers ---

    @property
    def size(self) -> int:
        return self._size

    @property
    def win_tile(self) -> int:
        return self._win_tile

    def get_board_array(self) -> Grid:
        """Returns a copy of the grid, safe to keep or modify."""
        return [list(row) for row in self._grid]

    def get_score(self) -> int:
        return self._score

    def get_max_tile(self) -> int:
        return max(max(row) for row in self._grid)

    def get_empty_cell_ids(self) -> List[int]:
        """
        Enumerates the empty cells in row-major order.
        Returns:
            List[int]: Cell ids, where id // size is the row and id % size the column.
        """
        return [row * self._size + col
                for row in range(self._size)
                for col in range(self._size)
                if self._grid[row][col] == 0]

    def get_number_of_empty_cells(self) -> int:
        return sum(row.count(0) for row in self._grid)

    @staticmethod
    def is_equal(grid_a: Grid, grid_b: Grid) -> bool:
        """Checks whether two grid snapshots hold the same tiles."""
        return len(grid_a) == len(grid_b) and all(
            list(row_a) == list(row_b) for row_a, row_b in zip(grid_a, grid_b))

    def has_won(self) -> bool:
        return self.get_max_tile() >= self._win_tile

    def is_game_terminated(self) -> bool:
        """
        A game ends when the win tile is reached or when the board is full and
        no direction moves or merges anything.
        """
        if self.has_won():
            return True
        if self.get_number_of_empty_cells() > 0:
            return False
        for direction in Direction:
            candidate = self.clone()
            points = candidate.move(direction)
            if points > 0 or not self.is_equal(self._grid, candidate._grid):
                return False
        return True

    # --- Mutators ---

    def clone(self) -> "Board":
        """Returns an independent copy; changes to it never reach this board."""
        duplicate = copy.copy(self)
        duplicate._grid = [list(row) for row in self._grid]
        return duplicate

    def move(self, direction: Direction) -> int:
        """
        Slides and merges the tiles in place, without spawning a new tile.
        Args:
            direction (Direction): The direction of the move.
        Returns:
            int: Points scored by the merges, also added to this board's score.
        """
        self._grid, points = slide_grid(self._grid, direction)
        self._score += points
        return points

    def set_empty_cell(self, row: int, col: int, value: int) -> None:
        """
        Places a tile on an empty cell. Used by search to model spawns.
        Raises:
            ValueError: If the cell is out of range or already occupied.
        """
        if not (0 <= row < self._size and 0 <= col < self._size):
            raise ValueError(f"Cell ({row}, {col}) is outside the board.")
        if self._grid[row][col] != 0:
            raise ValueError(f"Cell ({row}, {col}) is not empty.")
        self._grid[row][col] = value

    def _add_random_tile(self) -> bool:
        """Spawns a 2 (or, 10% of the time, a 4) on a random empty cell."""
        empty_cells = self.get_empty_cell_ids()
        if not empty_cells:
            return False
        cell_id = self._rng.choice(empty_cells)
        value = 4 if self._rng.random() < FOUR_TILE_PROBABILITY else 2
        self._grid[cell_id // self._size][cell_id % self._size] = value
        logger.debug("Spawned %d at cell %d", value, cell_id)
        return True

    def action(self, direction: Direction) -> ActionStatus:
        """
        Plays a full turn: slide and merge, then spawn a tile and check
        whether the game ended.
        Args:
            direction (Direction): The direction chosen by the player.
        Returns:
            ActionStatus: INVALID_MOVE (board untouched) if nothing moved,
                          WIN, LOSE, or CONTINUE otherwise.
        """
        candidate = self.clone()
        points = candidate.move(direction)

        if points == 0 and self.is_equal(self._grid, candidate._grid):
            if self.has_won():
                return ActionStatus.WIN
            if self.is_game_terminated():
                logger.debug("No move left, game lost with score %d", self._score)
                return ActionStatus.LOSE
            return ActionStatus.INVALID_MOVE

        self._grid = candidate._grid
        self._score += points
        self._add_random_tile()

        if self.has_won():
            logger.debug("Win tile %d reached with score %d", self._win_tile, self._score)
            return ActionStatus.WIN
        if self.is_game_terminated():
            logger.debug("No move left, game lost with score %d", self._score)
            return ActionStatus.LOSE
        return ActionStatus.CONTINUE

    def __repr__(self) -> str:
        return f"Board(size={self._size}, score={self._score}, grid={self._grid!r})"
