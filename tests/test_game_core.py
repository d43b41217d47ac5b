import random

import pytest

from game_core import (
    ActionStatus,
    Board,
    Direction,
    slide_grid,
    slide_line_left,
)

EMPTY_ROW = [0, 0, 0, 0]

# Full board where no two neighbours are equal
LOCKED_GRID = [
    [2, 4, 2, 4],
    [4, 2, 4, 2],
    [2, 4, 2, 4],
    [4, 2, 4, 2],
]


def make_board(grid, score=0, win_tile=2048, seed=0):
    return Board.from_grid(grid, score, win_tile, rng=random.Random(seed))


def tile_sum(grid):
    return sum(sum(row) for row in grid)


@pytest.mark.parametrize("line, expected, points", [
    ([2, 2, 0, 0], [4, 0, 0, 0], 4),
    ([0, 2, 0, 2], [4, 0, 0, 0], 4),
    ([2, 2, 2, 0], [4, 2, 0, 0], 4),
    ([2, 2, 2, 2], [4, 4, 0, 0], 8),
    ([4, 4, 8, 8], [8, 16, 0, 0], 24),
    ([2, 4, 8, 16], [2, 4, 8, 16], 0),
    ([4, 2, 2, 0], [4, 4, 0, 0], 4),
    ([0, 0, 0, 0], [0, 0, 0, 0], 0),
])
def test_slide_line_left(line, expected, points):
    assert slide_line_left(line) == (expected, points)


def test_merges_never_cascade():
    """A freshly merged tile does not merge again in the same move."""
    assert slide_line_left([4, 2, 2, 0]) == ([4, 4, 0, 0], 4)
    assert slide_line_left([8, 4, 4, 0]) == ([8, 8, 0, 0], 8)


def test_slide_grid_directions():
    grid = [
        [2, 0, 0, 2],
        [0, 0, 0, 0],
        [0, 0, 0, 0],
        [2, 0, 4, 0],
    ]
    assert slide_grid(grid, Direction.LEFT)[0] == [[4, 0, 0, 0], EMPTY_ROW, EMPTY_ROW, [2, 4, 0, 0]]
    assert slide_grid(grid, Direction.RIGHT)[0] == [[0, 0, 0, 4], EMPTY_ROW, EMPTY_ROW, [0, 0, 2, 4]]
    assert slide_grid(grid, Direction.UP) == ([[4, 0, 4, 2], EMPTY_ROW, EMPTY_ROW, EMPTY_ROW], 4)
    assert slide_grid(grid, Direction.DOWN) == ([EMPTY_ROW, EMPTY_ROW, EMPTY_ROW, [4, 0, 4, 2]], 4)
    # Input grid is left untouched
    assert grid[0] == [2, 0, 0, 2]


def test_slide_grid_rejects_unknown_direction():
    with pytest.raises(ValueError):
        slide_grid([[0, 0], [0, 0]], "LEFT")


def test_new_board_has_two_seed_tiles():
    board = Board(rng=random.Random(7))
    tiles = [value for row in board.get_board_array() for value in row if value]
    assert len(tiles) == 2
    assert all(value in (2, 4) for value in tiles)
    assert board.get_score() == 0
    assert board.get_number_of_empty_cells() == 14


@pytest.mark.parametrize("size, win_tile", [(1, 2048), (0, 2048), (4, 3), (4, 2), (4, 1000)])
def test_new_board_rejects_bad_settings(size, win_tile):
    with pytest.raises(ValueError):
        Board(size, win_tile)


@pytest.mark.parametrize("grid", [
    [],
    [[2, 0], [0]],
    [[3, 0], [0, 0]],
    [[1, 0], [0, 0]],
    [[-2, 0], [0, 0]],
    [[2]],
])
def test_from_grid_rejects_malformed_boards(grid):
    with pytest.raises(ValueError):
        Board.from_grid(grid)


def test_from_grid_rejects_negative_score():
    with pytest.raises(ValueError):
        Board.from_grid([[0, 0], [0, 0]], score=-1)


def test_merge_left_scenario():
    board = make_board([[2, 2, 0, 0], EMPTY_ROW, EMPTY_ROW, EMPTY_ROW])

    status = board.action(Direction.LEFT)

    assert status == ActionStatus.CONTINUE
    assert board.get_score() == 4
    grid = board.get_board_array()
    assert grid[0][0] == 4
    # Row-major, so the merged 4 comes first and the spawned tile second
    tiles = [value for row in grid for value in row if value]
    assert len(tiles) == 2
    assert tiles[1] in (2, 4)
    # The merged row cannot move left again
    assert slide_line_left([4, 0, 0, 0]) == ([4, 0, 0, 0], 0)


def test_move_returns_points_and_keeps_tile_sum():
    grid = [
        [2, 2, 4, 4],
        [8, 0, 8, 2],
        [0, 2, 2, 2],
        [16, 16, 16, 16],
    ]
    for direction in Direction:
        board = make_board(grid, score=10)
        points = board.move(direction)
        after = board.get_board_array()
        assert tile_sum(after) == tile_sum(grid)
        assert board.get_score() == 10 + points
        assert all(value == 0 or value & (value - 1) == 0 for row in after for value in row)


def test_move_does_not_spawn():
    board = make_board([[2, 2, 0, 0], EMPTY_ROW, EMPTY_ROW, EMPTY_ROW])
    assert board.move(Direction.LEFT) == 4
    assert board.get_board_array() == [[4, 0, 0, 0], EMPTY_ROW, EMPTY_ROW, EMPTY_ROW]


def test_action_spawns_exactly_one_tile():
    grid = [[2, 0, 0, 0], [4, 0, 0, 0], EMPTY_ROW, EMPTY_ROW]
    board = make_board(grid)
    assert board.action(Direction.RIGHT) == ActionStatus.CONTINUE
    after = board.get_board_array()
    assert tile_sum(after) - tile_sum(grid) in (2, 4)
    assert board.get_number_of_empty_cells() == 13
    assert board.get_score() == 0


def test_invalid_move_leaves_board_unchanged():
    grid = [[2, 4, 0, 0], [8, 0, 0, 0], EMPTY_ROW, EMPTY_ROW]
    board = make_board(grid, score=12)

    for _ in range(3):
        assert board.action(Direction.LEFT) == ActionStatus.INVALID_MOVE
        assert board.action(Direction.UP) == ActionStatus.INVALID_MOVE

    assert board.get_board_array() == grid
    assert board.get_score() == 12


def test_locked_board_is_terminated_and_loses_without_spawn():
    board = make_board(LOCKED_GRID, score=100)

    assert board.get_number_of_empty_cells() == 0
    assert board.is_game_terminated()
    for direction in Direction:
        assert board.action(direction) == ActionStatus.LOSE
    assert board.get_board_array() == LOCKED_GRID
    assert board.get_score() == 100


def test_full_board_with_merge_is_not_terminated():
    grid = [list(row) for row in LOCKED_GRID]
    grid[3][3] = 4
    board = make_board(grid)
    assert not board.is_game_terminated()


def test_board_with_empty_cell_is_not_terminated():
    grid = [list(row) for row in LOCKED_GRID]
    grid[0][0] = 0
    assert not make_board(grid).is_game_terminated()


def test_action_reports_loss_after_last_spawn():
    # Moving LEFT opens the top right corner; a 2 or a 4 there locks the board
    grid = [
        [0, 2, 4, 8],
        [4, 8, 16, 32],
        [8, 16, 32, 64],
        [16, 32, 64, 128],
    ]
    board = make_board(grid)
    status = board.action(Direction.LEFT)
    after = board.get_board_array()
    assert after[0][:3] == [2, 4, 8]
    assert after[0][3] in (2, 4)
    assert status == ActionStatus.LOSE


def test_win_tile_anywhere_wins():
    grid = [[0, 0, 0, 0], [0, 2048, 0, 0], [0, 0, 2, 0], EMPTY_ROW]
    board = make_board(grid)
    assert board.has_won()
    assert board.is_game_terminated()
    for direction in Direction:
        assert make_board(grid).action(direction) == ActionStatus.WIN


def test_merge_into_win_tile_wins():
    board = make_board([[16, 16, 0, 0], EMPTY_ROW, EMPTY_ROW, EMPTY_ROW], win_tile=32)
    assert not board.has_won()
    assert board.action(Direction.LEFT) == ActionStatus.WIN
    assert board.get_score() == 32


def test_clone_is_independent():
    board = make_board([[2, 2, 0, 0], EMPTY_ROW, EMPTY_ROW, EMPTY_ROW], score=8)
    copy = board.clone()

    copy.move(Direction.LEFT)
    copy.set_empty_cell(3, 3, 4)

    assert board.get_board_array() == [[2, 2, 0, 0], EMPTY_ROW, EMPTY_ROW, EMPTY_ROW]
    assert board.get_score() == 8
    assert copy.get_score() == 12


def test_get_board_array_returns_a_copy():
    board = make_board([[2, 0], [0, 0]])
    snapshot = board.get_board_array()
    snapshot[0][0] = 1024
    assert board.get_board_array() == [[2, 0], [0, 0]]


def test_empty_cell_ids_are_row_major():
    board = make_board([
        [2, 0, 2, 2],
        [2, 2, 2, 0],
        [2, 2, 2, 2],
        [0, 2, 2, 2],
    ])
    assert board.get_empty_cell_ids() == [1, 7, 12]
    assert board.get_number_of_empty_cells() == 3


def test_set_empty_cell():
    board = make_board([[2, 0], [0, 0]])
    board.set_empty_cell(1, 0, 4)
    assert board.get_board_array() == [[2, 0], [4, 0]]

    with pytest.raises(ValueError):
        board.set_empty_cell(0, 0, 2)
    with pytest.raises(ValueError):
        board.set_empty_cell(2, 0, 2)


def test_is_equal():
    assert Board.is_equal([[2, 0], [0, 4]], [[2, 0], [0, 4]])
    assert not Board.is_equal([[2, 0], [0, 4]], [[2, 0], [4, 0]])


def test_descriptions():
    assert str(Direction.UP) == "Up"
    assert Direction.LEFT.description == "Left"
    assert [direction.name for direction in Direction] == ["UP", "RIGHT", "DOWN", "LEFT"]
    assert ActionStatus.INVALID_MOVE.description == "Invalid move!"
    assert str(ActionStatus.WIN) == "You won, the game ended!"
