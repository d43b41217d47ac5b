# cli_driver.py
# This file is intended to be run to play the 2048 game on the CLI, with hints
# from the solver, or to measure how often the solver wins on its own.

from typing import List, Optional
import argparse
import logging
import random

from ai_solver import DEFAULT_HINT_DEPTH, find_best_move
from game_core import BOARD_SIZE, WIN_TILE, ActionStatus, Board, Direction

logger = logging.getLogger(__name__)

DIRECTION_KEYS = {'W': Direction.UP, 'D': Direction.RIGHT, 'S': Direction.DOWN, 'A': Direction.LEFT}
PLAYING_STATES = (ActionStatus.CONTINUE, ActionStatus.INVALID_MOVE)
MOVE_PROMPT = "Enter move (W/A/S/D for Up/Left/Down/Right, H to play the hint, Q to quit): "


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Play 2048 in the terminal with an alpha-beta solver.")
    parser.add_argument("--depth", type=int, default=DEFAULT_HINT_DEPTH,
                        help="Search depth (plies) used for hints and automatic play.")
    parser.add_argument("--size", type=int, default=BOARD_SIZE, help="Dimension N of the N x N board.")
    parser.add_argument("--win-tile", type=int, default=WIN_TILE, help="Tile value that wins the game.")
    parser.add_argument("--games", type=int, default=10, help="Number of games for the accuracy estimate.")
    parser.add_argument("--seed", type=int, default=None, help="Seed for tile spawning.")
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Logging verbosity.")
    return parser.parse_args(argv)


def _make_rng(seed: Optional[int], offset: int = 0) -> random.Random:
    return random.Random(seed + offset) if seed is not None else random.Random()


def print_menu():
    print()
    print("Choices:")
    print("1. Play the 2048 Game")
    print("2. Estimate the Accuracy of AI Solver")
    print("3. Help")
    print("4. Quit")
    print()


def print_help():
    print("Slide the tiles with W/A/S/D. Equal tiles that collide merge into their sum.")
    print("Reach the win tile to win; the game is lost when no move is left.")
    print("H plays the move suggested by the solver, Q leaves the current game.")


def display_board_state(board: List[List[int]], score: int, hint: Optional[Direction]):
    """Prints the board, score, and the solver's hint to the console."""
    print("-" * (len(board) * 6))
    print(f"Score:\t{score}")
    print(f"Hint:\t{hint if hint is not None else '-'}")
    print()
    for row in board:
        print("\t".join(map(str, row)))
    print("-" * (len(board) * 6)) # Adjust width based on board size


def play_game(args: argparse.Namespace) -> ActionStatus:
    """
    Interactive game loop. Returns the last status seen; CONTINUE when the
    player quits.
    """
    board = Board(args.size, args.win_tile, _make_rng(args.seed))
    hint = find_best_move(board, args.depth)
    display_board_state(board.get_board_array(), board.get_score(), hint)

    result = ActionStatus.CONTINUE
    while result in PLAYING_STATES:
        move_input = input(MOVE_PROMPT).strip().upper()

        if move_input == 'Q':
            print("Game ended, user quit.")
            break

        if move_input == 'H':
            chosen_direction = hint
        else:
            chosen_direction = DIRECTION_KEYS.get(move_input)
            if chosen_direction is None:
                print("Invalid input. Use W, A, S, D, H or Q.")
                continue

        if chosen_direction is None:
            # Only happens when the solver found no legal move
            result = ActionStatus.LOSE
        else:
            result = board.action(chosen_direction)

        hint = find_best_move(board, args.depth) if result in PLAYING_STATES else None
        display_board_state(board.get_board_array(), board.get_score(), hint)

        if result != ActionStatus.CONTINUE:
            print(result.description)

    return result


def play_automatically(board: Board, depth: int) -> ActionStatus:
    """Lets the solver play the board until the game ends."""
    result = ActionStatus.CONTINUE
    while result in PLAYING_STATES:
        hint = find_best_move(board, depth)
        if hint is None:
            return ActionStatus.LOSE
        result = board.action(hint)
    return result


def calculate_accuracy(args: argparse.Namespace) -> int:
    """Runs several games played by the solver alone and returns the number of wins."""
    wins = 0
    print(f"Running {args.games} games to estimate the accuracy:")

    for i in range(args.games):
        board = Board(args.size, args.win_tile, _make_rng(args.seed, i))
        result = play_automatically(board, args.depth)
        logger.info("Game %d finished with score %d and max tile %d",
                    i + 1, board.get_score(), board.get_max_tile())

        if result == ActionStatus.WIN:
            wins += 1
            print(f"Game {i + 1} - won")
        else:
            print(f"Game {i + 1} - lost")

    print(f"{wins} wins out of {args.games} games.")
    return wins


def main(argv: Optional[List[str]] = None):
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    print("The 2048 Game with an alpha-beta solver")
    print("=======================================")

    while True:
        print_menu()
        choice = input("Enter a number from 1-4: ").strip()
        if choice == '1':
            play_game(args)
        elif choice == '2':
            calculate_accuracy(args)
        elif choice == '3':
            print_help()
        elif choice == '4':
            return
        else:
            print("Wrong choice")


if __name__ == "__main__":
    main()
