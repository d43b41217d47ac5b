from fastapi import FastAPI, HTTPException, Request
from pydantic import BaseModel, Field
from typing import List, Optional
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
import logging

import ai_solver
import game_core

logger = logging.getLogger(__name__)

# Initialize the rate limiter
limiter = Limiter(key_func=get_remote_address)
app = FastAPI(
    title="2048 Game API",
    description="A stateless API for playing the 2048 game and asking the solver for hints. "\
                "Manage your game state (board, score, win_tile) on the client side.",
    version="1.0.0"
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

MAX_HINT_DEPTH = 7

# --- Pydantic Models for API requests and responses ---

class NewGameSettings(BaseModel):
    """Settings for creating a new game."""
    size: int = Field(
        default=game_core.BOARD_SIZE,
        gt=1, # Board size must be at least 2x2
        description="Size of the N x N game board (e.g., 4 for a 4x4 board)."
    )
    win_tile: int = Field(
        default=game_core.WIN_TILE,
        gt=2,
        description="The tile value to achieve for winning the game (e.g., 2048)."
    )

class GameStateData(BaseModel):
    """Represents the complete state of a game instance."""
    board: List[List[int]] = Field(..., description="The N x N game board, represented as a list of lists.")
    score: int = Field(..., ge=0, description="Current score of the game.")
    status: game_core.ActionStatus = Field(
        ...,
        description="Status of the game after the last action (CONTINUE, INVALID_MOVE, WIN, LOSE)."
    )
    win_tile: int = Field(..., gt=0, description="The tile value required to win this game instance.")
    board_size: int = Field(..., gt=0, description="The dimension N of the N x N board.")


class MoveRequestData(BaseModel):
    """Data required to make a move."""
    board: List[List[int]] = Field(..., description="Current N x N game board state before the move.")
    score: int = Field(..., ge=0, description="Current score before the move.")
    direction: game_core.Direction = Field(
        ...,
        description="Direction of the move (0=UP, 1=RIGHT, 2=DOWN, 3=LEFT)."
    )
    win_tile: int = Field(default=game_core.WIN_TILE, gt=0, description="The win condition tile for this game instance.")

class MoveResponseData(GameStateData):
    """Response after a move, including the new game state and move effectiveness."""
    move_was_effective: bool = Field(
        ...,
        description="True if the move resulted in a change to the board state, False otherwise."
    )
    message: Optional[str] = Field(
        default=None,
        description="An optional message, e.g., if a move was invalid, game ended, or other info."
    )

class HintRequestData(BaseModel):
    """Data required to ask the solver for the best move."""
    board: List[List[int]] = Field(..., description="Current N x N game board state.")
    score: int = Field(..., ge=0, description="Current score.")
    win_tile: int = Field(default=game_core.WIN_TILE, gt=0, description="The win condition tile for this game instance.")
    depth: int = Field(
        default=3,
        ge=0,
        le=MAX_HINT_DEPTH,
        description="Number of plies to search; mover and spawner plies alternate."
    )

class HintResponseData(BaseModel):
    """The solver's recommendation."""
    direction: Optional[game_core.Direction] = Field(
        default=None,
        description="Recommended direction, or null when no move changes the board."
    )
    description: Optional[str] = Field(default=None, description="Human-readable name of the direction.")

# --- API Endpoints ---

@app.post("/game/new", response_model=GameStateData, summary="Start a New 2048 Game")
@limiter.limit("100/minute")
async def start_new_game(request: Request, settings: NewGameSettings):
    """
    Initializes a new 2048 game based on the provided settings (size and win_tile).

    - **size**: Dimension of the N x N board (e.g., 4 for 4x4). Default is 4.
    - **win_tile**: Tile value to reach to win (e.g., 2048). Default is 2048.

    Returns the initial game state: the board with two random tiles,
    score (0), status (CONTINUE), and the specified win_tile.
    """
    try:
        board = game_core.Board(settings.size, settings.win_tile)
        return GameStateData(
            board=board.get_board_array(),
            score=board.get_score(),
            status=game_core.ActionStatus.CONTINUE,
            win_tile=board.win_tile,
            board_size=board.size
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Unexpected error in /game/new")
        raise HTTPException(status_code=500, detail=f"An unexpected error occurred during game creation: {str(e)}")


@app.post("/game/move", response_model=MoveResponseData, summary="Make a Move in the Game")
@limiter.limit("100/minute")
async def make_move(request: Request, request_data: MoveRequestData):
    """
    Processes a player's move in the game.

    Requires the current `board` state, `score`, the `direction` of the move,
    and the `win_tile` for this game instance.

    The API will:
    1. Slide and merge the tiles.
    2. If the move changed the board, add a new random tile (2 or 4).
    3. Report the resulting status (CONTINUE, INVALID_MOVE, WIN, LOSE).
    """
    try:
        board = game_core.Board.from_grid(request_data.board, request_data.score, request_data.win_tile)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid board structure in request: {str(e)}")

    try:
        before = board.get_board_array()
        status = board.action(request_data.direction)
        move_was_effective = not game_core.Board.is_equal(before, board.get_board_array())

        message_for_client: Optional[str] = None
        if status != game_core.ActionStatus.CONTINUE:
            message_for_client = status.description

        return MoveResponseData(
            board=board.get_board_array(),
            score=board.get_score(),
            status=status,
            win_tile=board.win_tile,
            board_size=board.size,
            move_was_effective=move_was_effective,
            message=message_for_client
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Error processing move: {str(e)}")
    except Exception as e:
        logger.exception("Unexpected error in /game/move")
        raise HTTPException(status_code=500, detail=f"An unexpected server error occurred while processing the move: {str(e)}")


@app.post("/game/hint", response_model=HintResponseData, summary="Ask the Solver for the Best Move")
@limiter.limit("30/minute")
def get_hint(request: Request, request_data: HintRequestData):
    """
    Runs the alpha-beta solver on the given state and returns the recommended direction.
    The search is deterministic; the state sent by the client is not changed.
    """
    try:
        board = game_core.Board.from_grid(request_data.board, request_data.score, request_data.win_tile)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid board structure in request: {str(e)}")

    try:
        direction = ai_solver.find_best_move(board, request_data.depth)
    except Exception as e:
        logger.exception("Unexpected error in /game/hint")
        raise HTTPException(status_code=500, detail=f"An unexpected server error occurred while searching: {str(e)}")

    return HintResponseData(
        direction=direction,
        description=direction.description if direction is not None else None
    )
