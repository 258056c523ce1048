"""
GameState entity - an immutable snapshot of the shared grid at one instant.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from snaketris_board import Grid
from snaketris_config import INITIAL_SNAKE_LENGTH
from snaketris_piece import Piece
from snaketris_snake import Apple, Direction, Snake, Star


class Status(Enum):
    RUNNING = "running"
    PAUSED = "paused"
    GAME_OVER = "game_over"


@dataclass(frozen=True)
class GameState:
    """
    A snapshot of the game handed to renderers and other observers.

    Attributes:
        grid: rows of locked block tags (None = empty), row 0 at the top
        snake: segments, head first
        direction: heading used by the last snake tick
        pending_direction: accepted input waiting for the next snake tick
        apples, stars: collectibles on the board
        current_piece, next_piece: falling piece and preview
        score, lines_cleared, pieces_destroyed: progress counters
        level: fixed at 1, no progression
        status: RUNNING, PAUSED or GAME_OVER
        star_power_active, star_power_end_time: star power window (ms)
        last_snake_move, last_tetris_drop: tick timestamps (ms)
    """
    grid: Grid
    snake: Snake
    direction: Direction
    pending_direction: Optional[Direction]
    apples: Tuple[Apple, ...]
    stars: Tuple[Star, ...]
    current_piece: Optional[Piece]
    next_piece: Optional[Piece]
    score: int
    lines_cleared: int
    pieces_destroyed: int
    level: int
    status: Status
    star_power_active: bool
    star_power_end_time: int
    last_snake_move: int
    last_tetris_drop: int

    @property
    def game_over(self) -> bool:
        return self.status is Status.GAME_OVER

    @property
    def paused(self) -> bool:
        return self.status is Status.PAUSED

    @property
    def apples_eaten(self) -> int:
        return len(self.snake) - INITIAL_SNAKE_LENGTH

    def print_board(self) -> str:
        """
        Returns a string representation of the board with:
        . = empty space
        # = locked block
        @ = falling piece
        A = apple, * = star
        H = snake head, s = snake body
        """
        board = [['#' if v else '.' for v in row] for row in self.grid]
        rows, cols = len(board), len(board[0]) if board else 0

        def put(x, y, ch):
            if 0 <= x < cols and 0 <= y < rows:
                board[y][x] = ch

        if self.current_piece is not None:
            for x, y in self.current_piece.cells():
                put(x, y, '@')
        for a in self.apples:
            put(a.x, a.y, 'A')
        for s in self.stars:
            put(s.x, s.y, '*')
        for i, seg in enumerate(self.snake):
            put(seg.x, seg.y, 'H' if i == 0 else 's')

        return "\n".join(f"{y:2d} {''.join(row)}" for y, row in enumerate(board))

    def __repr__(self):
        return (
            f"<GameState status={self.status.value}, score={self.score}, "
            f"lines={self.lines_cleared}, snake={len(self.snake)}, apples={len(self.apples)}>"
        )
