"""Tetromino rules: spawn, move, rotate, lock and line clears"""
from typing import Iterable, Tuple

from snaketris_board import Grid, collide, empty_grid, merge, sweep, top_row_filled
from snaketris_piece import Piece, Tetromino
from snaketris_rng import GameRandom

PIECES = list(Tetromino)


class TetrisRules:
    """
    Falling-block half of the game.

    Rotation walks the per-type rotation table circularly with no wall kicks;
    callers reject a rotation that lands somewhere invalid. ``is_valid_position``
    is the single test for both movement and lock detection: a piece locks once
    moving it down one row is invalid.
    """

    def __init__(self, cols: int, rows: int, rng: GameRandom):
        self.cols = cols
        self.rows = rows
        self.rng = rng
        self.next_piece_id = 0

    def empty_grid(self) -> Grid:
        return empty_grid(self.cols, self.rows)

    def create_random_piece(self) -> Piece:
        p = Piece.spawn(self.rng.choice(PIECES), self.cols, self.next_piece_id)
        self.next_piece_id += 1
        return p

    @staticmethod
    def move(piece: Piece, dx: int, dy: int) -> Piece:
        return piece.moved(dx, dy)

    @staticmethod
    def rotate(piece: Piece, clockwise: bool = True) -> Piece:
        return piece.rotated(clockwise)

    @staticmethod
    def is_valid_position(piece: Piece, grid: Grid, snake: Iterable = (),
                          check_snake_collision: bool = True) -> bool:
        blocked = [(s.x, s.y) for s in snake] if check_snake_collision else ()
        return not collide(grid, piece, blocked)

    @staticmethod
    def place(piece: Piece, grid: Grid) -> Grid:
        return merge(grid, piece)

    @staticmethod
    def clear_lines(grid: Grid) -> Tuple[Grid, int]:
        return sweep(grid)

    @staticmethod
    def is_game_over(grid: Grid) -> bool:
        # Checked after lock + clear, never before.
        return top_row_filled(grid)
