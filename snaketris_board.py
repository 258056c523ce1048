"""Board helpers: collide, merge, sweep, top-row check"""
from typing import Iterable, Optional, Set, Tuple
from snaketris_piece import Piece

Row = Tuple[Optional[str], ...]
Grid = Tuple[Row, ...]


def empty_grid(cols: int, rows: int) -> Grid:
    return tuple((None,) * cols for _ in range(rows))


def grid_size(grid: Grid) -> Tuple[int, int]:
    return (len(grid[0]) if grid else 0), len(grid)


def collide(grid: Grid, piece: Piece, blocked: Iterable[Tuple[int, int]] = ()) -> bool:
    """True if the piece hits a side wall, the floor, a locked block or a blocked cell."""
    cols, rows = grid_size(grid)
    blocked = set(blocked)
    for bx, by in piece.cells():
        if bx < 0 or bx >= cols or by >= rows: return True
        if by < 0: continue
        if grid[by][bx]: return True
        if (bx, by) in blocked: return True
    return False


def merge(grid: Grid, piece: Piece) -> Grid:
    """Return a new grid with the piece written in; cells above the top are dropped."""
    cols, rows = grid_size(grid)
    board = [list(r) for r in grid]
    for bx, by in piece.cells():
        if 0 <= by < rows and 0 <= bx < cols:
            board[by][bx] = piece.t.value
    return tuple(tuple(r) for r in board)


def sweep(grid: Grid) -> Tuple[Grid, int]:
    """Drop full rows, pad empty rows on top. Returns (grid, rows cleared)."""
    cols, rows = grid_size(grid)
    kept = [r for r in grid if not all(r)]
    c = rows - len(kept)
    return tuple([(None,) * cols] * c + kept), c


def top_row_filled(grid: Grid) -> bool:
    return bool(grid) and any(v is not None for v in grid[0])


def clear_cell(grid: Grid, x: int, y: int) -> Grid:
    row = list(grid[y]); row[x] = None
    return grid[:y] + (tuple(row),) + grid[y + 1:]


def cell_at(grid: Grid, x: int, y: int) -> Optional[str]:
    cols, rows = grid_size(grid)
    if 0 <= x < cols and 0 <= y < rows:
        return grid[y][x]
    return None


def filled_cells(grid: Grid) -> Set[Tuple[int, int]]:
    return {(x, y) for y, row in enumerate(grid) for x, v in enumerate(row) if v}
