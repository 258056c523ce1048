import pytest

from snaketris_board import Grid
from snaketris_clock import SimulationClock
from snaketris_snake import Segment


class FakeClock:
    """Millisecond clock the tests move by hand."""

    def __init__(self, now: int = 1000):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> int:
        self.now += ms
        return self.now


def with_blocks(grid: Grid, cells, tag: str = "I") -> Grid:
    board = [list(r) for r in grid]
    for x, y in cells:
        board[y][x] = tag
    return tuple(tuple(r) for r in board)


def straight_snake(head_x: int, y: int, length: int = 3, first_id: int = 1000):
    """Horizontal snake heading right with its head at (head_x, y)."""
    return tuple(Segment(head_x - i, y, first_id + i) for i in range(length))


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def make_game(fake_clock):
    def _make(events=None, **overrides):
        config = {"SEED": 1234}
        config.update(overrides)
        return SimulationClock(config=config, clock=fake_clock, events=events)
    return _make
