"""Snake rules: movement, collisions, growth, apples and stars"""
import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple, TypeVar

from snaketris_board import Grid, filled_cells
from snaketris_config import (CONFIG, APPLE_POINTS, LINE_POINTS, DESTROY_POINTS,
                              INITIAL_SNAKE_LENGTH)
from snaketris_rng import GameRandom

logger = logging.getLogger(__name__)


class Direction(Enum):
    UP = (0, -1)
    DOWN = (0, 1)
    LEFT = (-1, 0)
    RIGHT = (1, 0)


OPPOSITES = {
    Direction.UP: Direction.DOWN,
    Direction.DOWN: Direction.UP,
    Direction.LEFT: Direction.RIGHT,
    Direction.RIGHT: Direction.LEFT,
}


@dataclass(frozen=True)
class Segment:
    x: int
    y: int
    id: int


@dataclass(frozen=True)
class Apple:
    x: int
    y: int
    id: int


@dataclass(frozen=True)
class Star:
    x: int
    y: int
    id: int
    spawn_time: int = 0


Snake = Tuple[Segment, ...]
C = TypeVar("C", Apple, Star)


class SnakeRules:
    """
    Pure snake operations over explicit state.

    The only hidden state is the id counters for segments, apples and stars;
    ids exist so renderers get stable keys and carry no gameplay meaning.
    """

    def __init__(self, cols: int, rows: int, rng: GameRandom,
                 star_chance: Optional[float] = None):
        self.cols = cols
        self.rows = rows
        self.rng = rng
        self.star_chance = CONFIG["STAR_SPAWN_CHANCE"] if star_chance is None else star_chance
        self.next_segment_id = 0
        self.next_apple_id = 0
        self.next_star_id = 0

    def _next_id(self) -> int:
        i = self.next_segment_id
        self.next_segment_id += 1
        return i

    def _segment(self, x: int, y: int) -> Segment:
        return Segment(x, y, self._next_id())

    def initialize(self) -> Snake:
        """Three segments centred on the grid, head on the right (heading RIGHT)."""
        cx, cy = self.cols // 2, self.rows // 2
        return tuple(self._segment(cx - i, cy) for i in range(INITIAL_SNAKE_LENGTH))

    def move(self, snake: Snake, direction: Direction) -> Snake:
        head = snake[0]
        dx, dy = direction.value
        return (self._segment(head.x + dx, head.y + dy),) + snake[:-1]

    def check_wall_collision(self, head: Segment) -> bool:
        return head.x < 0 or head.x >= self.cols or head.y < 0 or head.y >= self.rows

    @staticmethod
    def check_self_collision(snake: Snake) -> bool:
        head = snake[0]
        return any(s.x == head.x and s.y == head.y for s in snake[1:])

    @staticmethod
    def check_collectible_collision(head: Segment, collectibles: Iterable[C]) -> Optional[C]:
        for c in collectibles:
            if c.x == head.x and c.y == head.y:
                return c
        return None

    def grow(self, snake: Snake) -> Snake:
        """Duplicate the tail; the next move keeps it, so length goes up by one."""
        tail = snake[-1]
        return snake + (replace(tail, id=self._next_id()),)

    def free_cells(self, snake: Snake, grid: Grid,
                   *occupied: Sequence) -> List[Tuple[int, int]]:
        taken = filled_cells(grid)
        taken.update((s.x, s.y) for s in snake)
        for group in occupied:
            taken.update((c.x, c.y) for c in group)
        return [(x, y) for x in range(self.cols) for y in range(self.rows)
                if (x, y) not in taken]

    def spawn_position(self, snake: Snake, grid: Grid,
                       *occupied: Sequence) -> Optional[Tuple[int, int]]:
        """Uniform pick among unoccupied cells, or None if the grid is saturated."""
        free = self.free_cells(snake, grid, *occupied)
        if not free:
            logger.debug("No free cell left to spawn a collectible")
            return None
        return self.rng.choice(free)

    def spawn_apple(self, snake: Snake, grid: Grid, apples: Sequence[Apple],
                    stars: Sequence[Star] = ()) -> Optional[Apple]:
        pos = self.spawn_position(snake, grid, apples, stars)
        if pos is None:
            return None
        apple = Apple(pos[0], pos[1], self.next_apple_id)
        self.next_apple_id += 1
        return apple

    def spawn_star(self, snake: Snake, grid: Grid, apples: Sequence[Apple],
                   stars: Sequence[Star], now: int, force: bool = False) -> Optional[Star]:
        """Spawn a star with probability ``star_chance`` unless ``force`` is set."""
        if not force and self.rng.random() >= self.star_chance:
            return None
        pos = self.spawn_position(snake, grid, apples, stars)
        if pos is None:
            return None
        star = Star(pos[0], pos[1], self.next_star_id, now)
        self.next_star_id += 1
        logger.debug("Star spawned at %s", pos)
        return star

    @staticmethod
    def is_opposite_direction(a: Direction, b: Direction) -> bool:
        return OPPOSITES[a] is b

    @staticmethod
    def is_valid_direction_change(current: Direction, new: Direction) -> bool:
        return not SnakeRules.is_opposite_direction(current, new)

    @staticmethod
    def score(apples_eaten: int, lines_cleared: int, pieces_destroyed: int) -> int:
        return (apples_eaten * APPLE_POINTS + lines_cleared * LINE_POINTS
                + pieces_destroyed * DESTROY_POINTS)
