"""
Simulation clock: owns the shared grid and both rule engines.

One ``update()`` call per display frame; the snake and tetromino halves are
paced by their own millisecond timers, not by the call rate. Every mutation
goes through one re-entrant lock, and inputs arriving from other threads can
be queued with ``post()`` to be applied in arrival order at the start of the
next update.
"""
import logging
import queue
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Mapping, Optional

import pygame

from snaketris_board import cell_at, clear_cell
from snaketris_config import (CONFIG, APPLE_POINTS, LINE_POINTS, DESTROY_POINTS,
                              STAR_POINTS, INITIAL_SNAKE_LENGTH)
from snaketris_rng import GameRandom
from snaketris_snake import Direction, SnakeRules
from snaketris_state import GameState, Status
from snaketris_tetris import TetrisRules

logger = logging.getLogger(__name__)


class TetrisAction(Enum):
    LEFT = "left"
    RIGHT = "right"
    SOFT_DROP = "down"
    ROTATE_CW = "rotate_cw"
    ROTATE_CCW = "rotate_ccw"


class Command(Enum):
    SNAKE = "snake"
    TETRIS = "tetris"
    TOGGLE_PAUSE = "pause"
    RESET = "reset"


SHIFTS = {
    TetrisAction.LEFT: (-1, 0),
    TetrisAction.RIGHT: (1, 0),
    TetrisAction.SOFT_DROP: (0, 1),
}

# Commands whose handlers take the timestamp of the update that drains them.
TIMED_COMMANDS = frozenset({Command.TETRIS, Command.RESET})


@dataclass
class GameEvents:
    """Notification hooks. None of them feed anything back into the simulation."""
    on_state_change: Optional[Callable[[GameState], None]] = None
    on_apple_eaten: Optional[Callable[[], None]] = None
    on_star_collected: Optional[Callable[[], None]] = None
    on_lines_cleared: Optional[Callable[[int], None]] = None
    on_piece_destroyed: Optional[Callable[[], None]] = None
    on_piece_placed: Optional[Callable[[], None]] = None
    on_game_over: Optional[Callable[[int], None]] = None

    def emit(self, name: str, *args) -> None:
        cb = getattr(self, name)
        if cb is not None:
            cb(*args)


class SimulationClock:
    """State machine over RUNNING, PAUSED and GAME_OVER."""

    def __init__(self, config: Optional[Mapping] = None, rng: Optional[GameRandom] = None,
                 clock: Optional[Callable[[], int]] = None,
                 events: Optional[GameEvents] = None):
        self.config = dict(CONFIG)
        if config:
            self.config.update(config)
        self.rng = rng if rng is not None else GameRandom(self.config["SEED"])
        cols, rows = self.config["GRID_WIDTH"], self.config["GRID_HEIGHT"]
        self.snake_rules = SnakeRules(cols, rows, self.rng, self.config["STAR_SPAWN_CHANCE"])
        self.tetris_rules = TetrisRules(cols, rows, self.rng)
        self.events = events if events is not None else GameEvents()
        self._clock = clock if clock is not None else pygame.time.get_ticks
        self._lock = threading.RLock()
        self._inbox = queue.SimpleQueue()
        self._handlers = {
            Command.SNAKE: self.handle_snake_input,
            Command.TETRIS: self.handle_tetris_input,
            Command.TOGGLE_PAUSE: self.toggle_pause,
            Command.RESET: self.reset,
        }
        self._init_state(self._clock())

    def _init_state(self, now: int) -> None:
        self.grid = self.tetris_rules.empty_grid()
        self.snake = self.snake_rules.initialize()
        self.direction = Direction.RIGHT
        self.pending_direction: Optional[Direction] = None
        self.current_piece = self.tetris_rules.create_random_piece()
        self.next_piece = self.tetris_rules.create_random_piece()
        apple = self.snake_rules.spawn_apple(self.snake, self.grid, ())
        self.apples = (apple,) if apple else ()
        self.stars = ()
        self.score = 0
        self.lines_cleared = 0
        self.pieces_destroyed = 0
        self.level = 1
        self.status = Status.RUNNING
        self.star_power_active = False
        self.star_power_end_time = 0
        self.last_snake_move = now
        self.last_tetris_drop = now

    @property
    def state(self) -> GameState:
        with self._lock:
            return GameState(
                grid=self.grid,
                snake=self.snake,
                direction=self.direction,
                pending_direction=self.pending_direction,
                apples=self.apples,
                stars=self.stars,
                current_piece=self.current_piece,
                next_piece=self.next_piece,
                score=self.score,
                lines_cleared=self.lines_cleared,
                pieces_destroyed=self.pieces_destroyed,
                level=self.level,
                status=self.status,
                star_power_active=self.star_power_active,
                star_power_end_time=self.star_power_end_time,
                last_snake_move=self.last_snake_move,
                last_tetris_drop=self.last_tetris_drop,
            )

    def _now(self, now: Optional[int] = None) -> int:
        return self._clock() if now is None else now

    def _notify(self) -> GameState:
        snapshot = self.state
        self.events.emit("on_state_change", snapshot)
        return snapshot

    # ---------- Commands ----------
    def post(self, command: Command, *args) -> None:
        """Queue an input; safe to call from any thread."""
        self._inbox.put((command, args))

    def _drain_inbox(self, now: Optional[int] = None) -> None:
        while True:
            try:
                command, args = self._inbox.get_nowait()
            except queue.Empty:
                return
            if command in TIMED_COMMANDS:
                self._handlers[command](*args, now=now)
            else:
                self._handlers[command](*args)

    def handle_snake_input(self, direction: Direction) -> None:
        with self._lock:
            if self.status is not Status.RUNNING:
                return
            # Validated against the heading actually travelled, so two quick
            # turns between ticks can't reverse the snake into itself.
            if self.snake_rules.is_valid_direction_change(self.direction, direction):
                self.pending_direction = direction
            self._notify()

    def handle_tetris_input(self, action: TetrisAction, now: Optional[int] = None) -> None:
        with self._lock:
            if self.status is not Status.RUNNING or self.current_piece is None:
                return
            rules = self.tetris_rules
            if action in SHIFTS:
                candidate = rules.move(self.current_piece, *SHIFTS[action])
            else:
                candidate = rules.rotate(self.current_piece, action is TetrisAction.ROTATE_CW)
            if rules.is_valid_position(candidate, self.grid, self.snake):
                self.current_piece = candidate
                if action is TetrisAction.SOFT_DROP:
                    self.last_tetris_drop = self._now(now)
            self._notify()

    def toggle_pause(self) -> None:
        with self._lock:
            if self.status is Status.RUNNING:
                self.status = Status.PAUSED
            elif self.status is Status.PAUSED:
                self.status = Status.RUNNING
            else:
                return
            logger.info("Game %s", "paused" if self.status is Status.PAUSED else "resumed")
            self._notify()

    def reset(self, now: Optional[int] = None) -> None:
        with self._lock:
            self._init_state(self._now(now))
            logger.info("Game reset")
            self._notify()

    # ---------- Tick ----------
    def update(self, now: Optional[int] = None) -> GameState:
        """Run whatever ticks are due at ``now`` and return the new snapshot."""
        with self._lock:
            now = self._now(now)
            self._drain_inbox(now)
            if self.status is not Status.RUNNING:
                return self.state

            if self.star_power_active and now >= self.star_power_end_time:
                self.star_power_active = False
                logger.debug("Star power expired at %d", now)

            if now - self.last_snake_move >= self.config["SNAKE_SPEED_MS"]:
                self._update_snake(now)
                self.last_snake_move = now

            if (self.status is Status.RUNNING
                    and now - self.last_tetris_drop >= self.config["TETRIS_SPEED_MS"]):
                self._update_tetris()
                self.last_tetris_drop = now

            return self._notify()

    def _update_snake(self, now: int) -> None:
        rules = self.snake_rules
        if self.pending_direction is not None:
            self.direction = self.pending_direction
            self.pending_direction = None

        moved = rules.move(self.snake, self.direction)
        head = moved[0]

        if rules.check_wall_collision(head):
            self._game_over("snake hit the wall")
            return
        if rules.check_self_collision(moved):
            self._game_over("snake hit itself")
            return

        if cell_at(self.grid, head.x, head.y):
            if not self.star_power_active:
                self._game_over("snake hit a block")
                return
            self.grid = clear_cell(self.grid, head.x, head.y)
            self.pieces_destroyed += 1
            self.score += DESTROY_POINTS
            self.events.emit("on_piece_destroyed")

        apple = rules.check_collectible_collision(head, self.apples)
        if apple is not None:
            self.snake = rules.grow(moved)
            self.apples = tuple(a for a in self.apples if a.id != apple.id)
            self.score += APPLE_POINTS
            replacement = rules.spawn_apple(self.snake, self.grid, self.apples, self.stars)
            if replacement is not None:
                self.apples += (replacement,)
            star = rules.spawn_star(self.snake, self.grid, self.apples, self.stars, now)
            if star is not None:
                self.stars += (star,)
            self.events.emit("on_apple_eaten")
        else:
            self.snake = moved

        star = rules.check_collectible_collision(head, self.stars)
        if star is not None:
            self.stars = tuple(s for s in self.stars if s.id != star.id)
            self.star_power_active = True
            self.star_power_end_time = now + self.config["STAR_POWER_MS"]
            self.score += STAR_POINTS
            logger.debug("Star power until %d", self.star_power_end_time)
            self.events.emit("on_star_collected")

    def _update_tetris(self) -> None:
        rules = self.tetris_rules
        if self.current_piece is None:
            return
        dropped = rules.move(self.current_piece, 0, 1)
        if rules.is_valid_position(dropped, self.grid, self.snake):
            self.current_piece = dropped
            return

        self.grid = rules.place(self.current_piece, self.grid)
        self.events.emit("on_piece_placed")

        self.grid, cleared = rules.clear_lines(self.grid)
        if cleared:
            self.lines_cleared += cleared
            self.score += cleared * LINE_POINTS
            logger.debug("Cleared %d line(s)", cleared)
            self.events.emit("on_lines_cleared", cleared)

        if rules.is_game_over(self.grid):
            self._game_over("blocks reached the top row")
            return

        self.current_piece = self.next_piece
        self.next_piece = rules.create_random_piece()
        if not rules.is_valid_position(self.current_piece, self.grid, self.snake,
                                       check_snake_collision=False):
            self._game_over("no room to spawn the next piece")

    def _game_over(self, reason: str) -> None:
        self.status = Status.GAME_OVER
        # Recomputed from authoritative counts; the destroyed-block bonus is
        # not part of the final figure.
        final = SnakeRules.score(len(self.snake) - INITIAL_SNAKE_LENGTH,
                                 self.lines_cleared, 0)
        self.score = final
        logger.info("Game over: %s (final score %d)", reason, final)
        self.events.emit("on_game_over", final)
