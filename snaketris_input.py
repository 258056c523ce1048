"""Keyboard bindings: arrows steer the snake, WASD/G/H drive the falling piece"""
from typing import Optional, Tuple
import pygame
from snaketris_clock import Command, TetrisAction
from snaketris_config import CONFIG
from snaketris_snake import Direction

SNAKE_KEYS = {
    pygame.K_UP: Direction.UP,
    pygame.K_DOWN: Direction.DOWN,
    pygame.K_LEFT: Direction.LEFT,
    pygame.K_RIGHT: Direction.RIGHT,
}

TETRIS_KEYS = {
    pygame.K_a: TetrisAction.LEFT,
    pygame.K_d: TetrisAction.RIGHT,
    pygame.K_s: TetrisAction.SOFT_DROP,
    pygame.K_w: TetrisAction.ROTATE_CW,
    pygame.K_h: TetrisAction.ROTATE_CW,
    pygame.K_g: TetrisAction.ROTATE_CCW,
}

RESTART_KEYS = (pygame.K_RETURN, pygame.K_KP_ENTER)


def command_for_key(key: int, game_over: bool = False) -> Optional[Tuple[Command, tuple]]:
    """Map a key press to ``(command, args)`` for SimulationClock.post, or None."""
    if key in SNAKE_KEYS: return Command.SNAKE, (SNAKE_KEYS[key],)
    if key in TETRIS_KEYS: return Command.TETRIS, (TETRIS_KEYS[key],)
    if key == pygame.K_SPACE: return Command.TOGGLE_PAUSE, ()
    # Restart only from the game-over screen
    if key in RESTART_KEYS and game_over: return Command.RESET, ()
    return None


def enable_key_repeat():
    pygame.key.set_repeat(CONFIG["KEY_REPEAT_DELAY_MS"], CONFIG["KEY_REPEAT_MS"])
