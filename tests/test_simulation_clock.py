"""
Tests for snaketris_clock - tick timing, arbitration between the two games,
scoring and the RUNNING / PAUSED / GAME_OVER state machine.
"""

import dataclasses

import pytest

from conftest import straight_snake, with_blocks
from snaketris_clock import Command, GameEvents, TetrisAction
from snaketris_piece import Piece, Tetromino
from snaketris_snake import Apple, Direction, Segment, Star
from snaketris_state import Status

FROZEN = 10 ** 9  # interval long enough that a timer never fires in a test


def recorder():
    """GameEvents wired to append (name, args) to a list."""
    calls = []

    def hook(name):
        return lambda *args: calls.append((name, args))

    events = GameEvents(
        on_apple_eaten=hook("apple"),
        on_star_collected=hook("star"),
        on_lines_cleared=hook("lines"),
        on_piece_destroyed=hook("destroyed"),
        on_piece_placed=hook("placed"),
        on_game_over=hook("game_over"),
    )
    return events, calls


class TestInitialState:

    def test_fresh_game(self, make_game):
        state = make_game().state
        assert state.status is Status.RUNNING
        assert not state.game_over and not state.paused
        assert len(state.snake) == 3
        assert state.direction is Direction.RIGHT
        assert len(state.apples) == 1
        assert state.stars == ()
        assert state.score == 0 and state.lines_cleared == 0
        assert state.level == 1
        assert state.current_piece is not None and state.next_piece is not None
        assert all(v is None for row in state.grid for v in row)

    def test_timestamps_start_at_clock(self, make_game, fake_clock):
        state = make_game().state
        assert state.last_snake_move == fake_clock.now
        assert state.last_tetris_drop == fake_clock.now


class TestSnakeTick:

    def test_snake_waits_for_interval(self, make_game, fake_clock):
        game = make_game()
        game.apples = ()
        head = game.snake[0]
        fake_clock.advance(199)
        assert game.update().snake[0] == head
        fake_clock.advance(1)
        new_head = game.update().snake[0]
        assert (new_head.x, new_head.y) == (head.x + 1, head.y)

    def test_explicit_now_overrides_clock(self, make_game, fake_clock):
        game = make_game()
        game.apples = ()
        x = game.snake[0].x
        state = game.update(now=fake_clock.now + 200)
        assert state.snake[0].x == x + 1

    def test_reversal_is_ignored(self, make_game):
        game = make_game()
        game.handle_snake_input(Direction.LEFT)
        assert game.state.pending_direction is None

    def test_turn_applies_on_next_tick(self, make_game, fake_clock):
        game = make_game()
        game.apples = ()
        head = game.snake[0]
        game.handle_snake_input(Direction.UP)
        assert game.state.pending_direction is Direction.UP
        fake_clock.advance(200)
        state = game.update()
        assert state.direction is Direction.UP
        assert state.pending_direction is None
        assert (state.snake[0].x, state.snake[0].y) == (head.x, head.y - 1)

    def test_latest_accepted_input_wins(self, make_game, fake_clock):
        game = make_game()
        game.apples = ()
        head = game.snake[0]
        game.handle_snake_input(Direction.UP)
        game.handle_snake_input(Direction.DOWN)
        game.handle_snake_input(Direction.LEFT)  # reversal of RIGHT, dropped
        fake_clock.advance(200)
        state = game.update()
        assert state.direction is Direction.DOWN
        assert (state.snake[0].x, state.snake[0].y) == (head.x, head.y + 1)

    def test_wall_ends_game(self, make_game, fake_clock):
        events, calls = recorder()
        game = make_game(events=events)
        game.apples = ()
        game.snake = straight_snake(19, 5)
        fake_clock.advance(200)
        state = game.update()
        assert state.status is Status.GAME_OVER
        assert ("game_over", (0,)) in calls

    def test_self_collision_ends_game(self, make_game, fake_clock):
        game = make_game()
        game.apples = ()
        # Head at (5,5) heading RIGHT into its own body at (6,5)
        cells = [(5, 5), (5, 6), (6, 6), (6, 5), (6, 4)]
        game.snake = tuple(Segment(x, y, 100 + i) for i, (x, y) in enumerate(cells))
        fake_clock.advance(200)
        assert game.update().game_over

    def test_block_ends_game_without_star_power(self, make_game, fake_clock):
        game = make_game()
        game.apples = ()
        game.snake = straight_snake(5, 10)
        game.grid = with_blocks(game.grid, [(6, 10)])
        fake_clock.advance(200)
        assert game.update().status is Status.GAME_OVER

    def test_star_power_destroys_block(self, make_game, fake_clock):
        events, calls = recorder()
        game = make_game(events=events)
        game.apples = ()
        game.snake = straight_snake(5, 10)
        game.grid = with_blocks(game.grid, [(6, 10)])
        game.star_power_active = True
        game.star_power_end_time = fake_clock.now + 5000
        fake_clock.advance(200)
        state = game.update()
        assert state.status is Status.RUNNING
        assert state.grid[10][6] is None
        assert state.score == 50
        assert state.pieces_destroyed == 1
        assert ("destroyed", ()) in calls

    def test_final_score_drops_destroyed_block_bonus(self, make_game, fake_clock):
        game = make_game()
        game.apples = ()
        game.snake = straight_snake(18, 10)
        game.grid = with_blocks(game.grid, [(19, 10)])
        game.star_power_active = True
        game.star_power_end_time = fake_clock.now + 5000
        fake_clock.advance(200)
        assert game.update().score == 50
        fake_clock.advance(200)
        state = game.update()
        assert state.game_over
        assert state.pieces_destroyed == 1
        assert state.score == 0


class TestCollectibles:

    def test_apple_grows_and_scores(self, make_game, fake_clock):
        events, calls = recorder()
        game = make_game(events=events, STAR_SPAWN_CHANCE=0.0)
        head = game.snake[0]
        game.apples = (Apple(head.x + 1, head.y, 500),)
        fake_clock.advance(200)
        state = game.update()
        assert state.score == 100
        assert len(state.snake) == 4
        assert len(state.apples) == 1
        assert state.apples[0].id != 500
        assert ("apple", ()) in calls

    def test_apple_may_bring_a_star(self, make_game, fake_clock):
        game = make_game(STAR_SPAWN_CHANCE=1.0)
        head = game.snake[0]
        game.apples = (Apple(head.x + 1, head.y, 500),)
        fake_clock.advance(200)
        state = game.update()
        assert len(state.stars) == 1
        assert state.stars[0].spawn_time == fake_clock.now

    def test_replacement_apple_never_covers_a_star(self, make_game, fake_clock):
        """The only free cell holds a star, so no replacement apple appears."""
        game = make_game(GRID_WIDTH=5, GRID_HEIGHT=1, STAR_SPAWN_CHANCE=0.0,
                         TETRIS_SPEED_MS=FROZEN)
        game.snake = straight_snake(2, 0)
        game.apples = (Apple(3, 0, 500),)
        game.stars = (Star(4, 0, 1),)
        fake_clock.advance(200)
        state = game.update()
        assert state.score == 100
        assert state.stars == (Star(4, 0, 1),)
        assert all((a.x, a.y) != (4, 0) for a in state.apples)
        assert state.apples == ()

    def test_hundred_apples(self, make_game, fake_clock):
        """Each apple is worth exactly 100 and a replacement is always spawned."""
        game = make_game(GRID_WIDTH=220, GRID_HEIGHT=5, STAR_SPAWN_CHANCE=0.0,
                         TETRIS_SPEED_MS=FROZEN)
        for i in range(1, 101):
            head = game.snake[0]
            game.apples = (Apple(head.x + 1, head.y, 10_000 + i),)
            before = game.score
            fake_clock.advance(200)
            state = game.update()
            assert state.score == before + 100
            assert len(state.apples) == 1
            assert len(state.snake) == 3 + i
        assert state.status is Status.RUNNING
        assert state.score == 10_000

    def test_star_activates_and_expires(self, make_game, fake_clock):
        events, calls = recorder()
        game = make_game(events=events)
        game.apples = ()
        head = game.snake[0]
        game.stars = (Star(head.x + 1, head.y, 1, 0),)
        now = fake_clock.advance(200)
        state = game.update()
        assert state.star_power_active is True
        assert state.star_power_end_time == now + 8000
        assert state.score == 500
        assert state.stars == ()
        assert ("star", ()) in calls

        fake_clock.advance(8001)
        assert game.update().star_power_active is False


class TestTetrisTick:

    def test_piece_falls_each_interval(self, make_game, fake_clock):
        game = make_game(SNAKE_SPEED_MS=FROZEN)
        y = game.current_piece.y
        fake_clock.advance(799)
        assert game.update().current_piece.y == y
        fake_clock.advance(1)
        assert game.update().current_piece.y == y + 1

    def test_lock_and_line_clear(self, make_game, fake_clock):
        events, calls = recorder()
        game = make_game(events=events, GRID_WIDTH=4, GRID_HEIGHT=8, SNAKE_SPEED_MS=FROZEN)
        nxt = game.next_piece
        game.current_piece = Piece(Tetromino.I, 0, 0, 6)  # fills row 7
        fake_clock.advance(800)
        state = game.update()
        assert state.lines_cleared == 1
        assert state.score == 1000
        assert all(v is None for row in state.grid for v in row)
        assert state.current_piece == nxt
        assert state.next_piece is not None and state.next_piece.id > nxt.id
        assert ("placed", ()) in calls
        assert ("lines", (1,)) in calls
        assert state.status is Status.RUNNING

    def test_lock_into_top_row_ends_game(self, make_game, fake_clock):
        events, calls = recorder()
        game = make_game(events=events, GRID_WIDTH=4, GRID_HEIGHT=8, SNAKE_SPEED_MS=FROZEN)
        game.grid = with_blocks(game.grid, [(0, 2), (1, 2)])
        game.current_piece = Piece(Tetromino.O, 0, 0, 0)
        fake_clock.advance(800)
        state = game.update()
        assert state.game_over
        assert ("game_over", (0,)) in calls
        assert state.grid[0][0] == "O"

    def test_blocked_spawn_ends_game(self, make_game, fake_clock):
        """A next piece that overlaps locked blocks when promoted ends the game once."""
        events, calls = recorder()
        game = make_game(events=events, GRID_WIDTH=4, GRID_HEIGHT=8, SNAKE_SPEED_MS=FROZEN)
        game.grid = with_blocks(game.grid, [(1, 1)])
        game.current_piece = Piece(Tetromino.O, 0, 2, 6)  # already on the floor
        game.next_piece = Piece(Tetromino.O, 0, 1, 0)
        fake_clock.advance(800)
        state = game.update()
        assert state.status is Status.GAME_OVER
        assert state.current_piece == Piece(Tetromino.O, 0, 1, 0)
        assert [c for c in calls if c[0] == "game_over"] == [("game_over", (0,))]

        fake_clock.advance(800)
        game.update()
        assert [c for c in calls if c[0] == "game_over"] == [("game_over", (0,))]

    def test_spawn_over_snake_keeps_running(self, make_game, fake_clock):
        """The snake does not count when checking room for the promoted piece."""
        game = make_game(GRID_WIDTH=4, GRID_HEIGHT=8, SNAKE_SPEED_MS=FROZEN)
        game.apples = ()
        game.snake = straight_snake(2, 1)
        game.current_piece = Piece(Tetromino.O, 0, 2, 6)
        game.next_piece = Piece(Tetromino.O, 0, 1, 0)
        fake_clock.advance(800)
        state = game.update()
        assert state.status is Status.RUNNING
        assert state.current_piece == Piece(Tetromino.O, 0, 1, 0)

    def test_falling_piece_rests_on_snake(self, make_game, fake_clock):
        game = make_game(SNAKE_SPEED_MS=FROZEN)
        game.snake = straight_snake(6, 10)
        game.current_piece = Piece(Tetromino.O, 0, 5, 8)  # rows 8-9, snake below
        fake_clock.advance(800)
        state = game.update()
        assert state.grid[9][5] == "O" and state.grid[8][6] == "O"


class TestManualInput:

    def test_move_left_and_right(self, make_game):
        game = make_game()
        x = game.current_piece.x
        game.handle_tetris_input(TetrisAction.LEFT)
        assert game.current_piece.x == x - 1
        game.handle_tetris_input(TetrisAction.RIGHT)
        game.handle_tetris_input(TetrisAction.RIGHT)
        assert game.current_piece.x == x + 1

    def test_move_into_wall_rejected(self, make_game):
        game = make_game()
        game.current_piece = Piece(Tetromino.O, 0, 0, 0)
        game.handle_tetris_input(TetrisAction.LEFT)
        assert game.current_piece.x == 0

    def test_move_into_snake_rejected(self, make_game):
        game = make_game()
        game.snake = straight_snake(10, 10)
        game.current_piece = Piece(Tetromino.O, 0, 5, 10)
        game.handle_tetris_input(TetrisAction.RIGHT)
        assert game.current_piece.x == 6
        game.handle_tetris_input(TetrisAction.RIGHT)
        assert game.current_piece.x == 6

    def test_rotation(self, make_game):
        game = make_game()
        game.current_piece = Piece(Tetromino.T, 0, 5, 5)
        game.handle_tetris_input(TetrisAction.ROTATE_CW)
        assert game.current_piece.rotation == 1
        game.handle_tetris_input(TetrisAction.ROTATE_CCW)
        game.handle_tetris_input(TetrisAction.ROTATE_CCW)
        assert game.current_piece.rotation == 3

    def test_rotation_into_wall_rejected(self, make_game):
        game = make_game()
        # Vertical I hugging the right wall; going horizontal would poke out
        game.current_piece = Piece(Tetromino.I, 1, 17, 5)
        game.handle_tetris_input(TetrisAction.ROTATE_CW)
        assert game.current_piece.rotation == 1

    def test_soft_drop_defers_gravity(self, make_game, fake_clock):
        game = make_game(SNAKE_SPEED_MS=FROZEN)
        y = game.current_piece.y
        now = fake_clock.advance(500)
        game.handle_tetris_input(TetrisAction.SOFT_DROP)
        assert game.current_piece.y == y + 1
        assert game.last_tetris_drop == now
        fake_clock.advance(400)
        assert game.update().current_piece.y == y + 1
        fake_clock.advance(400)
        assert game.update().current_piece.y == y + 2


class TestStateMachine:

    def test_pause_freezes_everything(self, make_game, fake_clock):
        game = make_game()
        game.toggle_pause()
        before = game.state
        assert before.paused
        game.handle_snake_input(Direction.UP)
        game.handle_tetris_input(TetrisAction.LEFT)
        fake_clock.advance(5000)
        after = game.update()
        assert after.snake == before.snake
        assert after.current_piece == before.current_piece
        assert after.pending_direction is None
        game.toggle_pause()
        assert game.state.status is Status.RUNNING

    def test_game_over_is_terminal_until_reset(self, make_game, fake_clock):
        game = make_game()
        game.apples = ()
        game.snake = straight_snake(19, 5)
        fake_clock.advance(200)
        assert game.update().game_over
        game.toggle_pause()
        assert game.state.status is Status.GAME_OVER
        snapshot = game.state
        fake_clock.advance(1000)
        assert game.update() == snapshot

    def test_reset_after_game_over(self, make_game, fake_clock):
        game = make_game()
        game.apples = ()
        game.snake = straight_snake(19, 5)
        game.grid = with_blocks(game.grid, [(0, 23), (1, 23)])
        game.score = 900
        fake_clock.advance(200)
        game.update()
        game.reset()
        state = game.state
        assert state.game_over is False
        assert state.status is Status.RUNNING
        assert len(state.snake) == 3
        assert all(v is None for row in state.grid for v in row)
        assert state.score == 0
        assert state.last_snake_move == fake_clock.now


class TestCommandQueue:

    def test_posted_inputs_apply_on_update(self, make_game, fake_clock):
        game = make_game()
        game.apples = ()
        game.post(Command.SNAKE, Direction.UP)
        assert game.pending_direction is None
        fake_clock.advance(200)
        assert game.update().direction is Direction.UP

    def test_posted_commands_keep_order(self, make_game, fake_clock):
        game = make_game()
        x = game.current_piece.x
        game.post(Command.TETRIS, TetrisAction.LEFT)
        game.post(Command.TOGGLE_PAUSE)
        game.post(Command.TETRIS, TetrisAction.LEFT)  # ignored, paused by now
        state = game.update()
        assert state.paused
        assert state.current_piece.x == x - 1

    def test_posted_reset(self, make_game):
        game = make_game()
        game.score = 1234
        game.post(Command.RESET)
        assert game.update().score == 0

    def test_posted_soft_drop_uses_update_time(self, make_game, fake_clock):
        """A queued soft drop is stamped with the ``now`` passed to update."""
        game = make_game(SNAKE_SPEED_MS=FROZEN)
        y = game.current_piece.y
        later = fake_clock.now + 500
        game.post(Command.TETRIS, TetrisAction.SOFT_DROP)
        state = game.update(now=later)
        assert state.current_piece.y == y + 1
        assert state.last_tetris_drop == later

    def test_posted_reset_uses_update_time(self, make_game, fake_clock):
        game = make_game()
        later = fake_clock.now + 5000
        game.post(Command.RESET)
        state = game.update(now=later)
        assert state.last_snake_move == later
        assert state.last_tetris_drop == later
        assert state.status is Status.RUNNING


class TestSnapshots:

    def test_observer_gets_every_update(self, make_game, fake_clock):
        seen = []
        game = make_game(events=GameEvents(on_state_change=seen.append))
        game.update()
        game.handle_tetris_input(TetrisAction.LEFT)
        assert len(seen) == 2

    def test_snapshot_is_frozen_and_detached(self, make_game, fake_clock):
        game = make_game()
        game.apples = ()
        snap = game.state
        with pytest.raises(dataclasses.FrozenInstanceError):
            snap.score = 5
        fake_clock.advance(200)
        game.update()
        assert snap.snake != game.state.snake

    def test_print_board_marks_head(self, make_game):
        game = make_game()
        game.apples = ()
        head = game.snake[0]
        lines = game.state.print_board().splitlines()
        assert len(lines) == 24
        assert lines[head.y][3 + head.x] == "H"
