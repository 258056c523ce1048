import argparse
import logging
import pygame
from snaketris_clock import SimulationClock
from snaketris_config import CONFIG
from snaketris_input import command_for_key, enable_key_repeat
from snaketris_overlay import HighScoreOverlay
from snaketris_render import Dims, RenderAssets
from snaketris_scores import HighScoreTable, JsonFileStore

logger = logging.getLogger(__name__)


def recreate_window(dims, flags=pygame.DOUBLEBUF):
    try:
        return pygame.display.set_mode((dims.total_w, dims.total_h), flags, vsync=1)
    except TypeError:
        return pygame.display.set_mode((dims.total_w, dims.total_h), flags)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Snake and Tetris on one shared grid.")
    parser.add_argument("--seed", type=int, default=CONFIG["SEED"],
                        help="Seed for apple, star and piece placement")
    parser.add_argument("--scores", default=CONFIG["HIGH_SCORE_FILE"],
                        help="JSON file that stores the high score table")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    pygame.init()
    pygame.event.set_allowed([pygame.QUIT, pygame.KEYDOWN])
    enable_key_repeat()

    dims = Dims.from_config()
    screen = recreate_window(dims)
    pygame.display.set_caption("SnakeTris")
    font = pygame.font.SysFont(None, 22)
    big_font = pygame.font.SysFont(None, 36)

    render = RenderAssets(dims, font, big_font)
    clock = pygame.time.Clock()

    table = HighScoreTable(JsonFileStore(args.scores))
    overlay = HighScoreOverlay(table)
    game = SimulationClock(config={"SEED": args.seed})

    def on_game_over(final_score):
        s = game.state
        if table.is_high_score(final_score):
            overlay.open(pending=(final_score, s.lines_cleared, s.apples_eaten))

    game.events.on_game_over = on_game_over
    logger.info("Starting game (seed %d)", game.rng.seed)

    while True:
        clock.tick(60)

        for e in pygame.event.get():
            if e.type == pygame.QUIT:
                pygame.quit()
                return 0
            if e.type != pygame.KEYDOWN:
                continue
            if overlay.active:
                overlay.handle(e); continue
            state = game.state
            if e.key == pygame.K_ESCAPE and not state.game_over:
                overlay.open(); continue
            cmd = command_for_key(e.key, state.game_over)
            if cmd is not None:
                command, cmd_args = cmd
                game.post(command, *cmd_args)

        # The game holds still while the high score panel is up
        state = game.state if overlay.active else game.update()

        render.draw(screen, state, pygame.time.get_ticks())
        overlay.draw(screen, font, big_font, dims.total_w, dims.total_h)
        pygame.display.flip()


if __name__ == '__main__':
    raise SystemExit(main())
