
CONFIG = {
    "GRID_WIDTH": 20,
    "GRID_HEIGHT": 24,
    "CELL_SIZE": 25,
    "KEY_REPEAT_DELAY_MS": 170,
    "KEY_REPEAT_MS": 50,
    "SNAKE_SPEED_MS": 200,
    "TETRIS_SPEED_MS": 800,
    "STAR_POWER_MS": 8000,
    "STAR_SPAWN_CHANCE": 0.03,
    "SEED": None,
    "HIGH_SCORE_FILE": "~/.snaketris/scores.json",
    "HIGH_SCORE_KEY": "snakeTetrisHighScores",
    "HIGH_SCORE_LIMIT": 10,
}

# Scoring
APPLE_POINTS = 100
LINE_POINTS = 1000
DESTROY_POINTS = 50
STAR_POINTS = 500

INITIAL_SNAKE_LENGTH = 3
