"""
Rendering helpers for SnakeTris. Draws a GameState snapshot; holds no game state.

- Pre-render block cell Surfaces per tetromino color and blit them.
- Pre-render the static background (grid + panel frame) once per Dims.
- Cache HUD text surfaces; re-render only when values change.
"""
from __future__ import annotations
import pygame
from dataclasses import dataclass
from typing import Dict, Optional, Tuple
from snaketris_config import CONFIG
from snaketris_piece import COLORS, ROTATIONS, Tetromino
from snaketris_state import GameState

SNAKE_COLOR = (0, 255, 65)
SNAKE_STAR_COLOR = (255, 215, 0)
APPLE_COLOR = (255, 0, 64)
STAR_COLOR = (255, 215, 0)
TEXT_COLOR = (0, 255, 65)
DIM_TEXT = (120, 200, 140)
BACKGROUND = (10, 10, 10)
GRID_LINE = (26, 26, 46)


@dataclass
class HudCache:
    score: int = -1
    lines: int = -1
    level: int = -1
    next_type: Optional[Tetromino] = None
    title: Optional[pygame.Surface] = None
    score_s: Optional[pygame.Surface] = None
    lines_s: Optional[pygame.Surface] = None
    level_s: Optional[pygame.Surface] = None
    next_label: Optional[pygame.Surface] = None
    controls: Optional[list] = None


@dataclass(frozen=True)
class Dims:
    """Window geometry: the board on the left, the HUD panel to its right."""
    cols: int
    rows: int
    cell: int
    margin: int = 16
    panel_w: int = 240

    @classmethod
    def from_config(cls, config=CONFIG) -> Dims:
        return cls(config["GRID_WIDTH"], config["GRID_HEIGHT"], int(config["CELL_SIZE"]))

    @property
    def board_x(self) -> int:
        return self.margin

    board_y = board_x

    @property
    def board_w(self) -> int:
        return self.cols * self.cell

    @property
    def board_h(self) -> int:
        return self.rows * self.cell

    @property
    def panel_x(self) -> int:
        return self.board_x + self.board_w + self.margin

    panel_y = board_x

    @property
    def total_w(self) -> int:
        return self.panel_x + self.panel_w + self.margin

    @property
    def total_h(self) -> int:
        return self.board_h + 2 * self.margin


class RenderAssets:
    """Holds all pre-rendered assets for fast blitting."""
    def __init__(self, dims: Dims, font: pygame.font.Font, big_font: pygame.font.Font):
        self.dims = dims
        self.font = font
        self.big_font = big_font
        self._make_static()
        self._make_cells()
        self.hud = HudCache()

    # ---------- Static background (grid + panel) ----------
    def _make_static(self):
        d = self.dims
        self.bg = pygame.Surface((d.total_w, d.total_h))
        self.bg.fill(BACKGROUND)
        for x in range(d.cols + 1):
            X = d.board_x + x * d.cell
            pygame.draw.line(self.bg, GRID_LINE, (X, d.board_y), (X, d.board_y + d.board_h))
        for y in range(d.rows + 1):
            Y = d.board_y + y * d.cell
            pygame.draw.line(self.bg, GRID_LINE, (d.board_x, Y), (d.board_x + d.board_w, Y))
        panel_rect = pygame.Rect(d.panel_x, d.panel_y, d.panel_w, d.board_h)
        pygame.draw.rect(self.bg, (16, 18, 30), panel_rect)
        pygame.draw.rect(self.bg, (0, 120, 40), panel_rect, 1)
        self.pv_cell = max(12, int(d.cell * 0.75))
        self.pv_x = d.panel_x + 12
        self.pv_y = d.panel_y + 170
        frame = pygame.Rect(self.pv_x - 6, self.pv_y - 6, self.pv_cell * 4 + 12, self.pv_cell * 4 + 12)
        pygame.draw.rect(self.bg, (12, 14, 24), frame)
        pygame.draw.rect(self.bg, (0, 90, 30), frame, 1)

    def _make_cells(self):
        self.cell_surf: Dict[Tetromino, pygame.Surface] = {}
        c = self.dims.cell
        for t, col in COLORS.items():
            s = pygame.Surface((c - 2, c - 2))
            s.fill(col)
            self.cell_surf[t] = s

    def cell_rect(self, bx: int, by: int) -> pygame.Rect:
        c = self.dims.cell
        return pygame.Rect(self.dims.board_x + bx * c + 1, self.dims.board_y + by * c + 1, c - 2, c - 2)

    def _in_board(self, bx: int, by: int) -> bool:
        return 0 <= bx < self.dims.cols and 0 <= by < self.dims.rows

    # ---------- Frame ----------
    def draw(self, screen: pygame.Surface, state: GameState, now: int):
        screen.blit(self.bg, (0, 0))
        for y, row in enumerate(state.grid):
            for x, tag in enumerate(row):
                if tag:
                    screen.blit(self.cell_surf[Tetromino(tag)], self.cell_rect(x, y).topleft)

        p = state.current_piece
        if p is not None:
            for bx, by in p.cells():
                if self._in_board(bx, by):
                    screen.blit(self.cell_surf[p.t], self.cell_rect(bx, by).topleft)

        for a in state.apples:
            r = self.cell_rect(a.x, a.y)
            pygame.draw.circle(screen, APPLE_COLOR, r.center, r.w // 2 - 1)
        for s in state.stars:
            self._draw_star(screen, self.cell_rect(s.x, s.y))

        body = SNAKE_STAR_COLOR if state.star_power_active else SNAKE_COLOR
        for i, seg in enumerate(state.snake):
            if not self._in_board(seg.x, seg.y):
                continue
            r = self.cell_rect(seg.x, seg.y)
            pygame.draw.rect(screen, body, r if i == 0 else r.inflate(-4, -4))

        self.draw_panel_hud(screen, state, now)

        if state.game_over:
            self._banner(screen, "GAME OVER (Enter to Restart)", (255, 0, 64))
        elif state.paused:
            self._banner(screen, "PAUSED (Space to Resume)", TEXT_COLOR)

    def _draw_star(self, screen: pygame.Surface, r: pygame.Rect):
        cx, cy = r.center
        o, i = r.w // 2, r.w // 5
        pts = [(cx, cy - o), (cx + i, cy - i), (cx + o, cy), (cx + i, cy + i),
               (cx, cy + o), (cx - i, cy + i), (cx - o, cy), (cx - i, cy - i)]
        pygame.draw.polygon(screen, STAR_COLOR, pts)

    def _banner(self, screen: pygame.Surface, text: str, col: Tuple[int, int, int]):
        d = self.dims
        msg = self.big_font.render(text, True, col)
        screen.blit(msg, msg.get_rect(center=(d.board_x + d.board_w // 2, d.board_y + d.board_h // 2)))

    # ---------- HUD / Panel ----------
    def draw_panel_hud(self, screen: pygame.Surface, state: GameState, now: int):
        d = self.dims
        f = self.font
        if self.hud.title is None:
            self.hud.title = f.render("SnakeTris", True, TEXT_COLOR)
        if state.score != self.hud.score:
            self.hud.score = state.score
            self.hud.score_s = f.render(f"Score: {state.score}", True, TEXT_COLOR)
        if state.lines_cleared != self.hud.lines:
            self.hud.lines = state.lines_cleared
            self.hud.lines_s = f.render(f"Lines: {state.lines_cleared}", True, TEXT_COLOR)
        if state.level != self.hud.level:
            self.hud.level = state.level
            self.hud.level_s = f.render(f"Level: {state.level}", True, TEXT_COLOR)
        nxt = state.next_piece.t if state.next_piece is not None else None
        if nxt != self.hud.next_type:
            self.hud.next_type = nxt
            self.hud.next_label = self._preview(nxt) if nxt is not None else None

        screen.blit(self.hud.title, (d.panel_x + 12, d.panel_y + 12))
        screen.blit(self.hud.score_s, (d.panel_x + 12, d.panel_y + 44))
        screen.blit(self.hud.lines_s, (d.panel_x + 12, d.panel_y + 68))
        screen.blit(self.hud.level_s, (d.panel_x + 12, d.panel_y + 92))
        if state.star_power_active:
            left = max(0, state.star_power_end_time - now) / 1000.0
            screen.blit(f.render(f"STAR POWER {left:.1f}s", True, STAR_COLOR), (d.panel_x + 12, d.panel_y + 116))
        screen.blit(f.render("Next:", True, TEXT_COLOR), (d.panel_x + 12, d.panel_y + 146))
        if self.hud.next_label:
            screen.blit(self.hud.next_label, (self.pv_x, self.pv_y))

        if not self.hud.controls:
            self.hud.controls = [
                f.render("Controls:", True, TEXT_COLOR),
                f.render("Arrows  Snake", True, DIM_TEXT),
                f.render("A/D  Move piece", True, DIM_TEXT),
                f.render("S  Soft drop", True, DIM_TEXT),
                f.render("W/H  Rot CW   G  Rot CCW", True, DIM_TEXT),
                f.render("Space  Pause", True, DIM_TEXT),
                f.render("Enter  Restart", True, DIM_TEXT),
                f.render("Esc  High scores", True, DIM_TEXT),
            ]
        y = d.panel_y + 290
        for surf in self.hud.controls:
            screen.blit(surf, (d.panel_x + 12, y)); y += 20

    def _preview(self, t: Tetromino) -> pygame.Surface:
        s = pygame.Surface((self.pv_cell * 4, self.pv_cell * 4), pygame.SRCALPHA)
        shape = ROTATIONS[t][0]
        offx = (4 - len(shape[0])) // 2
        offy = max(0, (4 - len(shape)) // 2)
        for y, row in enumerate(shape):
            for x, v in enumerate(row):
                if v:
                    block = pygame.Surface((self.pv_cell - 2, self.pv_cell - 2))
                    block.fill(COLORS[t])
                    s.blit(block, ((x + offx) * self.pv_cell + 1, (y + offy) * self.pv_cell + 1))
        return s
