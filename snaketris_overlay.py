from typing import Optional, Tuple

import pygame
from snaketris_scores import HighScoreTable


class HighScoreOverlay:
    """
    High score panel drawn over the board. When opened with a pending result
    it first asks for 1-3 initials, then saves and shows the table.
    """
    def __init__(self, table: HighScoreTable):
        self.table = table
        self.active = False
        self.name = ""
        self.pending: Optional[Tuple[int, int, int]] = None  # score, lines, apples
        self.scores = []

    def open(self, pending: Optional[Tuple[int, int, int]] = None):
        self.active = True
        self.pending = pending
        self.name = ""
        self.scores = self.table.load()

    def close(self):
        self.active = False
        self.pending = None

    @property
    def entering(self) -> bool:
        return self.pending is not None

    def handle(self, e):
        if e.key == pygame.K_ESCAPE: self.close(); return
        if not self.entering:
            if e.key in (pygame.K_RETURN, pygame.K_KP_ENTER): self.close()
            return
        if e.key == pygame.K_BACKSPACE: self.name = self.name[:-1]; return
        if e.key in (pygame.K_RETURN, pygame.K_KP_ENTER):
            if self.name.strip():
                score, lines, apples = self.pending
                self.scores = self.table.save(self.name, score, lines, apples)
                self.pending = None
            return
        ch = getattr(e, "unicode", "")
        if ch and ch.isalnum() and len(self.name) < 3:
            self.name += ch.upper()

    def draw(self, screen, font, big_font, w, h):
        if not self.active: return
        s = pygame.Surface((w - 80, h - 80), pygame.SRCALPHA); s.fill((10, 10, 20, 235))
        screen.blit(s, (40, 40))
        screen.blit(big_font.render("HIGH SCORES", True, (0, 255, 65)), (60, 56))
        y = 110
        if self.entering:
            score = self.pending[0]
            screen.blit(font.render(f"NEW HIGH SCORE! {score}", True, (255, 215, 0)), (60, y)); y += 28
            screen.blit(font.render(f"ENTER YOUR INITIALS: {self.name:_<3}", True, (255, 255, 255)), (60, y)); y += 40
        if not self.scores:
            screen.blit(font.render("NO HIGH SCORES YET", True, (200, 210, 235)), (60, y))
            return
        for i, hs in enumerate(self.scores, start=1):
            txt = f"{i:2d}. {hs.name:<3}  {hs.score:>8}  L{hs.lines_cleared:<3} A{hs.apples_eaten}"
            screen.blit(font.render(txt, True, (200, 210, 235)), (60, y)); y += 24
