"""Piece model, shapes, rotation tables"""
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, List, Tuple

Shape = Tuple[Tuple[int, ...], ...]


class Tetromino(str, Enum):
    I = "I"
    O = "O"
    T = "T"
    S = "S"
    Z = "Z"
    J = "J"
    L = "L"


SHAPES = {
    Tetromino.I: [[0,0,0,0],[1,1,1,1],[0,0,0,0],[0,0,0,0]],
    Tetromino.O: [[1,1],[1,1]],
    Tetromino.T: [[0,1,0],[1,1,1],[0,0,0]],
    Tetromino.S: [[0,1,1],[1,1,0],[0,0,0]],
    Tetromino.Z: [[1,1,0],[0,1,1],[0,0,0]],
    Tetromino.J: [[1,0,0],[1,1,1],[0,0,0]],
    Tetromino.L: [[0,0,1],[1,1,1],[0,0,0]],
}

ROTATION_COUNT = {
    Tetromino.I: 2, Tetromino.O: 1, Tetromino.T: 4, Tetromino.S: 2,
    Tetromino.Z: 2, Tetromino.J: 4, Tetromino.L: 4,
}

COLORS: Dict[Tetromino, Tuple[int, int, int]] = {
    Tetromino.I: (0, 245, 255),
    Tetromino.O: (255, 255, 0),
    Tetromino.T: (160, 0, 255),
    Tetromino.S: (0, 255, 0),
    Tetromino.Z: (255, 0, 0),
    Tetromino.J: (0, 0, 255),
    Tetromino.L: (255, 165, 0),
}


def rotate_cw(m): return [list(r) for r in zip(*m[::-1])]


def _rotation_states(base: List[List[int]], count: int) -> Tuple[Shape, ...]:
    states = []
    m = base
    for _ in range(count):
        states.append(tuple(tuple(r) for r in m))
        m = rotate_cw(m)
    return tuple(states)


ROTATIONS: Dict[Tetromino, Tuple[Shape, ...]] = {
    t: _rotation_states(SHAPES[t], ROTATION_COUNT[t]) for t in Tetromino
}


@dataclass(frozen=True)
class Piece:
    t: Tetromino
    rotation: int
    x: int
    y: int
    id: int = 0

    @property
    def shape(self) -> Shape:
        return ROTATIONS[self.t][self.rotation]

    @property
    def color(self) -> Tuple[int, int, int]:
        return COLORS[self.t]

    @staticmethod
    def spawn(t: Tetromino, cols: int, piece_id: int = 0) -> "Piece":
        w = len(ROTATIONS[t][0][0])
        return Piece(t, 0, (cols - w) // 2, 0, piece_id)

    def moved(self, dx: int, dy: int) -> "Piece":
        return replace(self, x=self.x + dx, y=self.y + dy)

    def rotated(self, cw: bool = True) -> "Piece":
        n = len(ROTATIONS[self.t])
        return replace(self, rotation=(self.rotation + (1 if cw else -1)) % n)

    def cells(self) -> List[Tuple[int, int]]:
        """Board coordinates of every filled cell, including any above the top."""
        return [(self.x + c, self.y + r)
                for r, row in enumerate(self.shape)
                for c, v in enumerate(row) if v]
