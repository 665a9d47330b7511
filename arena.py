"""
Terrain grid for Bugtopia.

The arena is a rectangle of `width × height` world units cut into square
tiles. Every tile has one TerrainKind, generated once from a seeded rng and
never changed during a run. Terrain acts on bugs through three
multiplicative factors (speed, vision, energy cost) that depend on the
bug's genes, plus a passability rule for walls and water.
"""

from collections import Counter
from dataclasses import dataclass
from enum import Enum
import logging
import math

import numpy as np

from config import (
    ARENA_WIDTH, ARENA_HEIGHT, TILE_SIZE, SPAWN_CLEAR_RADIUS, TERRAIN_NOISE,
)

log = logging.getLogger(__name__)


class ArenaError(ValueError):
    """Bad arena dimensions or terrain grid."""


class TerrainKind(Enum):
    OPEN     = "open"
    WALL     = "wall"
    WATER    = "water"
    HILL     = "hill"
    SHADOW   = "shadow"
    PREDATOR = "predator"
    WIND     = "wind"
    FOOD     = "food"      # food-rich ground

    @property
    def code(self) -> int:
        return _KINDS.index(self)


_KINDS = list(TerrainKind)


def _clip(value: float, lo: float, hi: float) -> float:
    return min(hi, max(lo, value))


@dataclass(frozen=True)
class Modifiers:
    speed:       float
    vision:      float
    energy_cost: float


@dataclass(frozen=True)
class Crossing:
    """Footprint of a usable tool that carries bugs over walls or water."""
    x:      float
    y:      float
    radius: float
    walls:  bool
    water:  bool

    def covers(self, x: float, y: float) -> bool:
        return math.hypot(self.x - x, self.y - y) <= self.radius


def crossings_of(tools) -> tuple:
    """Crossings for the usable bridge-like tools among `tools`."""
    found = []
    for tool in tools:
        kind = tool.tool_type
        if tool.usable and (kind.crosses_walls or kind.crosses_water):
            found.append(Crossing(tool.x, tool.y, tool.size,
                                  kind.crosses_walls, kind.crosses_water))
    return tuple(found)


# ──────────────────────────────────────────────────────────────────────────────
# Genome-adapted terrain factors
# ──────────────────────────────────────────────────────────────────────────────

def speed_modifier(kind: TerrainKind, dna) -> float:
    p = dna.physical
    if kind is TerrainKind.WALL:
        return 0.0
    if kind is TerrainKind.WATER:
        return _clip(0.5 * p.speed + 0.5 * p.energy_efficiency + 0.2, 0.1, 1.0)
    if kind is TerrainKind.HILL:
        return _clip(0.7 * p.strength + 0.3 * p.stickiness, 0.2, 1.0)
    if kind is TerrainKind.SHADOW:
        return 0.8
    if kind is TerrainKind.PREDATOR:
        return _clip(max(p.aggression, p.camouflage), 0.3, 1.0)
    if kind is TerrainKind.WIND:
        return _clip(p.size, 0.4, 1.2)
    if kind is TerrainKind.FOOD:
        return 1.1
    return 1.0


_VISION = {
    TerrainKind.SHADOW:   0.3,
    TerrainKind.HILL:     1.3,
    TerrainKind.WATER:    0.8,
    TerrainKind.PREDATOR: 0.9,
}


def vision_modifier(kind: TerrainKind, dna=None) -> float:
    return _VISION.get(kind, 1.0)


def energy_cost_modifier(kind: TerrainKind, dna) -> float:
    p = dna.physical
    if kind is TerrainKind.WATER:
        cost = 2.0 - 0.5 * p.speed
    elif kind is TerrainKind.HILL:
        cost = 2.5 - p.strength - 0.5 * (p.stickiness - 0.3)
    elif kind is TerrainKind.WIND:
        cost = 1.5 - 0.3 * p.size
    elif kind is TerrainKind.PREDATOR:
        cost = 1.8 - 0.5 * p.camouflage
    else:
        cost = 1.0
    return _clip(cost, 0.1, 5.0)


def can_swim(dna) -> bool:
    p = dna.physical
    return (p.speed + p.energy_efficiency + 0.5) / 2.0 > 0.6


# ──────────────────────────────────────────────────────────────────────────────
# Arena
# ──────────────────────────────────────────────────────────────────────────────

class Arena:
    """
    Read-only terrain map plus spatial helpers.

    `terrain` may be given as a rows × cols grid of TerrainKind values to
    bypass generation (used for hand-built test maps).
    """

    def __init__(self, width: float = ARENA_WIDTH, height: float = ARENA_HEIGHT,
                 tile_size: float = TILE_SIZE, rng=None, terrain=None):
        if not (width > 0 and height > 0 and tile_size > 0):
            raise ArenaError(f"invalid arena {width}×{height} tile {tile_size}")
        self.width     = float(width)
        self.height    = float(height)
        self.tile_size = float(tile_size)
        self.cols = int(self.width // self.tile_size)
        self.rows = int(self.height // self.tile_size)
        if self.cols < 1 or self.rows < 1:
            raise ArenaError(f"tile {tile_size} larger than arena {width}×{height}")

        if terrain is not None:
            self._grid = self._grid_from(terrain)
        else:
            if rng is None:
                rng = np.random.default_rng()
            self._grid = self._generate(rng)
        self._grid.setflags(write=False)

    # ──────────────────────────────────────────────────────────────────────────
    # Generation
    # ──────────────────────────────────────────────────────────────────────────

    def _grid_from(self, terrain) -> np.ndarray:
        rows = [list(r) for r in terrain]
        if len(rows) != self.rows or any(len(r) != self.cols for r in rows):
            raise ArenaError(
                f"terrain grid must be {self.rows} rows × {self.cols} cols")
        try:
            codes = [[TerrainKind(k).code for k in r] for r in rows]
        except ValueError as exc:
            raise ArenaError(str(exc)) from exc
        return np.array(codes, dtype=np.uint8)

    def _generate(self, rng) -> np.ndarray:
        grid = np.full((self.rows, self.cols), TerrainKind.OPEN.code, dtype=np.uint8)
        cx, cy = self.cols / 2.0, self.rows / 2.0
        max_dist = math.hypot(cx, cy)

        for row in range(self.rows):
            for col in range(self.cols):
                noise = rng.random()
                grid[row, col] = self._pick_kind(row, col, noise, cx, cy, max_dist).code

        self._clear_spawn_areas(grid)
        log.debug("generated %d×%d terrain: %s", self.cols, self.rows,
                  {k.value: int((grid == k.code).sum()) for k in _KINDS})
        return grid

    def _pick_kind(self, row, col, noise, cx, cy, max_dist) -> TerrainKind:
        if col in (0, self.cols - 1) or row in (0, self.rows - 1):
            return TerrainKind.WALL

        # Random features
        threshold = 0.0
        for name, prob in TERRAIN_NOISE:
            threshold += prob
            if noise < threshold:
                return TerrainKind(name)

        # Structured features: a water ring, hill ridges, shadow valleys
        dist = math.hypot(col - cx, row - cy) / max_dist
        if 0.2 < dist < 0.3 and noise < 0.3:
            return TerrainKind.WATER
        if (row % 8 == 0 or col % 8 == 0) and noise < 0.2:
            return TerrainKind.HILL
        if (row + col) % 12 < 2 and noise < 0.25:
            return TerrainKind.SHADOW
        return TerrainKind.OPEN

    def _clear_spawn_areas(self, grid: np.ndarray):
        r = SPAWN_CLEAR_RADIUS
        centres = [
            (2, 2), (self.cols - 3, 2),
            (2, self.rows - 3), (self.cols - 3, self.rows - 3),
            (self.cols // 2, self.rows // 2),
        ]
        wall = TerrainKind.WALL.code
        for ccol, crow in centres:
            r0, r1 = max(0, crow - r), min(self.rows - 1, crow + r)
            c0, c1 = max(0, ccol - r), min(self.cols - 1, ccol + r)
            block = grid[r0:r1 + 1, c0:c1 + 1]
            block[block == wall] = TerrainKind.OPEN.code

    # ──────────────────────────────────────────────────────────────────────────
    # Queries
    # ──────────────────────────────────────────────────────────────────────────

    @property
    def bounds(self) -> tuple:
        """(min_x, min_y, max_x, max_y)"""
        return (0.0, 0.0, self.width, self.height)

    def tile_index(self, x: float, y: float):
        """(row, col) of the tile containing a point, or None outside the grid."""
        if not (math.isfinite(x) and math.isfinite(y)):
            return None
        col = int(math.floor(x / self.tile_size))
        row = int(math.floor(y / self.tile_size))
        if self._in_bounds(row, col):
            return row, col
        return None

    def tile_center(self, row: int, col: int) -> tuple:
        return ((col + 0.5) * self.tile_size, (row + 0.5) * self.tile_size)

    def terrain_at(self, x: float, y: float) -> TerrainKind:
        idx = self.tile_index(x, y)
        if idx is None:
            return TerrainKind.WALL
        return _KINDS[self._grid[idx]]

    def surface_at(self, x: float, y: float, crossings=()) -> TerrainKind:
        """Terrain as a bug meets it: a covered wall or water tile walks like open ground."""
        kind = self.terrain_at(x, y)
        if kind is TerrainKind.WALL:
            if any(c.walls and c.covers(x, y) for c in crossings):
                return TerrainKind.OPEN
        elif kind is TerrainKind.WATER:
            if any(c.water and c.covers(x, y) for c in crossings):
                return TerrainKind.OPEN
        return kind

    def movement_modifiers(self, x: float, y: float, dna, crossings=()) -> Modifiers:
        kind = self.surface_at(x, y, crossings)
        return Modifiers(
            speed=speed_modifier(kind, dna),
            vision=vision_modifier(kind, dna),
            energy_cost=energy_cost_modifier(kind, dna),
        )

    def is_passable(self, x: float, y: float, dna, tools=()) -> bool:
        """
        Walls block (a tunnel gets through); water needs enough swimming
        ability unless a bridge or tunnel covers the point.
        """
        kind = self.surface_at(x, y, crossings_of(tools))
        if kind is TerrainKind.WALL:
            return False
        if kind is TerrainKind.WATER:
            return can_swim(dna)
        return True

    def clamp(self, x: float, y: float) -> tuple:
        if not math.isfinite(x):
            x = self.width / 2.0
        if not math.isfinite(y):
            y = self.height / 2.0
        return (_clip(x, 0.0, self.width), _clip(y, 0.0, self.height))

    def find_spawn_position(self, rng) -> tuple:
        """Random open or food-rich point away from the edges; centre as fallback."""
        mx = min(50.0, self.width / 4.0)
        my = min(50.0, self.height / 4.0)
        for _ in range(50):
            x = float(rng.uniform(mx, self.width - mx))
            y = float(rng.uniform(my, self.height - my))
            if self.terrain_at(x, y) in (TerrainKind.OPEN, TerrainKind.FOOD):
                return x, y
        return self.width / 2.0, self.height / 2.0

    def tiles_of(self, kind: TerrainKind) -> list:
        """Centres of every tile of the given kind."""
        rows, cols = np.nonzero(self._grid == kind.code)
        return [self.tile_center(int(r), int(c)) for r, c in zip(rows, cols)]

    def terrain_grid(self) -> np.ndarray:
        """Copy of the rows × cols terrain codes (index into list(TerrainKind))."""
        return self._grid.copy()

    def scan_terrain(self, x: float, y: float, radius: float) -> Counter:
        """Count tiles of each kind whose centres lie within `radius` of a point."""
        found = Counter()
        reach = int(math.ceil(radius / self.tile_size)) + 1
        col0 = int(math.floor(x / self.tile_size))
        row0 = int(math.floor(y / self.tile_size))
        for row in range(row0 - reach, row0 + reach + 1):
            for col in range(col0 - reach, col0 + reach + 1):
                if not self._in_bounds(row, col):
                    continue
                tx, ty = self.tile_center(row, col)
                if math.hypot(tx - x, ty - y) <= radius:
                    found[_KINDS[self._grid[row, col]]] += 1
        return found

    # ──────────────────────────────────────────────────────────────────────────

    def _in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols


def terrain_from_code(code: int) -> TerrainKind:
    return _KINDS[int(code)]
