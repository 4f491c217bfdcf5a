"""
Layered tile map used as the obstacle grid for pathfinding.

Stores one occupancy grid per tile layer. Layer 0 is the floor and is
normally empty; walls live on the collision layer (1 by default), which is
the layer agents search and collide against.
"""
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple
import numpy as np

from .base import ObstacleGrid


WALL_CHAR = "#"
FLOOR_CHAR = "."
PATH_CHAR = "*"


@dataclass
class ObstacleMapConfig:
    """Configuration for a tile obstacle map."""
    tile_size: float = 32.0  # World units per tile
    num_layers: int = 2
    collision_layer: int = 1  # Layer used when no layer is given


class ObstacleMap(ObstacleGrid):
    """
    Grid-based representation of tiles for pathfinding and collision.

    Each cell of each layer is either empty (0) or holds a tile (1).
    Every edit bumps `revision`, so consumers can tell the map changed.
    """

    def __init__(
        self,
        width: int,
        height: int,
        config: Optional[ObstacleMapConfig] = None,
    ):
        self.config = config or ObstacleMapConfig()
        if width <= 0 or height <= 0:
            raise ValueError(f"Map size must be positive, got {width}x{height}")
        if self.config.num_layers <= 0:
            raise ValueError(f"num_layers must be positive, got {self.config.num_layers}")
        self._check_layer(self.config.collision_layer)

        self.tile_size = self.config.tile_size
        self._width = width
        self._height = height
        self.revision = 0

        # (layer, row, column), 0 = empty, 1 = tile
        self.grid = np.zeros((self.config.num_layers, height, width), dtype=np.uint8)

    @classmethod
    def from_ascii(
        cls,
        rows: Sequence[str],
        config: Optional[ObstacleMapConfig] = None,
    ) -> "ObstacleMap":
        """
        Build a map from text rows, top row first is y = 0.

        '#' places a tile on the collision layer; any other character
        is treated as open floor.
        """
        if not rows:
            raise ValueError("ASCII map has no rows")
        width = len(rows[0])
        for y, row in enumerate(rows):
            if len(row) != width:
                raise ValueError(
                    f"ASCII map row {y} has length {len(row)}, expected {width}"
                )

        obstacle_map = cls(width, len(rows), config)
        layer = obstacle_map.config.collision_layer
        for y, row in enumerate(rows):
            for x, char in enumerate(row):
                if char == WALL_CHAR:
                    obstacle_map.grid[layer, y, x] = 1
        return obstacle_map

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def pixel_width(self) -> float:
        return self._width * self.tile_size

    @property
    def pixel_height(self) -> float:
        return self._height * self.tile_size

    def _check_layer(self, layer: int) -> None:
        if layer < 0 or layer >= self.config.num_layers:
            raise ValueError(
                f"Layer {layer} out of range (map has {self.config.num_layers} layers)"
            )

    def _resolve_layer(self, layer: Optional[int]) -> int:
        if layer is None:
            return self.config.collision_layer
        self._check_layer(layer)
        return layer

    def in_bounds(self, gx: int, gy: int) -> bool:
        return 0 <= gx < self._width and 0 <= gy < self._height

    def world_to_grid(self, x: float, y: float) -> Tuple[int, int]:
        """Convert world coordinates to grid coordinates."""
        gx = int(np.floor(x / self.tile_size))
        gy = int(np.floor(y / self.tile_size))
        # Clamp to grid bounds
        gx = max(0, min(self._width - 1, gx))
        gy = max(0, min(self._height - 1, gy))
        return gx, gy

    def tile_at(self, x: float, y: float) -> Tuple[int, int]:
        """Grid cell containing a world point, without clamping."""
        return int(np.floor(x / self.tile_size)), int(np.floor(y / self.tile_size))

    def grid_to_world(self, gx: int, gy: int) -> Tuple[float, float]:
        """Convert grid coordinates to world coordinates (cell center)."""
        x = (gx + 0.5) * self.tile_size
        y = (gy + 0.5) * self.tile_size
        return x, y

    def is_blocked(self, gx: int, gy: int, layer: Optional[int] = None) -> bool:
        """Check if a grid cell is blocked."""
        layer = self._resolve_layer(layer)
        if not self.in_bounds(gx, gy):
            return True  # Out of bounds is blocked
        return bool(self.grid[layer, gy, gx] == 1)

    def is_passable(self, gx: int, gy: int, layer: Optional[int] = None) -> bool:
        """Check if a grid cell is passable."""
        return not self.is_blocked(gx, gy, layer)

    def is_blocked_at(self, x: float, y: float, layer: Optional[int] = None) -> bool:
        """Check whether the tile under a world point is blocked."""
        gx, gy = self.tile_at(x, y)
        return self.is_blocked(gx, gy, layer)

    def set_blocked(
        self,
        gx: int,
        gy: int,
        blocked: bool = True,
        layer: Optional[int] = None,
    ) -> None:
        """Place or remove a tile."""
        layer = self._resolve_layer(layer)
        if not self.in_bounds(gx, gy):
            raise ValueError(
                f"Cell ({gx}, {gy}) is outside the {self._width}x{self._height} map"
            )
        self.grid[layer, gy, gx] = 1 if blocked else 0
        self.revision += 1

    def fill_rect(
        self,
        gx: int,
        gy: int,
        width: int,
        height: int,
        blocked: bool = True,
        layer: Optional[int] = None,
    ) -> None:
        """
        Place or remove tiles over a rectangle of cells.

        The rectangle is clipped to the map.
        """
        layer = self._resolve_layer(layer)
        x0, y0 = max(0, gx), max(0, gy)
        x1, y1 = min(self._width, gx + width), min(self._height, gy + height)
        if x0 >= x1 or y0 >= y1:
            return
        self.grid[layer, y0:y1, x0:x1] = 1 if blocked else 0
        self.revision += 1

    def clear(self, layer: Optional[int] = None) -> None:
        """Remove every tile on a layer."""
        layer = self._resolve_layer(layer)
        self.grid[layer].fill(0)
        self.revision += 1

    def blocked_cells(self, layer: Optional[int] = None) -> List[Tuple[int, int]]:
        """All blocked cells on a layer as (gx, gy)."""
        layer = self._resolve_layer(layer)
        ys, xs = np.nonzero(self.grid[layer])
        return [(int(x), int(y)) for x, y in zip(xs, ys)]

    def to_ascii(
        self,
        path: Optional[Iterable[Tuple[int, int]]] = None,
        layer: Optional[int] = None,
        markers: Optional[Dict[Tuple[int, int], str]] = None,
    ) -> str:
        """
        Generate ASCII visualization of the map.

        Args:
            path: Optional (gx, gy) waypoints to draw as '*'
            layer: Layer to draw (collision layer by default)
            markers: Optional single characters drawn over cells, e.g. agents

        Returns:
            ASCII string representation, top row is y = 0
        """
        layer = self._resolve_layer(layer)
        path_set = set(path) if path else set()
        markers = markers or {}
        lines = []

        for gy in range(self._height):
            row = ""
            for gx in range(self._width):
                if (gx, gy) in markers:
                    row += markers[(gx, gy)]
                elif (gx, gy) in path_set:
                    row += PATH_CHAR
                elif self.grid[layer, gy, gx] == 1:
                    row += WALL_CHAR
                else:
                    row += FLOOR_CHAR
            lines.append(row)

        return "\n".join(lines)

    def __repr__(self) -> str:
        blocked = int(np.sum(self.grid[self.config.collision_layer]))
        total = self._width * self._height
        return (
            f"ObstacleMap(size={self._width}x{self._height}, "
            f"tile_size={self.tile_size}, "
            f"blocked={blocked}/{total})"
        )
