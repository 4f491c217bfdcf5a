import random
from typing import List, Optional, Tuple

from tilechase.navigation import ObstacleMap


class Spawner:
    """Picks open cells for entities, keeping them apart from each other."""

    def __init__(
        self,
        obstacle_map: ObstacleMap,
        min_separation: int = 4,
        max_attempts: int = 200,
        seed: Optional[int] = None,
    ):
        self.obstacle_map = obstacle_map
        self.min_separation = min_separation  # in cells, Chebyshev distance
        self.max_attempts = max_attempts
        self.rng = random.Random(seed)

    def _random_cell(self) -> Tuple[int, int]:
        gx = self.rng.randrange(self.obstacle_map.width)
        gy = self.rng.randrange(self.obstacle_map.height)
        return gx, gy

    def _is_valid_cell(
        self, cell: Tuple[int, int], existing: List[Tuple[int, int]]
    ) -> bool:
        if self.obstacle_map.is_blocked(*cell):
            return False
        for other in existing:
            if max(abs(cell[0] - other[0]), abs(cell[1] - other[1])) < self.min_separation:
                return False
        return True

    def spawn_cell(
        self, existing: Optional[List[Tuple[int, int]]] = None
    ) -> Optional[Tuple[int, int]]:
        """Return a random open cell far enough from existing ones, or None."""
        existing = existing or []
        for _ in range(self.max_attempts):
            cell = self._random_cell()
            if self._is_valid_cell(cell, existing):
                return cell
        return None

    def spawn_cells(
        self, count: int, existing: Optional[List[Tuple[int, int]]] = None
    ) -> List[Tuple[int, int]]:
        """Pick up to `count` cells; fewer if the map is too crowded."""
        taken = list(existing or [])
        cells = []
        for _ in range(count):
            cell = self.spawn_cell(taken)
            if cell is None:
                break
            cells.append(cell)
            taken.append(cell)
        return cells
