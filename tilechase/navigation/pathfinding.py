"""
A* pathfinding over a tile grid.

Finds the cheapest path between two cells while avoiding blocked tiles.
Each pathfinder keeps one search node per cell for its whole lifetime and
reuses them across searches, so a single instance must not be shared
between threads.
"""
import heapq
import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, List, Optional, Sequence, Set, Tuple
import numpy as np

from .base import ObstacleGrid, Waypoint

logger = logging.getLogger(__name__)


ORTHOGONAL_COST = 10
DIAGONAL_COST = 14  # 10 * sqrt(2), rounded down

NEIGHBOR_OFFSETS: Tuple[Tuple[int, int], ...] = tuple(
    (dx, dy)
    for dx in (-1, 0, 1)
    for dy in (-1, 0, 1)
    if (dx, dy) != (0, 0)
)


class DiagonalMovement(Enum):
    """Restrictions on how a path may move between cells."""
    ORTHOGONAL = auto()           # Only horizontal and vertical steps
    DIAGONAL = auto()             # Diagonal steps, may clip tile corners
    DIAGONAL_NO_CUTTING = auto()  # Diagonal steps that never clip a corner


class CornerRule(Enum):
    """Which cells must be open for a diagonal step under DIAGONAL_NO_CUTTING."""
    SURROUNDING = auto()  # All four orthogonal neighbours of the current cell
    FLANKING = auto()     # Only the two cells the step passes between


class StopReason(Enum):
    TARGET_BLOCKED = auto()
    TARGET_REACHED = auto()
    OPEN_EXHAUSTED = auto()
    DEPTH_LIMIT = auto()


@dataclass
class PathfindingConfig:
    """Configuration for A* pathfinding."""
    max_search_distance: int = 64  # Search stops once any path reaches this many hops
    diagonal_movement: DiagonalMovement = DiagonalMovement.DIAGONAL
    corner_rule: CornerRule = CornerRule.SURROUNDING
    search_layer: int = 1


@dataclass
class SearchStats:
    """Summary of the most recent search, for debugging and tests."""
    expanded: int = 0
    max_depth: int = 0
    found: bool = False
    stop_reason: Optional[StopReason] = None


# Marks the target as not yet reached during a search
_UNKNOWN = object()


@dataclass(eq=False)
class SearchNode:
    """Search state for one grid cell."""
    x: int
    y: int
    cost: float = float("inf")
    heuristic: float = 0.0
    parent: object = field(default=None, repr=False)
    depth: int = 0
    generation: int = -1

    @property
    def position(self) -> Tuple[int, int]:
        return (self.x, self.y)

    @property
    def f_score(self) -> float:
        return self.cost + self.heuristic

    def reset(self, generation: int) -> None:
        """Forget state left over from an earlier search."""
        self.cost = float("inf")
        self.heuristic = 0.0
        self.parent = None
        self.depth = 0
        self.generation = generation

    def set_parent(self, parent: "SearchNode") -> None:
        self.parent = parent
        self.depth = parent.depth + 1


@dataclass(order=True)
class PriorityNode:
    """Entry in the open set heap."""
    f_score: float
    sequence: int  # Insertion order, breaks f ties deterministically
    node: SearchNode = field(compare=False)
    removed: bool = field(default=False, compare=False)


class OpenSet:
    """
    Min-priority queue of search nodes keyed on f = cost + heuristic.

    A coordinate index sits beside the heap, so membership is O(1) and
    removal just marks the heap entry dead.
    """

    def __init__(self):
        self._heap: List[PriorityNode] = []
        self._index: Dict[Tuple[int, int], PriorityNode] = {}
        self._sequence = 0

    def push(self, node: SearchNode) -> None:
        if node.position in self._index:
            self.remove(node)
        entry = PriorityNode(node.f_score, self._sequence, node)
        self._sequence += 1
        self._index[node.position] = entry
        heapq.heappush(self._heap, entry)

    def pop(self) -> SearchNode:
        while self._heap:
            entry = heapq.heappop(self._heap)
            if not entry.removed:
                del self._index[entry.node.position]
                return entry.node
        raise KeyError("pop from an empty open set")

    def remove(self, node: SearchNode) -> None:
        entry = self._index.pop(node.position, None)
        if entry is not None:
            entry.removed = True

    def clear(self) -> None:
        self._heap.clear()
        self._index.clear()
        self._sequence = 0

    def __contains__(self, node: SearchNode) -> bool:
        return node.position in self._index

    def __len__(self) -> int:
        return len(self._index)


def path_cost(path: Sequence[Tuple[int, int]]) -> int:
    """Total movement cost of a path using the 10/14 step costs."""
    total = 0
    for (x0, y0), (x1, y1) in zip(path, path[1:]):
        total += DIAGONAL_COST if (x0 != x1 and y0 != y1) else ORTHOGONAL_COST
    return total


class GridPathfinder:
    """
    A* pathfinding over an obstacle grid.

    Nodes are allocated once, one per cell, and stamped with the
    generation of the search that last touched them. A node with an old
    stamp is reset the first time the current search looks at it, so
    costs from earlier searches never leak into the current one.

    Usage:
        pathfinder = GridPathfinder(obstacle_map, PathfindingConfig())
        path = pathfinder.find_path(0, 0, 7, 5)
        if path is None:
            ...  # no path this time, try again on the next cell change
    """

    def __init__(
        self,
        obstacle_grid: ObstacleGrid,
        config: Optional[PathfindingConfig] = None,
    ):
        self.config = config or PathfindingConfig()
        self._grid = obstacle_grid
        self._width = obstacle_grid.width
        self._height = obstacle_grid.height

        # nodes[x][y]
        self._nodes: List[List[SearchNode]] = [
            [SearchNode(x, y) for y in range(self._height)]
            for x in range(self._width)
        ]
        self._open = OpenSet()
        self._closed: Set[Tuple[int, int]] = set()
        self._generation = 0

        if self.config.diagonal_movement == DiagonalMovement.ORTHOGONAL:
            self._offsets = tuple(
                (dx, dy) for dx, dy in NEIGHBOR_OFFSETS if dx == 0 or dy == 0
            )
        else:
            self._offsets = NEIGHBOR_OFFSETS

        self.last_search = SearchStats()

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def _check_cell(self, x: int, y: int, what: str) -> None:
        if not (0 <= x < self._width and 0 <= y < self._height):
            raise ValueError(
                f"{what} ({x}, {y}) is outside the {self._width}x{self._height} grid"
            )

    def _node(self, x: int, y: int) -> SearchNode:
        """Fetch a node, resetting it if it belongs to an earlier search."""
        node = self._nodes[x][y]
        if node.generation != self._generation:
            node.reset(self._generation)
        return node

    def _is_valid_location(self, x: int, y: int) -> bool:
        if x < 0 or y < 0 or x >= self._width or y >= self._height:
            return False
        return not self._grid.is_blocked(x, y, self.config.search_layer)

    def _heuristic(self, x: int, y: int, target_x: int, target_y: int) -> float:
        """
        Straight-line distance in cells.

        Each cell of straight-line distance costs at least 10/sqrt(2) (about
        7.07) to cover, so this never overestimates the remaining cost.
        """
        return float(np.hypot(x - target_x, y - target_y))

    def _can_step_diagonally(self, current: SearchNode, dx: int, dy: int) -> bool:
        if self.config.diagonal_movement != DiagonalMovement.DIAGONAL_NO_CUTTING:
            return True

        x, y = current.x, current.y
        if self.config.corner_rule == CornerRule.FLANKING:
            return self._is_valid_location(x + dx, y) and self._is_valid_location(x, y + dy)

        return (
            self._is_valid_location(x, y + 1)
            and self._is_valid_location(x, y - 1)
            and self._is_valid_location(x - 1, y)
            and self._is_valid_location(x + 1, y)
        )

    def find_path(
        self,
        start_x: int,
        start_y: int,
        target_x: int,
        target_y: int,
    ) -> Optional[List[Waypoint]]:
        """
        Find the cheapest path from start to target.

        Args:
            start_x, start_y: Starting cell
            target_x, target_y: Target cell

        Returns:
            Waypoints from start to target, both inclusive, or None if the
            target is blocked, unreachable, or further than the search
            depth allows.

        Raises:
            ValueError: If start or target lies outside the grid
        """
        self._check_cell(start_x, start_y, "start")
        self._check_cell(target_x, target_y, "target")

        stats = SearchStats()
        self.last_search = stats

        # Stop right away if the target is in a wall
        if self._grid.is_blocked(target_x, target_y, self.config.search_layer):
            stats.stop_reason = StopReason.TARGET_BLOCKED
            logger.debug("Target (%d, %d) is blocked", target_x, target_y)
            return None

        self._generation += 1
        self._open.clear()
        self._closed.clear()

        target = self._node(target_x, target_y)
        target.parent = _UNKNOWN

        start = self._node(start_x, start_y)
        start.cost = 0.0
        start.depth = 0
        start.parent = None
        start.heuristic = self._heuristic(start_x, start_y, target_x, target_y)
        self._open.push(start)

        current_depth = 0
        stats.stop_reason = StopReason.OPEN_EXHAUSTED

        while current_depth < self.config.max_search_distance and self._open:
            current = self._open.pop()
            if current is target:
                stats.stop_reason = StopReason.TARGET_REACHED
                break

            self._closed.add(current.position)
            stats.expanded += 1

            for dx, dy in self._offsets:
                diagonal = dx != 0 and dy != 0
                if diagonal and not self._can_step_diagonally(current, dx, dy):
                    continue

                nx, ny = current.x + dx, current.y + dy
                if not self._is_valid_location(nx, ny):
                    continue

                step_cost = DIAGONAL_COST if diagonal else ORTHOGONAL_COST
                tentative_cost = current.cost + step_cost
                neighbor = self._node(nx, ny)

                in_open = neighbor in self._open
                in_closed = neighbor.position in self._closed
                if (in_open or in_closed) and neighbor.cost <= tentative_cost:
                    continue

                # Cheaper route found: take it out of both sets and re-expand
                if in_open:
                    self._open.remove(neighbor)
                if in_closed:
                    self._closed.discard(neighbor.position)

                neighbor.cost = tentative_cost
                neighbor.heuristic = self._heuristic(nx, ny, target_x, target_y)
                neighbor.set_parent(current)
                current_depth = max(current_depth, neighbor.depth)
                self._open.push(neighbor)
        else:
            if current_depth >= self.config.max_search_distance:
                stats.stop_reason = StopReason.DEPTH_LIMIT

        stats.max_depth = current_depth

        if target.parent is _UNKNOWN:
            logger.debug(
                "No path from (%d, %d) to (%d, %d): %s after %d expansions",
                start_x, start_y, target_x, target_y,
                stats.stop_reason.name.lower(), stats.expanded,
            )
            return None

        stats.found = True
        path = self._reconstruct_path(target)
        logger.debug(
            "Path from (%d, %d) to (%d, %d): %d waypoints, %d expansions",
            start_x, start_y, target_x, target_y, len(path), stats.expanded,
        )
        return path

    def _reconstruct_path(self, target: SearchNode) -> List[Waypoint]:
        """Follow parent links from the target back to the start."""
        path = []
        node = target
        while node is not None:
            path.append(Waypoint(node.x, node.y))
            node = node.parent
        path.reverse()
        return path
