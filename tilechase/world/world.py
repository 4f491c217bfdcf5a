import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from tilechase.navigation import (
    ChaseNavigator,
    ChaseNavigatorConfig,
    DiagonalMovement,
    ObstacleMap,
    ObstacleMapConfig,
)
from .collision import resolve_motion
from .entities import Chaser, Player, Position
from .spawner import Spawner

logger = logging.getLogger(__name__)


PLAYER_CHAR = "P"
CHASER_CHAR = "C"


@dataclass
class WorldConfig:
    player_speed: float = 128.0  # world units per second
    chaser_speed: float = 64.0
    player_size: float = 16.0
    chaser_size: float = 16.0
    navigator: ChaseNavigatorConfig = field(
        default_factory=lambda: ChaseNavigatorConfig(
            diagonal_movement=DiagonalMovement.DIAGONAL_NO_CUTTING,
        )
    )


@dataclass
class Replan:
    """One chaser's path request during a step."""
    chaser_id: str
    found: bool
    waypoint_count: int


class World:
    """
    Tile world holding the player and every chaser explicitly.

    The world owns its chasers; each chaser owns a navigator built on
    this world's map. Editing the map through set_tile() invalidates all
    of their plans so they replan on the next step.
    """

    def __init__(
        self,
        obstacle_map: ObstacleMap,
        config: Optional[WorldConfig] = None,
        player_position: Optional[Position] = None,
    ):
        self.config = config or WorldConfig()
        self.obstacle_map = obstacle_map
        self.tick_count: int = 0
        self.elapsed: float = 0.0

        if player_position is None:
            player_position = Position(*obstacle_map.grid_to_world(0, 0))
        self.player = Player(
            position=player_position,
            entity_id="player",
            size=self.config.player_size,
            speed=self.config.player_speed,
        )
        self.chasers: List[Chaser] = []
        self.last_replans: List[Replan] = []
        self._next_chaser_id = 0

    @classmethod
    def from_ascii(
        cls,
        rows: Sequence[str],
        config: Optional[WorldConfig] = None,
        map_config: Optional[ObstacleMapConfig] = None,
    ) -> "World":
        """
        Build a world from text rows.

        '#' is a wall, 'P' the player (at most one) and 'C' a chaser;
        every other character is open floor.
        """
        obstacle_map = ObstacleMap.from_ascii(rows, map_config)
        player_cell = None
        chaser_cells = []
        for gy, row in enumerate(rows):
            for gx, char in enumerate(row):
                if char == PLAYER_CHAR:
                    if player_cell is not None:
                        raise ValueError(f"More than one player in ASCII map at ({gx}, {gy})")
                    player_cell = (gx, gy)
                elif char == CHASER_CHAR:
                    chaser_cells.append((gx, gy))

        player_position = None
        if player_cell is not None:
            player_position = Position(*obstacle_map.grid_to_world(*player_cell))

        world = cls(obstacle_map, config, player_position)
        for gx, gy in chaser_cells:
            world.add_chaser(*obstacle_map.grid_to_world(gx, gy))
        return world

    def add_chaser(self, x: float, y: float, entity_id: Optional[str] = None) -> Chaser:
        """Add a chaser at a world position, with its own navigator."""
        if entity_id is None:
            entity_id = f"chaser_{self._next_chaser_id}"
        self._next_chaser_id += 1

        chaser = Chaser(
            position=Position(x, y),
            entity_id=entity_id,
            size=self.config.chaser_size,
            speed=self.config.chaser_speed,
            navigator=ChaseNavigator(self.obstacle_map, self.config.navigator),
        )
        self.chasers.append(chaser)
        return chaser

    def spawn_chasers(self, count: int, min_separation: int = 4, seed: Optional[int] = None) -> List[Chaser]:
        """Place chasers on random open cells away from the player and each other."""
        spawner = Spawner(self.obstacle_map, min_separation=min_separation, seed=seed)
        existing = [self.player_cell] + [self.cell_of(c) for c in self.chasers]
        return [
            self.add_chaser(*self.obstacle_map.grid_to_world(gx, gy))
            for gx, gy in spawner.spawn_cells(count, existing)
        ]

    def remove_chaser(self, entity_id: str) -> bool:
        for i, chaser in enumerate(self.chasers):
            if chaser.entity_id == entity_id:
                del self.chasers[i]
                return True
        return False

    def get_chaser_by_id(self, entity_id: str) -> Optional[Chaser]:
        for chaser in self.chasers:
            if chaser.entity_id == entity_id:
                return chaser
        return None

    def cell_of(self, entity) -> Tuple[int, int]:
        return self.obstacle_map.world_to_grid(entity.position.x, entity.position.y)

    @property
    def player_cell(self) -> Tuple[int, int]:
        return self.cell_of(self.player)

    def _clamp_to_bounds(self, pos: Position) -> Position:
        half = self.player.size / 2
        return Position(
            x=max(half, min(self.obstacle_map.pixel_width - half, pos.x)),
            y=max(half, min(self.obstacle_map.pixel_height - half, pos.y)),
        )

    def move_player(self, axis_x: float, axis_y: float, dt: float) -> None:
        """
        Move the player from an input axis pair.

        The input is normalised, so diagonal input is not faster.
        """
        length = (axis_x * axis_x + axis_y * axis_y) ** 0.5
        if length == 0 or dt <= 0:
            return

        step = self.player.speed * dt
        dx, dy = resolve_motion(
            self.obstacle_map,
            self.player.position.x, self.player.position.y,
            axis_x / length * step, axis_y / length * step,
            self.player.size,
        )
        self.player.position = self._clamp_to_bounds(
            Position(self.player.position.x + dx, self.player.position.y + dy)
        )

    def set_tile(self, gx: int, gy: int, blocked: bool = True, layer: Optional[int] = None) -> None:
        """Edit the map and make every chaser replan."""
        self.obstacle_map.set_blocked(gx, gy, blocked, layer)
        for chaser in self.chasers:
            chaser.navigator.invalidate()

    def _replan(self, chaser: Chaser, own_cell: Tuple[int, int], target_cell: Tuple[int, int]) -> None:
        found = chaser.navigator.set_goal(own_cell, target_cell)
        count = len(chaser.navigator.waypoints)
        self.last_replans.append(Replan(chaser.entity_id, found, count))
        if found:
            logger.debug(
                "%s replanned %s -> %s: %d waypoints",
                chaser.entity_id, own_cell, target_cell, count,
            )
        else:
            logger.info("%s has no path from %s to %s", chaser.entity_id, own_cell, target_cell)

    def _step_chaser(self, chaser: Chaser, target_cell: Tuple[int, int], dt: float) -> None:
        own_cell = self.cell_of(chaser)
        if chaser.navigator.needs_replan(own_cell, target_cell):
            self._replan(chaser, own_cell, target_cell)

        target = chaser.navigator.get_current_target()
        if target is None:
            return

        to_x = target.x - chaser.position.x
        to_y = target.y - chaser.position.y
        distance = (to_x * to_x + to_y * to_y) ** 0.5
        step = chaser.speed * dt

        if distance > 0:
            dx, dy = resolve_motion(
                self.obstacle_map,
                chaser.position.x, chaser.position.y,
                to_x / distance * step, to_y / distance * step,
                chaser.size,
            )
            chaser.position = Position(chaser.position.x + dx, chaser.position.y + dy)

        chaser.navigator.update(chaser.position.x, chaser.position.y, step)

    def step(self, dt: float) -> Dict:
        """Advance every chaser by dt seconds and return the new state."""
        self.last_replans = []
        target_cell = self.player_cell

        for chaser in self.chasers:
            self._step_chaser(chaser, target_cell, dt)

        self.tick_count += 1
        self.elapsed += dt
        return self.get_state()

    def get_state(self) -> Dict:
        return {
            "tick": self.tick_count,
            "elapsed": self.elapsed,
            "map_size": (self.obstacle_map.width, self.obstacle_map.height),
            "map_revision": self.obstacle_map.revision,
            "player": self.player.to_dict(),
            "player_cell": self.player_cell,
            "chasers": [chaser.to_dict() for chaser in self.chasers],
            "replans": [
                {"chaser_id": r.chaser_id, "found": r.found, "waypoints": r.waypoint_count}
                for r in self.last_replans
            ],
        }

    def to_ascii(self, show_paths: bool = True) -> str:
        """Draw the map with chaser paths, chasers and the player."""
        path_cells = []
        markers = {}
        for chaser in self.chasers:
            if show_paths:
                path_cells.extend(chaser.navigator.remaining_waypoints)
            markers[self.cell_of(chaser)] = CHASER_CHAR
        markers[self.player_cell] = PLAYER_CHAR
        return self.obstacle_map.to_ascii(path_cells, markers=markers)
