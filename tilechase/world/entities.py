from dataclasses import dataclass, field
from typing import Optional

from tilechase.navigation import ChaseNavigator


@dataclass
class Position:
    x: float
    y: float

    def distance_to(self, other: "Position") -> float:
        return ((self.x - other.x) ** 2 + (self.y - other.y) ** 2) ** 0.5

    def copy(self) -> "Position":
        return Position(self.x, self.y)

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y}


@dataclass
class Entity:
    position: Position
    entity_id: str
    size: float = 16.0   # side of the square body, world units
    speed: float = 64.0  # world units per second

    def to_dict(self) -> dict:
        return {
            "entity_id": self.entity_id,
            "position": self.position.to_dict(),
            "size": self.size,
            "speed": self.speed,
        }


@dataclass
class Player(Entity):
    speed: float = 128.0

    def to_dict(self) -> dict:
        base = super().to_dict()
        base["type"] = "player"
        return base


@dataclass
class Chaser(Entity):
    """
    Enemy that paths toward the player.

    Each chaser owns its navigator (and through it, its own pathfinder).
    """
    speed: float = 64.0
    navigator: Optional[ChaseNavigator] = field(default=None, repr=False, compare=False)

    @property
    def has_path(self) -> bool:
        return self.navigator is not None and self.navigator.get_current_target() is not None

    def to_dict(self) -> dict:
        base = super().to_dict()
        base["type"] = "chaser"
        if self.navigator is not None:
            state = self.navigator.get_state()
            base["waypoints_remaining"] = state.waypoints_remaining
            base["is_stuck"] = state.is_stuck
            base["is_complete"] = state.is_complete
        return base
