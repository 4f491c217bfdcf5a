from .entities import Position, Entity, Player, Chaser
from .collision import resolve_motion
from .spawner import Spawner
from .world import World, WorldConfig, Replan

__all__ = [
    "Position",
    "Entity",
    "Player",
    "Chaser",
    "resolve_motion",
    "Spawner",
    "World",
    "WorldConfig",
    "Replan",
]
