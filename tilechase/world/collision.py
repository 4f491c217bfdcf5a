"""
Axis-aligned collision of square bodies against blocked tiles.

Movement is resolved one axis at a time: the horizontal component first,
then the vertical component from the horizontally-resolved position.
A component that would push the body's leading edge into a blocked tile
(or off the map) is dropped for this step.
"""
from typing import Optional, Tuple

from tilechase.navigation import ObstacleMap

# Keeps a body flush against a tile edge from counting as inside that tile
_EDGE_INSET = 1e-6


def resolve_motion(
    obstacle_map: ObstacleMap,
    x: float,
    y: float,
    dx: float,
    dy: float,
    size: float,
    layer: Optional[int] = None,
) -> Tuple[float, float]:
    """
    Clip a movement so a body does not enter blocked tiles.

    Args:
        obstacle_map: Map to collide against
        x, y: Body centre in world units
        dx, dy: Desired movement this step
        size: Side length of the square body
        layer: Tile layer to collide with (map's collision layer if None)

    Returns:
        (dx, dy) with blocked components set to 0
    """
    half = size / 2 - _EDGE_INSET

    if dx > 0:
        edge = x + dx + half
        if obstacle_map.is_blocked_at(edge, y - half, layer) or \
                obstacle_map.is_blocked_at(edge, y + half, layer):
            dx = 0.0
    elif dx < 0:
        edge = x + dx - half
        if obstacle_map.is_blocked_at(edge, y - half, layer) or \
                obstacle_map.is_blocked_at(edge, y + half, layer):
            dx = 0.0

    nx = x + dx
    if dy > 0:
        edge = y + dy + half
        if obstacle_map.is_blocked_at(nx - half, edge, layer) or \
                obstacle_map.is_blocked_at(nx + half, edge, layer):
            dy = 0.0
    elif dy < 0:
        edge = y + dy - half
        if obstacle_map.is_blocked_at(nx - half, edge, layer) or \
                obstacle_map.is_blocked_at(nx + half, edge, layer):
            dy = 0.0

    return dx, dy
