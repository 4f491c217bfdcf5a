"""Grid pathfinding for tile-map agents chasing a moving target."""

__version__ = "0.1.0"
