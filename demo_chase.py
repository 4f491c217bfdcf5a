"""
Demo script: a chaser follows the player around walls.
Run from project root: python demo_chase.py
"""
import argparse
import logging

from tilechase.navigation import ChaseNavigatorConfig, DiagonalMovement
from tilechase.runtime import EventType, Runtime, RuntimeConfig
from tilechase.world import World, WorldConfig


SAMPLE_MAP = [
    "################",
    "#..............#",
    "#..####........#",
    "#.....#...###..#",
    "#.....#.....#..#",
    "#.....#C....#..#",
    "#.....#.....#..#",
    "#..........##..#",
    "#..............#",
    "#....#######...#",
    "#..........#...#",
    "#..........#P..#",
    "#..............#",
    "################",
]

# Player input per phase: (axis_x, axis_y, ticks)
PLAYER_SCRIPT = [
    (0.0, 0.0, 60),
    (-1.0, 0.0, 90),
    (0.0, -1.0, 60),
    (0.0, 0.0, 120),
]


def main():
    parser = argparse.ArgumentParser(description="Headless chase demo")
    parser.add_argument(
        "--diagonal",
        choices=[m.name.lower() for m in DiagonalMovement],
        default="diagonal_no_cutting",
    )
    parser.add_argument("--max-search-distance", type=int, default=64)
    parser.add_argument("--frame-every", type=int, default=60, help="Print the map every N ticks")
    parser.add_argument("--chasers", type=int, default=0, help="Extra randomly placed chasers")
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    config = WorldConfig(navigator=ChaseNavigatorConfig(
        max_search_distance=args.max_search_distance,
        diagonal_movement=DiagonalMovement[args.diagonal.upper()],
    ))
    world = World.from_ascii(SAMPLE_MAP, config)
    if args.chasers:
        world.spawn_chasers(args.chasers, seed=args.seed)
    runtime = Runtime(world, RuntimeConfig(ticks_per_second=60))

    print("=== Chase Demo ===\n")
    print(f"Map: {world.obstacle_map}")
    print(f"Chasers: {', '.join(c.entity_id for c in world.chasers)}\n")

    for axis_x, axis_y, ticks in PLAYER_SCRIPT:
        for _ in range(ticks):
            runtime.move_player(axis_x, axis_y)
            result = runtime.step()

            for event in result.events:
                if event.event_type in (EventType.PATH_NOT_FOUND, EventType.CHASER_ARRIVED):
                    print(f"[tick {event.tick}] {event.event_type.name.lower()}: {event.data}")

            if result.tick % args.frame_every == 0:
                print(f"--- Tick {result.tick} (player cell {world.player_cell}) ---")
                print(world.to_ascii())
                print()

    history = runtime.get_step_history()
    replans = sum(
        1 for step in history for e in step["events"]
        if e["event_type"] in ("path_found", "path_not_found")
    )
    print(f"=== Demo Complete: {runtime.tick} ticks, {replans} replans ===")


if __name__ == "__main__":
    main()
